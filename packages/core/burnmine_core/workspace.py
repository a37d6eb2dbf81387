"""Workspace context: the lifecycle owner of the index, cache and pipeline.

A WorkspaceContext is created when a workspace opens, receives document
events while it is open, and is torn down when it closes. Editor transport
code talks to it and hands it a publisher for diagnostics.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from burnmine_core.compiler.gateway import CompilerGateway
from burnmine_core.diagnostics.actions import CodeAction, quick_fixes
from burnmine_core.diagnostics.cache import DiagnosticsCache
from burnmine_core.diagnostics.models import Diagnostic
from burnmine_core.diagnostics.pipeline import DiagnosticPipeline, DiagnosticsProvider
from burnmine_core.documents import TextDocument
from burnmine_core.settings import Settings, get_settings
from burnmine_core.symbols.discovery import find_source_files
from burnmine_core.symbols.models import DefinitionLocation, DocumentSymbol
from burnmine_core.symbols.resolver import WorkspaceIndex

logger = logging.getLogger(__name__)


class DiagnosticsPublisher(Protocol):
    """Receives the diagnostics to show for a document."""

    async def publish_diagnostics(
        self, uri: str, version: int | None, diagnostics: list[Diagnostic]
    ) -> None: ...


class WorkspaceContext:
    """Index, cache and pipeline shared by all open documents of a workspace."""

    def __init__(
        self,
        root: str | Path | None = None,
        settings: Settings | None = None,
        gateway: DiagnosticsProvider | None = None,
        publisher: DiagnosticsPublisher | None = None,
    ):
        """Initialize the context.

        Args:
            root: Workspace root directory, None for loose files
            settings: Settings to use (defaults to get_settings())
            gateway: Compiler stage (defaults to a CompilerGateway from settings)
            publisher: Receiver of published diagnostics
        """
        self._settings = settings or get_settings()
        self._root = Path(root).resolve() if root is not None else None
        self._publisher = publisher
        self._documents: dict[str, TextDocument] = {}

        self.index = WorkspaceIndex(
            self._root,
            extension=self._settings.source_extension,
            stdlib_prefix=self._settings.stdlib_prefix,
            stdlib_dir=self._settings.stdlib_dir,
        )
        self.cache = DiagnosticsCache(self._settings.diagnostics_cache_size)
        self.pipeline = DiagnosticPipeline(
            self.index,
            self.cache,
            gateway if gateway is not None else self._gateway_from_settings(),
        )

    def _gateway_from_settings(self, compiler_path: str | None = None) -> CompilerGateway:
        return CompilerGateway(
            compiler_path=compiler_path or self._settings.compiler_path,
            timeout_seconds=self._settings.compiler_timeout_seconds,
            extension=self._settings.source_extension,
        )

    @property
    def root(self) -> Path | None:
        return self._root

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_document(self, uri: str) -> TextDocument | None:
        return self._documents.get(uri)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> int:
        """Index every source file under the workspace root.

        Returns:
            Number of files indexed
        """
        if self._root is None:
            return 0

        count = 0
        for path in find_source_files(self._root, self._settings.source_extension):
            if self.index.index_file(path) is not None:
                count += 1
        logger.info("Indexed %d files under %s", count, self._root)
        return count

    def close(self) -> None:
        """Drop all documents, tables and cached diagnostics."""
        self._documents.clear()
        self.cache.clear()
        self.index.clear()

    # ------------------------------------------------------------------
    # Document events
    # ------------------------------------------------------------------

    async def did_open(self, uri: str, version: int, text: str) -> list[Diagnostic]:
        return await self._validate_and_publish(TextDocument(uri, version, text))

    async def did_change(self, uri: str, version: int, text: str) -> list[Diagnostic]:
        return await self._validate_and_publish(TextDocument(uri, version, text))

    async def did_close(self, uri: str) -> None:
        """Forget a document and clear its published diagnostics."""
        self._documents.pop(uri, None)
        self.cache.invalidate(uri)
        self.index.remove_document(uri)
        await self._publish(uri, None, [])

    async def reconfigure(self, compiler_path: str | None = None) -> None:
        """Switch compiler and re-validate every open document."""
        if compiler_path is not None:
            self.pipeline.gateway = self._gateway_from_settings(compiler_path)
            logger.info("Compiler path set to %s", compiler_path)

        self.cache.clear()
        for document in list(self._documents.values()):
            await self._validate_and_publish(document)

    async def _validate_and_publish(self, document: TextDocument) -> list[Diagnostic]:
        self._documents[document.uri] = document
        diagnostics = await self.pipeline.validate(document)

        latest = self._documents.get(document.uri)
        if latest is None:
            # Closed while this pass was running
            self.cache.invalidate(document.uri)
            logger.debug("Dropping diagnostics for closed %s v%d", document.uri, document.version)
            return diagnostics
        if latest.version != document.version:
            # Overtaken by a newer version
            logger.debug(
                "Dropping diagnostics for %s v%d, v%d is newer",
                document.uri,
                document.version,
                latest.version,
            )
            return diagnostics

        await self._publish(
            document.uri,
            document.version,
            diagnostics[: self._settings.max_number_of_problems],
        )
        return diagnostics

    async def _publish(self, uri: str, version: int | None, diagnostics: list[Diagnostic]) -> None:
        if self._publisher is not None:
            await self._publisher.publish_diagnostics(uri, version, diagnostics)

    # ------------------------------------------------------------------
    # Editor queries
    # ------------------------------------------------------------------

    def definition_at(self, uri: str, line: int, character: int) -> DefinitionLocation | None:
        """Find the declaration of the identifier under a cursor position."""
        document = self._documents.get(uri)
        if document is None:
            return None
        name = document.word_at(document.offset_at(line, character))
        if not name:
            return None
        return self.index.get_definition_location(name, uri)

    def document_symbols(self, uri: str) -> list[DocumentSymbol]:
        return self.index.document_symbols(uri)

    def code_actions(self, uri: str, diagnostics: list[Diagnostic]) -> list[CodeAction]:
        """Quick fixes for the given diagnostics of an open document."""
        document = self._documents.get(uri)
        if document is None:
            return []
        return quick_fixes(document, diagnostics)
