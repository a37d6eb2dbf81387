"""Diagnostic pipeline: ordered validation stages merged into one result.

Stages run in a fixed order:

    syntax -> (critical failure?) -> semantics -> lint -> compiler

A critical syntax failure (unbalanced delimiters) ends the pass after the
syntax stage. Stage outputs are concatenated in stage order without
de-duplication, cached per document version, and returned.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from burnmine_core.diagnostics.cache import DiagnosticsCache
from burnmine_core.diagnostics.lint import lint_document
from burnmine_core.diagnostics.models import Diagnostic
from burnmine_core.diagnostics.semantics import check_semantics
from burnmine_core.diagnostics.syntax import check_syntax, has_critical_failure
from burnmine_core.documents import TextDocument

if TYPE_CHECKING:
    from burnmine_core.symbols.resolver import WorkspaceIndex

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """Validation stages in execution order."""

    SYNTAX = "syntax"
    SEMANTICS = "semantics"
    LINT = "lint"
    COMPILER = "compiler"


class DiagnosticsProvider(Protocol):
    """Anything that can validate a document snapshot asynchronously."""

    async def validate(self, text: str, uri: str) -> list[Diagnostic]: ...


@dataclass
class PipelineResult:
    """Per-stage output of one validation pass."""

    version: int
    stages: dict[PipelineStage, list[Diagnostic]] = field(default_factory=dict)
    critical_failure: bool = False

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """All diagnostics in stage order."""
        merged: list[Diagnostic] = []
        for stage in PipelineStage:
            merged.extend(self.stages.get(stage, []))
        return merged


class DiagnosticPipeline:
    """Runs the validation stages for documents of one workspace."""

    def __init__(
        self,
        index: WorkspaceIndex,
        cache: DiagnosticsCache,
        gateway: DiagnosticsProvider | None = None,
    ):
        """Initialize the pipeline.

        Args:
            index: Workspace index re-built for each validated document
            cache: Cache consulted before and filled after each pass
            gateway: External compiler stage; skipped when None
        """
        self._index = index
        self._cache = cache
        self._gateway = gateway

    @property
    def gateway(self) -> DiagnosticsProvider | None:
        return self._gateway

    @gateway.setter
    def gateway(self, gateway: DiagnosticsProvider | None) -> None:
        self._gateway = gateway

    async def validate(self, document: TextDocument) -> list[Diagnostic]:
        """Get diagnostics for a document version, from the cache when possible."""
        cached = self._cache.get(document.uri, document.version)
        if cached is not None:
            logger.debug("Diagnostics cache hit for %s v%d", document.uri, document.version)
            return list(cached)

        result = await self.run(document)
        diagnostics = result.diagnostics
        self._cache.put(document.uri, document.version, diagnostics)
        return diagnostics

    async def run(self, document: TextDocument) -> PipelineResult:
        """Run every stage for a document, bypassing the cache."""
        started = time.monotonic()
        result = PipelineResult(version=document.version)

        indexed = self._index.index_document(document.uri, document.text)
        syntax = list(indexed.diagnostics) + check_syntax(document)
        result.stages[PipelineStage.SYNTAX] = syntax

        if has_critical_failure(syntax):
            result.critical_failure = True
            logger.debug(
                "Critical syntax failure in %s v%d, skipping remaining stages",
                document.uri,
                document.version,
            )
            return result

        result.stages[PipelineStage.SEMANTICS] = check_semantics(document)
        result.stages[PipelineStage.LINT] = lint_document(document)

        if self._gateway is not None:
            result.stages[PipelineStage.COMPILER] = await self._gateway.validate(
                document.text, document.uri
            )

        logger.debug(
            "Validated %s v%d: %d diagnostics in %.3fs",
            document.uri,
            document.version,
            len(result.diagnostics),
            time.monotonic() - started,
        )
        return result
