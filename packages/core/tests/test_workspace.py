"""Tests for the workspace context."""

import asyncio
from pathlib import Path

import pytest
from burnmine_core.compiler import CompilerGateway, MockCompilerGateway
from burnmine_core.diagnostics import Diagnostic, DiagnosticSource, Severity
from burnmine_core.documents import TextRange
from burnmine_core.pathing import path_to_uri
from burnmine_core.settings import Settings
from burnmine_core.workspace import WorkspaceContext


class RecordingPublisher:
    """Collects published diagnostics."""

    def __init__(self) -> None:
        self.published: list[tuple[str, int | None, list[Diagnostic]]] = []

    async def publish_diagnostics(
        self, uri: str, version: int | None, diagnostics: list[Diagnostic]
    ) -> None:
        self.published.append((uri, version, diagnostics))


class SlowGateway(MockCompilerGateway):
    """Mock gateway that takes a while to answer."""

    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay

    async def validate(self, text: str, uri: str = "untitled") -> list[Diagnostic]:
        await asyncio.sleep(self.delay)
        return await super().validate(text, uri)


def _context(tmp_path: Path, **settings) -> tuple[WorkspaceContext, RecordingPublisher]:
    publisher = RecordingPublisher()
    context = WorkspaceContext(
        tmp_path,
        settings=Settings(**settings),
        gateway=MockCompilerGateway(),
        publisher=publisher,
    )
    return context, publisher


class TestOpen:
    """Tests for workspace discovery at open."""

    def test_indexes_discovered_files(self, tmp_path: Path) -> None:
        """Test that visible source files are indexed and others skipped."""
        (tmp_path / "a.bn").write_text("fun a(): int {\n}\n")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "b.bn").write_text("fun b(): int {\n}\n")
        (tmp_path / ".hidden").mkdir()
        (tmp_path / ".hidden" / "c.bn").write_text("fun c(): int {\n}\n")
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "d.bn").write_text("fun d(): int {\n}\n")
        (tmp_path / "notes.txt").write_text("fun e(): int {\n}\n")

        context, _ = _context(tmp_path)

        assert context.open() == 2
        assert sorted(context.index.uris) == sorted(
            [path_to_uri(tmp_path / "a.bn"), path_to_uri(tmp_path / "sub" / "b.bn")]
        )

    def test_no_root(self) -> None:
        """Test a context for loose files."""
        context = WorkspaceContext(settings=Settings(), gateway=MockCompilerGateway())

        assert context.open() == 0

    def test_default_gateway_from_settings(self, tmp_path: Path) -> None:
        """Test that the compiler gateway is built from settings."""
        context = WorkspaceContext(
            tmp_path, settings=Settings(compiler_path="/opt/burn", compiler_timeout_seconds=2)
        )

        gateway = context.pipeline.gateway
        assert isinstance(gateway, CompilerGateway)
        assert gateway.compiler_path == "/opt/burn"
        assert gateway.timeout_seconds == 2


class TestDocumentEvents:
    """Tests for open/change/close handling."""

    @pytest.mark.anyio
    async def test_open_publishes(self, tmp_path: Path) -> None:
        """Test that opening a document publishes its diagnostics."""
        context, publisher = _context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")

        await context.did_open(uri, 1, "var unused = 1\n")

        assert len(publisher.published) == 1
        published_uri, version, diagnostics = publisher.published[0]
        assert (published_uri, version) == (uri, 1)
        assert [d.message for d in diagnostics] == ["Variable 'unused' is declared but never used"]

    @pytest.mark.anyio
    async def test_change_reindexes(self, tmp_path: Path) -> None:
        """Test that a change replaces the document's table."""
        context, _ = _context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")

        await context.did_open(uri, 1, "var a = 1\nprint(a)\n")
        await context.did_change(uri, 2, 'var b = "x"\nprint(b)\n')

        assert context.index.get_variables(uri) == {"b": "string"}
        assert context.get_document(uri).version == 2

    @pytest.mark.anyio
    async def test_publish_cap(self, tmp_path: Path) -> None:
        """Test that the published list is capped but the cache keeps everything."""
        context, publisher = _context(tmp_path, max_number_of_problems=1)
        uri = path_to_uri(tmp_path / "main.bn")

        diagnostics = await context.did_open(uri, 1, "var a = 1\nvar b = 2\nvar c = 3\n")

        assert len(diagnostics) == 3
        assert len(publisher.published[0][2]) == 1
        assert len(context.cache.get(uri, 1)) == 3

    @pytest.mark.anyio
    async def test_close_clears(self, tmp_path: Path) -> None:
        """Test that closing drops state and publishes an empty list."""
        context, publisher = _context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")
        await context.did_open(uri, 1, "var a = 1\n")

        await context.did_close(uri)

        assert publisher.published[-1] == (uri, None, [])
        assert context.index.get_table(uri) is None
        assert uri not in context.cache
        assert context.get_document(uri) is None

    @pytest.mark.anyio
    async def test_reconfigure_revalidates(self, tmp_path: Path) -> None:
        """Test that a compiler change re-runs validation for open documents."""
        context, publisher = _context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")
        await context.did_open(uri, 1, "var a = 1\nprint(a)\n")

        await context.reconfigure(compiler_path=str(tmp_path / "missing-burn"))

        assert isinstance(context.pipeline.gateway, CompilerGateway)
        assert context.pipeline.gateway.compiler_path == str(tmp_path / "missing-burn")
        assert len(publisher.published) == 2
        assert publisher.published[1][:2] == (uri, 1)

    @pytest.mark.anyio
    async def test_close_context(self, tmp_path: Path) -> None:
        """Test tearing the workspace down."""
        context, _ = _context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")
        await context.did_open(uri, 1, "var a = 1\n")

        context.close()

        assert context.index.uris == []
        assert len(context.cache) == 0
        assert context.get_document(uri) is None


class TestOverlappingPasses:
    """Tests for passes that finish after the document moved on."""

    def _slow_context(
        self, tmp_path: Path, delay: float = 0.05
    ) -> tuple[WorkspaceContext, RecordingPublisher, SlowGateway]:
        publisher = RecordingPublisher()
        gateway = SlowGateway(delay)
        context = WorkspaceContext(
            tmp_path, settings=Settings(), gateway=gateway, publisher=publisher
        )
        return context, publisher, gateway

    @pytest.mark.anyio
    async def test_older_pass_not_published(self, tmp_path: Path) -> None:
        """Test that only the newest version is published when passes interleave."""
        context, publisher, _ = self._slow_context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")

        await asyncio.gather(
            context.did_change(uri, 1, "var a = 1\n"),
            context.did_change(uri, 2, "var a = 1\nprint(a)\n"),
        )

        assert publisher.published == [(uri, 2, [])]
        assert context.cache.get(uri, 2) == ()
        assert context.cache.get(uri, 1) is None

    @pytest.mark.anyio
    async def test_older_pass_finishing_last(self, tmp_path: Path) -> None:
        """Test that a slow older pass neither publishes nor replaces the newer entry."""
        context, publisher, gateway = self._slow_context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")

        first = asyncio.create_task(context.did_change(uri, 1, "var a = 1\n"))
        await asyncio.sleep(0)
        gateway.delay = 0
        await context.did_change(uri, 2, "var a = 1\nprint(a)\n")
        stale = await first

        assert [d.message for d in stale] == ["Variable 'a' is declared but never used"]
        assert publisher.published == [(uri, 2, [])]
        assert context.cache.get(uri, 2) == ()

    @pytest.mark.anyio
    async def test_close_during_pass(self, tmp_path: Path) -> None:
        """Test that closing mid-pass leaves the document cleared."""
        context, publisher, _ = self._slow_context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")

        async def close_soon() -> None:
            await asyncio.sleep(0.01)
            await context.did_close(uri)

        await asyncio.gather(context.did_open(uri, 1, "var unused = 1\n"), close_soon())

        assert publisher.published == [(uri, None, [])]
        assert uri not in context.cache
        assert context.get_document(uri) is None


class TestEditorQueries:
    """Tests for definition, outline and quick fix queries."""

    @pytest.mark.anyio
    async def test_definition_at(self, tmp_path: Path) -> None:
        """Test resolving the identifier under the cursor."""
        context, _ = _context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")
        await context.did_open(uri, 1, "var count = 1\nprint(count)\n")

        location = context.definition_at(uri, 1, 8)

        assert location is not None
        assert location.uri == uri
        assert location.range.start_line == 0
        assert context.definition_at(uri, 1, 5) is None
        assert context.definition_at("file:///closed.bn", 0, 0) is None

    @pytest.mark.anyio
    async def test_definition_in_other_file(self, tmp_path: Path) -> None:
        """Test definitions found through the workspace-wide tier."""
        (tmp_path / "util.bn").write_text("fun helper(): int {\n}\n")
        context, _ = _context(tmp_path)
        context.open()
        uri = path_to_uri(tmp_path / "main.bn")
        await context.did_open(uri, 1, "var x = helper()\nprint(x)\n")

        location = context.definition_at(uri, 0, 10)

        assert location is not None
        assert location.uri == path_to_uri(tmp_path / "util.bn")

    @pytest.mark.anyio
    async def test_document_symbols(self, tmp_path: Path) -> None:
        """Test the outline of an open document."""
        context, _ = _context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")
        await context.did_open(uri, 1, "fun main() {\n}\nconst LIMIT = 3\n")

        assert [s.name for s in context.document_symbols(uri)] == ["main", "LIMIT"]

    @pytest.mark.anyio
    async def test_code_actions(self, tmp_path: Path) -> None:
        """Test quick fixes for published diagnostics."""
        context, _ = _context(tmp_path)
        uri = path_to_uri(tmp_path / "main.bn")
        diagnostics = await context.did_open(uri, 1, "var unused = 1\nprint(ghost)\n")

        actions = context.code_actions(uri, diagnostics)

        assert sorted(a.title for a in actions) == [
            "Add underscore to 'unused'",
            "Declare variable 'ghost'",
        ]
        assert context.code_actions("file:///closed.bn", diagnostics) == []

    def test_unrelated_diagnostics(self, tmp_path: Path) -> None:
        """Test that documents that are not open produce no actions."""
        context, _ = _context(tmp_path)
        diagnostic = Diagnostic(
            Severity.ERROR, TextRange(0, 0, 0, 1), "x", DiagnosticSource.COMPILER
        )

        assert context.code_actions("file:///nowhere.bn", [diagnostic]) == []
