"""Tests for the diagnostic pipeline."""

from pathlib import Path

import pytest
from burnmine_core.compiler import CompilerGateway, MockCompilerGateway
from burnmine_core.diagnostics import (
    Diagnostic,
    DiagnosticPipeline,
    DiagnosticSource,
    DiagnosticsCache,
    PipelineStage,
    Severity,
)
from burnmine_core.documents import TextDocument, TextRange
from burnmine_core.symbols import WorkspaceIndex

URI = "file:///work/main.bn"

COMPILER_DIAGNOSTIC = Diagnostic(
    Severity.ERROR, TextRange(0, 0, 0, 1), "compiler says no", DiagnosticSource.COMPILER
)


def _pipeline(gateway=None) -> DiagnosticPipeline:
    return DiagnosticPipeline(WorkspaceIndex(), DiagnosticsCache(), gateway)


class TestStageOrder:
    """Tests for stage execution and merging."""

    @pytest.mark.anyio
    async def test_merged_in_stage_order(self) -> None:
        """Test that every stage contributes, in order."""
        gateway = MockCompilerGateway([COMPILER_DIAGNOSTIC])
        text = (
            "var = 1\n"
            "const = 2\n"
            "var unused = 2\n"
            "var other = 3\n"
            "print(undeclared)\n"
            "fun f(){\n"
            "}\n"
        )

        diagnostics = await _pipeline(gateway).validate(TextDocument(URI, 1, text))

        assert [d.source for d in diagnostics] == [
            DiagnosticSource.SYNTAX,
            DiagnosticSource.SYNTAX,
            DiagnosticSource.SEMANTICS,
            DiagnosticSource.LINT,
            DiagnosticSource.LINT,
            DiagnosticSource.LINT,
            DiagnosticSource.COMPILER,
        ]

    @pytest.mark.anyio
    async def test_extraction_diagnostics_in_syntax_stage(self) -> None:
        """Test that malformed declarations are reported with the syntax stage."""
        result = await _pipeline().run(TextDocument(URI, 1, "def Point { x: int, y }\n"))

        syntax = result.stages[PipelineStage.SYNTAX]
        assert [d.message for d in syntax] == ["Invalid field definition in type Point"]

    @pytest.mark.anyio
    async def test_index_updated(self) -> None:
        """Test that validation re-indexes the document."""
        index = WorkspaceIndex()
        pipeline = DiagnosticPipeline(index, DiagnosticsCache())

        await pipeline.validate(TextDocument(URI, 1, "var a = 1\nprint(a)\n"))

        assert index.get_variable_type("a", URI) == "int"


class TestCriticalGate:
    """Tests for skipping stages after a critical syntax failure."""

    @pytest.mark.anyio
    async def test_extra_closing_brace(self) -> None:
        """Test that only the syntax error is reported."""
        gateway = MockCompilerGateway([COMPILER_DIAGNOSTIC])
        pipeline = _pipeline(gateway)

        result = await pipeline.run(TextDocument(URI, 1, "fun f() { }\n}"))

        assert result.critical_failure
        assert [d.message for d in result.diagnostics] == ["Unexpected closing brace '}'"]
        assert PipelineStage.SEMANTICS not in result.stages
        assert PipelineStage.LINT not in result.stages
        assert PipelineStage.COMPILER not in result.stages
        assert gateway.call_count == 0

    @pytest.mark.anyio
    async def test_gate_hides_other_findings(self) -> None:
        """Test that semantic and lint findings are suppressed for the pass."""
        text = "var unused = 1\nprint(nothing)\n}\n"

        diagnostics = await _pipeline(MockCompilerGateway()).validate(TextDocument(URI, 1, text))

        assert len(diagnostics) == 1
        assert diagnostics[0].is_critical


class TestGracefulDegradation:
    """Tests for running without a usable compiler."""

    @pytest.mark.anyio
    async def test_unreachable_compiler(self, tmp_path: Path) -> None:
        """Test that other stages still report and nothing raises."""
        gateway = CompilerGateway(str(tmp_path / "no-such-compiler"))
        text = "var unused = 1\nprint(undeclaredThing)\n"

        diagnostics = await _pipeline(gateway).validate(TextDocument(URI, 1, text))

        assert [(d.severity, d.source) for d in diagnostics] == [
            (Severity.WARNING, DiagnosticSource.SEMANTICS),
            (Severity.HINT, DiagnosticSource.LINT),
        ]

    @pytest.mark.anyio
    async def test_compiler_that_cannot_start(self, tmp_path: Path) -> None:
        """Test that an executable the OS rejects does not break the pass."""
        compiler = tmp_path / "burn"
        compiler.write_bytes(b"\x00\x01not a binary")
        compiler.chmod(0o755)

        diagnostics = await _pipeline(CompilerGateway(str(compiler))).validate(
            TextDocument(URI, 1, "var unused = 1\n")
        )

        assert [d.source for d in diagnostics] == [DiagnosticSource.LINT]

    @pytest.mark.anyio
    async def test_no_gateway(self) -> None:
        """Test a pipeline without a compiler stage."""
        result = await _pipeline().run(TextDocument(URI, 1, "var a = 1\nprint(a)\n"))

        assert result.diagnostics == []
        assert PipelineStage.COMPILER not in result.stages


class TestCaching:
    """Tests for version-keyed caching."""

    @pytest.mark.anyio
    async def test_same_version_hits_cache(self) -> None:
        """Test that a repeated version returns identical results without recompiling."""
        gateway = MockCompilerGateway([COMPILER_DIAGNOSTIC])
        pipeline = _pipeline(gateway)
        document = TextDocument(URI, 7, "var unused = 1\n")

        first = await pipeline.validate(document)
        second = await pipeline.validate(document)

        assert first == second
        assert [d.to_dict() for d in first] == [d.to_dict() for d in second]
        assert gateway.call_count == 1

    @pytest.mark.anyio
    async def test_new_version_reruns(self) -> None:
        """Test that a new version misses the cache."""
        gateway = MockCompilerGateway()
        pipeline = _pipeline(gateway)

        await pipeline.validate(TextDocument(URI, 1, "var a = 1\n"))
        diagnostics = await pipeline.validate(TextDocument(URI, 2, "var a = 1\nprint(a)\n"))

        assert diagnostics == []
        assert gateway.call_count == 2
