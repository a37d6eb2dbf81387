"""Diagnostic data model shared by every validation stage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from burnmine_core.documents import TextRange


class Severity(str, Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"
    HINT = "hint"

    @property
    def lsp_code(self) -> int:
        """Numeric severity used by the editor protocol."""
        return _LSP_SEVERITY[self]


_LSP_SEVERITY = {
    Severity.ERROR: 1,
    Severity.WARNING: 2,
    Severity.HINT: 4,
}


class DiagnosticSource(str, Enum):
    """The stage (or compiler-reported error kind) that produced a diagnostic."""

    SYNTAX = "syntax"
    SEMANTICS = "semantics"
    LINT = "lint"
    COMPILER = "compiler"
    COMPILER_LEXICAL = "compiler-lexical"
    COMPILER_SYNTAX = "compiler-syntax"
    COMPILER_TYPE = "compiler-type"
    COMPILER_RUNTIME = "compiler-runtime"

    @property
    def tag(self) -> str:
        """Source label shown in the editor."""
        return f"burn-{self.value}"

    @classmethod
    def for_compiler_kind(cls, kind: str) -> DiagnosticSource:
        """Map a compiler error kind (lexical, syntax, type, runtime) to a source."""
        return _COMPILER_KINDS.get(kind.lower(), cls.COMPILER)


_COMPILER_KINDS = {
    "lexical": DiagnosticSource.COMPILER_LEXICAL,
    "syntax": DiagnosticSource.COMPILER_SYNTAX,
    "type": DiagnosticSource.COMPILER_TYPE,
    "runtime": DiagnosticSource.COMPILER_RUNTIME,
}


class DiagnosticCode:
    """Stable machine-readable diagnostic codes."""

    UNCLOSED_DELIMITER = "unclosed-delimiter"
    UNEXPECTED_CLOSING_DELIMITER = "unexpected-closing-delimiter"
    UNTERMINATED_STRING = "unterminated-string"
    EXPECTED_IDENTIFIER = "expected-identifier"
    INVALID_FIELD = "invalid-field"
    INVALID_PARAMETER = "invalid-parameter"
    UNDECLARED_VARIABLE = "undeclared-variable"
    UNUSED_VARIABLE = "unused-variable"
    BRACE_SPACING = "brace-spacing"
    COMPILER_ERROR = "compiler-error"


# Syntax failures that make heuristic and compiler analysis unreliable
CRITICAL_SYNTAX_CODES = frozenset(
    {DiagnosticCode.UNCLOSED_DELIMITER, DiagnosticCode.UNEXPECTED_CLOSING_DELIMITER}
)


@dataclass(frozen=True)
class Diagnostic:
    """A reported issue in a document."""

    severity: Severity
    range: TextRange
    message: str
    source: DiagnosticSource
    code: str | None = None

    @property
    def is_critical(self) -> bool:
        """Whether this diagnostic disables downstream analysis for the pass."""
        return self.severity is Severity.ERROR and self.code in CRITICAL_SYNTAX_CODES

    def to_dict(self) -> dict[str, Any]:
        """Convert to an editor protocol diagnostic."""
        result: dict[str, Any] = {
            "severity": self.severity.lsp_code,
            "range": self.range.to_dict(),
            "message": self.message,
            "source": self.source.tag,
        }
        if self.code is not None:
            result["code"] = self.code
        return result
