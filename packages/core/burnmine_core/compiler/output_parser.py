"""Translate the burn compiler's textual error stream into diagnostics.

Each output line is tried against an ordered list of grammars, most
specific first; the first grammar that matches consumes the line. Line and
column numbers in compiler output are 1-based.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from burnmine_core.diagnostics.models import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticSource,
    Severity,
)
from burnmine_core.documents import TextRange, is_identifier_char

logger = logging.getLogger(__name__)

EOF_NOTICE = "error reading input: EOF"

OPERATOR_CHARS = frozenset("+-*/=%&|<>!^")
EXPRESSION_RE = re.compile(r"[A-Za-z0-9_.()\[\]{}]+")

EXPECTED_RE = re.compile(r"expected (variable name|expression) at line (\d+)")
TRAILING_DECL_RE = re.compile(r"\b(var|const)\s*$")
COUPLED_RE = re.compile(r"(syntax|type|lexical) error at line (\d+), column (\d+): (.+) at line (\d+)")
COUPLED_NO_COLUMN_RE = re.compile(r"(syntax|type|lexical) error at line (\d+)(?::|,)(.*?) at line (\d+)")
VAR_INIT_RE = re.compile(
    r"(?:type|syntax) error at line (\d+), column (\d+): "
    r"variable (\w+) must have a type or initializer"
)
KIND_RE = re.compile(r"(lexical|syntax|type|runtime) error at line (\d+), column (\d+): (.+)")
UNEXPECTED_TOKEN_RE = re.compile(r"unexpected token '([^']*)' at line (\d+), column (\d+)")
UNDEFINED_VARIABLE_RE = re.compile(r"undefined variable '([^']+)' at line (\d+), column (\d+)")
TYPE_MISMATCH_RE = re.compile(
    r"type mismatch: expected '([^']*)', got '([^']*)' at line (\d+), column (\d+)"
)
FILE_POSITION_RE = re.compile(r"^(.+?):(\d+):(\d+):\s*(error|warning):\s*(.+)$")
TRAILING_POSITION_RE = re.compile(r"(error|warning):\s+(.+) at line (\d+)(?:, column (\d+))?")

MAX_SPAN = 10


def _is_suppressed(message: str) -> bool:
    return "error reading input" in message or "EOF" in message


def _line_number(value: str) -> int:
    return max(0, int(value) - 1)


def error_range(line_text: str, column: int) -> tuple[int, int]:
    """Widen a column to the operator or identifier run it points into."""
    if not line_text:
        return column, column + 1
    if column >= len(line_text):
        return max(0, len(line_text) - 1), len(line_text)

    char = line_text[column]
    if char in OPERATOR_CHARS:
        end = column
        while end < len(line_text) and line_text[end] in OPERATOR_CHARS:
            end += 1
        return column, end

    if is_identifier_char(char):
        start = column
        while start > 0 and is_identifier_char(line_text[start - 1]):
            start -= 1
        end = column
        while end < len(line_text) and is_identifier_char(line_text[end]):
            end += 1
        return start, end

    return column, column + 1


class _OutputParser:
    """Parses compiler output against one document snapshot."""

    def __init__(self, document_text: str):
        self.lines = document_text.split("\n")
        self.diagnostics: list[Diagnostic] = []

    def line_text(self, line: int) -> str | None:
        if 0 <= line < len(self.lines):
            return self.lines[line]
        logger.debug("Compiler referenced line %d outside the snapshot", line + 1)
        return None

    def add(
        self,
        line: int,
        start: int,
        end: int,
        message: str,
        source: DiagnosticSource = DiagnosticSource.COMPILER,
        severity: Severity = Severity.ERROR,
    ) -> None:
        self.diagnostics.append(
            Diagnostic(
                severity=severity,
                range=TextRange.on_line(line, start, max(end, start + 1)),
                message=message,
                source=source,
                code=DiagnosticCode.COMPILER_ERROR,
            )
        )

    def add_whole_line(self, line: int, message: str) -> None:
        text = self.line_text(line)
        self.add(line, 0, len(text) if text else 1, message)

    def add_widened(self, line: int, column: int, message: str, source: DiagnosticSource) -> None:
        text = self.line_text(line)
        if text is None:
            self.add(line, column, column + 1, message, source)
            return
        start, end = error_range(text, column)
        self.add(line, start, end, message, source)

    # Grammars, most specific first. Each returns True when it consumed the line.

    def expected_name(self, line: str) -> bool:
        match = EXPECTED_RE.search(line)
        if not match:
            return False
        line_num = _line_number(match.group(2))
        text = self.line_text(line_num) or ""

        decl = TRAILING_DECL_RE.search(text)
        if decl:
            start, end = decl.start(), len(text)
        else:
            stripped = text.rstrip()
            start, end = (len(stripped) - 1, len(stripped)) if stripped else (0, 1)

        if match.group(1) == "variable name":
            message = f"Expected variable name after '{decl.group(1) if decl else 'var'}'"
        else:
            message = "Expected expression"
        self.add(line_num, start, end, message)
        return True

    def coupled(self, line: str) -> bool:
        match = COUPLED_RE.search(line)
        if not match:
            return False
        kind, first, column, message, second = match.groups()
        first_line = _line_number(first)
        self.add_widened(
            first_line, _line_number(column), f"{kind} error: {message}", DiagnosticSource.COMPILER
        )
        self.add_whole_line(
            _line_number(second),
            f"{kind} error: {message} (referenced from line {first_line + 1})",
        )
        return True

    def coupled_without_column(self, line: str) -> bool:
        match = COUPLED_NO_COLUMN_RE.search(line)
        if not match:
            return False
        kind, first, message, second = match.groups()
        first_line = _line_number(first)
        message = message.strip() or "expected expression"
        self.add_whole_line(first_line, f"{kind} error: {message}")
        self.add_whole_line(
            _line_number(second),
            f"{kind} error: {message} (referenced from line {first_line + 1})",
        )
        return True

    def missing_initializer(self, line: str) -> bool:
        match = VAR_INIT_RE.search(line)
        if not match:
            return False
        line_num = _line_number(match.group(1))
        column = _line_number(match.group(2))
        name = match.group(3)
        self.add(
            line_num,
            column,
            column + len(name),
            f"Variable '{name}' must have a type or initializer",
            DiagnosticSource.COMPILER_TYPE,
        )
        return True

    def kind_error(self, line: str) -> bool:
        match = KIND_RE.search(line)
        if not match:
            return False
        kind, line_str, column, message = match.groups()
        if _is_suppressed(message):
            return True
        self.add_widened(
            _line_number(line_str),
            _line_number(column),
            f"{kind} error: {message}",
            DiagnosticSource.for_compiler_kind(kind),
        )
        return True

    def unexpected_token(self, line: str) -> bool:
        match = UNEXPECTED_TOKEN_RE.search(line)
        if not match:
            return False
        token, line_str, column = match.groups()
        start = _line_number(column)
        self.add(
            _line_number(line_str),
            start,
            start + len(token),
            f"Unexpected token '{token}'",
            DiagnosticSource.COMPILER_SYNTAX,
        )
        return True

    def undefined_variable(self, line: str) -> bool:
        match = UNDEFINED_VARIABLE_RE.search(line)
        if not match:
            return False
        name, line_str, column = match.groups()
        start = _line_number(column)
        self.add(_line_number(line_str), start, start + len(name), f"Undefined variable '{name}'")
        return True

    def type_mismatch(self, line: str) -> bool:
        match = TYPE_MISMATCH_RE.search(line)
        if not match:
            return False
        expected, got, line_str, column = match.groups()
        line_num, start = _line_number(line_str), _line_number(column)

        end = start + 1
        text = self.line_text(line_num)
        if text is not None:
            expression = EXPRESSION_RE.match(text, start)
            if expression:
                end = expression.end()
        self.add(
            line_num,
            start,
            end,
            f"Type mismatch: expected '{expected}', got '{got}'",
            DiagnosticSource.COMPILER_TYPE,
        )
        return True

    def _positioned(self, level: str, message: str, line_num: int, column: int) -> None:
        severity = Severity.WARNING if level == "warning" else Severity.ERROR
        text = self.line_text(line_num)
        span = min(MAX_SPAN, len(text) - column) if text is not None else 1
        self.add(line_num, column, column + span, message, severity=severity)

    def file_position(self, line: str) -> bool:
        match = FILE_POSITION_RE.match(line.strip())
        if not match:
            return False
        _, line_str, column, level, message = match.groups()
        if not _is_suppressed(message):
            self._positioned(level, message, _line_number(line_str), _line_number(column))
        return True

    def trailing_position(self, line: str) -> bool:
        match = TRAILING_POSITION_RE.search(line)
        if not match:
            return False
        level, message, line_str, column = match.groups()
        if not _is_suppressed(message):
            self._positioned(
                level, message, _line_number(line_str), _line_number(column) if column else 0
            )
        return True

    @property
    def grammars(self) -> list[Callable[[str], bool]]:
        return [
            self.expected_name,
            self.coupled,
            self.coupled_without_column,
            self.missing_initializer,
            self.kind_error,
            self.unexpected_token,
            self.undefined_variable,
            self.type_mismatch,
            self.file_position,
            self.trailing_position,
        ]


def parse_compiler_output(output: str, document_text: str) -> list[Diagnostic]:
    """Parse compiler output into diagnostics.

    Args:
        output: Raw compiler stderr/stdout
        document_text: Text of the snapshot the compiler checked

    Returns:
        Diagnostics in output order. When output is non-empty but no grammar
        matches, a single generic error anchored at the document start.
    """
    parser = _OutputParser(document_text)
    unmatched: list[str] = []
    matched_any = False

    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line or EOF_NOTICE in line:
            continue
        if any(grammar(line) for grammar in parser.grammars):
            matched_any = True
        else:
            unmatched.append(line)

    if not matched_any and unmatched:
        parser.add(0, 0, 1, "\n".join(unmatched))

    return parser.diagnostics
