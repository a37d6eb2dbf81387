"""Syntax stage: delimiter balance and string-literal termination.

A single left-to-right scan tracks brace, parenthesis and bracket depth,
skipping string literals and ``//`` line comments.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from burnmine_core.diagnostics.models import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticSource,
    Severity,
)
from burnmine_core.documents import TextDocument, is_identifier_char, is_identifier_start

DECLARATION_KEYWORDS = frozenset({"fun", "var", "const", "def", "class"})


@dataclass
class _Delimiter:
    open_char: str
    close_char: str
    name: str
    depth: int = 0
    open_positions: list[int] = field(default_factory=list)


def _error(document: TextDocument, start: int, end: int, message: str, code: str) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        range=document.range_of(start, end),
        message=message,
        source=DiagnosticSource.SYNTAX,
        code=code,
    )


def check_syntax(document: TextDocument) -> list[Diagnostic]:
    """Report unbalanced delimiters, unterminated strings and missing declaration names.

    An unmatched closing delimiter is reported where it occurs and resets that
    delimiter's depth to zero. Unmatched openers are reported once per
    delimiter kind, at the last one still open.
    """
    text = document.text
    diagnostics: list[Diagnostic] = []
    delimiters = {
        "brace": _Delimiter("{", "}", "brace"),
        "parenthesis": _Delimiter("(", ")", "parenthesis"),
        "bracket": _Delimiter("[", "]", "bracket"),
    }
    by_open = {d.open_char: d for d in delimiters.values()}
    by_close = {d.close_char: d for d in delimiters.values()}

    string_start = -1
    quote = ""
    i = 0
    length = len(text)

    while i < length:
        char = text[i]

        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = ""
            elif char == "\n":
                diagnostics.append(
                    _error(
                        document,
                        string_start,
                        i,
                        "Unterminated string literal",
                        DiagnosticCode.UNTERMINATED_STRING,
                    )
                )
                quote = ""
            i += 1
            continue

        if char == "/" and i + 1 < length and text[i + 1] == "/":
            newline = text.find("\n", i)
            if newline == -1:
                break
            i = newline + 1
            continue

        if char in ('"', "'"):
            quote = char
            string_start = i
            i += 1
            continue

        if char in by_open:
            delimiter = by_open[char]
            delimiter.depth += 1
            delimiter.open_positions.append(i)
        elif char in by_close:
            delimiter = by_close[char]
            delimiter.depth -= 1
            if delimiter.open_positions:
                delimiter.open_positions.pop()
            if delimiter.depth < 0:
                diagnostics.append(
                    _error(
                        document,
                        i,
                        i + 1,
                        f"Unexpected closing {delimiter.name} '{delimiter.close_char}'",
                        DiagnosticCode.UNEXPECTED_CLOSING_DELIMITER,
                    )
                )
                delimiter.depth = 0
        elif is_identifier_start(char):
            j = i + 1
            while j < length and is_identifier_char(text[j]):
                j += 1
            word = text[i:j]
            if word in DECLARATION_KEYWORDS and j < length:
                k = j
                while k < length and text[k].isspace():
                    k += 1
                if k < length and not is_identifier_start(text[k]):
                    diagnostics.append(
                        _error(
                            document,
                            i,
                            j,
                            f"Expected identifier after '{word}'",
                            DiagnosticCode.EXPECTED_IDENTIFIER,
                        )
                    )
            i = j
            continue

        i += 1

    for delimiter in delimiters.values():
        if delimiter.depth > 0 and delimiter.open_positions:
            position = delimiter.open_positions[-1]
            diagnostics.append(
                _error(
                    document,
                    position,
                    position + 1,
                    f"Unclosed {delimiter.name} '{delimiter.open_char}'",
                    DiagnosticCode.UNCLOSED_DELIMITER,
                )
            )

    if quote and string_start >= 0:
        diagnostics.append(
            _error(
                document,
                string_start,
                length,
                "Unterminated string literal",
                DiagnosticCode.UNTERMINATED_STRING,
            )
        )

    return diagnostics


def has_critical_failure(diagnostics: list[Diagnostic]) -> bool:
    """Whether any diagnostic is an unclosed or unexpected-closing delimiter error."""
    return any(d.is_critical for d in diagnostics)
