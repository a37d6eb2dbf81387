"""Semantics stage: scope-free detection of identifiers used but never declared.

A name counts as declared if it is declared anywhere in the file (variables,
parameters, for-loop variables, classes, types) or is on the builtin
allowlist. Block and function scopes are not modelled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from burnmine_core.diagnostics.models import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticSource,
    Severity,
)
from burnmine_core.documents import TextDocument

IDENT = r"[a-zA-Z_][a-zA-Z0-9_]*"

KEYWORDS = frozenset(
    {
        "var",
        "const",
        "fun",
        "def",
        "class",
        "if",
        "else",
        "while",
        "for",
        "return",
        "import",
        "true",
        "false",
        "nil",
    }
)

BUILTIN_TYPES = frozenset({"string", "int", "float", "bool", "nil", "Date", "Time", "any"})

# Compared in lower case
BUILTIN_NAMES = frozenset(
    name.lower()
    for name in (
        "print",
        "toString",
        "input",
        "now",
        "formatDate",
        "createDate",
        "currentYear",
        "currentMonth",
        "currentDay",
        "power",
        "isEven",
        "join",
        "addDays",
        "subtractDays",
        "isLeapYear",
        "daysInMonth",
        "dayOfWeek",
        "i",
        "j",
        "k",
        "index",
        "value",
        "key",
        "true",
        "false",
    )
)

CLASS_DECL_RE = re.compile(rf"class\s+({IDENT})\s*\{{")
TYPE_DECL_RE = re.compile(rf"def\s+({IDENT})\s*\{{")
VAR_DECL_RE = re.compile(rf"(?:var|const)\s+({IDENT})(?:\s*:\s*{IDENT})?(?=\s*=|\s*$)", re.MULTILINE)
FOR_VAR_RE = re.compile(rf"for\s*\(\s*var\s+({IDENT})")
FUNCTION_PARAMS_RE = re.compile(rf"fun\s+{IDENT}\s*\(\s*([^)]*)\s*\)")
PARAM_NAME_RE = re.compile(rf"({IDENT})(?:\s*:\s*{IDENT})?")

# A bare identifier not followed by an assignment, call, block, index or annotation
USAGE_RE = re.compile(rf"\b({IDENT})\b(?!\s*(?:=|\(|\{{|\[|:))")

COMMENT_RE = re.compile(r"//.*$", re.MULTILINE)
STRING_RE = re.compile(r"\"(?:[^\"\\\n]|\\.)*\"|'(?:[^'\\\n]|\\.)*'")
NUMERIC_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class _Region:
    start: int
    end: int


def find_non_code_regions(text: str) -> list[_Region]:
    """Locate string literals and line comments.

    Strings are found first so that ``//`` inside a string does not start a comment.
    """
    regions = [_Region(m.start(), m.end()) for m in STRING_RE.finditer(text)]
    for match in COMMENT_RE.finditer(text):
        if not any(r.start <= match.start() < r.end for r in regions):
            regions.append(_Region(match.start(), match.end()))
    return regions


def collect_declared_names(text: str) -> set[str]:
    """Names declared anywhere in the text."""
    declared: set[str] = set()
    for pattern in (CLASS_DECL_RE, TYPE_DECL_RE, VAR_DECL_RE, FOR_VAR_RE):
        declared.update(m.group(1) for m in pattern.finditer(text))

    for match in FUNCTION_PARAMS_RE.finditer(text):
        for param in match.group(1).split(","):
            name_match = PARAM_NAME_RE.search(param.strip())
            if name_match:
                declared.add(name_match.group(1))

    return declared


def _is_known(name: str, declared: set[str]) -> bool:
    return (
        name in KEYWORDS
        or name in declared
        or name.lower() in BUILTIN_NAMES
        or name in BUILTIN_TYPES
        or NUMERIC_RE.fullmatch(name) is not None
    )


def check_semantics(document: TextDocument) -> list[Diagnostic]:
    """Warn once per undeclared identifier, at its first occurrence."""
    text = document.text
    declared = collect_declared_names(text)
    regions = find_non_code_regions(text)

    first_use: dict[str, int] = {}
    for match in USAGE_RE.finditer(text):
        name = match.group(1)
        position = match.start()

        if name in first_use or _is_known(name, declared):
            continue
        if any(r.start <= position < r.end for r in regions):
            continue
        if text[max(0, position - 20) : position].rstrip().endswith("."):
            continue

        first_use[name] = position

    return [
        Diagnostic(
            severity=Severity.WARNING,
            range=document.range_of(position, position + len(name)),
            message=f"Variable '{name}' is used but not declared",
            source=DiagnosticSource.SEMANTICS,
            code=DiagnosticCode.UNDECLARED_VARIABLE,
        )
        for name, position in first_use.items()
    ]
