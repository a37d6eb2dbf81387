"""Lint stage: unused variables and brace spacing hints."""

from __future__ import annotations

import re

from burnmine_core.diagnostics.models import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticSource,
    Severity,
)
from burnmine_core.documents import TextDocument

IDENT = r"[a-zA-Z_][a-zA-Z0-9_]*"

VAR_DECL_RE = re.compile(
    rf"(?:var|const)\s+({IDENT})(?:\s*:\s*{IDENT})?(?=\s*=|\s*$)", re.MULTILINE
)
CONTROL_BRACE_RE = re.compile(r"\b(?:fun|if|while|for|else)\b[^{]*\{")

UNUSED_PREFIX = "_"


def find_unused_variables(document: TextDocument) -> list[Diagnostic]:
    """Hint at variables whose name never reappears after the declaration."""
    text = document.text
    diagnostics: list[Diagnostic] = []
    seen: set[str] = set()

    for match in VAR_DECL_RE.finditer(text):
        name = match.group(1)
        if name in seen:
            continue
        seen.add(name)
        if name.startswith(UNUSED_PREFIX):
            continue

        if re.search(rf"\b{re.escape(name)}\b", text[match.end(1) :]):
            continue

        diagnostics.append(
            Diagnostic(
                severity=Severity.HINT,
                range=document.range_of(match.start(), match.end(1)),
                message=f"Variable '{name}' is declared but never used",
                source=DiagnosticSource.LINT,
                code=DiagnosticCode.UNUSED_VARIABLE,
            )
        )

    return diagnostics


def find_brace_spacing(document: TextDocument) -> list[Diagnostic]:
    """Hint when a control construct's opening brace has no whitespace before it."""
    text = document.text
    diagnostics: list[Diagnostic] = []

    for match in CONTROL_BRACE_RE.finditer(text):
        brace = match.end() - 1
        if brace > 0 and not text[brace - 1].isspace():
            diagnostics.append(
                Diagnostic(
                    severity=Severity.HINT,
                    range=document.range_of(brace, brace + 1),
                    message="Consider adding a space before opening brace for consistent style",
                    source=DiagnosticSource.LINT,
                    code=DiagnosticCode.BRACE_SPACING,
                )
            )

    return diagnostics


def lint_document(document: TextDocument) -> list[Diagnostic]:
    """Run all lint checks."""
    return find_unused_variables(document) + find_brace_spacing(document)
