"""Quick fixes offered for diagnostics."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from burnmine_core.diagnostics.models import Diagnostic, DiagnosticCode
from burnmine_core.documents import TextDocument, TextRange

UNDECLARED_RE = re.compile(r"Variable '([^']+)' is used but not declared")
UNUSED_RE = re.compile(r"Variable '([^']+)' is declared but never used")
DECLARATION_HEAD_RE = re.compile(r"(var|const)\s+")

QUICKFIX = "quickfix"


@dataclass(frozen=True)
class TextEdit:
    """Replace a range of a document with new text."""

    range: TextRange
    new_text: str

    def to_dict(self) -> dict[str, Any]:
        return {"range": self.range.to_dict(), "newText": self.new_text}


@dataclass
class CodeAction:
    """A titled set of edits fixing one diagnostic."""

    title: str
    uri: str
    edits: list[TextEdit] = field(default_factory=list)
    kind: str = QUICKFIX
    diagnostic: Diagnostic | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "title": self.title,
            "kind": self.kind,
            "edit": {"changes": {self.uri: [edit.to_dict() for edit in self.edits]}},
        }
        if self.diagnostic is not None:
            result["diagnostics"] = [self.diagnostic.to_dict()]
        return result


def _declare_variable(document: TextDocument, diagnostic: Diagnostic) -> CodeAction | None:
    match = UNDECLARED_RE.search(diagnostic.message)
    if not match:
        return None
    name = match.group(1)
    line = diagnostic.range.start_line
    return CodeAction(
        title=f"Declare variable '{name}'",
        uri=document.uri,
        edits=[TextEdit(TextRange.on_line(line, 0, 0), f"var {name} = \n")],
        diagnostic=diagnostic,
    )


def _prefix_underscore(document: TextDocument, diagnostic: Diagnostic) -> CodeAction | None:
    match = UNUSED_RE.search(diagnostic.message)
    if not match:
        return None
    name = match.group(1)

    # Keep the declaring keyword the diagnostic range starts with
    start = document.offset_at(diagnostic.range.start_line, diagnostic.range.start_col)
    head = DECLARATION_HEAD_RE.match(document.text, start)
    keyword = head.group(1) if head else "var"

    return CodeAction(
        title=f"Add underscore to '{name}'",
        uri=document.uri,
        edits=[TextEdit(diagnostic.range, f"{keyword} _{name}")],
        diagnostic=diagnostic,
    )


def quick_fixes(document: TextDocument, diagnostics: list[Diagnostic]) -> list[CodeAction]:
    """Build quick fixes for undeclared and unused variable diagnostics."""
    actions: list[CodeAction] = []
    for diagnostic in diagnostics:
        action: CodeAction | None = None
        if diagnostic.code == DiagnosticCode.UNDECLARED_VARIABLE:
            action = _declare_variable(document, diagnostic)
        elif diagnostic.code == DiagnosticCode.UNUSED_VARIABLE:
            action = _prefix_underscore(document, diagnostic)
        if action is not None:
            actions.append(action)
    return actions
