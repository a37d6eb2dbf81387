"""Diagnostics for burn documents.

This module provides the validation stages and their orchestration:
- Syntax: delimiter balance and string termination
- Semantics: identifiers used but never declared
- Lint: unused variables and brace spacing
- Pipeline: ordered stages with a critical-failure gate and a version cache
"""

from burnmine_core.diagnostics.models import (
    CRITICAL_SYNTAX_CODES,
    Diagnostic,
    DiagnosticCode,
    DiagnosticSource,
    Severity,
)
from burnmine_core.diagnostics.cache import CacheEntry, DiagnosticsCache
from burnmine_core.diagnostics.syntax import check_syntax, has_critical_failure
from burnmine_core.diagnostics.semantics import check_semantics
from burnmine_core.diagnostics.lint import lint_document
from burnmine_core.diagnostics.actions import CodeAction, TextEdit, quick_fixes
from burnmine_core.diagnostics.pipeline import (
    DiagnosticPipeline,
    DiagnosticsProvider,
    PipelineResult,
    PipelineStage,
)

__all__ = [
    # Models
    "CRITICAL_SYNTAX_CODES",
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticSource",
    "Severity",
    # Cache
    "CacheEntry",
    "DiagnosticsCache",
    # Stages
    "check_semantics",
    "check_syntax",
    "has_critical_failure",
    "lint_document",
    # Quick fixes
    "CodeAction",
    "TextEdit",
    "quick_fixes",
    # Pipeline
    "DiagnosticPipeline",
    "DiagnosticsProvider",
    "PipelineResult",
    "PipelineStage",
]
