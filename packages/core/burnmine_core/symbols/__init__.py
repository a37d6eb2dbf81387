"""Cross-file symbol index for burn sources.

This module provides pattern-based declaration extraction and a workspace
index that resolves imports and answers name lookups:
- Extracting types, functions, classes, variables and imports from text
- Resolving import paths to files and indexing them on demand
- Layered lookup: own file, builtins, imports, then every other file
"""

from burnmine_core.symbols.models import (
    ClassDefinition,
    DefinitionLocation,
    DocumentSymbol,
    FunctionSignature,
    IndexResult,
    Parameter,
    SymbolKind,
    SymbolTable,
    TypeDefinition,
    VariableInfo,
)
from burnmine_core.symbols.builtins import (
    BUILTIN_URI,
    PRIMITIVE_TYPES,
    build_builtin_table,
)
from burnmine_core.symbols.discovery import find_source_files
from burnmine_core.symbols.indexer import extract_imports, index_source, infer_type
from burnmine_core.symbols.resolver import WorkspaceIndex

__all__ = [
    # Models
    "ClassDefinition",
    "DefinitionLocation",
    "DocumentSymbol",
    "FunctionSignature",
    "IndexResult",
    "Parameter",
    "SymbolKind",
    "SymbolTable",
    "TypeDefinition",
    "VariableInfo",
    # Builtins
    "BUILTIN_URI",
    "PRIMITIVE_TYPES",
    "build_builtin_table",
    # Extraction
    "extract_imports",
    "find_source_files",
    "index_source",
    "infer_type",
    # Index
    "WorkspaceIndex",
]
