"""Symbol table data model.

A SymbolTable holds every declaration extracted from one file. Tables are
never patched in place: each re-index produces a fresh table that replaces
the previous one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from burnmine_core.diagnostics.models import Diagnostic
from burnmine_core.documents import TextRange


class SymbolKind(Enum):
    """Kinds of declarations reported in a document outline."""

    FUNCTION = "function"
    METHOD = "method"
    CLASS = "class"
    TYPE = "type"
    VARIABLE = "variable"
    CONSTANT = "constant"


@dataclass(frozen=True)
class Parameter:
    """A typed function parameter."""

    name: str
    type: str


@dataclass
class FunctionSignature:
    """A function or method header."""

    name: str
    parameters: list[Parameter] = field(default_factory=list)
    return_type: str = ""
    declaration_range: TextRange | None = None
    uri: str | None = None
    class_name: str | None = None
    """Owning class for methods, None for free functions."""
    documentation: str | None = None

    @property
    def is_method(self) -> bool:
        return self.class_name is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "parameters": [{"name": p.name, "type": p.type} for p in self.parameters],
            "return_type": self.return_type,
            "class_name": self.class_name,
            "documentation": self.documentation,
        }


@dataclass
class VariableInfo:
    """A var or const declaration."""

    name: str
    type: str
    """Declared or inferred type, empty when unknown."""
    declaration_range: TextRange
    is_const: bool = False


@dataclass
class TypeDefinition:
    """A ``def Name { field: type, ... }`` declaration."""

    name: str
    fields: dict[str, str] = field(default_factory=dict)
    declaration_range: TextRange | None = None
    uri: str | None = None


@dataclass
class ClassDefinition:
    """A ``class Name { ... }`` declaration and its methods."""

    name: str
    methods: dict[str, FunctionSignature] = field(default_factory=dict)
    declaration_range: TextRange | None = None
    uri: str | None = None


@dataclass
class SymbolTable:
    """All declarations extracted from one file."""

    uri: str
    variables: dict[str, VariableInfo] = field(default_factory=dict)
    functions: dict[str, FunctionSignature] = field(default_factory=dict)
    types: dict[str, TypeDefinition] = field(default_factory=dict)
    classes: dict[str, ClassDefinition] = field(default_factory=dict)
    imports: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DefinitionLocation:
    """Where a name is declared."""

    uri: str
    range: TextRange

    def to_dict(self) -> dict[str, Any]:
        """Convert to an editor protocol location."""
        return {"uri": self.uri, "range": self.range.to_dict()}


@dataclass(frozen=True)
class DocumentSymbol:
    """One entry of a document outline."""

    name: str
    kind: SymbolKind
    range: TextRange
    container: str | None = None


@dataclass
class IndexResult:
    """Outcome of indexing one file."""

    table: SymbolTable
    diagnostics: list[Diagnostic] = field(default_factory=list)
