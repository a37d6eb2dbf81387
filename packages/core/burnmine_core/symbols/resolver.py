"""Workspace-wide symbol index with cross-file import resolution.

The WorkspaceIndex owns one SymbolTable per file URI plus the reserved
builtin table. Name lookups from a file walk, in order:

1. the file's own table
2. the builtin table
3. the tables of the files it imports
4. every other indexed table, in population order

The fourth tier trades precision for breadth: two unrelated files declaring
the same name resolve to whichever was indexed first.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from burnmine_core.pathing import path_to_uri, uri_to_path
from burnmine_core.symbols.builtins import BUILTIN_URI, build_builtin_table
from burnmine_core.symbols.indexer import extract_imports, index_source
from burnmine_core.symbols.models import (
    DefinitionLocation,
    DocumentSymbol,
    FunctionSignature,
    IndexResult,
    SymbolKind,
    SymbolTable,
    TypeDefinition,
)

logger = logging.getLogger(__name__)


class WorkspaceIndex:
    """Symbol tables for every indexed file of a workspace.

    Tables are replaced wholesale on re-index, so readers iterating other
    files' tables see either the previous or the new table, never a mix.
    """

    def __init__(
        self,
        workspace_root: str | Path | None = None,
        *,
        extension: str = ".bn",
        stdlib_prefix: str = "std/",
        stdlib_dir: str = "src/lib",
    ):
        """Initialize the index.

        Args:
            workspace_root: Root used for standard-library and absolute imports
            extension: Source extension appended to extension-less imports
            stdlib_prefix: Import prefix reserved for the standard library
            stdlib_dir: Standard library directory relative to the workspace root
        """
        self._root = Path(workspace_root).resolve() if workspace_root is not None else None
        self._extension = extension
        self._stdlib_prefix = stdlib_prefix
        self._stdlib_dir = stdlib_dir
        self._builtins = build_builtin_table()
        self._tables: dict[str, SymbolTable] = {}
        self._import_targets: dict[str, list[str]] = {}
        self._in_progress: set[str] = set()

    @property
    def workspace_root(self) -> Path | None:
        return self._root

    @property
    def builtins(self) -> SymbolTable:
        """The builtin namespace table."""
        return self._builtins

    @property
    def uris(self) -> list[str]:
        """URIs of all indexed files, in population order."""
        return list(self._tables)

    def get_table(self, uri: str) -> SymbolTable | None:
        if uri == BUILTIN_URI:
            return self._builtins
        return self._tables.get(uri)

    def imported_uris(self, uri: str) -> list[str]:
        """Resolved URIs of the files imported by a file."""
        return list(self._import_targets.get(uri, []))

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def index_document(self, uri: str, text: str) -> IndexResult:
        """Rebuild the table of a file from its current text.

        Imports are resolved and indexed first (files already in the index are
        left untouched), so calls into imported functions can type variables.

        Args:
            uri: Document URI
            text: Full document text

        Returns:
            IndexResult with the new table and extraction diagnostics

        Raises:
            ValueError: If uri is the reserved builtin URI
        """
        if uri == BUILTIN_URI:
            raise ValueError(f"{BUILTIN_URI} is reserved for the builtin namespace")
        return self._index(uri, text)

    def index_file(self, path: str | Path) -> IndexResult | None:
        """Read and index a file from disk under its own URI.

        Returns:
            IndexResult, or None if the file could not be read
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Error reading %s: %s", path, e)
            return None
        return self._index(path_to_uri(path), text)

    def remove_document(self, uri: str) -> None:
        """Discard the table of a file."""
        self._tables.pop(uri, None)
        self._import_targets.pop(uri, None)

    def clear(self) -> None:
        """Discard every file table. The builtin table is kept."""
        self._tables.clear()
        self._import_targets.clear()
        self._in_progress.clear()

    def _index(self, uri: str, text: str) -> IndexResult:
        self._in_progress.add(uri)
        try:
            targets: list[str] = []
            for import_path in extract_imports(text):
                target = self._index_import(import_path, uri)
                if target is not None and target not in targets:
                    targets.append(target)
            self._import_targets[uri] = targets

            result = index_source(
                text,
                uri,
                lookup_function=lambda name: self._find_external_function(uri, name),
            )
            self._tables[uri] = result.table
            return result
        finally:
            self._in_progress.discard(uri)

    def _index_import(self, import_path: str, from_uri: str) -> str | None:
        resolved = self.resolve_import(import_path, from_uri)
        if resolved is None or not resolved.is_file():
            logger.debug("Import target not found: %s (from %s)", import_path, from_uri)
            return None

        target_uri = path_to_uri(resolved)
        if target_uri in self._tables or target_uri in self._in_progress:
            return target_uri

        try:
            text = resolved.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Error reading imported file %s: %s", resolved, e)
            return None

        self._index(target_uri, text)
        return target_uri

    def resolve_import(self, import_path: str, from_uri: str) -> Path | None:
        """Resolve an import path to a file path.

        - ``std/...`` resolves under ``<workspace root>/<stdlib_dir>``
        - ``/...`` resolves under the workspace root
        - anything else resolves against the importing file's directory

        The source extension is appended when missing. The returned path may
        not exist.
        """
        if import_path.startswith(self._stdlib_prefix):
            if self._root is None:
                return None
            candidate = self._root / self._stdlib_dir / import_path
        elif import_path.startswith("/"):
            candidate = (
                self._root / import_path.lstrip("/") if self._root is not None else Path(import_path)
            )
        else:
            current = uri_to_path(from_uri)
            if current is None:
                return None
            candidate = current.parent / import_path

        if not candidate.name.endswith(self._extension):
            candidate = candidate.with_name(candidate.name + self._extension)
        return candidate

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _tables_for(self, uri: str) -> Iterator[SymbolTable]:
        """Yield tables in lookup order for a file, each once."""
        seen: set[str] = set()

        own = self._tables.get(uri)
        if own is not None:
            seen.add(uri)
            yield own

        seen.add(BUILTIN_URI)
        yield self._builtins

        for target in list(self._import_targets.get(uri, [])):
            table = self._tables.get(target)
            if table is not None and target not in seen:
                seen.add(target)
                yield table

        for other_uri, table in list(self._tables.items()):
            if other_uri not in seen:
                seen.add(other_uri)
                yield table

    def _find_external_function(self, uri: str, name: str) -> FunctionSignature | None:
        # Used while a file is being re-indexed: its previous table must not answer.
        for table in self._tables_for(uri):
            if table.uri == uri:
                continue
            signature = table.functions.get(name)
            if signature is not None:
                return signature
        return None

    def get_variable_type(self, name: str, uri: str) -> str | None:
        """Get the declared or inferred type of a variable visible from a file."""
        for table in self._tables_for(uri):
            info = table.variables.get(name)
            if info is not None:
                return info.type
        return None

    def get_function(self, name: str, uri: str) -> FunctionSignature | None:
        """Get a function signature visible from a file."""
        for table in self._tables_for(uri):
            signature = table.functions.get(name)
            if signature is not None:
                return signature
        return None

    def get_type_definition(self, name: str, uri: str) -> TypeDefinition | None:
        for table in self._tables_for(uri):
            definition = table.types.get(name)
            if definition is not None:
                return definition
        return None

    def get_type(self, name: str, uri: str) -> dict[str, str] | None:
        """Get the fields of a type visible from a file."""
        definition = self.get_type_definition(name, uri)
        return dict(definition.fields) if definition is not None else None

    def get_class_methods(self, class_name: str, uri: str) -> dict[str, FunctionSignature] | None:
        """Get the methods of a class visible from a file."""
        for table in self._tables_for(uri):
            class_def = table.classes.get(class_name)
            if class_def is not None:
                return dict(class_def.methods)
        return None

    def get_all_functions(self, uri: str) -> dict[str, FunctionSignature]:
        """All function names visible from a file, first occurrence wins."""
        result: dict[str, FunctionSignature] = {}
        for table in self._tables_for(uri):
            for name, signature in table.functions.items():
                result.setdefault(name, signature)
        return result

    def get_all_types(self, uri: str) -> dict[str, dict[str, str]]:
        """All type names visible from a file with their fields, first occurrence wins."""
        result: dict[str, dict[str, str]] = {}
        for table in self._tables_for(uri):
            for name, definition in table.types.items():
                result.setdefault(name, dict(definition.fields))
        return result

    def get_definition_location(self, name: str, uri: str) -> DefinitionLocation | None:
        """Find where a name is declared. Builtins have no location."""
        for table in self._tables_for(uri):
            if table.uri == BUILTIN_URI:
                continue
            variable = table.variables.get(name)
            if variable is not None:
                return DefinitionLocation(table.uri, variable.declaration_range)
            for declared in (
                table.functions.get(name),
                table.types.get(name),
                table.classes.get(name),
            ):
                if declared is not None and declared.declaration_range is not None:
                    return DefinitionLocation(table.uri, declared.declaration_range)
        return None

    def get_variables(self, uri: str) -> dict[str, str] | None:
        """Variable name to type for one file, or None if it is not indexed."""
        table = self._tables.get(uri)
        if table is None:
            return None
        return {name: info.type for name, info in table.variables.items()}

    def get_constants(self, uri: str) -> dict[str, str] | None:
        """Const-declared subset of get_variables()."""
        table = self._tables.get(uri)
        if table is None:
            return None
        return {name: info.type for name, info in table.variables.items() if info.is_const}

    def document_symbols(self, uri: str) -> list[DocumentSymbol]:
        """Outline of one file: functions, types, classes with methods, variables."""
        table = self._tables.get(uri)
        if table is None:
            return []

        symbols: list[DocumentSymbol] = []
        for function in table.functions.values():
            if function.declaration_range is not None:
                symbols.append(
                    DocumentSymbol(function.name, SymbolKind.FUNCTION, function.declaration_range)
                )
        for type_def in table.types.values():
            if type_def.declaration_range is not None:
                symbols.append(
                    DocumentSymbol(type_def.name, SymbolKind.TYPE, type_def.declaration_range)
                )
        for class_def in table.classes.values():
            if class_def.declaration_range is not None:
                symbols.append(
                    DocumentSymbol(class_def.name, SymbolKind.CLASS, class_def.declaration_range)
                )
            for method in class_def.methods.values():
                if method.declaration_range is not None:
                    symbols.append(
                        DocumentSymbol(
                            method.name,
                            SymbolKind.METHOD,
                            method.declaration_range,
                            container=class_def.name,
                        )
                    )
        for variable in table.variables.values():
            kind = SymbolKind.CONSTANT if variable.is_const else SymbolKind.VARIABLE
            symbols.append(DocumentSymbol(variable.name, kind, variable.declaration_range))

        symbols.sort(key=lambda s: (s.range.start_line, s.range.start_col))
        return symbols
