"""Declaration extraction from burn source text.

Extraction is pattern based: each declaration kind is found by an independent
scan over the raw text, so it is a best-effort index rather than a parse.
Structurally invalid declarations become diagnostics and never raise.
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
from burnmine_core.documents import TextDocument
from burnmine_core.symbols.models import (
    ClassDefinition,
    FunctionSignature,
    IndexResult,
    Parameter,
    SymbolTable,
    TypeDefinition,
    VariableInfo,
)

logger = logging.getLogger(__name__)

IDENT = r"[a-zA-Z_][a-zA-Z0-9_]*"

SINGLE_IMPORT_RE = re.compile(r"""import\s+["']([^"']+)["']""")
MULTI_IMPORT_RE = re.compile(r"import\s*\(([^)]*)\)", re.DOTALL)
QUOTED_PATH_RE = re.compile(r"""["']([^"']+)["']""")

TYPE_RE = re.compile(rf"def\s+({IDENT})\s*\{{([^}}]*)\}}")
FUNCTION_RE = re.compile(rf"fun\s+({IDENT})\s*\(([^)]*)\)(?:\s*:\s*({IDENT}))?\s*\{{")
CLASS_HEAD_RE = re.compile(rf"class\s+({IDENT})\s*\{{")
VARIABLE_RE = re.compile(
    rf"(var|const)\s+({IDENT})(?:\s*:\s*({IDENT}))?\s*=\s*(.+?)(?:[;\n,]|$)"
)
CALL_RE = re.compile(rf"({IDENT})\s*\(")

INT_LITERAL_RE = re.compile(r"-?\d+")
FLOAT_LITERAL_RE = re.compile(r"-?\d+\.\d+")

# Entries of a field or parameter list
LIST_ENTRY_RE = re.compile(r"[^,\n]+")

FunctionLookup = Callable[[str], FunctionSignature | None]


def extract_imports(text: str) -> list[str]:
    """Extract import paths in source order.

    Handles both ``import "path"`` and ``import ("a" "b")``.
    """
    found: list[tuple[int, str]] = []
    for match in SINGLE_IMPORT_RE.finditer(text):
        found.append((match.start(1), match.group(1)))
    for match in MULTI_IMPORT_RE.finditer(text):
        for path_match in QUOTED_PATH_RE.finditer(match.group(1)):
            found.append((match.start(1) + path_match.start(1), path_match.group(1)))
    found.sort(key=lambda item: item[0])
    return [path for _, path in found]


def infer_type(value: str, lookup_function: FunctionLookup | None = None) -> str:
    """Infer a variable type from the right-hand side of a declaration.

    Literal shapes win, then the declared return type of a called function.
    Returns an empty string when the type is unknown.
    """
    value = value.strip()
    if value in ("true", "false"):
        return "bool"
    if len(value) >= 2 and value[0] in "\"'" and value[-1] == value[0]:
        return "string"
    if INT_LITERAL_RE.fullmatch(value):
        return "int"
    if FLOAT_LITERAL_RE.fullmatch(value):
        return "float"
    if value == "nil":
        return "nil"

    call = CALL_RE.search(value)
    if call is None:
        return ""
    callee = call.group(1)
    if callee == "input":
        return "string"
    if lookup_function is not None:
        signature = lookup_function(callee)
        if signature is not None and signature.return_type:
            return signature.return_type
    return ""


class _Extraction:
    """State for one indexing pass over a single file."""

    def __init__(self, text: str, uri: str, lookup_function: FunctionLookup | None):
        self.document = TextDocument(uri=uri, version=0, text=text)
        self.text = text
        self.uri = uri
        self.lookup_function = lookup_function
        self.table = SymbolTable(uri=uri)
        self.diagnostics: list[Diagnostic] = []

    def report(self, start: int, end: int, message: str, code: str) -> None:
        self.diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                range=self.document.range_of(start, end),
                message=message,
                source=DiagnosticSource.SYNTAX,
                code=code,
            )
        )

    def parse_parameters(self, owner: str, params_text: str, offset: int) -> list[Parameter]:
        params: list[Parameter] = []
        for entry in LIST_ENTRY_RE.finditer(params_text):
            raw = entry.group(0)
            if not raw.strip():
                continue
            parts = raw.split(":")
            name = parts[0].strip()
            p_type = parts[1].strip() if len(parts) == 2 else ""
            if len(parts) != 2 or not name or not p_type:
                start = offset + entry.start() + (len(raw) - len(raw.lstrip()))
                end = offset + entry.start() + len(raw.rstrip())
                self.report(
                    start,
                    end,
                    f"Invalid parameter definition in function {owner}",
                    DiagnosticCode.INVALID_PARAMETER,
                )
                continue
            params.append(Parameter(name, p_type))
        return params

    def signature_from(self, match: re.Match[str], offset: int = 0) -> FunctionSignature:
        name = match.group(1)
        return FunctionSignature(
            name=name,
            parameters=self.parse_parameters(name, match.group(2), offset + match.start(2)),
            return_type=match.group(3) or "",
            declaration_range=self.document.range_of(offset + match.start(), offset + match.end()),
            uri=self.uri,
        )

    def extract_types(self) -> None:
        for match in TYPE_RE.finditer(self.text):
            type_name = match.group(1)
            fields: dict[str, str] = {}
            body_offset = match.start(2)

            for entry in LIST_ENTRY_RE.finditer(match.group(2)):
                raw = entry.group(0)
                if not raw.strip():
                    continue
                parts = raw.split(":")
                if len(parts) == 2 and parts[0].strip() and parts[1].strip():
                    fields[parts[0].strip()] = parts[1].strip()
                    continue
                start = body_offset + entry.start() + (len(raw) - len(raw.lstrip()))
                end = body_offset + entry.start() + len(raw.rstrip())
                self.report(
                    start,
                    end,
                    f"Invalid field definition in type {type_name}",
                    DiagnosticCode.INVALID_FIELD,
                )

            self.table.types[type_name] = TypeDefinition(
                name=type_name,
                fields=fields,
                declaration_range=self.document.range_of(match.start(), match.end()),
                uri=self.uri,
            )

    def extract_functions(self) -> None:
        for match in FUNCTION_RE.finditer(self.text):
            signature = self.signature_from(match)
            self.table.functions[signature.name] = signature

    def extract_classes(self) -> None:
        for match in CLASS_HEAD_RE.finditer(self.text):
            class_name = match.group(1)
            body_start = match.end()
            body_end = _find_block_end(self.text, body_start)
            body = self.text[body_start:body_end]

            methods: dict[str, FunctionSignature] = {}
            for method_match in FUNCTION_RE.finditer(body):
                method = FunctionSignature(
                    name=method_match.group(1),
                    parameters=[
                        Parameter(p.name, p.type)
                        for p in _quiet_parameters(method_match.group(2))
                    ],
                    return_type=method_match.group(3) or "",
                    declaration_range=self.document.range_of(
                        body_start + method_match.start(), body_start + method_match.end()
                    ),
                    uri=self.uri,
                    class_name=class_name,
                )
                methods[method.name] = method

            self.table.classes[class_name] = ClassDefinition(
                name=class_name,
                methods=methods,
                declaration_range=self.document.range_of(
                    match.start(), min(body_end + 1, len(self.text))
                ),
                uri=self.uri,
            )

    def extract_variables(self) -> None:
        for match in VARIABLE_RE.finditer(self.text):
            is_const = match.group(1) == "const"
            name = match.group(2)
            declared_type = match.group(3) or ""
            var_type = declared_type or infer_type(match.group(4), self.lookup_own_first)

            self.table.variables[name] = VariableInfo(
                name=name,
                type=var_type,
                declaration_range=self.document.range_of(match.start(), match.end(4)),
                is_const=is_const,
            )

    def lookup_own_first(self, name: str) -> FunctionSignature | None:
        own = self.table.functions.get(name)
        if own is not None:
            return own
        if self.lookup_function is not None:
            return self.lookup_function(name)
        return None


def _quiet_parameters(params_text: str) -> list[Parameter]:
    # Method headers are also seen by the top-level function scan, which reports
    # malformed parameters once.
    params: list[Parameter] = []
    for entry in LIST_ENTRY_RE.finditer(params_text):
        parts = entry.group(0).split(":")
        if len(parts) == 2 and parts[0].strip() and parts[1].strip():
            params.append(Parameter(parts[0].strip(), parts[1].strip()))
    return params


def _find_block_end(text: str, body_start: int) -> int:
    """Return the offset of the brace closing a block whose body starts at body_start.

    Falls back to the end of text for an unclosed block.
    """
    depth = 1
    quote = ""
    index = body_start
    while index < len(text):
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote or char == "\n":
                quote = ""
        elif char in ('"', "'"):
            quote = char
        elif char == "/" and text.startswith("//", index):
            newline = text.find("\n", index)
            if newline == -1:
                break
            index = newline
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return len(text)


def index_source(
    text: str,
    uri: str,
    lookup_function: FunctionLookup | None = None,
) -> IndexResult:
    """Extract the declarations of one file into a fresh symbol table.

    Args:
        text: Full file contents
        uri: URI the table is recorded under
        lookup_function: Resolves callee names declared outside this file
            (builtins, imports); used only for variable type inference

    Returns:
        IndexResult with the table and any extraction diagnostics
    """
    extraction = _Extraction(text, uri, lookup_function)
    extraction.table.imports = extract_imports(text)
    extraction.extract_types()
    extraction.extract_functions()
    extraction.extract_classes()
    extraction.extract_variables()

    logger.debug(
        "Indexed %s: %d functions, %d types, %d classes, %d variables",
        uri,
        len(extraction.table.functions),
        len(extraction.table.types),
        len(extraction.table.classes),
        len(extraction.table.variables),
    )
    return IndexResult(table=extraction.table, diagnostics=extraction.diagnostics)
