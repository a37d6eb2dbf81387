"""Gateway to the external burn compiler.

Validation writes the document to a uniquely named temporary file, runs
``<compiler> -c <file>`` with a bounded wait and parses whatever the
compiler prints. Any failure unrelated to compile errors (missing binary,
timeout, crash, temporary file I/O) is logged and yields no diagnostics.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from burnmine_core.compiler.exceptions import (
    CompilerCrashError,
    CompilerError,
    CompilerNotFoundError,
    CompilerTimeoutError,
    TemporaryFileError,
)
from burnmine_core.compiler.output_parser import parse_compiler_output
from burnmine_core.compiler.runner import CompilerResult, run_compiler
from burnmine_core.diagnostics.models import Diagnostic

logger = logging.getLogger(__name__)

CHECK_FLAG = "-c"
DEBUG_FLAG = "-d"
VERSION_FLAG = "-v"

VERSION_RE = re.compile(r"v(\d+\.\d+\.\d+)")
UNKNOWN_VERSION = "unknown"


@dataclass
class CompileReport:
    """Outcome of a debug compile of a file."""

    success: bool
    output: str
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "output": self.output,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass
class CompilerInfo:
    """Compiler availability and version."""

    path: str
    available: bool
    version: str = UNKNOWN_VERSION
    resolved_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "available": self.available,
            "version": self.version,
            "resolved_path": self.resolved_path,
        }


@contextmanager
def snapshot_file(text: str, uri: str, extension: str = ".bn") -> Iterator[Path]:
    """Write text to a unique temporary file, removed on exit.

    The file name carries a hash of the URI and text; mkstemp adds a random
    part so concurrent validations of the same content do not collide.

    Raises:
        TemporaryFileError: If the snapshot cannot be written
    """
    digest = hashlib.md5(f"{uri}\0{text}".encode(), usedforsecurity=False).hexdigest()[:12]
    try:
        fd, name = tempfile.mkstemp(prefix=f"burn-{digest}-", suffix=extension)
    except OSError as e:
        raise TemporaryFileError(f"Cannot create snapshot for {uri}: {e}") from e

    path = Path(name)
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise TemporaryFileError(f"Cannot write snapshot {path}: {e}") from e
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Error cleaning up temp file %s: %s", path, e)


class CompilerGateway:
    """Runs the burn compiler and turns its output into diagnostics."""

    def __init__(
        self,
        compiler_path: str = "burn",
        timeout_seconds: float = 5.0,
        extension: str = ".bn",
    ):
        """Initialize the gateway.

        Args:
            compiler_path: Compiler binary, absolute or looked up on PATH
            timeout_seconds: Bounded wait for each invocation
            extension: Suffix of the temporary snapshot files
        """
        self._compiler_path = compiler_path
        self._timeout_seconds = timeout_seconds
        self._extension = extension

    @property
    def compiler_path(self) -> str:
        return self._compiler_path

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    def resolve_executable(self) -> str | None:
        """Locate the compiler binary, or None if it is not executable."""
        return shutil.which(self._compiler_path)

    def is_available(self) -> bool:
        return self.resolve_executable() is not None

    async def _run(self, *args: str) -> CompilerResult:
        executable = self.resolve_executable()
        if executable is None:
            raise CompilerNotFoundError(f"Compiler not found: {self._compiler_path}")
        return await run_compiler([executable, *args], timeout_s=self._timeout_seconds)

    async def validate(self, text: str, uri: str = "untitled") -> list[Diagnostic]:
        """Check a document snapshot with the compiler.

        Never raises for compiler or I/O failures; those yield an empty list.

        Args:
            text: Document text to check
            uri: Document URI, used to name the snapshot

        Returns:
            Diagnostics parsed from the compiler output
        """
        try:
            with snapshot_file(text, uri, self._extension) as path:
                result = await self._run(CHECK_FLAG, str(path))
            return self._diagnostics_from(result, text)
        except CompilerNotFoundError as e:
            logger.debug("Skipping compiler check for %s: %s", uri, e)
        except CompilerTimeoutError as e:
            logger.warning("Compiler check for %s timed out: %s", uri, e)
        except CompilerError as e:
            logger.warning("Compiler check for %s failed: %s", uri, e)
        return []

    def _diagnostics_from(self, result: CompilerResult, text: str) -> list[Diagnostic]:
        if result.exit_code == 0:
            return []
        if result.killed_by_signal:
            raise CompilerCrashError(
                f"Compiler killed by signal {-result.exit_code}", exit_code=result.exit_code
            )
        output = result.output
        if not output.strip():
            raise CompilerCrashError(
                f"Compiler exited with {result.exit_code} and no output",
                exit_code=result.exit_code,
            )
        return parse_compiler_output(output, text)

    async def compile_file(self, path: str | Path) -> CompileReport:
        """Compile a file with verbose diagnostics (``-d``).

        Raises:
            CompilerNotFoundError: If the compiler is not available
            CompilerTimeoutError: If compilation exceeds the time bound
        """
        path = Path(path)
        result = await self._run(DEBUG_FLAG, str(path))
        output = result.output
        if result.exit_code == 0:
            return CompileReport(success=True, output=output)

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Error reading %s: %s", path, e)
            text = ""
        return CompileReport(
            success=False,
            output=output,
            diagnostics=parse_compiler_output(output, text),
        )

    async def get_version(self) -> str:
        """Get the compiler version (``major.minor.patch``), or "unknown"."""
        try:
            result = await self._run(VERSION_FLAG)
        except CompilerError as e:
            logger.debug("Error checking compiler version: %s", e)
            return UNKNOWN_VERSION

        match = VERSION_RE.search(result.output)
        return match.group(1) if match else UNKNOWN_VERSION

    async def get_environment_info(self) -> CompilerInfo:
        resolved = self.resolve_executable()
        if resolved is None:
            return CompilerInfo(path=self._compiler_path, available=False)
        return CompilerInfo(
            path=self._compiler_path,
            available=True,
            version=await self.get_version(),
            resolved_path=resolved,
        )


async def validate_with_compiler(
    text: str,
    compiler_path: str,
    timeout_seconds: float = 5.0,
    uri: str = "untitled",
    extension: str = ".bn",
) -> list[Diagnostic]:
    """Check a document snapshot with a compiler binary. Never raises."""
    gateway = CompilerGateway(compiler_path, timeout_seconds, extension)
    return await gateway.validate(text, uri)


class MockCompilerGateway:
    """Mock compiler gateway for testing without a compiler binary."""

    def __init__(self, diagnostics: list[Diagnostic] | None = None):
        """Initialize mock gateway."""
        self._default = list(diagnostics or [])
        self._by_uri: dict[str, list[Diagnostic]] = {}
        self.calls: list[tuple[str, str]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def set_diagnostics(self, uri: str, diagnostics: list[Diagnostic]) -> None:
        """Set mock diagnostics for one document."""
        self._by_uri[uri] = list(diagnostics)

    async def validate(self, text: str, uri: str = "untitled") -> list[Diagnostic]:
        """Get mock diagnostics."""
        self.calls.append((text, uri))
        return list(self._by_uri.get(uri, self._default))
