"""External burn compiler integration.

This module shells out to the burn compiler and translates its output:
- Time-bounded, cancellable subprocess execution
- Temporary snapshot files removed on every exit path
- Ordered parsing of the compiler's textual error grammars
"""

from burnmine_core.compiler.exceptions import (
    CompilerCrashError,
    CompilerError,
    CompilerNotFoundError,
    CompilerTimeoutError,
    TemporaryFileError,
)
from burnmine_core.compiler.runner import CompilerResult, run_compiler
from burnmine_core.compiler.output_parser import error_range, parse_compiler_output
from burnmine_core.compiler.gateway import (
    CompileReport,
    CompilerGateway,
    CompilerInfo,
    MockCompilerGateway,
    snapshot_file,
    validate_with_compiler,
)

__all__ = [
    # Exceptions
    "CompilerCrashError",
    "CompilerError",
    "CompilerNotFoundError",
    "CompilerTimeoutError",
    "TemporaryFileError",
    # Runner
    "CompilerResult",
    "run_compiler",
    # Output parsing
    "error_range",
    "parse_compiler_output",
    # Gateway
    "CompileReport",
    "CompilerGateway",
    "CompilerInfo",
    "MockCompilerGateway",
    "snapshot_file",
    "validate_with_compiler",
]
