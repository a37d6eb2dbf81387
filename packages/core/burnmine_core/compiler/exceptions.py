"""Compiler-specific exceptions."""


class CompilerError(Exception):
    """Base class for compiler invocation errors."""

    pass


class CompilerNotFoundError(CompilerError):
    """Raised when the compiler binary cannot be found or executed."""

    pass


class CompilerTimeoutError(CompilerError):
    """Raised when the compiler does not finish within its time bound.

    The process has already been killed when this is raised.
    """

    pass


class CompilerCrashError(CompilerError):
    """Raised when the compiler exits abnormally without usable output.

    This can happen when:
    - The process is killed by a signal
    - It exits non-zero and prints nothing
    """

    def __init__(self, message: str, exit_code: int):
        super().__init__(message)
        self.exit_code = exit_code


class TemporaryFileError(CompilerError):
    """Raised when the document snapshot cannot be written to disk."""

    pass
