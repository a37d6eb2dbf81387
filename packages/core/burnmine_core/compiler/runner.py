"""Async subprocess runner for the burn compiler.

Provides a time-bounded, cancellable subprocess wrapper with output
capture and error translation.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from burnmine_core.compiler.exceptions import CompilerNotFoundError, CompilerTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class CompilerResult:
    """Result of one compiler invocation."""

    exit_code: int
    stdout: str
    stderr: str
    elapsed_s: float

    @property
    def output(self) -> str:
        """Combined stderr and stdout, stderr first."""
        return "\n".join(part for part in (self.stderr, self.stdout) if part)

    @property
    def killed_by_signal(self) -> bool:
        return self.exit_code < 0


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


async def run_compiler(cmd: list[str], timeout_s: float = 5.0) -> CompilerResult:
    """Run a compiler command with a bounded wait.

    Args:
        cmd: Command and arguments
        timeout_s: Timeout in seconds

    Returns:
        CompilerResult with exit code and decoded output

    Raises:
        CompilerNotFoundError: If the command cannot be executed
        CompilerTimeoutError: If the command times out (the process is killed)
    """
    logger.debug("Running command: %s", " ".join(cmd))
    start_time = time.monotonic()

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError, NotADirectoryError) as e:
        raise CompilerNotFoundError(f"Command not found: {cmd[0]}") from e
    except OSError as e:
        # e.g. ENOEXEC for a file that is neither a binary nor a script
        raise CompilerNotFoundError(f"Cannot execute {cmd[0]}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_s)
    except TimeoutError as e:
        await _terminate(process)
        raise CompilerTimeoutError(f"{cmd[0]} timed out after {timeout_s}s") from e
    except asyncio.CancelledError:
        await _terminate(process)
        raise

    elapsed = time.monotonic() - start_time

    return CompilerResult(
        exit_code=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
        elapsed_s=elapsed,
    )
