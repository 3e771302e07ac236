"""Subprocess helpers used by providers.

Commands are always executed without a shell, with captured text output
and a bounded run time.
"""

import shutil
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of an external command.

    Attributes:
        stdout: Decoded standard output.
        stderr: Decoded standard error.
        returncode: Process exit status.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if the command exited with status 0."""
        return self.returncode == 0

    @property
    def message(self) -> str:
        """Best error text available: stderr, then stdout, then the exit status."""
        return self.stderr.strip() or self.stdout.strip() or f"exit status {self.returncode}"


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 60.0,
    cwd: str | None = None,
    encoding: str | None = None,
    errors: str | None = None,
) -> CommandResult:
    """Run a command and capture its output.

    Args:
        args: Executable followed by its arguments.
        check: Raise CalledProcessError on a non-zero exit status.
        timeout: Seconds to wait before the process is killed (None waits forever).
        cwd: Working directory, defaults to the current one.
        encoding: Codec for decoding output, defaults to the locale encoding.
        errors: Decoding error handler, such as "replace" (strict by default).

    Returns:
        CommandResult holding the decoded output and exit status.

    Raises:
        subprocess.CalledProcessError: If check is set and the command fails.
        subprocess.TimeoutExpired: If the command outlives the timeout.
        FileNotFoundError: If the executable does not exist.
    """
    completed = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
        cwd=cwd,
        encoding=encoding,
        errors=errors,
    )
    return CommandResult(
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        returncode=completed.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if an executable is on PATH."""
    return shutil.which(name) is not None


def first_available(names: Iterable[str]) -> str | None:
    """Pick the first executable found on PATH.

    Args:
        names: Candidate executables, most preferred first.

    Returns:
        The first candidate found, or None.
    """
    return next((name for name in names if command_exists(name)), None)
