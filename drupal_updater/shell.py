"""Shell, git and composer utilities.

Provides simple wrappers around subprocess calls for running external
commands, plus output formatting helpers. Every wrapper accepts a timeout;
a command that outlives it is killed and reported as ``ExternalTimeout``.
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path

from .errors import CommandError, ExternalTimeout, MissingCommand

PathLike = str | Path


def _capture(
    args: list[str],
    *,
    check: bool,
    cwd: PathLike | None,
    timeout: float | None,
) -> subprocess.CompletedProcess[str]:
    try:
        result = subprocess.run(
            args, capture_output=True, text=True, cwd=cwd, timeout=timeout
        )
    except subprocess.TimeoutExpired as exc:
        raise ExternalTimeout(args, exc.timeout) from exc
    if check and result.returncode != 0:
        raise CommandError(args, result.returncode, result.stderr or result.stdout)
    return result


def git(
    *args: str,
    check: bool = True,
    cwd: PathLike | None = None,
    timeout: float | None = None,
) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--short").
        check: If True (default), raise CommandError on non-zero exit. Set to
               False for commands that may legitimately fail.
        cwd: Directory to run in; defaults to the current directory.
        timeout: Seconds before the command is killed.

    Returns:
        Stripped stdout from the git command.
    """
    result = _capture(["git", *args], check=check, cwd=cwd, timeout=timeout)
    return result.stdout.strip()


def git_quiet(
    *args: str, cwd: PathLike | None = None, timeout: float | None = None
) -> int:
    """Run a git command for its exit status only (e.g. ``diff --quiet``)."""
    return _capture(["git", *args], check=False, cwd=cwd, timeout=timeout).returncode


def composer(
    *args: str,
    check: bool = True,
    cwd: PathLike | None = None,
    timeout: float | None = None,
) -> str:
    """Run a composer command and return stdout. Same contract as git()."""
    result = _capture(["composer", *args], check=check, cwd=cwd, timeout=timeout)
    return result.stdout.strip()


def run(
    *args: str,
    check: bool = True,
    cwd: PathLike | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[bytes]:
    """Run an arbitrary command.

    Unlike git(), this doesn't capture output - it streams directly to
    the terminal so users can see composer's progress.

    Returns:
        CompletedProcess with returncode for checking success.
    """
    cmd = list(args)
    try:
        result = subprocess.run(cmd, cwd=cwd, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        raise ExternalTimeout(cmd, exc.timeout) from exc
    if check and result.returncode != 0:
        raise CommandError(cmd, result.returncode)
    return result


def require_commands(*names: str) -> None:
    """Fail fast if any of the named executables is missing from PATH."""
    for name in names:
        if shutil.which(name) is None:
            raise MissingCommand(name)


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of an update run in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warn(msg: str) -> None:
    """Print a non-fatal problem to stderr."""
    print(f"Warning: {msg}", file=sys.stderr)
