"""Error types for drupal-updater.

Three families, matching how far a failure is allowed to travel:

- Fatal errors subclass ``click.ClickException``. They abort the whole run
  before any per-package work happens; click prints them to stderr and exits
  with status 1.
- Per-package errors (``UpgradeFailed``, ``CommitFailed``) are caught by the
  workflow and turned into an outcome for that package.
- Warnings (``UpdaterWarning`` subclasses) come from best-effort cleanup.
  They are printed and recorded on the run state, never re-raised.
"""

from __future__ import annotations

from collections.abc import Sequence

import click


class UpdaterError(click.ClickException):
    """Base class for errors that end the run with exit status 1."""

    exit_code = 1


class MissingCommand(UpdaterError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Required command '{name}' not found. Please install it.")
        self.name = name


class DirtyWorkingTree(UpdaterError):
    def __init__(self) -> None:
        super().__init__(
            "Your working directory has uncommitted changes.\n"
            "Please commit or stash them before running the updater."
        )


class UnknownBranch(UpdaterError):
    def __init__(self, detail: str = "") -> None:
        msg = "Could not determine the current git branch."
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class SourceQueryFailed(UpdaterError):
    """Listing outdated packages failed or returned unparsable output."""


class BranchCreateFailed(UpdaterError):
    """The update branch could not be created, checked out, or reused."""


class ConfigError(UpdaterError):
    """The configuration file is unreadable or invalid."""


class NoTerminal(UpdaterError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"An interactive terminal is required ({detail}).")


class CommandError(Exception):
    """An external command exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, output: str = "") -> None:
        self.cmd = list(args)
        self.returncode = returncode
        self.output = output.strip()
        super().__init__(self._describe())

    def _describe(self) -> str:
        msg = f"'{' '.join(self.cmd)}' exited with status {self.returncode}"
        if self.output:
            msg += f": {self.output}"
        return msg


class ExternalTimeout(CommandError):
    """An external command was killed after exceeding its timeout."""

    def __init__(self, args: Sequence[str], timeout: float) -> None:
        self.timeout = timeout
        super().__init__(args, returncode=-1)

    def _describe(self) -> str:
        return f"'{' '.join(self.cmd)}' timed out after {self.timeout:g}s"


class CandidateError(Exception):
    """A failure confined to a single package; the run moves on."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class UpgradeFailed(CandidateError):
    def __init__(self, reason: str, *, timed_out: bool = False) -> None:
        super().__init__(reason)
        self.timed_out = timed_out


class CommitFailed(CandidateError):
    pass


class UpdaterWarning(Exception):
    """A best-effort step failed. Reported, never fatal."""


class RevertFailed(UpdaterWarning):
    pass


class CheckoutFailed(UpdaterWarning):
    pass


class PushFailed(UpdaterWarning):
    pass


class BranchDeleteFailed(UpdaterWarning):
    pass
