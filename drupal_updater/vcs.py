"""Version control backed by the git CLI."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .errors import (
    BranchDeleteFailed,
    CheckoutFailed,
    CommandError,
    CommitFailed,
    PushFailed,
    RevertFailed,
)
from .shell import git, git_quiet, run


class GitRepository:
    """Git operations used by the update workflow.

    Args:
        root: Repository working directory.
        timeout: Seconds each git invocation may take.
    """

    def __init__(self, root: Path, timeout: float | None = None) -> None:
        self.root = root
        self.timeout = timeout

    def _git(self, *args: str, check: bool = True) -> str:
        return git(*args, check=check, cwd=self.root, timeout=self.timeout)

    def has_uncommitted_changes(self) -> bool:
        """True if tracked files differ from HEAD (staged or not).

        Raises:
            CommandError: If HEAD can't be compared, e.g. before the first commit.
        """
        status = git_quiet(
            "diff", "--quiet", "HEAD", "--", cwd=self.root, timeout=self.timeout
        )
        if status not in (0, 1):
            raise CommandError(["git", "diff", "--quiet", "HEAD", "--"], status)
        return status == 1

    def current_branch(self) -> str | None:
        """Name of the checked-out branch, or None if detached or unknown."""
        name = self._git("rev-parse", "--abbrev-ref", "HEAD", check=False)
        if not name or name == "HEAD":
            return None
        return name

    def branch_exists(self, name: str) -> bool:
        status = git_quiet(
            "rev-parse", "--verify", "--quiet", f"refs/heads/{name}",
            cwd=self.root, timeout=self.timeout,
        )
        return status == 0

    def create_and_checkout(self, name: str) -> None:
        try:
            self._git("checkout", "-b", name)
        except CommandError as exc:
            raise CheckoutFailed(f"Could not create branch '{name}': {exc}") from exc

    def checkout(self, name: str) -> None:
        try:
            self._git("checkout", name)
        except CommandError as exc:
            raise CheckoutFailed(f"Could not check out '{name}': {exc}") from exc

    def is_tracked(self, path: str) -> bool:
        """True if git tracks ``path`` or anything beneath it."""
        return bool(self._git("ls-files", "--", path, check=False))

    def paths_differ(self, paths: Iterable[str]) -> bool:
        """Compare the working tree against HEAD for exactly ``paths``."""
        paths = list(paths)
        status = git_quiet(
            "diff", "--quiet", "HEAD", "--", *paths, cwd=self.root, timeout=self.timeout
        )
        if status not in (0, 1):
            raise CommandError(["git", "diff", "--quiet", "HEAD", "--", *paths], status)
        return status == 1

    def stage(self, paths: Iterable[str]) -> None:
        self._git("add", "--", *paths)

    def commit(self, message: str) -> None:
        # Hooks may trip over a partially reset vendor/ tree.
        try:
            self._git("commit", "--no-verify", "-m", message)
        except CommandError as exc:
            raise CommitFailed(str(exc)) from exc

    def unstage(self, paths: Iterable[str]) -> None:
        try:
            self._git("reset", "-q", "HEAD", "--", *paths)
        except CommandError as exc:
            raise RevertFailed(f"Could not unstage changes: {exc}") from exc

    def revert_paths(self, paths: Iterable[str]) -> None:
        """Restore ``paths`` to their HEAD content. Safe to repeat."""
        paths = list(paths)
        try:
            self._git("checkout", "HEAD", "--", *paths)
        except CommandError as exc:
            raise RevertFailed(f"Could not revert {', '.join(paths)}: {exc}") from exc

    def push(self, remote: str, branch: str) -> None:
        """Push ``branch`` and set its upstream. Output streams to the terminal."""
        try:
            run("git", "push", "-u", remote, branch, cwd=self.root, timeout=self.timeout)
        except CommandError as exc:
            raise PushFailed(f"'git push' failed: {exc}") from exc

    def delete_branch(self, name: str) -> None:
        try:
            self._git("branch", "-D", name)
        except CommandError as exc:
            raise BranchDeleteFailed(f"Could not delete branch '{name}': {exc}") from exc
