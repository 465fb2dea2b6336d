"""Package source backed by the composer CLI.

All parsing of composer's output happens here; the workflow only ever sees
PackageCandidate objects and typed errors.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from .errors import (
    CommandError,
    ExternalTimeout,
    RevertFailed,
    SourceQueryFailed,
    UpgradeFailed,
)
from .models import PackageCandidate
from .shell import composer, run, warn


class ComposerSource:
    """Lists and upgrades the project's composer packages.

    Args:
        project_dir: Directory holding composer.json.
        timeout: Seconds each composer invocation may take.
    """

    def __init__(self, project_dir: Path, timeout: float | None = None) -> None:
        self.project_dir = project_dir
        self.timeout = timeout

    def list_outdated(self, include_dev: bool = False) -> list[PackageCandidate]:
        """Return outdated direct dependencies in the order composer reports them.

        Raises:
            SourceQueryFailed: If composer fails or prints something that
                isn't the expected JSON document.
        """
        args = ["outdated", "--direct", "--format=json"]
        if not include_dev:
            args.append("--no-dev")
        try:
            output = composer(*args, cwd=self.project_dir, timeout=self.timeout)
        except CommandError as exc:
            raise SourceQueryFailed(f"'composer outdated' failed: {exc}") from exc
        return parse_outdated(output)

    def upgrade(self, name: str) -> None:
        """Run ``composer update`` for one package and its dependencies.

        Output streams to the terminal.

        Raises:
            UpgradeFailed: On non-zero exit or timeout.
        """
        args = ["composer", "update", name, "--with-dependencies", "--no-interaction"]
        print(f"  Running: {' '.join(args)}")
        try:
            run(*args, cwd=self.project_dir, timeout=self.timeout)
        except ExternalTimeout as exc:
            raise UpgradeFailed(str(exc), timed_out=True) from exc
        except CommandError as exc:
            raise UpgradeFailed(str(exc)) from exc

    def why_not(self, name: str, version: str) -> str:
        """Explain why ``name`` can't be installed at ``version``.

        Purely informational: a failure is returned as text, not raised.
        """
        try:
            return composer(
                "why-not",
                name,
                version,
                check=False,
                cwd=self.project_dir,
                timeout=self.timeout,
            )
        except ExternalTimeout as exc:
            return str(exc)

    def install_path(self, name: str) -> str | None:
        """Where composer installed ``name``, relative to the project root.

        Returns None when composer can't tell or the package lives outside
        the project.
        """
        try:
            output = composer(
                "show", name, "--path", cwd=self.project_dir, timeout=self.timeout
            )
        except CommandError:
            return None

        # Output is "<name> <absolute path>"
        parts = output.split(None, 1)
        if len(parts) != 2:
            return None
        try:
            return (
                Path(parts[1].strip())
                .resolve()
                .relative_to(self.project_dir.resolve())
                .as_posix()
            )
        except ValueError:
            return None

    def reinstall(self) -> None:
        """Reinstall from the lock file after it has been reverted.

        Raises:
            RevertFailed: If composer install fails.
        """
        try:
            run(
                "composer",
                "install",
                "--no-interaction",
                cwd=self.project_dir,
                timeout=self.timeout,
            )
        except CommandError as exc:
            raise RevertFailed(f"'composer install' failed: {exc}") from exc


def parse_outdated(output: str) -> list[PackageCandidate]:
    """Parse ``composer outdated --format=json`` output.

    Entries lacking a name or latest version are skipped with a warning.

    Raises:
        SourceQueryFailed: If the output isn't a JSON object with an
            "installed" list.
    """
    if not output:
        return []
    try:
        data = json.loads(output)
    except json.JSONDecodeError as exc:
        raise SourceQueryFailed(f"Could not parse composer output: {exc}") from exc

    if not isinstance(data, dict) or not isinstance(data.get("installed", []), list):
        raise SourceQueryFailed("Unexpected composer output: no 'installed' list.")

    candidates: list[PackageCandidate] = []
    seen: set[str] = set()
    for entry in data.get("installed", []):
        try:
            candidate = PackageCandidate.model_validate(entry)
        except ValidationError:
            warn(f"Skipping malformed entry from composer output: {entry!r}")
            continue
        if candidate.name in seen:
            continue
        seen.add(candidate.name)
        candidates.append(candidate)
    return candidates
