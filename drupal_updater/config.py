"""Configuration loading.

Two files live in the project root, both optional:

- ``.drupal-updater.toml``: run settings, read with tomlkit and validated by
  the ``Settings`` model.
- ``.drupal-updater-ignore``: package names that must never be offered for
  update, one per line.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError

CONFIG_FILE = ".drupal-updater.toml"


class Settings(BaseModel):
    """Settings for one update run.

    Attributes:
        ignore_file: Ignore-list path, relative to the project root.
        branch_prefix: Update branches are named ``{prefix}/YYYY-MM-DD``.
        remote: Remote the update branch is pushed to.
        include_dev: Also offer require-dev packages.
        command_timeout: Seconds any single git/composer call may take.
        declaration_files: Files whose change means an update took effect.
        incidental_paths: Tracked paths reset when an update changed nothing.
    """

    model_config = ConfigDict(extra="forbid")

    ignore_file: str = ".drupal-updater-ignore"
    branch_prefix: str = "update"
    remote: str = "origin"
    include_dev: bool = False
    command_timeout: float | None = Field(default=900, gt=0)
    declaration_files: list[str] = Field(
        default_factory=lambda: ["composer.json", "composer.lock"], min_length=1
    )
    incidental_paths: list[str] = Field(default_factory=lambda: ["vendor"])


def load_settings(project_dir: Path, path: Path | None = None) -> Settings:
    """Load settings from ``path`` or the project's ``.drupal-updater.toml``.

    A missing default file yields default settings. An explicitly given
    path must exist.

    Raises:
        ConfigError: If the file can't be read, parsed, or validated.
    """
    config_path = path if path is not None else project_dir / CONFIG_FILE
    if not config_path.exists():
        if path is not None:
            raise ConfigError(f"Config file '{config_path}' not found.")
        return Settings()

    try:
        doc = tomlkit.parse(config_path.read_text())
    except (OSError, TOMLKitError) as exc:
        raise ConfigError(f"Could not read '{config_path}': {exc}") from exc

    try:
        return Settings.model_validate(doc.unwrap())
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in '{config_path}':\n{exc}") from exc


def load_pinned_packages(path: Path) -> frozenset[str]:
    """Read the ignore list.

    Everything after ``#`` on a line is a comment; surrounding whitespace is
    trimmed and blank lines are skipped. A missing file means nothing is
    pinned.
    """
    if not path.exists():
        print(f"Info: '{path.name}' not found. No packages will be ignored.")
        return frozenset()

    print(f"Loading pinned packages from '{path.name}'...")
    names: set[str] = set()
    for line in path.read_text().splitlines():
        name = line.split("#", 1)[0].strip()
        if name:
            names.add(name)

    if not names:
        print(f"Info: '{path.name}' contains no package names to ignore.")
    return frozenset(names)
