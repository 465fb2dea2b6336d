"""Tests for drupal_updater.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from drupal_updater.config import Settings, load_pinned_packages, load_settings
from drupal_updater.errors import ConfigError


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path)

        assert settings == Settings()
        assert settings.ignore_file == ".drupal-updater-ignore"
        assert settings.branch_prefix == "update"
        assert settings.remote == "origin"
        assert settings.include_dev is False
        assert settings.declaration_files == ["composer.json", "composer.lock"]
        assert settings.incidental_paths == ["vendor"]

    def test_reads_project_file(self, tmp_path: Path) -> None:
        (tmp_path / ".drupal-updater.toml").write_text(
            """\
# Team settings
remote = "upstream"
branch_prefix = "deps"
command_timeout = 300
incidental_paths = ["vendor", "web/core"]
"""
        )

        settings = load_settings(tmp_path)

        assert settings.remote == "upstream"
        assert settings.branch_prefix == "deps"
        assert settings.command_timeout == 300
        assert settings.incidental_paths == ["vendor", "web/core"]

    def test_explicit_path(self, tmp_path: Path) -> None:
        config = tmp_path / "elsewhere.toml"
        config.write_text("include_dev = true\n")

        assert load_settings(tmp_path, config).include_dev is True

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path, tmp_path / "missing.toml")

    def test_unknown_key(self, tmp_path: Path) -> None:
        (tmp_path / ".drupal-updater.toml").write_text('remot = "origin"\n')

        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings(tmp_path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / ".drupal-updater.toml").write_text("command_timeout = -5\n")

        with pytest.raises(ConfigError):
            load_settings(tmp_path)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / ".drupal-updater.toml").write_text("remote = \n")

        with pytest.raises(ConfigError, match="Could not read"):
            load_settings(tmp_path)


class TestLoadPinnedPackages:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert load_pinned_packages(tmp_path / ".drupal-updater-ignore") == frozenset()

    def test_skips_comments_and_blank_lines(self, tmp_path: Path) -> None:
        path = tmp_path / ".drupal-updater-ignore"
        path.write_text(
            "# Packages we hold back\n"
            "drupal/core-recommended\n"
            "\n"
            "   \n"
            "  drupal/webform   # waiting on a patch\n"
            "#drupal/token\n"
        )

        assert load_pinned_packages(path) == {
            "drupal/core-recommended",
            "drupal/webform",
        }

    def test_file_without_names(self, tmp_path: Path) -> None:
        path = tmp_path / ".drupal-updater-ignore"
        path.write_text("# nothing pinned right now\n")

        assert load_pinned_packages(path) == frozenset()

    def test_last_line_without_newline(self, tmp_path: Path) -> None:
        path = tmp_path / ".drupal-updater-ignore"
        path.write_text("a/b\nc/d")

        assert load_pinned_packages(path) == {"a/b", "c/d"}
