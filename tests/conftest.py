"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from drupal_updater.composer import ComposerSource
from drupal_updater.config import Settings
from drupal_updater.models import PackageCandidate, UserDecision
from drupal_updater.vcs import GitRepository
from drupal_updater.workflow import UpdateWorkflow


@pytest.fixture
def outdated_json() -> str:
    """Sample `composer outdated --direct --format=json` output."""
    return """\
{
    "installed": [
        {
            "name": "drupal/core-recommended",
            "direct-dependency": true,
            "homepage": null,
            "source": "https://github.com/drupal/core-recommended/tree/10.2.0",
            "version": "10.1.6",
            "latest": "10.2.0",
            "latest-status": "semver-safe-update",
            "description": "Core and its dependencies with known-compatible minor versions.",
            "abandoned": false
        },
        {
            "name": "drush/drush",
            "version": "12.4.2",
            "latest": "12.4.3",
            "latest-status": "semver-safe-update"
        },
        {
            "name": "drupal/token",
            "version": "1.12.0",
            "latest": "1.13.0",
            "latest-status": "update-possible"
        }
    ]
}
"""


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def vcs() -> MagicMock:
    """A git repository on a clean `main` where everything is tracked."""
    repo = MagicMock(spec=GitRepository)
    repo.has_uncommitted_changes.return_value = False
    repo.current_branch.return_value = "main"
    repo.branch_exists.return_value = False
    repo.is_tracked.return_value = True
    repo.paths_differ.return_value = True
    return repo


@pytest.fixture
def source() -> MagicMock:
    src = MagicMock(spec=ComposerSource)
    src.list_outdated.return_value = []
    src.why_not.return_value = ""
    src.install_path.return_value = None
    return src


@pytest.fixture
def prompter() -> MagicMock:
    """Answers yes to every package and takes the default for confirmations."""
    p = MagicMock()
    p.decide.return_value = UserDecision.YES
    p.confirm.side_effect = lambda question, default=False: default
    return p


@pytest.fixture
def make_candidate():
    def _make(
        name: str, current: str = "1.0", latest: str = "1.1", status: str | None = None
    ) -> PackageCandidate:
        return PackageCandidate(
            name=name,
            current_version=current,
            latest_version=latest,
            latest_status=status,
        )

    return _make


@pytest.fixture
def workflow(
    tmp_path: Path,
    source: MagicMock,
    vcs: MagicMock,
    prompter: MagicMock,
    settings: Settings,
) -> UpdateWorkflow:
    return UpdateWorkflow(
        source=source,
        vcs=vcs,
        prompter=prompter,
        settings=settings,
        project_dir=tmp_path,
    )
