"""Tests for drupal_updater.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from drupal_updater.errors import PushFailed
from drupal_updater.models import (
    OutcomeKind,
    PackageCandidate,
    RunState,
    UpdateOutcome,
    UserDecision,
)


class TestPackageCandidate:
    def test_from_composer_entry(self) -> None:
        pkg = PackageCandidate.model_validate(
            {
                "name": "drupal/core",
                "version": "10.1.6",
                "latest": "10.2.0",
                "latest-status": "semver-safe-update",
                "description": "ignored",
            }
        )
        assert pkg.name == "drupal/core"
        assert pkg.current_version == "10.1.6"
        assert pkg.latest_version == "10.2.0"
        assert pkg.latest_status == "semver-safe-update"

    def test_accepts_camel_case_status(self) -> None:
        pkg = PackageCandidate.model_validate(
            {"name": "a/b", "version": "1", "latest": "2", "latestStatus": "update-possible"}
        )
        assert pkg.latest_status == "update-possible"

    def test_status_is_optional(self) -> None:
        pkg = PackageCandidate(name="a/b", current_version="1.0", latest_version="1.1")
        assert pkg.latest_status is None

    def test_versions_are_kept_verbatim(self) -> None:
        pkg = PackageCandidate(
            name="a/b", current_version="dev-main 1a2b3c", latest_version="8.x-1.0-rc1"
        )
        assert pkg.latest_version == "8.x-1.0-rc1"

    def test_requires_latest_version(self) -> None:
        with pytest.raises(ValidationError):
            PackageCandidate.model_validate({"name": "a/b", "version": "1.0"})

    def test_is_immutable(self) -> None:
        pkg = PackageCandidate(name="a/b", current_version="1.0", latest_version="1.1")
        with pytest.raises(ValidationError):
            pkg.name = "c/d"


class TestUserDecision:
    @pytest.mark.parametrize(
        ("answer", "expected"),
        [
            ("", UserDecision.YES),
            ("  ", UserDecision.YES),
            ("y", UserDecision.YES),
            ("Y", UserDecision.YES),
            ("yes", UserDecision.YES),
            ("n", UserDecision.NO),
            ("No", UserDecision.NO),
            ("s", UserDecision.SKIP),
            ("SKIP", UserDecision.SKIP),
            ("maybe", UserDecision.INVALID),
            ("yn", UserDecision.INVALID),
        ],
    )
    def test_parse(self, answer: str, expected: UserDecision) -> None:
        assert UserDecision.parse(answer) is expected


class TestUpdateOutcome:
    @pytest.fixture
    def candidate(self) -> PackageCandidate:
        return PackageCandidate(name="a/b", current_version="1.0", latest_version="1.1")

    def test_updated_line(self, candidate: PackageCandidate) -> None:
        outcome = UpdateOutcome(candidate=candidate, kind=OutcomeKind.UPDATED, version="1.1")
        assert outcome.updated
        assert outcome.report_line == "a/b -> 1.1"

    @pytest.mark.parametrize(
        ("kind", "line"),
        [
            (OutcomeKind.SKIPPED_PINNED, "a/b (pinned)"),
            (OutcomeKind.SKIPPED_BY_USER, "a/b (skipped by user)"),
            (OutcomeKind.UPDATE_FAILED, "a/b (update failed)"),
            (OutcomeKind.NO_EFFECTIVE_CHANGE, "a/b (no lock file changes/constraints)"),
            (OutcomeKind.COMMIT_FAILED, "a/b (commit failed)"),
        ],
    )
    def test_not_updated_lines(
        self, candidate: PackageCandidate, kind: OutcomeKind, line: str
    ) -> None:
        outcome = UpdateOutcome(candidate=candidate, kind=kind)
        assert not outcome.updated
        assert outcome.report_line == line

    def test_invalid_input_line(self, candidate: PackageCandidate) -> None:
        outcome = UpdateOutcome(
            candidate=candidate, kind=OutcomeKind.SKIPPED_BY_USER, reason="invalid input"
        )
        assert outcome.report_line == "a/b (invalid input)"


class TestRunState:
    def test_defaults(self) -> None:
        state = RunState(original_branch="main")
        assert state.target_branch is None
        assert state.created_branch is False
        assert state.commits == 0
        assert state.outcomes == []
        assert state.warnings == []

    def test_holds_warnings(self) -> None:
        state = RunState(original_branch="main")
        state.warnings.append(PushFailed("rejected"))
        assert str(state.warnings[0]) == "rejected"
