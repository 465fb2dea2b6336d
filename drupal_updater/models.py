"""Data models for drupal-updater.

These Pydantic models represent the core data structures used throughout
an update run.
"""

from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .errors import UpdaterWarning


class PackageCandidate(BaseModel):
    """One outdated direct dependency reported by composer.

    Versions are opaque strings: they are shown to the user and handed back
    to composer, never compared.

    Attributes:
        name: vendor/package name.
        current_version: Installed version.
        latest_version: Newest version composer knows about.
        latest_status: Composer's classifier, e.g. "semver-safe-update".
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    current_version: str = Field(validation_alias=AliasChoices("version", "current_version"))
    latest_version: str = Field(validation_alias=AliasChoices("latest", "latest_version"))
    latest_status: str | None = Field(
        default=None,
        validation_alias=AliasChoices("latest-status", "latestStatus", "latest_status"),
    )


class UserDecision(str, Enum):
    YES = "yes"
    NO = "no"
    SKIP = "skip"
    INVALID = "invalid"

    @classmethod
    def parse(cls, answer: str) -> UserDecision:
        """Map a typed answer to a decision. Empty input means yes."""
        value = answer.strip().lower()
        if value in ("", "y", "yes"):
            return cls.YES
        if value in ("n", "no"):
            return cls.NO
        if value in ("s", "skip"):
            return cls.SKIP
        return cls.INVALID


class OutcomeKind(str, Enum):
    UPDATED = "updated"
    SKIPPED_PINNED = "skipped-pinned"
    SKIPPED_BY_USER = "skipped-by-user"
    UPDATE_FAILED = "update-failed"
    NO_EFFECTIVE_CHANGE = "no-effective-change"
    COMMIT_FAILED = "commit-failed"


_NOT_UPDATED_SUFFIX = {
    OutcomeKind.SKIPPED_PINNED: "pinned",
    OutcomeKind.SKIPPED_BY_USER: "skipped by user",
    OutcomeKind.UPDATE_FAILED: "update failed",
    OutcomeKind.NO_EFFECTIVE_CHANGE: "no lock file changes/constraints",
    OutcomeKind.COMMIT_FAILED: "commit failed",
}


class UpdateOutcome(BaseModel):
    """What happened to one candidate during the run.

    Attributes:
        candidate: The package this outcome belongs to.
        kind: Which of the possible end states was reached.
        version: Version committed, for UPDATED outcomes only.
        reason: Diagnostic for failures, or "invalid input" for an
                unrecognised answer.
    """

    candidate: PackageCandidate
    kind: OutcomeKind
    version: str | None = None
    reason: str | None = None

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def updated(self) -> bool:
        return self.kind is OutcomeKind.UPDATED

    @property
    def report_line(self) -> str:
        if self.updated:
            return f"{self.name} -> {self.version}"
        if self.kind is OutcomeKind.SKIPPED_BY_USER and self.reason == "invalid input":
            return f"{self.name} (invalid input)"
        return f"{self.name} ({_NOT_UPDATED_SUFFIX[self.kind]})"


class RunState(BaseModel):
    """Mutable state of a single update run. Owned by UpdateWorkflow.

    Attributes:
        original_branch: Branch checked out before the run started.
        target_branch: The dated update branch, once opened.
        created_branch: True if this run created target_branch.
        commits: Number of package commits made so far.
        outcomes: One entry per processed candidate, in processing order.
        warnings: Best-effort failures that did not stop the run.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    original_branch: str
    pinned: frozenset[str] = frozenset()
    target_branch: str | None = None
    created_branch: bool = False
    commits: int = 0
    outcomes: list[UpdateOutcome] = Field(default_factory=list)
    warnings: list[UpdaterWarning] = Field(default_factory=list)


class ReportGroup(BaseModel):
    label: str
    entries: list[str] = Field(default_factory=list)


class Report(BaseModel):
    """Final summary: outcomes split into updated / not updated, then grouped."""

    updated: list[ReportGroup] = Field(default_factory=list)
    not_updated: list[ReportGroup] = Field(default_factory=list)
    commits: int = 0

    def updated_lines(self) -> list[str]:
        return [line for group in self.updated for line in group.entries]

    def not_updated_lines(self) -> list[str]:
        return [line for group in self.not_updated for line in group.entries]
