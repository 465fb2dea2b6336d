"""Interactive update workflow: check → discover → branch → update each → report.

This module drives one update run:
1. Refuse to start on a dirty working tree or an unresolvable branch
2. Load the ignore list and ask composer for outdated direct dependencies
3. Open (or reuse) a dated update branch
4. For each package, in composer's order: skip if pinned, ask the user,
   run the update, check composer.json/composer.lock actually changed,
   then commit or roll back
5. Print a summary and offer to push (or to switch back if nothing changed)

Every package is handled on its own: a failure while updating one package is
recorded as that package's outcome and the loop moves on to the next.
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from typing import Protocol

from .config import Settings, load_pinned_packages
from .errors import (
    BranchCreateFailed,
    CheckoutFailed,
    CommandError,
    CommitFailed,
    DirtyWorkingTree,
    PushFailed,
    RevertFailed,
    UnknownBranch,
    UpdaterWarning,
    UpgradeFailed,
)
from .models import (
    OutcomeKind,
    PackageCandidate,
    Report,
    RunState,
    UpdateOutcome,
    UserDecision,
)
from .report import (
    Classifier,
    build_report,
    classify_package,
    render_available_updates,
    render_summary,
)
from .shell import step, warn


class PackageSource(Protocol):
    def list_outdated(self, include_dev: bool = False) -> list[PackageCandidate]: ...

    def upgrade(self, name: str) -> None: ...

    def why_not(self, name: str, version: str) -> str: ...

    def install_path(self, name: str) -> str | None: ...

    def reinstall(self) -> None: ...


class VersionControl(Protocol):
    def has_uncommitted_changes(self) -> bool: ...

    def current_branch(self) -> str | None: ...

    def branch_exists(self, name: str) -> bool: ...

    def create_and_checkout(self, name: str) -> None: ...

    def checkout(self, name: str) -> None: ...

    def is_tracked(self, path: str) -> bool: ...

    def paths_differ(self, paths: list[str]) -> bool: ...

    def stage(self, paths: list[str]) -> None: ...

    def commit(self, message: str) -> None: ...

    def unstage(self, paths: list[str]) -> None: ...

    def revert_paths(self, paths: list[str]) -> None: ...

    def push(self, remote: str, branch: str) -> None: ...

    def delete_branch(self, name: str) -> None: ...


class Prompter(Protocol):
    def confirm(self, question: str, default: bool = False) -> bool: ...

    def decide(self, question: str) -> UserDecision: ...


def commit_message(candidate: PackageCandidate) -> str:
    return f"Update {candidate.name} to {candidate.latest_version}"


class UpdateWorkflow:
    """One interactive update run over a Drupal project.

    Args:
        source: Lists and upgrades packages (composer).
        vcs: Branch, diff, and commit operations (git).
        prompter: Where yes/no answers come from.
        settings: Loaded run settings.
        project_dir: Project root; the ignore file is resolved against it.
        classifier: Maps a package name to its report group label.
    """

    def __init__(
        self,
        source: PackageSource,
        vcs: VersionControl,
        prompter: Prompter,
        settings: Settings,
        project_dir: Path,
        classifier: Classifier = classify_package,
    ) -> None:
        self.source = source
        self.vcs = vcs
        self.prompter = prompter
        self.settings = settings
        self.project_dir = project_dir
        self.classifier = classifier
        self.state: RunState | None = None
        self.report: Report | None = None

    def _require_state(self) -> RunState:
        if self.state is None:
            raise RuntimeError("initialize() must be called first")
        return self.state

    def _warn(self, exc: UpdaterWarning) -> None:
        warn(str(exc))
        self._require_state().warnings.append(exc)

    def _tracked(self, paths: list[str]) -> list[str]:
        return [p for p in paths if self.vcs.is_tracked(p)]

    # -- setup ---------------------------------------------------------------

    def initialize(self) -> RunState:
        """Check preconditions, then load the ignore list and record the branch.

        Raises:
            DirtyWorkingTree: If tracked files have uncommitted changes.
            UnknownBranch: If HEAD is detached, unborn or unreadable.
        """
        try:
            dirty = self.vcs.has_uncommitted_changes()
        except CommandError as exc:
            raise UnknownBranch(
                f"cannot compare the working tree with HEAD: {exc}"
            ) from exc
        if dirty:
            raise DirtyWorkingTree()
        branch = self.vcs.current_branch()
        if not branch:
            raise UnknownBranch("detached HEAD or not a git repository")
        print(f"Current branch is: {branch}")

        pinned = load_pinned_packages(self.project_dir / self.settings.ignore_file)
        self.state = RunState(original_branch=branch, pinned=pinned)
        return self.state

    def discover_candidates(self) -> list[PackageCandidate]:
        """Ask composer for outdated direct dependencies.

        Raises:
            SourceQueryFailed: If composer fails or its output can't be parsed.
        """
        step("Checking for outdated direct dependencies")
        return self.source.list_outdated(include_dev=self.settings.include_dev)

    def open_update_branch(self, today: date) -> str:
        """Create and check out ``{prefix}/YYYY-MM-DD``, or reuse it if it exists.

        An existing branch is only reused with the user's consent, and is
        never reset.

        Raises:
            BranchCreateFailed: If the user declines to reuse an existing
                branch, or the checkout fails.
        """
        state = self._require_state()
        branch = f"{self.settings.branch_prefix}/{today.isoformat()}"
        step(f"Opening update branch: {branch}")

        create = not self.vcs.branch_exists(branch)
        if not create:
            print(f"Branch '{branch}' already exists.")
            if not self.prompter.confirm(
                "Do you want to switch to it and continue?", default=False
            ):
                raise BranchCreateFailed(
                    f"Branch '{branch}' already exists and was not reused. Aborting."
                )

        try:
            if create:
                self.vcs.create_and_checkout(branch)
            else:
                self.vcs.checkout(branch)
        except CheckoutFailed as exc:
            try:
                self.vcs.checkout(state.original_branch)
            except CheckoutFailed as back:
                self._warn(back)
            raise BranchCreateFailed(str(exc)) from exc

        state.target_branch = branch
        state.created_branch = create
        print(f"Switched to branch '{branch}'.")
        return branch

    # -- per package ---------------------------------------------------------

    def process_candidate(self, candidate: PackageCandidate) -> UpdateOutcome:
        """Take one package from "outdated" to exactly one recorded outcome."""
        state = self._require_state()
        print(f"\n--- Package: {candidate.name} ---")
        print(f"  Current Version: {candidate.current_version}")
        latest = candidate.latest_version
        if candidate.latest_status:
            latest += f" ({candidate.latest_status})"
        print(f"  Latest Version:  {latest}")

        outcome = self._process(candidate)
        state.outcomes.append(outcome)
        return outcome

    def _process(self, c: PackageCandidate) -> UpdateOutcome:
        state = self._require_state()

        if c.name in state.pinned:
            print(f"  Status: Pinned/Ignored in '{self.settings.ignore_file}'. Skipping.")
            return UpdateOutcome(candidate=c, kind=OutcomeKind.SKIPPED_PINNED)

        decision = self.prompter.decide(f"  Update '{c.name}' to '{c.latest_version}'?")
        if decision is UserDecision.INVALID:
            print(f"  Invalid input. Skipping update for '{c.name}'.")
            return UpdateOutcome(
                candidate=c, kind=OutcomeKind.SKIPPED_BY_USER, reason="invalid input"
            )
        if decision is not UserDecision.YES:
            print(f"  Skipping update for '{c.name}'.")
            return UpdateOutcome(candidate=c, kind=OutcomeKind.SKIPPED_BY_USER)

        print(f"  Attempting update of '{c.name}'...")
        declarations = list(self.settings.declaration_files)
        try:
            self.source.upgrade(c.name)
            changed = self.vcs.paths_differ(declarations)
        except (UpgradeFailed, CommandError) as exc:
            reason = exc.reason if isinstance(exc, UpgradeFailed) else str(exc)
            print(f"  Error: update of '{c.name}' failed: {reason}", file=sys.stderr)
            self._rollback_update()
            return UpdateOutcome(
                candidate=c, kind=OutcomeKind.UPDATE_FAILED, reason=reason
            )

        if not changed:
            self._explain_no_change(c)
            return UpdateOutcome(candidate=c, kind=OutcomeKind.NO_EFFECTIVE_CHANGE)

        return self._commit(c, declarations)

    def _revert(self, paths: list[str]) -> bool:
        """Best-effort restore of the tracked subset of ``paths``."""
        try:
            tracked = self._tracked(paths)
            if tracked:
                print(f"  Reverting {', '.join(tracked)}...")
                self.vcs.revert_paths(tracked)
        except RevertFailed as exc:
            self._warn(exc)
            return False
        except CommandError as exc:
            self._warn(RevertFailed(str(exc)))
            return False
        return True

    def _rollback_update(self) -> None:
        """Put the declaration files (and installed code) back as they were."""
        if not self._revert(list(self.settings.declaration_files)):
            warn("Automatic revert failed. Manual check needed.")
            return
        try:
            self.source.reinstall()
        except RevertFailed as exc:
            self._warn(exc)
            warn("Installed packages may not match composer.lock. Manual check needed.")
        else:
            print("  Reverted declaration files and reinstalled packages.")

    def _explain_no_change(self, c: PackageCandidate) -> None:
        files = " and ".join(self.settings.declaration_files)
        print(f"  Update command succeeded but {files} were not modified.")
        print("  The package may already be as new as its constraints allow.")
        print(f"  Running 'composer why-not {c.name} {c.latest_version}' for more info...")
        diagnostic = self.source.why_not(c.name, c.latest_version)
        for line in diagnostic.splitlines():
            print(f"    {line}")
        self._revert(list(self.settings.incidental_paths))

    def _commit(self, c: PackageCandidate, declarations: list[str]) -> UpdateOutcome:
        state = self._require_state()
        message = commit_message(c)
        paths = list(declarations)
        try:
            paths = self._tracked(declarations) or paths
            code_dir = self.source.install_path(c.name)
            if code_dir and self.vcs.is_tracked(code_dir):
                paths.append(code_dir)
            print("  Update successful. Staging changes...")
            self.vcs.stage(paths)
            self.vcs.commit(message)
        except (CommitFailed, CommandError) as exc:
            reason = exc.reason if isinstance(exc, CommitFailed) else str(exc)
            print(f"  Error: commit failed for '{c.name}': {reason}", file=sys.stderr)
            print("  Attempting to unstage changes...")
            try:
                self.vcs.unstage(paths)
            except RevertFailed as warning:
                self._warn(warning)
            return UpdateOutcome(
                candidate=c, kind=OutcomeKind.COMMIT_FAILED, reason=reason
            )

        state.commits += 1
        print(f"  Committed: {message}")
        return UpdateOutcome(
            candidate=c, kind=OutcomeKind.UPDATED, version=c.latest_version
        )

    # -- wrap up -------------------------------------------------------------

    def finalize(self) -> Report:
        """Print the summary, then offer to push or to switch back."""
        state = self._require_state()
        report = build_report(state.outcomes, state.commits, self.classifier)
        step("Update Process Summary")
        print(render_summary(report))

        if state.commits > 0:
            self._offer_push()
        else:
            self._offer_switch_back()
        return report

    def _offer_push(self) -> None:
        state = self._require_state()
        branch = state.target_branch
        remote = self.settings.remote
        print(f"\n{state.commits} update(s) committed to branch '{branch}'.")
        if not branch or not self.prompter.confirm(
            f"Do you want to push the branch '{branch}' to remote '{remote}'?",
            default=False,
        ):
            print("Branch not pushed.")
            return
        print("Pushing branch...")
        try:
            self.vcs.push(remote, branch)
        except PushFailed as exc:
            self._warn(exc)
            print("Local commits are kept; push manually when ready.")
        else:
            print("Branch pushed successfully.")

    def _offer_switch_back(self) -> None:
        state = self._require_state()
        original = state.original_branch
        print("\nNo updates were performed or committed.")
        if state.target_branch in (None, original):
            return
        if not self.prompter.confirm(
            f"Switch back to the original branch '{original}'?", default=True
        ):
            return
        try:
            self.vcs.checkout(original)
        except CheckoutFailed as exc:
            self._warn(exc)
            return
        print(f"Switched back to branch '{original}'.")

        # Only branches created by this run are offered for deletion.
        if not state.created_branch:
            return
        branch = state.target_branch
        if self.prompter.confirm(
            f"Delete the unused update branch '{branch}'?", default=False
        ):
            try:
                self.vcs.delete_branch(branch)
            except UpdaterWarning as exc:
                self._warn(exc)
            else:
                print(f"Deleted branch '{branch}'.")

    def run(self, today: date) -> int:
        """Execute a full update run. Returns the process exit status.

        Fatal problems propagate as UpdaterError subclasses.
        """
        state = self.initialize()
        candidates = self.discover_candidates()
        if not candidates:
            print("Result: No outdated direct dependencies found. Nothing to do.")
            return 0

        print(render_available_updates(candidates, state.pinned, self.classifier))
        self.open_update_branch(today)

        step("Interactive Update Process")
        for candidate in candidates:
            self.process_candidate(candidate)

        self.report = self.finalize()
        print("\nUpdate run finished.")
        print(
            "Remember to run database updates (drush updb) and clear caches "
            "(drush cr) after deploying."
        )
        return 0
