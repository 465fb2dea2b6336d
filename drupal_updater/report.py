"""Text reports: the up-front list of available updates and the final summary."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .models import PackageCandidate, Report, ReportGroup, UpdateOutcome

Classifier = Callable[[str], str]

# Display order for the default classifier; other labels sort after these.
GROUP_ORDER = ("Drupal", "Other")


def classify_package(name: str) -> str:
    """Group drupal/* packages apart from everything else."""
    return "Drupal" if name.startswith("drupal/") else "Other"


def _group_key(label: str) -> tuple[int, str]:
    if label in GROUP_ORDER:
        return (GROUP_ORDER.index(label), label)
    return (len(GROUP_ORDER), label)


def _group_outcomes(
    outcomes: Iterable[UpdateOutcome], classifier: Classifier
) -> list[ReportGroup]:
    grouped: dict[str, list[UpdateOutcome]] = {}
    for outcome in outcomes:
        grouped.setdefault(classifier(outcome.name), []).append(outcome)
    return [
        ReportGroup(
            label=label,
            entries=[o.report_line for o in sorted(grouped[label], key=lambda o: o.name)],
        )
        for label in sorted(grouped, key=_group_key)
    ]


def build_report(
    outcomes: list[UpdateOutcome],
    commits: int,
    classifier: Classifier = classify_package,
) -> Report:
    """Partition outcomes into updated / not updated, grouped and name-sorted."""
    return Report(
        updated=_group_outcomes((o for o in outcomes if o.updated), classifier),
        not_updated=_group_outcomes((o for o in outcomes if not o.updated), classifier),
        commits=commits,
    )


def render_available_updates(
    candidates: list[PackageCandidate],
    pinned: frozenset[str],
    classifier: Classifier = classify_package,
) -> str:
    """Format the initial listing of outdated packages.

    Example line: ``drupal/core (10.1.0 -> 10.2.0) [semver-safe-update]``
    """
    grouped: dict[str, list[str]] = {}
    pinned_count = 0
    for c in candidates:
        line = f"{c.name} ({c.current_version} -> {c.latest_version})"
        if c.latest_status:
            line += f" [{c.latest_status}]"
        if c.name in pinned:
            line += " [Pinned/Ignored]"
            pinned_count += 1
        grouped.setdefault(classifier(c.name), []).append(line)

    lines = ["Found outdated direct dependencies:"]
    for label in sorted(grouped, key=_group_key):
        lines.append(f"  {label} Packages:")
        lines.extend(f"    {line}" for line in grouped[label])
    if pinned_count:
        lines.append(f"  ({pinned_count} package(s) marked as pinned/ignored)")
    return "\n".join(lines)


def render_summary(report: Report) -> str:
    """Format the end-of-run summary."""
    lines: list[str] = []
    if report.updated:
        lines.append("Successfully Updated Packages:")
        for group in report.updated:
            lines.append(f"  {group.label}:")
            lines.extend(f"    - {entry}" for entry in group.entries)
    else:
        lines.append("No packages were successfully updated and committed.")

    lines.append("")
    if report.not_updated:
        lines.append("Packages Not Updated:")
        for group in report.not_updated:
            lines.append(f"  {group.label}:")
            lines.extend(f"    - {entry}" for entry in group.entries)
    else:
        lines.append("All offered packages were updated.")
    return "\n".join(lines)
