"""Lint diagnostics for the catalog manifest."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from .manifest import ChannelItem, Manifest, ManifestObject


class IssueSeverity(Enum):
    """Severity level for lint issues."""

    ERROR = auto()
    WARNING = auto()


@dataclass(slots=True)
class ManifestIssue:
    """Represents a lint finding inside the manifest."""

    pointer: str
    message: str
    severity: IssueSeverity


@dataclass(slots=True)
class LintReport:
    """Aggregate lint results for a manifest."""

    issues: list[ManifestIssue] = field(default_factory=list)
    category_count: int = 0
    item_count: int = 0

    def add(self, pointer: str, message: str, severity: IssueSeverity) -> None:
        self.issues.append(ManifestIssue(pointer=pointer, message=message, severity=severity))

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.WARNING)


def lint_manifest(manifest: Manifest) -> LintReport:
    """Check category id uniqueness, item URLs, site tags, and values the models had to ignore."""
    report = LintReport(category_count=len(manifest.categories))
    known_sites = {_site_tag(site.path) for site in manifest.sites}
    seen: dict[str, int] = {}

    _report_unread(report, "", manifest)
    for index, site in zip(manifest.entry_positions("sites"), manifest.sites):
        _report_unread(report, f"sites[{index}]", site)

    for index, category in zip(manifest.entry_positions("categories"), manifest.categories):
        pointer = f"categories[{index}]"
        _report_unread(report, pointer, category)
        if category.id in seen:
            report.add(
                f"{pointer}.id",
                f"Duplicate category id '{category.id}' (first used at categories[{seen[category.id]}]).",
                IssueSeverity.ERROR,
            )
        else:
            seen[category.id] = index

        for item_index, item in zip(category.entry_positions("items"), category.items):
            report.item_count += 1
            item_pointer = f"{pointer}.items[{item_index}]"
            _report_unread(report, item_pointer, item)
            if not item.url:
                report.add(f"{item_pointer}.url", "Item has no url.", IssueSeverity.ERROR)
            if isinstance(item, ChannelItem) and not item.playlist:
                report.add(
                    f"{item_pointer}.playlist",
                    "Channel item has no uploads playlist; run resolve-channel to fill it in.",
                    IssueSeverity.WARNING,
                )
            if item.site and known_sites and item.site not in known_sites:
                report.add(
                    f"{item_pointer}.site",
                    f"Site tag '{item.site}' does not match any listed site.",
                    IssueSeverity.WARNING,
                )
    return report


def _report_unread(report: LintReport, pointer: str, model: ManifestObject) -> None:
    prefix = f"{pointer}." if pointer else ""
    for key in model.ignored_keys():
        report.add(f"{prefix}{key}", "Value has an unexpected type and is ignored.", IssueSeverity.WARNING)
    for key, index, _ in model.skipped_entries():
        report.add(
            f"{prefix}{key}[{index}]",
            "Entry does not have the expected shape and is ignored.",
            IssueSeverity.WARNING,
        )


def _site_tag(path: str) -> str:
    segments = [segment for segment in path.split("/") if segment]
    return segments[-1] if segments else path
