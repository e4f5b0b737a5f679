"""Sync report formatting functions.

Provides human-readable and machine-readable output for sync runs:

- ``format_sync_report`` -- full post-sync summary.
- ``format_dry_run_preview`` -- dry-run preview grouped by action.
- ``report_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SyncReport

from .models import ContentKind, SyncAction

_KIND_LABELS = {ContentKind.POST: "post", ContentKind.MEDIA: "media"}

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_sync_report(report: SyncReport) -> str:
    """Format a complete sync report as human-readable text.

    Sections are only included when they contain at least one result.
    Skipped items are summarised by count only to avoid excessive output.

    Args:
        report: The completed sync report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    header = "Sync report"
    if report.dry_run:
        header += " (DRY RUN)"
    lines.append(header)
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    lines.append(
        f"Processed {len(report.results)} items: "
        f"{len(report.created)} created, {len(report.updated)} updated, "
        f"{len(report.skipped)} unchanged, {len(report.errors)} errors"
    )
    lines.append("")

    if report.created:
        lines.append("Created:")
        for r in report.created:
            lines.append(
                f"  [{_KIND_LABELS[r.kind]}] {r.local_file} -> "
                f"{r.remote_url or r.remote_id}"
            )
        lines.append("")

    if report.updated:
        lines.append("Updated:")
        for r in report.updated:
            lines.append(
                f"  [{_KIND_LABELS[r.kind]}] {r.local_file} -> "
                f"{r.remote_url or r.remote_id}"
            )
        lines.append("")

    if report.errors:
        lines.append("Errors:")
        for r in report.errors:
            lines.append(
                f"  [{_KIND_LABELS[r.kind]}] {r.local_file}: {r.error}"
            )
        lines.append("")

    warnings = [r for r in report.results if r.success and r.error]
    if warnings:
        lines.append("Warnings:")
        for r in warnings:
            lines.append(
                f"  [{_KIND_LABELS[r.kind]}] {r.local_file}: {r.error}"
            )
        lines.append("")

    if report.skipped:
        lines.append(f"Skipped: {len(report.skipped)} items")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# Dry-run preview
# ------------------------------------------------------------------


def format_dry_run_preview(report: SyncReport) -> str:
    """Format a dry-run preview grouped by action type.

    Each proposed action is shown as ``[ACTION] kind local_file``.

    Args:
        report: A dry-run sync report (``dry_run=True``).

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []
    lines.append("DRY RUN -- No changes will be made")
    lines.append("")

    groups: dict[SyncAction, list[str]] = defaultdict(list)
    for r in report.results:
        groups[r.action].append(f"{_KIND_LABELS[r.kind]} {r.local_file}")

    for action in (SyncAction.CREATE, SyncAction.UPDATE):
        if action not in groups:
            continue
        lines.append(f"[{action.value.upper()}]")
        for entry in groups[action]:
            lines.append(f"  {entry}")
        lines.append("")

    skip_count = len(groups.get(SyncAction.SKIP, []))
    if skip_count > 0:
        lines.append(f"Skipped: {skip_count} items (unchanged)")
        lines.append("")

    if not any(a != SyncAction.SKIP for a in groups):
        lines.append("No changes needed.")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(report: SyncReport) -> dict:
    """Convert a sync report to a structured dict for JSON serialisation.

    Args:
        report: The sync report.

    Returns:
        Dict with run info, counts, and per-result details.
    """
    results_list = []
    for r in report.results:
        entry: dict = {
            "kind": r.kind.value,
            "local_file": r.local_file,
            "action": r.action.value,
            "success": r.success,
        }
        if r.remote_id:
            entry["remote_id"] = r.remote_id
        if r.remote_url:
            entry["remote_url"] = r.remote_url
        if r.error:
            entry["error"] = r.error
        results_list.append(entry)

    return {
        "dry_run": report.dry_run,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "counts": {
            "total": len(report.results),
            "created": len(report.created),
            "updated": len(report.updated),
            "skipped": len(report.skipped),
            "errors": len(report.errors),
        },
        "results": results_list,
    }
