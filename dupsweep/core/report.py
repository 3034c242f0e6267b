#!/usr/bin/env python3
"""
Report Builder

Pure aggregation of a finished run into a RunSummary, plus console
rendering and JSON/CSV export of the results.
"""

import csv
import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

from .errors import FileError
from .models import DeletionOutcome, DuplicateGroup, RunSummary
from .selector import ORDER_KEYS

logger = logging.getLogger(__name__)

# ---------------------------
# Aggregation
# ---------------------------

def build_summary(candidates_scanned: int, groups: List[DuplicateGroup], errors: List[FileError],
                  deletions: Optional[List[DeletionOutcome]] = None, dry_run: bool = True,
                  size_collisions: Optional[int] = None) -> RunSummary:
    """Aggregate groups, errors and deletion outcomes"""
    deletions = deletions or []
    deleted = [o for o in deletions if o.ok]

    return RunSummary(
        candidates_scanned=candidates_scanned,
        groups_found=len(groups),
        duplicate_files=sum(g.count - 1 for g in groups),
        reclaimable_bytes=sum(g.reclaimable_bytes for g in groups),
        error_count=len(errors),
        files_deleted=len(deleted),
        deletion_errors=len(deletions) - len(deleted),
        bytes_freed=sum(o.candidate.size for o in deleted),
        dry_run=dry_run,
        size_collisions=size_collisions,
    )


def sort_groups(groups: List[DuplicateGroup], criterion: Optional[str]) -> List[DuplicateGroup]:
    """Order groups for display by their kept member (anchor if none kept)"""
    if criterion is None:
        return list(groups)
    key = ORDER_KEYS[criterion]
    return sorted(groups, key=lambda g: key(g.kept or g.anchor))

# ---------------------------
# Rendering
# ---------------------------

def format_size(bytes_val: int) -> str:
    """Format bytes as human readable"""
    size = float(bytes_val)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}" if unit != 'B' else f"{int(size)} B"
        size /= 1024.0
    return f"{size:.1f} PB"


def shorten_path(path: Path, root: Optional[Path]) -> str:
    """Path relative to the scanned root when possible"""
    if root is None:
        return str(path)
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def render_groups(groups: List[DuplicateGroup], root: Optional[Path] = None, dry_run: bool = True) -> str:
    lines = []
    for group in groups:
        kept = group.kept or group.anchor
        header = f"Found {group.count} duplicate files:"
        if group.similarity is not None:
            header += f" (similarity >= {group.similarity:.1f})"
        lines.append(header)
        lines.append(f"Keep:   {shorten_path(kept.path, root)}")
        label = "Copy:  " if dry_run else "Delete:"
        for candidate in group.duplicates:
            lines.append(f"{label} {shorten_path(candidate.path, root)}")
        lines.append("")
    return "\n".join(lines)


def render_summary(summary: RunSummary, errors: Optional[List[FileError]] = None,
                   deletion_errors: Optional[List[FileError]] = None,
                   phase_times: Optional[Dict[str, float]] = None) -> str:
    lines = [
        "=" * 60,
        "SUMMARY",
        "=" * 60,
        f"Files scanned: {summary.candidates_scanned:,}",
        f"Duplicate groups: {summary.groups_found:,}",
        f"Duplicate files: {summary.duplicate_files:,}",
    ]

    if summary.dry_run:
        lines.append(f"Reclaimable space: {format_size(summary.reclaimable_bytes)} (dry run, nothing deleted)")
    else:
        lines.append(f"Reclaimable space: {format_size(summary.reclaimable_bytes)}")
        lines.append(f"Files deleted: {summary.files_deleted:,}")
        lines.append(f"Space freed: {format_size(summary.bytes_freed)}")
        lines.append(f"Deletion errors: {summary.deletion_errors:,}")

    if summary.size_collisions is not None:
        lines.append(f"Size collisions: {summary.size_collisions:,}")

    lines.append(f"Skipped (errors): {summary.error_count:,}")

    if errors:
        lines.append("Recent errors:")
        for error in errors[-5:]:
            lines.append(f"  [{error.kind}] {error}")

    if deletion_errors:
        lines.append("Deletion failures:")
        for error in deletion_errors:
            lines.append(f"  {error}")

    if phase_times:
        lines.append("Phase timing:")
        for phase, seconds in phase_times.items():
            lines.append(f"  {phase.replace('_', ' ').title()}: {timedelta(seconds=round(seconds, 3))}")

    return "\n".join(lines)

# ---------------------------
# Export
# ---------------------------

def export_json(path: Path, summary: RunSummary, groups: List[DuplicateGroup],
                errors: List[FileError]) -> None:
    data = {
        'generated': datetime.now().isoformat(),
        'summary': summary.to_dict(),
        'groups': [
            {
                'kept': (g.kept or g.anchor).to_dict(),
                'duplicates': [c.to_dict() for c in g.duplicates],
                'similarity': g.similarity,
                'reclaimable_bytes': g.reclaimable_bytes,
            }
            for g in groups
        ],
        'errors': [e.to_dict() for e in errors],
    }
    with Path(path).open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.info(f"Results exported to: {path}")


def export_csv(path: Path, groups: List[DuplicateGroup]) -> None:
    with Path(path).open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["group", "role", "path", "size", "modified", "created"])
        for group_id, group in enumerate(groups, 1):
            kept = group.kept or group.anchor
            for candidate in group.members:
                info = candidate.to_dict()
                role = "keep" if candidate is kept else "duplicate"
                writer.writerow([group_id, role, info['path'], info['size'], info['modified'], info['created']])
    logger.info(f"Results exported to: {path}")
