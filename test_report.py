#!/usr/bin/env python3
"""
Tests for summary aggregation, rendering and export
"""

import csv
import json
from pathlib import Path

from dupsweep.core.errors import DeletionError, ReadError
from dupsweep.core.models import DeletionOutcome, DuplicateGroup, FileCandidate
from dupsweep.core.report import (
    build_summary,
    export_csv,
    export_json,
    format_size,
    render_groups,
    render_summary,
    shorten_path,
    sort_groups,
)
from dupsweep.core.selector import select_keep

ROOT = Path("/data")


def candidate(name: str, index: int, size: int = 100, modified: float = 0.0) -> FileCandidate:
    return FileCandidate(path=ROOT / name, size=size, modified=modified, created=modified, index=index)


def kept_group(*members: FileCandidate) -> DuplicateGroup:
    group = DuplicateGroup(members=list(members))
    select_keep(group, "first", "name")
    return group


def test_summary_counts_duplicates_and_bytes():
    groups = [
        kept_group(candidate("a1", 0), candidate("a2", 1), candidate("a3", 2)),
        kept_group(candidate("b1", 3, size=50), candidate("b2", 4, size=50)),
    ]
    errors = [ReadError("/data/broken", "I/O error")]

    summary = build_summary(10, groups, errors)

    assert summary.candidates_scanned == 10
    assert summary.groups_found == 2
    assert summary.duplicate_files == 3
    assert summary.reclaimable_bytes == 250
    assert summary.error_count == 1
    assert summary.dry_run
    assert summary.files_deleted == 0


def test_summary_counts_deletion_outcomes():
    group = kept_group(candidate("a", 0), candidate("b", 1), candidate("c", 2))
    b, c = group.duplicates
    deletions = [
        DeletionOutcome(candidate=b),
        DeletionOutcome(candidate=c, error=DeletionError(c.path, "busy")),
    ]

    summary = build_summary(3, [group], [], deletions, dry_run=False)

    assert summary.files_deleted == 1
    assert summary.deletion_errors == 1
    assert summary.bytes_freed == 100
    assert summary.error_count == 0


def test_sort_groups_by_kept_member():
    late = kept_group(candidate("z1", 0, modified=50.0), candidate("z2", 1, modified=60.0))
    early = kept_group(candidate("y1", 2, modified=10.0), candidate("y2", 3, modified=20.0))

    assert sort_groups([late, early], None) == [late, early]
    assert sort_groups([late, early], "modified") == [early, late]
    assert sort_groups([late, early], "name") == [early, late]


def test_format_size():
    assert format_size(0) == "0 B"
    assert format_size(512) == "512 B"
    assert format_size(2048) == "2.0 KB"
    assert format_size(5 * 1024 ** 3) == "5.0 GB"


def test_shorten_path():
    assert shorten_path(ROOT / "sub" / "f.txt", ROOT) == str(Path("sub") / "f.txt")
    assert shorten_path(Path("/elsewhere/f.txt"), ROOT) == str(Path("/elsewhere/f.txt"))


def test_render_groups_lists_kept_and_copies():
    group = kept_group(candidate("b.txt", 0), candidate("a.txt", 1))

    text = render_groups([group], ROOT)

    assert "Found 2 duplicate files:" in text
    assert "Keep:   a.txt" in text
    assert "Copy:   b.txt" in text


def test_render_summary_reports_errors_separately():
    group = kept_group(candidate("a", 0), candidate("b", 1))
    errors = [ReadError("/data/broken", "I/O error")]

    text = render_summary(build_summary(3, [group], errors), errors)

    assert "Duplicate files: 1" in text
    assert "Skipped (errors): 1" in text
    assert "dry run" in text
    assert "[read] /data/broken" in text


def test_export_json(tmp_path):
    group = kept_group(candidate("b", 0), candidate("a", 1))
    errors = [ReadError("/data/x", "boom")]
    target = tmp_path / "report.json"

    export_json(target, build_summary(2, [group], errors), [group], errors)

    data = json.loads(target.read_text())
    assert data["summary"]["groups_found"] == 1
    assert data["groups"][0]["kept"]["path"] == str(ROOT / "a")
    assert [d["path"] for d in data["groups"][0]["duplicates"]] == [str(ROOT / "b")]
    assert data["errors"][0]["kind"] == "read"


def test_export_csv(tmp_path):
    group = kept_group(candidate("b", 0), candidate("a", 1))
    target = tmp_path / "report.csv"

    export_csv(target, [group])

    with target.open(newline="") as f:
        rows = list(csv.DictReader(f))
    assert [(r["group"], r["role"], Path(r["path"]).name) for r in rows] == [
        ("1", "duplicate", "b"),
        ("1", "keep", "a"),
    ]


def test_render_summary_size_collisions_only_when_counted():
    group = kept_group(candidate("a", 0), candidate("b", 1))

    assert "Size collisions" not in render_summary(build_summary(2, [group], []))
    assert "Size collisions: 3" in render_summary(build_summary(5, [group], [], size_collisions=3))
