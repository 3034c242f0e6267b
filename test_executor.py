#!/usr/bin/env python3
"""
Tests for the deletion executor
"""

from pathlib import Path

import pytest

from dupsweep.core.errors import DeletionError
from dupsweep.core.executor import DeletionExecutor
from dupsweep.core.models import DuplicateGroup, FileCandidate
from dupsweep.core.selector import select_keep


def make_group(root: Path, prefix: str, count: int, start_index: int = 0) -> DuplicateGroup:
    members = []
    for i in range(count):
        path = root / f"{prefix}{i}.txt"
        path.write_text(f"{prefix} content")
        members.append(FileCandidate(path=path, size=path.stat().st_size, modified=float(i),
                                     created=float(i), index=start_index + i))
    group = DuplicateGroup(members=members)
    select_keep(group, "first", "name")
    return group


def test_deletes_all_but_kept(tmp_path):
    group = make_group(tmp_path, "dup", 3)

    outcomes = DeletionExecutor().execute([group])

    assert all(o.ok for o in outcomes)
    assert len(outcomes) == 2
    assert sorted(p.name for p in tmp_path.iterdir()) == ["dup0.txt"]


def test_failure_in_one_group_does_not_block_the_next(tmp_path):
    first = make_group(tmp_path, "a", 2)
    second = make_group(tmp_path, "b", 2, start_index=2)
    locked = first.duplicates[0].path

    def delete(path: Path) -> None:
        if path == locked:
            raise PermissionError(13, "Permission denied", str(path))
        path.unlink()

    executor = DeletionExecutor(delete)
    outcomes = executor.execute([first, second])

    failed = [o for o in outcomes if not o.ok]
    assert len(failed) == 1
    assert isinstance(failed[0].error, DeletionError)
    assert failed[0].error.reason == "Permission denied"
    assert locked.exists()
    assert not second.duplicates[0].path.exists()
    assert executor.deleted_files == [second.duplicates[0].path]


def test_already_missing_file_is_reported(tmp_path):
    group = make_group(tmp_path, "gone", 2)
    group.duplicates[0].path.unlink()

    [outcome] = DeletionExecutor().execute([group])

    assert not outcome.ok
    assert outcome.error.kind == "deletion"


def test_requires_keep_selection(tmp_path):
    path = tmp_path / "x"
    path.write_text("x")
    members = [FileCandidate(path=path, size=1, modified=0, created=0, index=i) for i in range(2)]

    with pytest.raises(ValueError):
        DeletionExecutor().execute([DuplicateGroup(members=members)])
