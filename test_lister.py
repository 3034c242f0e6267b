#!/usr/bin/env python3
"""
Tests for candidate listing
"""

import os
from pathlib import Path

import pytest

from dupsweep.core.errors import ListingError
from dupsweep.core.lister import list_candidates
from dupsweep.core.models import FileCandidate


def build_tree(root: Path) -> None:
    (root / "sub" / "deeper").mkdir(parents=True)
    (root / "b.txt").write_bytes(b"bbb")
    (root / "a.txt").write_bytes(b"a")
    (root / "sub" / "c.txt").write_bytes(b"cc")
    (root / "sub" / "deeper" / "d.txt").write_bytes(b"dddd")


def test_recursive_listing_is_sorted_and_indexed(tmp_path):
    """Files are listed top-down in name order with consecutive indices"""
    build_tree(tmp_path)

    entries = list(list_candidates(tmp_path, recursive=True))

    assert all(isinstance(e, FileCandidate) for e in entries)
    assert [e.path.relative_to(tmp_path).as_posix() for e in entries] == [
        "a.txt", "b.txt", "sub/c.txt", "sub/deeper/d.txt",
    ]
    assert [e.index for e in entries] == [0, 1, 2, 3]
    assert [e.size for e in entries] == [1, 3, 2, 4]


def test_non_recursive_lists_top_level_only(tmp_path):
    build_tree(tmp_path)

    entries = list(list_candidates(tmp_path, recursive=False))

    assert [e.name for e in entries] == ["a.txt", "b.txt"]


def test_candidate_carries_timestamps(tmp_path):
    target = tmp_path / "file.bin"
    target.write_bytes(b"x" * 10)
    os.utime(target, (1_600_000_000, 1_600_000_000))

    [candidate] = list(list_candidates(tmp_path))

    assert candidate.modified == pytest.approx(1_600_000_000)
    assert candidate.created > 0


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_broken_symlink_yields_error_and_listing_continues(tmp_path):
    """A dangling link becomes a ListingError record, not an exception"""
    (tmp_path / "good.txt").write_text("content")
    os.symlink(tmp_path / "missing.txt", tmp_path / "dangling.txt")

    entries = list(list_candidates(tmp_path))

    errors = [e for e in entries if isinstance(e, ListingError)]
    candidates = [e for e in entries if isinstance(e, FileCandidate)]
    assert len(errors) == 1
    assert errors[0].path.name == "dangling.txt"
    assert [c.name for c in candidates] == ["good.txt"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_symlinked_directories_are_not_listed_or_descended(tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "hidden.txt").write_text("x")
    root = tmp_path / "root"
    root.mkdir()
    (root / "real.txt").write_text("y")
    os.symlink(outside, root / "linked_dir", target_is_directory=True)

    entries = list(list_candidates(root))

    assert [e.name for e in entries] == ["real.txt"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_symlinked_files_are_not_listed(tmp_path):
    real = tmp_path / "b_real.txt"
    real.write_text("payload")
    os.symlink(real, tmp_path / "a_link.txt")

    entries = list(list_candidates(tmp_path))

    assert all(isinstance(e, FileCandidate) for e in entries)
    assert [e.name for e in entries] == ["b_real.txt"]
    assert [e.index for e in entries] == [0]


def test_listing_is_lazy(tmp_path):
    build_tree(tmp_path)

    iterator = list_candidates(tmp_path)
    first = next(iterator)

    assert first.name == "a.txt"


def test_missing_root_yields_listing_error(tmp_path):
    entries = list(list_candidates(tmp_path / "nope"))

    assert len(entries) == 1
    assert isinstance(entries[0], ListingError)
