#!/usr/bin/env python3
"""
Tests for keep selection
"""

from pathlib import Path

import pytest

from dupsweep.core.models import DuplicateGroup, FileCandidate
from dupsweep.core.selector import order_members, select_keep


def candidate(name: str, index: int, modified: float = 0.0, created: float = 0.0) -> FileCandidate:
    return FileCandidate(path=Path("/data") / name, size=5, modified=modified, created=created, index=index)


def test_keep_first_by_name():
    group = DuplicateGroup(members=[candidate("b.txt", 0), candidate("a.txt", 1)])

    kept = select_keep(group, keep="first", order="name")

    assert kept.name == "a.txt"
    assert group.keep_index == 1
    assert [d.name for d in group.duplicates] == ["b.txt"]


def test_keep_last_by_modified():
    group = DuplicateGroup(members=[
        candidate("new.txt", 0, modified=200.0),
        candidate("old.txt", 1, modified=100.0),
    ])

    kept = select_keep(group, keep="last", order="modified")

    assert kept.name == "new.txt"


def test_keep_first_by_created():
    group = DuplicateGroup(members=[
        candidate("x", 0, created=30.0),
        candidate("y", 1, created=10.0),
        candidate("z", 2, created=20.0),
    ])

    assert select_keep(group, keep="first", order="created").name == "y"


def test_policy_applies_to_sorted_sequence_not_listing_order():
    members = [
        candidate("mid", 0, modified=2.0),
        candidate("low", 1, modified=1.0),
        candidate("high", 2, modified=3.0),
    ]

    first = select_keep(DuplicateGroup(members=list(members)), "first", "modified")
    last = select_keep(DuplicateGroup(members=list(members)), "last", "modified")

    assert (first.name, last.name) == ("low", "high")


def test_ties_break_by_listing_order():
    members = [candidate("one", 0, modified=5.0), candidate("two", 1, modified=5.0), candidate("three", 2, modified=5.0)]

    assert order_members(members, "modified") == [0, 1, 2]
    assert select_keep(DuplicateGroup(members=list(members)), "first", "modified").name == "one"
    assert select_keep(DuplicateGroup(members=list(members)), "last", "modified").name == "three"


def test_selection_is_deterministic():
    members = [candidate("c", 0, 3.0), candidate("a", 1, 1.0), candidate("b", 2, 1.0)]

    indices = set()
    for _ in range(5):
        group = DuplicateGroup(members=list(members))
        select_keep(group, "first", "modified")
        indices.add(group.keep_index)

    assert indices == {1}


def test_keep_index_is_set_once():
    group = DuplicateGroup(members=[candidate("a", 0), candidate("b", 1)])
    select_keep(group, "first", "name")

    with pytest.raises(ValueError):
        select_keep(group, "last", "name")

    assert group.kept.name == "a"


def test_unknown_policy_rejected():
    group = DuplicateGroup(members=[candidate("a", 0), candidate("b", 1)])

    with pytest.raises(ValueError):
        select_keep(group, keep="middle")
