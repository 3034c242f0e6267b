#!/usr/bin/env python3
"""
Keep Selector - picks the one file per group that survives deletion
"""

from typing import Callable, Dict, List

from .models import DuplicateGroup, FileCandidate

ORDER_KEYS: Dict[str, Callable[[FileCandidate], object]] = {
    'modified': lambda c: c.modified,
    'created': lambda c: c.created,
    'name': lambda c: c.name,
}


def order_members(members: List[FileCandidate], order: str) -> List[int]:
    """Member indices sorted ascending by ``order``; ties keep listing order"""
    key = ORDER_KEYS[order]
    return sorted(range(len(members)), key=lambda i: (key(members[i]), members[i].index))


def select_keep(group: DuplicateGroup, keep: str = "first", order: str = "modified") -> FileCandidate:
    """Set the group's keep index and return the kept file.

    The policy is applied to the sorted sequence, not to listing order:
    ``first`` keeps the lowest member by ``order``, ``last`` the highest.
    """
    if keep not in ("first", "last"):
        raise ValueError(f"Unknown keep policy: {keep}")

    ranked = order_members(group.members, order)
    group.keep_index = ranked[0] if keep == "first" else ranked[-1]
    return group.kept


def apply_keep_policy(groups: List[DuplicateGroup], keep: str, order: str) -> None:
    for group in groups:
        select_keep(group, keep, order)
