#!/usr/bin/env python3
"""
Equivalence Grouper

Partitions fingerprints into duplicate groups:
- hash mode: exact digest equality
- similarity mode: threshold clustering against a group anchor
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, List

from .models import DuplicateGroup, Fingerprint, FileCandidate

logger = logging.getLogger(__name__)


def similarity_score(value1, value2) -> float:
    """Similarity of two perceptual descriptors on a 0-100 scale.

    100 means identical descriptors; every differing bit lowers the score by
    the same amount.
    """
    bits = value1.hash.size
    distance = value1 - value2  # Hamming distance
    if distance == 0:
        return 100.0
    return 100.0 * (1.0 - distance / bits)


def group_by_digest(fingerprints: List[Fingerprint]) -> List[DuplicateGroup]:
    """Group byte-identical files.

    Members and groups follow listing order regardless of the order the
    worker pool produced the fingerprints in.
    """
    buckets: Dict[bytes, List[FileCandidate]] = defaultdict(list)
    for fp in sorted(fingerprints, key=lambda f: f.candidate.index):
        buckets[fp.value].append(fp.candidate)

    groups = [DuplicateGroup(members=members) for members in buckets.values() if len(members) > 1]
    logger.debug(f"{len(buckets)} distinct digests, {len(groups)} duplicate groups")
    return groups


def cluster_by_similarity(fingerprints: List[Fingerprint], threshold: float,
                          score_func: Callable = similarity_score) -> List[DuplicateGroup]:
    """Group visually similar files around an anchor.

    Candidates are taken in listing order. Each ungrouped candidate anchors a
    new group and absorbs every later ungrouped candidate whose score against
    the anchor meets ``threshold``. Members are compared to the anchor only,
    so two members of one group may score below the threshold against each
    other. Clustering is not transitive: a file similar only to a non-anchor
    member is not pulled in.
    """
    ordered = sorted(fingerprints, key=lambda f: f.candidate.index)
    grouped = [False] * len(ordered)
    groups = []

    for i, anchor in enumerate(ordered):
        if grouped[i]:
            continue
        grouped[i] = True

        members = [anchor.candidate]
        lowest = 100.0
        for j in range(i + 1, len(ordered)):
            if grouped[j]:
                continue
            score = score_func(anchor.value, ordered[j].value)
            if score >= threshold:
                grouped[j] = True
                members.append(ordered[j].candidate)
                lowest = min(lowest, score)

        if len(members) > 1:
            groups.append(DuplicateGroup(members=members, similarity=lowest))

    logger.debug(f"{len(ordered)} descriptors clustered into {len(groups)} groups at threshold {threshold}")
    return groups


def group_fingerprints(fingerprints: List[Fingerprint], mode: str, threshold: float = 95) -> List[DuplicateGroup]:
    """Dispatch to the grouping rule of the active mode"""
    if mode == "similarity":
        return cluster_by_similarity(fingerprints, threshold)
    return group_by_digest(fingerprints)


def unique_size_candidates(candidates: List[FileCandidate]) -> List[FileCandidate]:
    """Candidates whose byte size no other candidate shares"""
    sizes: Dict[int, int] = defaultdict(int)
    for candidate in candidates:
        sizes[candidate.size] += 1
    return [c for c in candidates if sizes[c.size] == 1]
