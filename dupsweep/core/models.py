#!/usr/bin/env python3
"""
Data model shared by all engine stages
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import DeletionError, FileError

# ---------------------------
# Option values
# ---------------------------

MODES = ("hash", "similarity")
KEEP_POLICIES = ("first", "last")
ORDERINGS = ("modified", "created", "name")

# ---------------------------
# Candidates and fingerprints
# ---------------------------

@dataclass(frozen=True)
class FileCandidate:
    """A regular file found by the lister; immutable once listed"""
    path: Path
    size: int
    modified: float
    created: float
    index: int  # Position in listing order

    @property
    def name(self) -> str:
        return self.path.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': str(self.path),
            'size': self.size,
            'modified': datetime.fromtimestamp(self.modified).isoformat(),
            'created': datetime.fromtimestamp(self.created).isoformat(),
        }


@dataclass(frozen=True)
class Fingerprint:
    """Content-derived value for one candidate.

    ``value`` is a digest (bytes) in hash mode and an ``imagehash.ImageHash``
    descriptor in similarity mode.
    """
    candidate: FileCandidate
    mode: str
    value: Any


@dataclass
class FingerprintOutcome:
    """Tagged result of fingerprinting one candidate"""
    candidate: FileCandidate
    fingerprint: Optional[Fingerprint] = None
    error: Optional[FileError] = None
    bytes_read: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

# ---------------------------
# Groups
# ---------------------------

@dataclass
class DuplicateGroup:
    """Files judged equivalent, in listing order.

    ``keep_index`` points into ``members`` and can only be set once.
    """
    members: List[FileCandidate]
    similarity: Optional[float] = None  # Lowest score against the anchor
    _keep_index: Optional[int] = field(default=None, repr=False)

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def anchor(self) -> FileCandidate:
        return self.members[0]

    @property
    def keep_index(self) -> Optional[int]:
        return self._keep_index

    @keep_index.setter
    def keep_index(self, index: int) -> None:
        if self._keep_index is not None:
            raise ValueError("Keep index already set for this group")
        if not 0 <= index < len(self.members):
            raise IndexError(f"Keep index {index} out of range for {len(self.members)} members")
        self._keep_index = index

    @property
    def kept(self) -> Optional[FileCandidate]:
        if self._keep_index is None:
            return None
        return self.members[self._keep_index]

    @property
    def duplicates(self) -> List[FileCandidate]:
        """Members that are not kept (all but the anchor before selection)"""
        keep = 0 if self._keep_index is None else self._keep_index
        return [m for i, m in enumerate(self.members) if i != keep]

    @property
    def reclaimable_bytes(self) -> int:
        return sum(m.size for m in self.duplicates)

# ---------------------------
# Actions and summary
# ---------------------------

@dataclass
class DeletionOutcome:
    """Result of one deletion attempt"""
    candidate: FileCandidate
    error: Optional[DeletionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RunSummary:
    """Aggregated run statistics; read-only after construction"""
    candidates_scanned: int = 0
    groups_found: int = 0
    duplicate_files: int = 0
    reclaimable_bytes: int = 0
    error_count: int = 0
    files_deleted: int = 0
    deletion_errors: int = 0
    bytes_freed: int = 0
    dry_run: bool = True
    size_collisions: Optional[int] = None  # Set only when the size pre-filter ran

    def to_dict(self) -> Dict[str, Any]:
        return {
            'candidates_scanned': self.candidates_scanned,
            'groups_found': self.groups_found,
            'duplicate_files': self.duplicate_files,
            'reclaimable_bytes': self.reclaimable_bytes,
            'error_count': self.error_count,
            'files_deleted': self.files_deleted,
            'deletion_errors': self.deletion_errors,
            'bytes_freed': self.bytes_freed,
            'dry_run': self.dry_run,
            'size_collisions': self.size_collisions,
        }
