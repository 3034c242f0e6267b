#!/usr/bin/env python3
"""
Action Executor - deletes the non-kept members of duplicate groups
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional

from .errors import DeletionError
from .models import DeletionOutcome, DuplicateGroup

logger = logging.getLogger(__name__)


def unlink(path: Path) -> None:
    path.unlink()


class DeletionExecutor:
    """Delete duplicates one by one, collecting an outcome per file.

    A failed deletion is recorded and the batch moves on; earlier deletions
    are never undone.
    """

    def __init__(self, delete_func: Optional[Callable[[Path], None]] = None):
        self.delete_func = delete_func or unlink
        self.deleted_files: List[Path] = []

    def execute(self, groups: List[DuplicateGroup]) -> List[DeletionOutcome]:
        outcomes = []

        for group in groups:
            if group.kept is None:
                raise ValueError("Keep policy must be applied before deleting")

            for candidate in group.duplicates:
                try:
                    self.delete_func(candidate.path)
                except OSError as e:
                    error = DeletionError(candidate.path, e.strerror or str(e))
                    logger.warning(f"Failed to delete {candidate.path}: {error.reason}")
                    outcomes.append(DeletionOutcome(candidate=candidate, error=error))
                    continue

                logger.debug(f"Deleted: {candidate.path}")
                self.deleted_files.append(candidate.path)
                outcomes.append(DeletionOutcome(candidate=candidate))

        failed = sum(1 for o in outcomes if not o.ok)
        logger.info(f"Deletion complete: {len(outcomes) - failed} deleted, {failed} failed")
        return outcomes
