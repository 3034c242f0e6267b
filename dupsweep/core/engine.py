#!/usr/bin/env python3
"""
Deduplication run driver

Runs the stages in order (list, fingerprint, group, select keep, delete,
summarize, export). Every stage fully consumes its input before the next
starts. Stages hand back tagged per-file outcomes; this driver alone applies
the ignore-errors policy and raises RunAborted when it says to stop.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from .config import Config
from .errors import FileError, ListingError, RunAborted
from .executor import DeletionExecutor
from .fingerprint import FingerprintPool, build_fingerprinter
from .grouper import group_fingerprints, unique_size_candidates
from .lister import ListedEntry, list_candidates
from .models import DeletionOutcome, DuplicateGroup, FileCandidate, RunSummary
from .report import build_summary, export_csv, export_json, format_size, sort_groups
from .selector import apply_keep_policy

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Everything a finished run produced"""
    summary: RunSummary
    groups: List[DuplicateGroup] = field(default_factory=list)
    errors: List[FileError] = field(default_factory=list)
    deletions: List[DeletionOutcome] = field(default_factory=list)
    phase_times: Dict[str, float] = field(default_factory=dict)

    @property
    def deletion_errors(self) -> List[FileError]:
        return [o.error for o in self.deletions if o.error is not None]


class Deduplicator:
    """Find duplicate groups under one root and optionally delete copies"""

    def __init__(self, config: Config, fingerprinter=None,
                 delete_func: Optional[Callable[[Path], None]] = None,
                 lister: Optional[Callable[[Path, bool], Iterable[ListedEntry]]] = None):
        config.validate()
        self.config = config
        self.fingerprinter = fingerprinter or build_fingerprinter(config)
        self.delete_func = delete_func
        self.lister = lister or list_candidates
        self.phase_times: Dict[str, float] = {}

    def run(self) -> RunResult:
        """Execute the complete run; raises RunAborted under strict error policy"""
        config = self.config
        logger.info(f"Scanning {config.path} | Mode: {config.mode} | Threads: {config.threads}")

        candidates, errors = self._timed("listing", self._list)

        to_fingerprint = candidates
        if config.skip_unique_sizes:
            unique = set(unique_size_candidates(candidates))
            to_fingerprint = [c for c in candidates if c not in unique]
            logger.info(f"Size pre-filter: {len(unique):,} files with a unique size skipped")

        fingerprints, fp_errors = self._timed("fingerprinting", self._fingerprint, to_fingerprint)
        errors.extend(fp_errors)

        groups = self._timed("grouping", self._group, fingerprints)

        size_collisions = None
        if config.skip_unique_sizes:
            # Same size as another file, but in no duplicate group
            size_collisions = len(fingerprints) - sum(g.count for g in groups)

        apply_keep_policy(groups, config.keep, config.order)
        groups = sort_groups(groups, config.sort_output)

        deletions: List[DeletionOutcome] = []
        if config.delete:
            deletions = self._timed("deletion", self._delete, groups)
        elif groups:
            logger.info("Dry run: no files deleted (use --delete to remove duplicates)")

        summary = build_summary(len(candidates), groups, errors, deletions,
                                dry_run=config.dry_run, size_collisions=size_collisions)
        result = RunResult(
            summary=summary,
            groups=groups,
            errors=errors,
            deletions=deletions,
            phase_times=dict(self.phase_times),
        )

        if config.export_format:
            self._export(result)

        return result

    def _timed(self, phase: str, func, *args):
        start = time.time()
        try:
            return func(*args)
        finally:
            self.phase_times[phase] = time.time() - start

    def _list(self):
        logger.info("Phase 1: Listing candidates...")
        candidates: List[FileCandidate] = []
        errors: List[FileError] = []

        for entry in self.lister(self.config.path, self.config.recursive):
            if isinstance(entry, ListingError):
                if not self.config.ignore_errors:
                    raise RunAborted(entry)
                logger.warning(f"Listing error: {entry}")
                errors.append(entry)
            else:
                candidates.append(entry)

        logger.info(f"Phase 1 complete: {len(candidates):,} files, {len(errors)} listing errors")
        return candidates, errors

    def _fingerprint(self, candidates: List[FileCandidate]):
        logger.info(f"Phase 2: Fingerprinting {len(candidates):,} files...")
        pool = FingerprintPool(
            self.fingerprinter,
            workers=self.config.threads,
            stop_on_error=not self.config.ignore_errors,
            progress_interval=self.config.progress_interval,
        )
        result = pool.run(candidates)

        if result.aborted_by is not None:
            raise RunAborted(result.aborted_by)

        logger.info(f"Phase 2 complete: {len(result.fingerprints):,} fingerprints, {len(result.errors)} errors, "
                    f"{format_size(result.bytes_read)} read")
        return result.fingerprints, result.errors

    def _group(self, fingerprints):
        logger.info("Phase 3: Grouping duplicates...")
        groups = group_fingerprints(fingerprints, self.config.mode, self.config.similarity_score)
        logger.info(f"Phase 3 complete: {len(groups):,} duplicate groups")
        return groups

    def _delete(self, groups: List[DuplicateGroup]) -> List[DeletionOutcome]:
        logger.info("Phase 4: Deleting duplicates...")
        return DeletionExecutor(self.delete_func).execute(groups)

    def _export(self, result: RunResult) -> None:
        if self.config.export_format == "json":
            export_json(self.config.export_path, result.summary, result.groups, result.errors)
        elif self.config.export_format == "csv":
            export_csv(self.config.export_path, result.groups)
