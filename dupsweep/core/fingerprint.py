#!/usr/bin/env python3
"""
Fingerprint Worker Pool

Computes content fingerprints for candidates with a fixed set of worker
threads pulling from a single shared queue:
- hash mode: cryptographic digest over the full byte stream
- similarity mode: perceptual image descriptor (ImageHash)
"""

import hashlib
import io
import logging
import queue
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, List, Optional, Tuple

import imagehash
from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, FileError, ReadError
from .models import FileCandidate, Fingerprint, FingerprintOutcome

logger = logging.getLogger(__name__)

# ---------------------------
# Fingerprint Functions
# ---------------------------

class HashComputer:
    """Stream a file through a hashlib digest, retrying transient read errors"""

    mode = "hash"

    def __init__(self, algorithm: str = "sha256", chunk_size: int = 1024 * 1024,
                 retry_attempts: int = 3, retry_backoff: float = 0.2):
        self.algorithm = algorithm
        self.chunk_size = chunk_size
        self.retry_attempts = retry_attempts
        self.retry_backoff = retry_backoff

    def _get_hasher(self):
        return hashlib.new(self.algorithm)

    def compute(self, path: Path) -> Tuple[bytes, int]:
        """Return (digest, bytes_read); raise ReadError once retries are exhausted"""
        for attempt in range(self.retry_attempts):
            bytes_read = 0
            try:
                hasher = self._get_hasher()

                with path.open("rb") as f:
                    while chunk := f.read(self.chunk_size):
                        hasher.update(chunk)
                        bytes_read += len(chunk)

                return hasher.digest(), bytes_read

            except OSError as e:
                if attempt < self.retry_attempts - 1:
                    time.sleep(self.retry_backoff * (2 ** attempt))
                    continue
                raise ReadError(path, f"Hash error: {e.strerror or e}") from e


class ImageFingerprinter:
    """Decode a file as an image and compute a perceptual hash descriptor"""

    mode = "similarity"

    HASH_FUNCTIONS = {
        'dhash': imagehash.dhash,
        'phash': imagehash.phash,
        'ahash': imagehash.average_hash,
        'whash': imagehash.whash,
    }

    def __init__(self, algorithm: str = "dhash", hash_size: int = 16):
        self.algorithm = algorithm
        self.hash_size = hash_size
        self.hash_func = self.HASH_FUNCTIONS[algorithm]

    def compute(self, path: Path) -> Tuple[imagehash.ImageHash, int]:
        """Return (descriptor, bytes_read); ReadError if unreadable, DecodeError if not an image"""
        # Read fully first: any OSError past this point comes from the decoder
        try:
            with path.open("rb") as f:
                data = f.read()
        except OSError as e:
            raise ReadError(path, e.strerror or str(e)) from e

        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                # Convert to RGB to handle different color modes
                if img.mode != 'RGB':
                    img = img.convert('RGB')
                descriptor = self.hash_func(img, hash_size=self.hash_size)
        except (UnidentifiedImageError, Image.DecompressionBombError, SyntaxError, ValueError) as e:
            raise DecodeError(path, f"Not a decodable image: {e}") from e
        except OSError as e:
            raise DecodeError(path, f"Image decode failed: {e}") from e

        return descriptor, len(data)


def build_fingerprinter(config) -> Any:
    """Pick the fingerprint function for the configured mode"""
    if config.mode == "similarity":
        return ImageFingerprinter(config.image_hash, config.image_hash_size)
    return HashComputer(
        config.hash_algorithm,
        config.chunk_size,
        config.retry_attempts,
        config.retry_backoff,
    )

# ---------------------------
# Progress Tracker
# ---------------------------

class ProgressTracker:
    """Log fingerprinting progress at a fixed interval"""

    def __init__(self, total: int, interval: float = 2.0):
        self.total = total
        self.interval = interval
        self.completed = 0
        self.errors = 0
        self.bytes_read = 0
        self.start_time = time.time()
        self.last_update = self.start_time

    def record(self, outcome: FingerprintOutcome) -> None:
        self.completed += 1
        self.bytes_read += outcome.bytes_read
        if not outcome.ok:
            self.errors += 1

    def update(self, force: bool = False) -> None:
        now = time.time()
        if not force and now - self.last_update < self.interval:
            return

        duration = now - self.start_time
        pct = (self.completed / self.total) * 100 if self.total else 100.0
        rate = self.completed / duration if duration > 0 else 0.0
        parts = [
            f"Fingerprints: {self.completed:,}/{self.total:,} ({pct:.1f}%)",
            f"Errors: {self.errors}",
            f"Rate: {rate:.1f}/s",
            f"Time: {timedelta(seconds=int(duration))}",
        ]
        if self.bytes_read > 0:
            parts.append(f"Read: {self.bytes_read / (1024 * 1024):.1f}MB")

        logger.info(" | ".join(parts))
        self.last_update = now

# ---------------------------
# Worker Pool
# ---------------------------

@dataclass
class PoolResult:
    """Outcomes in listing order, or the error that stopped the pool"""
    outcomes: List[FingerprintOutcome] = field(default_factory=list)
    aborted_by: Optional[FileError] = None
    bytes_read: int = 0

    @property
    def fingerprints(self) -> List[Fingerprint]:
        return [o.fingerprint for o in self.outcomes if o.fingerprint is not None]

    @property
    def errors(self) -> List[FileError]:
        return [o.error for o in self.outcomes if o.error is not None]


class FingerprintPool:
    """Fixed set of workers sharing one work queue.

    Each worker pulls the next unclaimed candidate, so slow files never hold
    up a pre-assigned batch. Results go through a lock-protected collection;
    the lock is never held during file I/O. With ``stop_on_error`` the first
    per-file error stops all workers from taking new work, and results of
    reads still in flight are discarded.
    """

    def __init__(self, fingerprinter, workers: int = 8, stop_on_error: bool = False,
                 progress_interval: float = 2.0):
        if workers < 1:
            raise ValueError("Workers must be >= 1")
        self.fingerprinter = fingerprinter
        self.workers = workers
        self.stop_on_error = stop_on_error
        self.progress_interval = progress_interval

        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._outcomes: List[FingerprintOutcome] = []
        self._first_error: Optional[FileError] = None
        self._progress: Optional[ProgressTracker] = None

    def run(self, candidates: List[FileCandidate]) -> PoolResult:
        """Fingerprint every candidate and block until all workers finish"""
        self._stop.clear()
        self._outcomes = []
        self._first_error = None
        self._progress = ProgressTracker(len(candidates), self.progress_interval)

        if not candidates:
            return PoolResult()

        work: queue.Queue = queue.Queue()
        for candidate in candidates:
            work.put(candidate)

        worker_count = min(self.workers, len(candidates))
        with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="fingerprint") as executor:
            futures = [executor.submit(self._worker, work) for _ in range(worker_count)]
            pending = set(futures)
            while pending:
                done, pending = wait(pending, timeout=self.progress_interval, return_when=FIRST_EXCEPTION)
                if any(f.exception() is not None for f in done):
                    self._stop.set()
                with self._lock:
                    self._progress.update()

            for future in futures:
                future.result()  # Re-raise unexpected worker failures

        self._progress.update(force=True)

        if self._first_error is not None:
            return PoolResult(aborted_by=self._first_error, bytes_read=self._progress.bytes_read)

        outcomes = sorted(self._outcomes, key=lambda o: o.candidate.index)
        return PoolResult(outcomes=outcomes, bytes_read=self._progress.bytes_read)

    def _worker(self, work: queue.Queue) -> None:
        while not self._stop.is_set():
            try:
                candidate = work.get_nowait()
            except queue.Empty:
                return

            outcome = self._process(candidate)

            with self._lock:
                if self._stop.is_set():
                    return  # Run is stopping, discard in-flight result
                self._outcomes.append(outcome)
                self._progress.record(outcome)
                if outcome.error is not None:
                    logger.warning(f"{outcome.error.kind.title()} error: {outcome.error}")
                    if self.stop_on_error:
                        self._first_error = outcome.error
                        self._stop.set()

    def _process(self, candidate: FileCandidate) -> FingerprintOutcome:
        try:
            value, bytes_read = self.fingerprinter.compute(candidate.path)
        except FileError as e:
            return FingerprintOutcome(candidate=candidate, error=e)

        fingerprint = Fingerprint(candidate=candidate, mode=self.fingerprinter.mode, value=value)
        return FingerprintOutcome(candidate=candidate, fingerprint=fingerprint, bytes_read=bytes_read)
