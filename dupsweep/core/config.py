#!/usr/bin/env python3
"""
Run configuration with defaults matching the command line
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .models import KEEP_POLICIES, MODES, ORDERINGS

logger = logging.getLogger(__name__)

HASH_ALGORITHMS = ("sha256", "sha1", "md5", "blake2b")
IMAGE_HASHES = ("dhash", "phash", "ahash", "whash")
EXPORT_FORMATS = ("json", "csv")

# ---------------------------
# Configuration
# ---------------------------

@dataclass
class Config:
    """Deduplication run configuration"""
    # Paths
    path: Optional[Path] = None
    recursive: bool = True

    # Detection
    mode: str = "hash"  # hash, similarity
    similarity_score: int = 95  # 0-100, 100 = exact descriptor match
    hash_algorithm: str = "sha256"
    image_hash: str = "dhash"
    image_hash_size: int = 16  # 16x16 = 256 bit descriptor
    skip_unique_sizes: bool = False

    # Keep selection
    keep: str = "first"  # first, last
    order: str = "modified"  # modified, created, name
    sort_output: Optional[str] = None

    # Performance
    threads: int = 8
    chunk_size: int = 1024 * 1024  # 1 MB
    progress_interval: float = 2.0

    # Error policy
    ignore_errors: bool = True
    retry_attempts: int = 3
    retry_backoff: float = 0.2

    # Actions
    delete: bool = False

    # Output
    summary: bool = True
    quiet: bool = False
    verbose: bool = False
    export_format: Optional[str] = None  # json, csv
    export_path: Optional[Path] = None

    def validate(self) -> None:
        """Validate configuration"""
        if self.path is None:
            raise ValueError("A path to scan is required")
        self.path = Path(self.path)
        if not self.path.is_dir():
            raise ValueError(f"Path is not a directory: {self.path}")
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode}")
        if self.keep not in KEEP_POLICIES:
            raise ValueError(f"Unknown keep policy: {self.keep}")
        if self.order not in ORDERINGS:
            raise ValueError(f"Unknown order: {self.order}")
        if self.sort_output is not None and self.sort_output not in ORDERINGS:
            raise ValueError(f"Unknown output sort: {self.sort_output}")
        if self.threads < 1:
            raise ValueError("Threads must be >= 1")
        if not 0 <= self.similarity_score <= 100:
            raise ValueError("Similarity score must be between 0 and 100")
        if self.hash_algorithm not in HASH_ALGORITHMS:
            raise ValueError(f"Unknown hash algorithm: {self.hash_algorithm}")
        if self.hash_algorithm not in hashlib.algorithms_available:
            raise ValueError(f"Hash algorithm not available in this Python build: {self.hash_algorithm}")
        if self.image_hash not in IMAGE_HASHES:
            raise ValueError(f"Unknown image hash: {self.image_hash}")
        if self.image_hash_size < 2:
            raise ValueError("Image hash size must be >= 2")
        if self.image_hash == "whash" and self.image_hash_size & (self.image_hash_size - 1):
            raise ValueError("whash requires an image hash size that is a power of 2")
        if self.chunk_size < 1024:
            raise ValueError("Chunk size must be >= 1KB")
        if self.retry_attempts < 1:
            raise ValueError("Retry attempts must be >= 1")
        if self.retry_backoff < 0:
            raise ValueError("Retry backoff cannot be negative")
        if self.export_format is not None:
            if self.export_format not in EXPORT_FORMATS:
                raise ValueError(f"Unknown export format: {self.export_format}")
            if self.export_path is None:
                self.export_path = Path(f"dupsweep_report.{self.export_format}")
        if self.skip_unique_sizes and self.mode != "hash":
            logger.warning("Size pre-filter only applies to hash mode, ignoring")
            self.skip_unique_sizes = False

    @property
    def dry_run(self) -> bool:
        return not self.delete
