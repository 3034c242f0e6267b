#!/usr/bin/env python3
"""
Candidate Lister

Walks the scan root and yields one FileCandidate per regular file, in a
reproducible order. Entries that cannot be inspected are yielded inline as
ListingError records so the caller decides whether to continue.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Iterator, List, Union

from .errors import ListingError
from .models import FileCandidate

logger = logging.getLogger(__name__)

ListedEntry = Union[FileCandidate, ListingError]


def _created_time(st: os.stat_result) -> float:
    """Creation time where the platform records it, otherwise ctime"""
    return getattr(st, "st_birthtime", st.st_ctime)


def _walk_error(err: OSError) -> ListingError:
    path = err.filename if err.filename is not None else "<unknown>"
    return ListingError(path, err.strerror or str(err))


def list_candidates(root: Union[str, Path], recursive: bool = True) -> Iterator[ListedEntry]:
    """Lazily list regular files under ``root``.

    Directories are visited top-down with their entries sorted by name, so two
    runs over the same tree produce the same listing order. Symlinks are never
    listed, so a kept link can never point at a deleted target. Symlinks to
    directories are not descended. A link that does not resolve is reported
    as a ListingError.
    """
    walk_errors: List[OSError] = []
    index = 0

    for dirpath, dirs, files in os.walk(str(root), topdown=True, onerror=walk_errors.append, followlinks=False):
        while walk_errors:
            yield _walk_error(walk_errors.pop(0))

        if recursive:
            dirs.sort()
        else:
            dirs.clear()  # Don't descend

        for filename in sorted(files):
            path = Path(dirpath) / filename
            try:
                st = path.lstat()
                if stat.S_ISLNK(st.st_mode):
                    path.stat()  # Broken links raise here
                    logger.debug(f"Skipping symlink: {path}")
                    continue
            except OSError as e:
                yield ListingError(path, e.strerror or str(e))
                continue

            if not stat.S_ISREG(st.st_mode):
                logger.debug(f"Skipping non-regular file: {path}")
                continue

            yield FileCandidate(
                path=path,
                size=st.st_size,
                modified=st.st_mtime,
                created=_created_time(st),
                index=index,
            )
            index += 1

    while walk_errors:
        yield _walk_error(walk_errors.pop(0))
