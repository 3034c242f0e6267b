"""
Error types raised and recorded by the deduplication engine
"""

from pathlib import Path
from typing import Union


class DedupError(Exception):
    """Base class for all dupsweep errors"""


class FileError(DedupError):
    """A failure tied to a single file; recorded against that file"""

    kind = "file"

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")

    def to_dict(self) -> dict:
        return {"kind": self.kind, "path": str(self.path), "reason": self.reason}


class ListingError(FileError):
    """Entry could not be listed or stat'ed (permission denied, broken symlink)"""

    kind = "listing"


class ReadError(FileError):
    """File became unreadable while streaming its content"""

    kind = "read"


class DecodeError(FileError):
    """File is not a decodable image in similarity mode"""

    kind = "decode"


class DeletionError(FileError):
    """Filesystem refused to delete the file"""

    kind = "deletion"


class RunAborted(DedupError):
    """Raised by the run driver when a per-file error is not ignorable"""

    def __init__(self, error: FileError):
        self.error = error
        super().__init__(f"Run aborted by {error.kind} error: {error}")
