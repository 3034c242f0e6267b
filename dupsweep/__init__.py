"""
dupsweep - Duplicate File Finder and Cleaner

Finds byte-identical or visually similar files under a directory tree,
picks one file to keep per duplicate group and optionally deletes the rest.
"""

__version__ = "1.0.0"
__author__ = "dupsweep Team"
__email__ = "info@dupsweep.dev"
__license__ = "MIT"

from .core import config, engine, models

__all__ = [
    "config",
    "engine",
    "models",
]
