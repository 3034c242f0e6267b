"""
dupsweep Core Modules

Candidate listing, concurrent fingerprinting, equivalence grouping,
keep selection, deletion and reporting.
"""

from . import config
from . import engine
from . import errors
from . import models

__all__ = [
    "config",
    "engine",
    "errors",
    "models",
]
