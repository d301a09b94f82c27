"""Domain model for scanned file sets.

This package contains the non-rendering scan primitives:
- file record and per-entry error datatypes
- the concurrent filesystem walker
- hierarchical tree derivation from flat sorted records
"""

from __future__ import annotations

from .types import EntryError, FileRecord
from .tree import build_directory_tree, iter_tree
from .walker import ConcurrentWalker

__all__ = [
    "ConcurrentWalker",
    "EntryError",
    "FileRecord",
    "build_directory_tree",
    "iter_tree",
]
