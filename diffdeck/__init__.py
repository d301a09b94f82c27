"""Concurrent file discovery and classification for packing codebases.

Public API:
- ``scan`` / ``Scanner``: walk roots and return sorted ``FileRecord`` values
- ``PatternMatcher``: include/ignore glob decisions
- ``FileClassifier``: MIME, encoding, and line-count classification
"""

from __future__ import annotations

__version__ = "1.0.0"

from .classify import FileClassifier
from .config import Config, ScanConfig, load_config
from .errors import ConfigError, DiffdeckError, RootNotFoundError, ScanError
from .file_tree_model import ConcurrentWalker, EntryError, FileRecord
from .patterns import PatternMatcher, PatternSet
from .scanner import ScanReport, Scanner, records_from_changes, scan

__all__ = [
    "Config",
    "ConcurrentWalker",
    "ConfigError",
    "DiffdeckError",
    "EntryError",
    "FileClassifier",
    "FileRecord",
    "PatternMatcher",
    "PatternSet",
    "RootNotFoundError",
    "ScanConfig",
    "ScanError",
    "ScanReport",
    "Scanner",
    "__version__",
    "load_config",
    "records_from_changes",
    "scan",
]
