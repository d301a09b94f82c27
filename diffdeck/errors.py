"""Exception taxonomy for scanning, configuration, and git access.

Fatal errors derive from ``DiffdeckError`` and propagate to the caller.
Per-entry problems are not exceptions at the API surface; the walker
reports them as ``EntryError`` values instead.
"""

from __future__ import annotations


class DiffdeckError(Exception):
    """Base class for all errors raised by diffdeck."""


class ConfigError(DiffdeckError):
    """Configuration is malformed or fails validation."""


class PatternSetError(DiffdeckError):
    """Pattern set cannot be constructed (structural problem, not one bad glob)."""


class PatternSyntaxError(ValueError):
    """One glob pattern is malformed."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class ScanError(DiffdeckError):
    """Root-level failure that aborts a scan."""

    def __init__(self, root: str, message: str) -> None:
        super().__init__(f"{root}: {message}")
        self.root = root


class RootNotFoundError(ScanError):
    """Scan root does not exist or cannot be stat'ed."""


class EncodingDetectionError(ValueError):
    """Statistical encoding detection produced no answer."""


class GitError(DiffdeckError):
    """git is unavailable or a git command failed."""
