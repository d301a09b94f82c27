"""Public scanning entry point.

``Scanner`` walks each root with the concurrent walker, merges the
results, and publishes them sorted by path so identical inputs always give
identical output. Git-provided changes go through the same matcher and
classifier without any traversal.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from .classify import FileClassifier
from .config import ScanConfig
from .errors import ConfigError, RootNotFoundError
from .file_tree_model import ConcurrentWalker, EntryError, FileRecord, build_directory_tree
from .git_history import ChangeStatus, FileChange
from .patterns import PatternMatcher, normalize_path

logger = logging.getLogger(__name__)

DEFAULT_ROOT = "."


@dataclass(frozen=True)
class ScanReport:
    """Sorted records plus the per-entry errors seen along the way."""

    records: list[FileRecord]
    errors: list[EntryError]


def _sorted_view(records: Iterable[FileRecord], directory_tree: bool) -> list[FileRecord]:
    ordered = sorted(records, key=lambda record: record.path)
    if directory_tree:
        return build_directory_tree(ordered)
    return ordered


class Scanner:
    """Scan coordinator bound to one immutable ``ScanConfig``."""

    def __init__(self, config: ScanConfig, classifier: FileClassifier | None = None) -> None:
        if not isinstance(config, ScanConfig):
            raise ConfigError(f"expected ScanConfig, got {type(config).__name__}")
        self.config = config
        self.matcher = PatternMatcher(config.pattern_set())
        self.classifier = classifier if classifier is not None else FileClassifier()
        self.walker = ConcurrentWalker(config, self.matcher, self.classifier)

    def scan_report(self, roots: Sequence[str | os.PathLike[str]] | None = None) -> ScanReport:
        """Scan ``roots`` (default: current directory) and keep entry errors.

        Every root is stat'ed before any walk starts. When two roots yield
        the same relative path, the first root's record is kept.
        """
        root_list = list(roots) if roots else [DEFAULT_ROOT]
        for root in root_list:
            if not Path(root).exists():
                raise RootNotFoundError(str(root), "path does not exist")

        merged: dict[str, FileRecord] = {}
        errors: list[EntryError] = []
        for root in root_list:
            records, root_errors = self.walker.walk(root)
            logger.debug("Root %s yielded %d records, %d errors", root, len(records), len(root_errors))
            for record in records:
                if record.path in merged:
                    logger.warning("Duplicate path %s from root %s; keeping the earlier root", record.path, root)
                    continue
                merged[record.path] = record
            errors.extend(root_errors)

        errors.sort(key=lambda error: error.path)
        return ScanReport(
            records=_sorted_view(merged.values(), self.config.directory_tree),
            errors=errors,
        )

    def scan(self, roots: Sequence[str | os.PathLike[str]] | None = None) -> list[FileRecord]:
        """Return the sorted records for ``roots``; see ``scan_report``."""
        return self.scan_report(roots).records

    def scan_changes(self, changes: Iterable[FileChange]) -> list[FileRecord]:
        """Turn git-provided changes into sorted records.

        Ignore/include matching and the size ceiling apply; pruning does not,
        since the git layer already fixed the path set. Deleted files carry
        no content.
        """
        records: dict[str, FileRecord] = {}
        for change in changes:
            path = normalize_path(change.path)
            if not self.matcher.should_include(path):
                continue
            size = len(change.content)
            if change.status is ChangeStatus.DELETED:
                record = FileRecord(path=path, size=0)
            elif size > self.config.max_file_size:
                record = FileRecord(path=path, size=size)
            else:
                record = self.walker.build_record(path, size, change.content)
            records[path] = replace(
                record,
                change_status=change.status.value,
                old_path=normalize_path(change.old_path),
            )
        return _sorted_view(records.values(), self.config.directory_tree)


def scan(
    roots: Sequence[str | os.PathLike[str]] | None = None,
    config: ScanConfig | None = None,
) -> list[FileRecord]:
    """Convenience wrapper: scan ``roots`` with ``config`` or defaults."""
    return Scanner(config if config is not None else ScanConfig()).scan(roots)


def records_from_changes(changes: Iterable[FileChange], config: ScanConfig | None = None) -> list[FileRecord]:
    """Build sorted records from git changes with ``config`` or defaults."""
    return Scanner(config if config is not None else ScanConfig()).scan_changes(changes)


__all__ = [
    "DEFAULT_ROOT",
    "ScanReport",
    "Scanner",
    "records_from_changes",
    "scan",
]
