"""Hierarchical view derived from a flat, path-sorted record list."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import replace

from .types import FileRecord

logger = logging.getLogger(__name__)


def _parent_path(path: str) -> str:
    head, _sep, _tail = path.rpartition("/")
    return head


def build_directory_tree(records: Iterable[FileRecord]) -> list[FileRecord]:
    """Nest ``records`` under their parent directories.

    Every directory implied by a path is synthesized when no record exists
    for it. Each path appears exactly once in the result; top-level entries
    and every ``children`` tuple are sorted by path.
    """
    nodes: dict[str, FileRecord] = {}
    children_by_parent: dict[str, set[str]] = {}
    implied_dirs: set[str] = set()
    top_level: set[str] = set()

    for record in records:
        if record.path in nodes:
            continue
        nodes[record.path] = replace(record, children=()) if record.children else record
        child = record.path
        parent = _parent_path(child)
        while parent:
            children_by_parent.setdefault(parent, set()).add(child)
            if parent in implied_dirs:
                break
            implied_dirs.add(parent)
            child = parent
            parent = _parent_path(parent)
        else:
            top_level.add(child)

    def build(path: str) -> FileRecord:
        children = tuple(build(child) for child in sorted(children_by_parent.get(path, ())))
        base = nodes.get(path)
        if base is not None and children and not base.is_dir:
            logger.warning("Replacing file record %s with a directory holding %d entries", path, len(children))
            base = None
        if base is None:
            base = FileRecord(path=path, is_dir=True)
        return replace(base, children=children) if children else base

    return [build(path) for path in sorted(top_level)]


def iter_tree(records: Iterable[FileRecord], depth: int = 0) -> Iterator[tuple[int, FileRecord]]:
    """Yield ``(depth, record)`` pairs in pre-order."""
    for record in records:
        yield depth, record
        yield from iter_tree(record.children, depth + 1)


__all__ = [
    "build_directory_tree",
    "iter_tree",
]
