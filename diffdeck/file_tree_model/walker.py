"""Concurrent filesystem walk producing ``FileRecord`` values.

One traversal driver enumerates directories depth-first and hands regular
files to a bounded worker pool. A semaphore caps in-flight reads so the
driver blocks once every slot is busy. Results land in a single list under
one lock held only for the append.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from ..classify import FileClassifier, decode_text, detect_language
from ..config import ScanConfig
from ..errors import EncodingDetectionError, RootNotFoundError, ScanError
from ..patterns import PatternMatcher, normalize_path
from .types import EntryError, FileRecord

logger = logging.getLogger(__name__)


def _read_file_bytes(path: Path) -> bytes:
    """Read a whole file; isolated so tests can observe which files are read."""
    with path.open("rb") as handle:
        return handle.read()


def _list_directory(path: str | os.PathLike[str]) -> list[os.DirEntry[str]]:
    with os.scandir(path) as entries:
        return sorted(entries, key=lambda entry: entry.name)


@dataclass
class _WalkState:
    """Shared result collection for one walk."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    records: list[FileRecord] = field(default_factory=list)
    errors: list[EntryError] = field(default_factory=list)

    def add_record(self, record: FileRecord) -> None:
        with self.lock:
            self.records.append(record)

    def add_error(self, error: EntryError) -> None:
        logger.warning("Skipping %s: %s", error.path, error.message)
        with self.lock:
            self.errors.append(error)


class ConcurrentWalker:
    """Walk one root at a time under a fixed ``ScanConfig``.

    Only ignore matches prune descent; directories failing the include list
    are still entered because deeper files may match.
    """

    def __init__(
        self,
        config: ScanConfig,
        matcher: PatternMatcher | None = None,
        classifier: FileClassifier | None = None,
    ) -> None:
        self.config = config
        self.matcher = matcher if matcher is not None else PatternMatcher(config.pattern_set())
        self.classifier = classifier if classifier is not None else FileClassifier()

    def build_record(self, rel_path: str, size: int, data: bytes) -> FileRecord:
        """Classify ``data`` read for ``rel_path`` into a populated record."""
        classification = self.classifier.classify(data)
        content: str | bytes = b""
        encoding = ""
        line_count = 0
        language = ""
        if classification.is_text:
            try:
                encoding = self.classifier.detect_encoding(data)
            except EncodingDetectionError as exc:
                logger.debug("No encoding detected for %s: %s", rel_path, exc)
            line_count = self.classifier.count_lines(data)
            language = detect_language(rel_path)
            content = data if self.config.raw_content else decode_text(data, encoding)
        elif self.config.raw_content:
            content = data
        return FileRecord(
            path=rel_path,
            size=size,
            content=content or "",
            mime_type=classification.mime_type,
            is_text=classification.is_text,
            encoding=encoding,
            line_count=line_count,
            language=language,
        )

    def _process_file(self, state: _WalkState, abs_path: Path, rel_path: str, size: int) -> None:
        if size > self.config.max_file_size:
            logger.debug("Not reading %s: %d bytes exceeds limit", rel_path, size)
            state.add_record(FileRecord(path=rel_path, size=size))
            return
        try:
            data = _read_file_bytes(abs_path)
        except OSError as exc:
            state.add_error(EntryError(rel_path, f"read failed: {exc}"))
            return
        try:
            record = self.build_record(rel_path, len(data), data)
        except (ValueError, LookupError) as exc:
            state.add_error(EntryError(rel_path, f"classification failed: {exc}"))
            return
        state.add_record(record)

    def _walk_file_root(self, root: Path) -> tuple[list[FileRecord], list[EntryError]]:
        rel_path = normalize_path(root.name)
        if self.matcher.should_ignore(rel_path) or not self.matcher.matches_include(rel_path):
            return [], []
        state = _WalkState()
        try:
            size = root.stat().st_size
        except OSError as exc:
            raise RootNotFoundError(str(root), f"cannot stat: {exc}") from exc
        self._process_file(state, root, rel_path, size)
        return state.records, state.errors

    def walk(self, root: str | os.PathLike[str]) -> tuple[list[FileRecord], list[EntryError]]:
        """Walk ``root`` and return ``(records, entry_errors)``.

        Raises ``RootNotFoundError`` when the root cannot be stat'ed and
        ``ScanError`` when the root directory cannot be listed; both happen
        before any worker is dispatched. Returns only after every dispatched
        worker has finished. Record order is unspecified.
        """
        root_path = Path(root)
        try:
            root_path.stat()
        except OSError as exc:
            raise RootNotFoundError(str(root), f"cannot stat: {exc}") from exc

        if not root_path.is_dir():
            return self._walk_file_root(root_path)

        try:
            root_entries = _list_directory(root_path)
        except OSError as exc:
            raise ScanError(str(root), f"cannot list directory: {exc}") from exc
        logger.debug("Walking %s", root_path)

        state = _WalkState()
        slots = threading.BoundedSemaphore(self.config.workers)
        futures: list[Future[None]] = []

        def run_slot(abs_path: Path, rel_path: str, size: int) -> None:
            try:
                self._process_file(state, abs_path, rel_path, size)
            finally:
                slots.release()

        with ThreadPoolExecutor(
            max_workers=self.config.workers,
            thread_name_prefix="diffdeck-scan",
        ) as pool:
            # Depth-first; each stack item is a directory listing still to visit.
            stack: list[tuple[str, list[os.DirEntry[str]]]] = [("", root_entries)]
            while stack:
                parent_rel, entries = stack.pop()
                pending_dirs: list[tuple[str, list[os.DirEntry[str]]]] = []
                for entry in entries:
                    rel_path = f"{parent_rel}/{entry.name}" if parent_rel else entry.name
                    try:
                        is_dir = entry.is_dir(follow_symlinks=False)
                    except OSError:
                        is_dir = False

                    if self.matcher.should_ignore(rel_path, is_dir=is_dir):
                        if is_dir:
                            logger.debug("Pruning ignored directory %s", rel_path)
                        continue
                    included = self.matcher.matches_include(rel_path)

                    if is_dir:
                        if included:
                            state.add_record(FileRecord(path=rel_path, is_dir=True))
                        try:
                            children = _list_directory(entry.path)
                        except OSError as exc:
                            state.add_error(EntryError(rel_path, f"cannot list directory: {exc}"))
                            continue
                        pending_dirs.append((rel_path, children))
                        continue

                    if not included:
                        continue
                    try:
                        is_file = entry.is_file()
                    except OSError:
                        is_file = False
                    if not is_file:
                        logger.debug("Skipping non-regular entry %s", rel_path)
                        continue
                    try:
                        size = entry.stat().st_size
                    except OSError as exc:
                        state.add_error(EntryError(rel_path, f"stat failed: {exc}"))
                        continue

                    slots.acquire()
                    try:
                        futures.append(pool.submit(run_slot, Path(entry.path), rel_path, size))
                    except BaseException:
                        slots.release()
                        raise
                # Reverse so the first subdirectory is visited next.
                stack.extend(reversed(pending_dirs))

        for future in futures:
            future.result()
        return state.records, state.errors


__all__ = [
    "ConcurrentWalker",
]
