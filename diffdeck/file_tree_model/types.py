"""Domain datatypes for scanned files, directories, and per-entry errors."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FileRecord:
    """One discovered filesystem (or git) entry.

    ``path`` is slash-normalized and relative to the scan root. Content and the
    text-derived fields are filled only when the file was actually read;
    ``children`` is filled only in the hierarchical view.
    """

    path: str
    size: int = 0
    is_dir: bool = False
    content: str | bytes = ""
    mime_type: str = ""
    is_text: bool = False
    encoding: str = ""
    line_count: int = 0
    language: str = ""
    change_status: str = ""
    old_path: str = ""
    children: tuple["FileRecord", ...] = ()

    def __post_init__(self) -> None:
        if self.is_dir and self.content:
            raise ValueError(f"directory record {self.path!r} cannot carry content")
        if self.children and not self.is_dir:
            raise ValueError(f"file record {self.path!r} cannot have children")

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def content_read(self) -> bool:
        """Whether the file body was read and classified."""
        return bool(self.mime_type)

    @property
    def is_metadata_only(self) -> bool:
        """File is known to exist with data, but its body was not read."""
        return not self.is_dir and not self.content_read and self.size > 0


@dataclass(frozen=True)
class EntryError:
    """Recoverable failure for one entry; the scan continues without it."""

    path: str
    message: str


__all__ = [
    "EntryError",
    "FileRecord",
]
