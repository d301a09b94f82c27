"""Git-history provider: materialized file changes for diff-mode scans.

Lists files at a ref or the changes between two refs and reads blob
contents in one ``git cat-file --batch`` round trip. Paths come back
slash-separated and relative to the repository root.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import GitError

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 120.0


class ChangeStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    UNMODIFIED = "unmodified"


_STATUS_LETTERS = {
    "A": ChangeStatus.ADDED,
    "C": ChangeStatus.ADDED,
    "M": ChangeStatus.MODIFIED,
    "T": ChangeStatus.MODIFIED,
    "D": ChangeStatus.DELETED,
    "R": ChangeStatus.RENAMED,
}


@dataclass(frozen=True)
class FileChange:
    """One file as seen by the git layer, with its new and old contents."""

    path: str
    status: ChangeStatus
    content: bytes = b""
    old_path: str = ""
    old_content: bytes = b""


def _run_git(
    cwd: Path,
    args: Sequence[str],
    *,
    input_bytes: bytes | None = None,
) -> subprocess.CompletedProcess[bytes]:
    """Run one git command; any failure becomes ``GitError``."""
    if shutil.which("git") is None:
        raise GitError("git is not installed")
    try:
        proc = subprocess.run(
            ["git", "-C", str(cwd), *args],
            input=input_bytes,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise GitError(f"git {args[0]} failed: {exc}") from exc
    if proc.returncode != 0:
        detail = proc.stderr.decode("utf-8", errors="replace").strip()
        raise GitError(f"git {args[0]} failed: {detail or f'exit code {proc.returncode}'}")
    return proc


def _split_z(output: bytes) -> list[str]:
    return [raw.decode("utf-8", errors="replace") for raw in output.split(b"\x00") if raw]


class GitRepository:
    """A local git work tree addressed through the ``git`` CLI."""

    def __init__(self, path: Path) -> None:
        proc = _run_git(path, ["rev-parse", "--show-toplevel"])
        top_level = proc.stdout.decode("utf-8", errors="replace").strip()
        if not top_level:
            raise GitError(f"{path} is not inside a git work tree")
        self.root = Path(top_level).resolve()

    def read_blobs(self, specs: Sequence[str]) -> list[bytes | None]:
        """Read ``ref:path`` specs; ``None`` for missing or non-blob objects."""
        if not specs:
            return []
        payload = "".join(f"{spec}\n" for spec in specs).encode("utf-8")
        out = _run_git(self.root, ["cat-file", "--batch"], input_bytes=payload).stdout

        results: list[bytes | None] = []
        pos = 0
        for spec in specs:
            newline = out.find(b"\n", pos)
            if newline < 0:
                raise GitError(f"truncated cat-file output at {spec}")
            header = out[pos:newline].decode("utf-8", errors="replace").split()
            pos = newline + 1
            if len(header) == 3 and header[2].isdigit():
                size = int(header[2])
                data = out[pos : pos + size]
                pos += size + 1
                results.append(data if header[1] == "blob" else None)
            else:
                logger.debug("git object missing for %s", spec)
                results.append(None)
        return results

    def head_files(self, ref: str = "HEAD") -> list[FileChange]:
        """Return every file at ``ref`` with status ``unmodified``."""
        out = _run_git(self.root, ["ls-tree", "-r", "-z", "--name-only", ref]).stdout
        paths = _split_z(out)
        blobs = self.read_blobs([f"{ref}:{path}" for path in paths])
        changes: list[FileChange] = []
        for path, blob in zip(paths, blobs):
            if blob is None:
                continue
            changes.append(FileChange(path=path, status=ChangeStatus.UNMODIFIED, content=blob))
        return changes

    def compare(self, from_ref: str, to_ref: str) -> list[FileChange]:
        """Return files that differ between ``from_ref`` and ``to_ref``."""
        out = _run_git(self.root, ["diff", "--name-status", "-z", "-M", from_ref, to_ref, "--"]).stdout
        tokens = _split_z(out)

        entries: list[tuple[ChangeStatus, str, str]] = []
        idx = 0
        while idx < len(tokens):
            code = tokens[idx]
            idx += 1
            status = _STATUS_LETTERS.get(code[:1])
            if code[:1] in ("R", "C"):
                old_path, new_path = tokens[idx], tokens[idx + 1]
                idx += 2
            else:
                old_path = new_path = tokens[idx]
                idx += 1
            if status is None:
                logger.debug("Skipping git status %s for %s", code, new_path)
                continue
            if code[:1] == "C":
                old_path = ""
            entries.append((status, new_path, old_path))

        specs: list[str] = []
        for status, new_path, old_path in entries:
            specs.append(f"{to_ref}:{new_path}" if status is not ChangeStatus.DELETED else "")
            specs.append(f"{from_ref}:{old_path}" if status is not ChangeStatus.ADDED and old_path else "")
        wanted = [spec for spec in specs if spec]
        blobs = iter(self.read_blobs(wanted))
        contents = [next(blobs) if spec else None for spec in specs]

        changes: list[FileChange] = []
        for index, (status, new_path, old_path) in enumerate(entries):
            new_content = contents[index * 2] or b""
            old_content = contents[index * 2 + 1] or b""
            changes.append(
                FileChange(
                    path=new_path,
                    status=status,
                    content=new_content,
                    old_path=old_path if status is ChangeStatus.RENAMED else "",
                    old_content=old_content,
                )
            )
        return changes

    def changes(self, from_ref: str | None = None, to_ref: str | None = None) -> list[FileChange]:
        """Compare refs when both are given, otherwise snapshot ``HEAD``."""
        if from_ref and to_ref:
            return self.compare(from_ref, to_ref)
        return self.head_files()


@contextmanager
def clone_remote(url: str, branch: str | None = None) -> Iterator[GitRepository]:
    """Shallow-clone ``url`` into a temporary directory removed on exit."""
    with tempfile.TemporaryDirectory(prefix="diffdeck-") as tmp:
        args = ["clone", "--quiet", "--depth", "1", "--single-branch"]
        if branch:
            args.extend(["--branch", branch])
        args.extend([url, "repo"])
        logger.info("Cloning %s", url)
        _run_git(Path(tmp), args)
        yield GitRepository(Path(tmp) / "repo")


__all__ = [
    "ChangeStatus",
    "FileChange",
    "GitRepository",
    "clone_remote",
]
