"""Output-time content transforms: comment stripping, blank lines, numbering.

Only whole-line comments are removed; there is no language parser here.
"""

from __future__ import annotations

from pathlib import PurePosixPath

_SLASH_COMMENT_SUFFIXES = frozenset({".go", ".java", ".js", ".ts"})
_HASH_COMMENT_SUFFIXES = frozenset({".py"})
_MARKUP_COMMENT_SUFFIXES = frozenset({".html", ".xml"})


def remove_comments(content: str, path: str) -> str:
    """Drop whole-line comments for a handful of languages keyed by suffix."""
    suffix = PurePosixPath(path).suffix.lower()
    lines = content.split("\n")
    out: list[str] = []
    in_block = False

    for line in lines:
        trimmed = line.strip()
        if suffix in _SLASH_COMMENT_SUFFIXES:
            if in_block:
                if "*/" in trimmed:
                    in_block = False
                continue
            if trimmed.startswith("//"):
                continue
            if trimmed.startswith("/*"):
                in_block = "*/" not in trimmed[2:]
                continue
        elif suffix in _HASH_COMMENT_SUFFIXES:
            if trimmed.startswith("#"):
                continue
        elif suffix in _MARKUP_COMMENT_SUFFIXES:
            if trimmed.startswith("<!--") and trimmed.endswith("-->"):
                continue
        out.append(line)

    return "\n".join(out)


def remove_empty_lines(content: str) -> str:
    return "\n".join(line for line in content.split("\n") if line.strip())


def add_line_numbers(content: str) -> str:
    """Prefix each line with a right-aligned 1-based number and ``|``."""
    return "\n".join(f"{index:5d} | {line}" for index, line in enumerate(content.split("\n"), start=1))


def transform_content(
    content: str,
    path: str,
    *,
    strip_comments: bool = False,
    drop_empty_lines: bool = False,
    line_numbers: bool = False,
) -> str:
    """Apply the enabled transforms in a fixed order."""
    if strip_comments:
        content = remove_comments(content, path)
    if drop_empty_lines:
        content = remove_empty_lines(content)
    if line_numbers:
        content = add_line_numbers(content)
    return content


__all__ = [
    "add_line_numbers",
    "remove_comments",
    "remove_empty_lines",
    "transform_content",
]
