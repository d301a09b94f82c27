"""Gitignore rules for the ignore set.

Reads ``.gitignore`` files at scan roots. Lines are kept verbatim and matched
by ``pathspec.GitIgnoreSpec``, so root anchoring of ``a/b`` entries,
directory-only ``dir/`` entries, and ``!`` re-includes behave as in git.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

GITIGNORE_FILENAME = ".gitignore"


def load_gitignore_lines(root: Path) -> list[str]:
    """Return the meaningful lines of ``root/.gitignore``.

    Blank lines and comments are dropped. A missing file, or a root that is
    not a directory, yields no lines.
    """
    path = root / GITIGNORE_FILENAME
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except (FileNotFoundError, NotADirectoryError):
        return []

    lines = [line for line in text.splitlines() if line.strip() and not line.startswith("#")]
    logger.debug("Loaded %d gitignore lines from %s", len(lines), path)
    return lines


def collect_gitignore_lines(roots: Iterable[Path]) -> list[str]:
    """Concatenate gitignore lines for all ``roots`` in root order.

    Order is preserved because later lines (including ``!`` entries)
    override earlier ones.
    """
    lines: list[str] = []
    for root in roots:
        lines.extend(load_gitignore_lines(root))
    return lines


__all__ = [
    "GITIGNORE_FILENAME",
    "collect_gitignore_lines",
    "load_gitignore_lines",
]
