"""Include/ignore glob matching for scan candidates.

Patterns use git wildmatch syntax via ``pathspec``: ``**`` spans directories,
``*`` and ``?`` stay inside one path segment, ``[...]`` classes are supported,
and ``{a,b}`` alternatives are expanded before compiling. ``.gitignore`` lines
are kept as a separate ``GitIgnoreSpec`` so anchoring and ``!`` re-includes
follow git. Ignore patterns always win over include patterns.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

from pathspec import GitIgnoreSpec
from pathspec.patterns import GitWildMatchPattern
from pathspec.patterns.gitwildmatch import GitWildMatchPatternError

from .errors import PatternSetError, PatternSyntaxError

logger = logging.getLogger(__name__)

RECURSIVE_PREFIX = "**/"
RECURSIVE_SUFFIX = "/**"


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Return ``path`` with forward slashes and no leading ``./``."""
    text = os.fspath(path).replace("\\", "/")
    while text.startswith("./"):
        text = text[2:]
    return text


def parse_pattern_list(patterns: str | None) -> list[str]:
    """Split a comma-separated pattern list, dropping blanks."""
    if not patterns:
        return []
    return [part.strip() for part in patterns.split(",") if part.strip()]


def normalize_patterns(patterns: Iterable[str]) -> list[str]:
    """Make unanchored patterns match at any depth.

    Platform separators become ``/``. Patterns without a leading ``/`` or
    ``**/`` get a ``**/`` prefix, so ``src/*.go`` also matches
    ``a/src/main.go``. A leading ``/`` keeps the pattern anchored at the
    scan root.
    """
    normalized: list[str] = []
    for pattern in patterns:
        if os.sep != "/":
            pattern = pattern.replace(os.sep, "/")
        if not pattern.startswith("/") and not pattern.startswith(RECURSIVE_PREFIX):
            pattern = RECURSIVE_PREFIX + pattern
        normalized.append(pattern)
    return normalized


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives into plain patterns, left to right."""
    size = len(pattern)
    idx = 0
    while idx < size:
        ch = pattern[idx]
        if ch == "\\":
            idx += 2
            continue
        if ch == "{":
            break
        idx += 1
    else:
        return [pattern]

    start = idx
    depth = 0
    options: list[str] = []
    part_start = start + 1
    while idx < size:
        ch = pattern[idx]
        if ch == "\\":
            idx += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                options.append(pattern[part_start:idx])
                break
        elif ch == "," and depth == 1:
            options.append(pattern[part_start:idx])
            part_start = idx + 1
        idx += 1
    else:
        raise PatternSyntaxError(pattern, "unclosed '{'")

    prefix, suffix = pattern[:start], pattern[idx + 1 :]
    expanded: list[str] = []
    for option in options:
        expanded.extend(expand_braces(prefix + option + suffix))
    return expanded


@lru_cache(maxsize=1024)
def compile_glob(pattern: str) -> tuple[GitWildMatchPattern, ...]:
    """Compile ``pattern`` into wildmatch patterns, one per brace alternative.

    A trailing ``/**`` also matches the directory itself, so ``.git/**``
    prunes ``.git``. Raises ``PatternSyntaxError`` when malformed.
    """
    if pattern.startswith("!"):
        raise PatternSyntaxError(pattern, "negated patterns are only supported in .gitignore")
    sources: list[str] = []
    for expanded in expand_braces(pattern):
        sources.append(expanded)
        stem = expanded[: -len(RECURSIVE_SUFFIX)] if expanded.endswith(RECURSIVE_SUFFIX) else ""
        if stem.strip("/*"):
            sources.append(stem)

    compiled: list[GitWildMatchPattern] = []
    for source in sources:
        try:
            wildmatch = GitWildMatchPattern(source)
        except (GitWildMatchPatternError, re.error) as exc:
            raise PatternSyntaxError(pattern, str(exc)) from exc
        if wildmatch.include is not None:
            compiled.append(wildmatch)
    return tuple(compiled)


def _matches_any(patterns: Iterable[GitWildMatchPattern], candidate: str) -> bool:
    return any(wildmatch.match_file(candidate) is not None for wildmatch in patterns)


def glob_match(pattern: str, path: str) -> bool:
    """Return whether ``path`` matches ``pattern``."""
    return _matches_any(compile_glob(pattern), normalize_path(path))


def _pattern_tuple(value: object, field_name: str) -> tuple[str, ...]:
    if value is None or isinstance(value, (str, bytes)):
        raise PatternSetError(f"{field_name} must be a sequence of patterns, got {value!r}")
    try:
        patterns = tuple(value)  # type: ignore[arg-type]
    except TypeError as exc:
        raise PatternSetError(f"{field_name} must be a sequence of patterns") from exc
    for pattern in patterns:
        if not isinstance(pattern, str):
            raise PatternSetError(f"{field_name} pattern must be a string, got {pattern!r}")
    return patterns


@dataclass(frozen=True)
class PatternSet:
    """Ordered include/ignore glob lists plus case sensitivity.

    ``gitignore`` holds raw ``.gitignore`` lines, matched with git's own
    rules rather than as plain globs. Immutable once built; one instance is
    shared read-only by every worker of a scan.
    """

    include: tuple[str, ...] = ()
    ignore: tuple[str, ...] = ()
    case_sensitive: bool = True
    gitignore: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for field_name in ("include", "ignore", "gitignore"):
            object.__setattr__(self, field_name, _pattern_tuple(getattr(self, field_name), field_name))

    @classmethod
    def build(
        cls,
        include: Iterable[str] | None,
        ignore: Iterable[str] | None,
        *,
        case_sensitive: bool = True,
        normalize: bool = True,
        gitignore: Iterable[str] = (),
    ) -> PatternSet:
        """Build a pattern set, optionally running ``normalize_patterns``.

        Normalization applies to ``include`` and ``ignore`` only.
        """
        if include is None or ignore is None:
            raise PatternSetError("include and ignore pattern lists are required")
        if normalize:
            include = normalize_patterns(include)
            ignore = normalize_patterns(ignore)
        return cls(
            include=tuple(include),
            ignore=tuple(ignore),
            case_sensitive=case_sensitive,
            gitignore=tuple(gitignore),
        )


class PatternMatcher:
    """Evaluate candidate paths against one ``PatternSet``.

    Patterns are compiled up front. A malformed pattern is logged once and
    never matches; the remaining patterns are still evaluated.
    """

    def __init__(self, pattern_set: PatternSet) -> None:
        if not isinstance(pattern_set, PatternSet):
            raise PatternSetError(f"expected PatternSet, got {type(pattern_set).__name__}")
        self.pattern_set = pattern_set
        self._case_sensitive = pattern_set.case_sensitive
        self._has_include = bool(pattern_set.include)
        self._ignore = self._compile_all(pattern_set.ignore)
        self._include = self._compile_all(pattern_set.include)
        self._gitignore = self._compile_gitignore(pattern_set.gitignore)

    def _fold(self, text: str) -> str:
        return text if self._case_sensitive else text.lower()

    def _compile_all(self, patterns: tuple[str, ...]) -> tuple[GitWildMatchPattern, ...]:
        compiled: list[GitWildMatchPattern] = []
        for pattern in patterns:
            try:
                compiled.extend(compile_glob(self._fold(pattern)))
            except PatternSyntaxError as exc:
                logger.warning("Ignoring malformed pattern: %s", exc)
        return tuple(compiled)

    def _compile_gitignore(self, lines: tuple[str, ...]) -> GitIgnoreSpec | None:
        valid: list[str] = []
        for line in lines:
            line = self._fold(line)
            try:
                GitWildMatchPattern(line)
            except (GitWildMatchPatternError, re.error) as exc:
                logger.warning("Ignoring malformed .gitignore entry %r: %s", line, exc)
                continue
            valid.append(line)
        if not valid:
            return None
        return GitIgnoreSpec.from_lines(valid)

    def _prepare(self, path: str | os.PathLike[str]) -> str:
        return self._fold(normalize_path(path))

    def should_ignore(self, path: str | os.PathLike[str], *, is_dir: bool = False) -> bool:
        """Return whether an ignore pattern or ``.gitignore`` rule matches ``path``.

        ``is_dir`` lets directory-only ``.gitignore`` entries (``build/``)
        match the directory itself.
        """
        candidate = self._prepare(path)
        if _matches_any(self._ignore, candidate):
            return True
        if self._gitignore is None:
            return False
        return self._gitignore.match_file(candidate + "/" if is_dir else candidate)

    def matches_include(self, path: str | os.PathLike[str]) -> bool:
        """Return whether ``path`` passes the include list alone.

        An empty include list admits everything.
        """
        if not self._has_include:
            return True
        return _matches_any(self._include, self._prepare(path))

    def should_include(self, path: str | os.PathLike[str], *, is_dir: bool = False) -> bool:
        """Return whether ``path`` is admitted: not ignored and included."""
        if self.should_ignore(path, is_dir=is_dir):
            return False
        return self.matches_include(path)


__all__ = [
    "PatternMatcher",
    "PatternSet",
    "compile_glob",
    "expand_braces",
    "glob_match",
    "normalize_path",
    "normalize_patterns",
    "parse_pattern_list",
]
