"""Immutable configuration objects plus JSON loading and validation.

Configuration is read once, validated, and passed explicitly into scans;
overrides produce new objects via ``dataclasses.replace``. Files use the
camelCase JSON layout of ``diffdeck.config.json``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from platformdirs import user_config_dir

from .errors import ConfigError
from .gitignore import collect_gitignore_lines
from .patterns import PatternSet

logger = logging.getLogger(__name__)

APP_NAME = "diffdeck"
CONFIG_FILENAME = "diffdeck.config.json"
USER_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / "config.json"

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_WORKERS = 10
DEFAULT_OUTPUT_PATH = "diffdeck-output.txt"
DEFAULT_TOP_FILES_LENGTH = 5
DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    ".git/**",
    "node_modules/**",
    "*.log",
    "*.tmp",
    "*.temp",
    ".DS_Store",
    "Thumbs.db",
)


class OutputStyle(str, Enum):
    """Report output styles; resolved once into a formatter strategy."""

    PLAIN = "plain"

    @classmethod
    def parse(cls, value: str) -> OutputStyle:
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            choices = ", ".join(item.value for item in cls)
            raise ConfigError(f"invalid output style {value!r}: must be one of {choices}") from exc


def _pattern_tuple(value: object, name: str) -> tuple[str, ...]:
    if value is None or isinstance(value, (str, bytes)):
        raise ConfigError(f"{name} must be a list of patterns")
    try:
        patterns = tuple(value)  # type: ignore[arg-type]
    except TypeError as exc:
        raise ConfigError(f"{name} must be a list of patterns") from exc
    for pattern in patterns:
        if not isinstance(pattern, str):
            raise ConfigError(f"{name} entries must be strings, got {pattern!r}")
    return patterns


@dataclass(frozen=True)
class ScanConfig:
    """Validated inputs for one scan.

    ``ignore`` defaults to ``DEFAULT_IGNORE_PATTERNS``; an empty ``include``
    admits every path that is not ignored.
    ``gitignore`` carries raw ``.gitignore`` lines matched with git rules.
    """

    include: tuple[str, ...] = ()
    ignore: tuple[str, ...] = DEFAULT_IGNORE_PATTERNS
    case_sensitive: bool = True
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    workers: int = DEFAULT_WORKERS
    raw_content: bool = False
    directory_tree: bool = False
    normalize_patterns: bool = True
    gitignore: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "include", _pattern_tuple(self.include, "include"))
        object.__setattr__(self, "ignore", _pattern_tuple(self.ignore, "ignore"))
        object.__setattr__(self, "gitignore", _pattern_tuple(self.gitignore, "gitignore"))
        if isinstance(self.max_file_size, bool) or not isinstance(self.max_file_size, int):
            raise ConfigError(f"max_file_size must be an integer, got {self.max_file_size!r}")
        if self.max_file_size < 0:
            raise ConfigError("max_file_size must be non-negative")
        if isinstance(self.workers, bool) or not isinstance(self.workers, int) or self.workers < 1:
            raise ConfigError(f"workers must be a positive integer, got {self.workers!r}")

    def pattern_set(self) -> PatternSet:
        return PatternSet.build(
            self.include,
            self.ignore,
            case_sensitive=self.case_sensitive,
            normalize=self.normalize_patterns,
            gitignore=self.gitignore,
        )


@dataclass(frozen=True)
class OutputConfig:
    file_path: str = DEFAULT_OUTPUT_PATH
    style: OutputStyle = OutputStyle.PLAIN
    header_text: str = ""
    instruction_file_path: str = ""
    file_summary: bool = True
    directory_structure: bool = True
    remove_comments: bool = False
    remove_empty_lines: bool = False
    show_line_numbers: bool = False
    top_files_length: int = DEFAULT_TOP_FILES_LENGTH
    copy_to_clipboard: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.style, OutputStyle):
            object.__setattr__(self, "style", OutputStyle.parse(str(self.style)))
        if self.top_files_length < 0:
            raise ConfigError("topFilesLength must be non-negative")


@dataclass(frozen=True)
class IgnoreConfig:
    use_gitignore: bool = True
    use_default_patterns: bool = True
    custom_patterns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "custom_patterns", _pattern_tuple(self.custom_patterns, "customPatterns"))


@dataclass(frozen=True)
class SecurityConfig:
    enable_security_check: bool = True


@dataclass(frozen=True)
class ScanOptions:
    case_sensitive: bool = True
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    workers: int = DEFAULT_WORKERS

    def __post_init__(self) -> None:
        if self.max_file_size < 0:
            raise ConfigError("scan.maxFileSize must be non-negative")
        if self.workers < 1:
            raise ConfigError("scan.workers must be at least 1")


@dataclass(frozen=True)
class Config:
    """Whole-tool configuration; ``scan_config`` derives the scan inputs."""

    output: OutputConfig = field(default_factory=OutputConfig)
    include: tuple[str, ...] = ()
    ignore: IgnoreConfig = field(default_factory=IgnoreConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    scan: ScanOptions = field(default_factory=ScanOptions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "include", _pattern_tuple(self.include, "include"))

    def ignore_patterns(self) -> list[str]:
        """Defaults (when enabled), then custom patterns."""
        patterns: list[str] = []
        if self.ignore.use_default_patterns:
            patterns.extend(DEFAULT_IGNORE_PATTERNS)
        patterns.extend(self.ignore.custom_patterns)
        return patterns

    def gitignore_lines(self, roots: Iterable[Path] = ()) -> list[str]:
        """``.gitignore`` rules of every directory root, when enabled."""
        if not self.ignore.use_gitignore:
            return []
        dir_roots = [Path(root) for root in roots if Path(root).is_dir()]
        try:
            return collect_gitignore_lines(dir_roots)
        except OSError as exc:
            raise ConfigError(f"failed to read .gitignore: {exc}") from exc

    def scan_config(self, roots: Iterable[Path] = (), *, directory_tree: bool = False) -> ScanConfig:
        return ScanConfig(
            include=self.include,
            ignore=tuple(self.ignore_patterns()),
            gitignore=tuple(self.gitignore_lines(roots)),
            case_sensitive=self.scan.case_sensitive,
            max_file_size=self.scan.max_file_size,
            workers=self.scan.workers,
            directory_tree=directory_tree,
        )


_OUTPUT_KEYS: dict[str, tuple[str, type]] = {
    "filePath": ("file_path", str),
    "style": ("style", str),
    "headerText": ("header_text", str),
    "instructionFilePath": ("instruction_file_path", str),
    "fileSummary": ("file_summary", bool),
    "directoryStructure": ("directory_structure", bool),
    "removeComments": ("remove_comments", bool),
    "removeEmptyLines": ("remove_empty_lines", bool),
    "showLineNumbers": ("show_line_numbers", bool),
    "topFilesLength": ("top_files_length", int),
    "copyToClipboard": ("copy_to_clipboard", bool),
}
_IGNORE_KEYS: dict[str, tuple[str, type]] = {
    "useGitignore": ("use_gitignore", bool),
    "useDefaultPatterns": ("use_default_patterns", bool),
    "customPatterns": ("custom_patterns", list),
}
_SECURITY_KEYS: dict[str, tuple[str, type]] = {
    "enableSecurityCheck": ("enable_security_check", bool),
}
_SCAN_KEYS: dict[str, tuple[str, type]] = {
    "caseSensitive": ("case_sensitive", bool),
    "maxFileSize": ("max_file_size", int),
    "workers": ("workers", int),
}


def _coerce(value: object, expected: type, name: str) -> object:
    """Type-check one JSON scalar; booleans are never accepted as integers."""
    if expected is bool:
        if not isinstance(value, bool):
            raise ConfigError(f"{name} must be a boolean")
        return value
    if expected is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{name} must be an integer")
        return value
    if expected is str:
        if not isinstance(value, str):
            raise ConfigError(f"{name} must be a string")
        return value
    if not isinstance(value, list):
        raise ConfigError(f"{name} must be a list")
    return _pattern_tuple(value, name)


def _parse_section(raw: object, keys: Mapping[str, tuple[str, type]], section: str) -> dict[str, object]:
    if not isinstance(raw, dict):
        raise ConfigError(f"{section} must be a JSON object")
    values: dict[str, object] = {}
    for json_key, value in raw.items():
        mapping = keys.get(json_key)
        if mapping is None:
            logger.debug("Ignoring unknown config key %s.%s", section, json_key)
            continue
        field_name, expected = mapping
        values[field_name] = _coerce(value, expected, f"{section}.{json_key}")
    return values


def config_from_dict(data: object) -> Config:
    """Build a validated ``Config`` from decoded JSON."""
    if not isinstance(data, dict):
        raise ConfigError("config must be a JSON object")

    include: tuple[str, ...] = ()
    if "include" in data:
        include = _pattern_tuple(data["include"], "include")

    return Config(
        output=OutputConfig(**_parse_section(data.get("output", {}), _OUTPUT_KEYS, "output")),
        include=include,
        ignore=IgnoreConfig(**_parse_section(data.get("ignore", {}), _IGNORE_KEYS, "ignore")),
        security=SecurityConfig(**_parse_section(data.get("security", {}), _SECURITY_KEYS, "security")),
        scan=ScanOptions(**_parse_section(data.get("scan", {}), _SCAN_KEYS, "scan")),
    )


def resolve_config_path(path: Path | None = None) -> Path | None:
    """Pick the config file: explicit path, local file, then user config dir."""
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"config file not found: {path}")
        return path
    local = Path.cwd() / CONFIG_FILENAME
    if local.is_file():
        return local
    if USER_CONFIG_PATH.is_file():
        return USER_CONFIG_PATH
    return None


def load_config(path: Path | None = None) -> Config:
    """Load and validate configuration, falling back to defaults.

    A missing file yields defaults. An unreadable or malformed file raises
    ``ConfigError``.
    """
    config_path = resolve_config_path(path)
    if config_path is None:
        return Config()
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"failed to read config {config_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"malformed config {config_path}: {exc}") from exc
    logger.debug("Loaded config from %s", config_path)
    return config_from_dict(data)


__all__ = [
    "APP_NAME",
    "CONFIG_FILENAME",
    "Config",
    "DEFAULT_IGNORE_PATTERNS",
    "DEFAULT_MAX_FILE_SIZE",
    "DEFAULT_WORKERS",
    "IgnoreConfig",
    "OutputConfig",
    "OutputStyle",
    "ScanConfig",
    "ScanOptions",
    "SecurityConfig",
    "config_from_dict",
    "load_config",
    "resolve_config_path",
]
