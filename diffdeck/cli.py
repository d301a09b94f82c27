"""Command-line front door for diffdeck.

Parses CLI options, loads configuration, and applies overrides. Then scans
local paths or a git repository and writes the plain-text report.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

import pyperclip

from . import __version__
from .config import Config, OutputStyle, load_config
from .errors import ConfigError, DiffdeckError
from .file_tree_model import FileRecord
from .formatter import FormatOptions, resolve_formatter
from .git_history import GitRepository, clone_remote
from .patterns import parse_pattern_list
from .scanner import Scanner
from .security import SecurityChecker, create_report

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _non_negative_int(value: str) -> int:
    """argparse type for integer values that may be zero."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diffdeck",
        description="Pack a directory tree or git history into one plain-text document.",
    )
    parser.add_argument("paths", nargs="*", help="Directories or files to scan. Defaults to current directory.")
    parser.add_argument("-c", "--config", default=None, help="Path to a diffdeck.config.json file.")
    parser.add_argument("-o", "--output", default=None, help="Output file path.")
    parser.add_argument("--stdout", action="store_true", help="Write the report to stdout instead of a file.")
    parser.add_argument("--copy", action="store_true", help="Also copy the report to the clipboard.")
    parser.add_argument(
        "--style",
        default=None,
        help=f"Output style ({', '.join(style.value for style in OutputStyle)}).",
    )
    parser.add_argument("--include", default=None, help="Comma-separated include patterns.")
    parser.add_argument("-i", "--ignore", default=None, help="Comma-separated additional ignore patterns.")
    parser.add_argument("--case-insensitive", action="store_true", help="Match patterns case-insensitively.")
    parser.add_argument(
        "--max-file-size",
        type=_non_negative_int,
        default=None,
        help="Files larger than this many bytes are listed without content.",
    )
    parser.add_argument("--workers", type=_positive_int, default=None, help="Concurrent file readers.")
    parser.add_argument("--remote", default=None, help="Clone and scan a remote git repository URL.")
    parser.add_argument("--remote-branch", default=None, help="Branch to clone with --remote.")
    parser.add_argument("--from-ref", default=None, help="Base git ref for a diff scan.")
    parser.add_argument("--to-ref", default=None, help="Target git ref for a diff scan.")
    parser.add_argument(
        "--top-files-len",
        type=_non_negative_int,
        default=None,
        help="Number of largest files listed in the summary.",
    )
    parser.add_argument(
        "--output-show-line-numbers",
        action="store_true",
        help="Prefix file content lines with line numbers.",
    )
    parser.add_argument("--no-security-check", action="store_true", help="Skip the secret scan.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool) -> None:
    """Attach one stderr handler to the package logger."""
    package_logger = logging.getLogger("diffdeck")
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return a new ``Config`` with command-line values layered on top."""
    output = config.output
    if args.output is not None:
        output = replace(output, file_path=args.output)
    if args.style is not None:
        output = replace(output, style=OutputStyle.parse(args.style))
    if args.top_files_len is not None:
        output = replace(output, top_files_length=args.top_files_len)
    if args.output_show_line_numbers:
        output = replace(output, show_line_numbers=True)
    if args.copy:
        output = replace(output, copy_to_clipboard=True)

    include = config.include
    if args.include is not None:
        include = tuple(parse_pattern_list(args.include))

    ignore = config.ignore
    if args.ignore is not None:
        ignore = replace(ignore, custom_patterns=ignore.custom_patterns + tuple(parse_pattern_list(args.ignore)))

    scan = config.scan
    if args.case_insensitive:
        scan = replace(scan, case_sensitive=False)
    if args.max_file_size is not None:
        scan = replace(scan, max_file_size=args.max_file_size)
    if args.workers is not None:
        scan = replace(scan, workers=args.workers)

    security = config.security
    if args.no_security_check:
        security = replace(security, enable_security_check=False)

    return replace(config, output=output, include=include, ignore=ignore, scan=scan, security=security)


def _scan_repository(repo: GitRepository, config: Config, args: argparse.Namespace) -> list[FileRecord]:
    scanner = Scanner(config.scan_config([repo.root]))
    return scanner.scan_changes(repo.changes(args.from_ref, args.to_ref))


def collect_records(config: Config, args: argparse.Namespace) -> list[FileRecord]:
    """Scan local paths, a local repository diff, or a cloned remote."""
    if bool(args.from_ref) != bool(args.to_ref):
        raise ConfigError("--from-ref and --to-ref must be given together")

    if args.remote:
        with clone_remote(args.remote, args.remote_branch) as repo:
            return _scan_repository(repo, config, args)

    roots = [Path(path) for path in args.paths] or [Path(".")]
    if args.from_ref:
        return _scan_repository(GitRepository(roots[0]), config, args)

    report = Scanner(config.scan_config(roots)).scan_report(roots)
    if report.errors:
        logger.warning("%d entries could not be read", len(report.errors))
    return report.records


def _read_instructions(config: Config) -> str:
    path_text = config.output.instruction_file_path
    if not path_text:
        return ""
    try:
        return Path(path_text).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read instruction file {path_text}: {exc}") from exc


def copy_to_clipboard(report: str) -> None:
    try:
        pyperclip.copy(report)
    except pyperclip.PyperclipException as exc:
        raise DiffdeckError(f"failed to copy to clipboard: {exc}") from exc
    logger.debug("Copied %d characters to the clipboard", len(report))


def run(args: argparse.Namespace) -> None:
    config = apply_overrides(load_config(Path(args.config) if args.config else None), args)
    records = collect_records(config, args)

    if config.security.enable_security_check:
        findings = SecurityChecker().check(records)
        if findings:
            sys.stderr.write(create_report(findings))

    options = FormatOptions.from_output_config(config.output, _read_instructions(config))
    report = resolve_formatter(config.output.style).format(records, options)

    if args.stdout:
        sys.stdout.write(report)
    else:
        output_path = Path(config.output.file_path)
        try:
            output_path.write_text(report, encoding="utf-8")
        except OSError as exc:
            raise DiffdeckError(f"failed to write {output_path}: {exc}") from exc
        file_count = sum(1 for record in records if not record.is_dir)
        print(f"Packed {file_count} files into {output_path}")

    if config.output.copy_to_clipboard:
        copy_to_clipboard(report)


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and run one scan.

    ``argv`` is primarily for tests; when omitted ``sys.argv`` is used.
    Fatal errors exit with an ``Error: ...`` message.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        run(args)
    except DiffdeckError as exc:
        raise SystemExit(f"Error: {exc}") from exc
