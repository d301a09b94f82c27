"""Plain-text report rendering for a scanned file set.

The output style is resolved once into a formatter strategy. Records are
consumed read-only; content transforms run on copies of the text.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .config import OutputConfig, OutputStyle
from .content import transform_content
from .file_tree_model import FileRecord, build_directory_tree, iter_tree

SECTION_RULE = "=" * 64
FILE_RULE = "=" * 16
REPORT_PREAMBLE = (
    "This file is a merged representation of the entire codebase, "
    "combining all repository files into a single document."
)


@dataclass(frozen=True)
class FormatOptions:
    header_text: str = ""
    instruction_text: str = ""
    file_summary: bool = True
    directory_structure: bool = True
    remove_comments: bool = False
    remove_empty_lines: bool = False
    show_line_numbers: bool = False
    top_files_length: int = 5

    @classmethod
    def from_output_config(cls, output: OutputConfig, instruction_text: str = "") -> FormatOptions:
        return cls(
            header_text=output.header_text,
            instruction_text=instruction_text,
            file_summary=output.file_summary,
            directory_structure=output.directory_structure,
            remove_comments=output.remove_comments,
            remove_empty_lines=output.remove_empty_lines,
            show_line_numbers=output.show_line_numbers,
            top_files_length=output.top_files_length,
        )


def _flatten(records: Sequence[FileRecord]) -> list[FileRecord]:
    """Accept either flat or tree-form records; return them flat, path-sorted."""
    flat = [record for _depth, record in iter_tree(records)]
    flat.sort(key=lambda record: record.path)
    return flat


def _format_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def file_summary(records: Sequence[FileRecord], top_files_length: int) -> str:
    """Counts, total size, and the largest files."""
    files = [record for record in records if not record.is_dir]
    total_size = sum(record.size for record in files)
    text_files = sum(1 for record in files if record.is_text)
    lines = [
        f"Total files: {len(files)}",
        f"Text files: {text_files}",
        f"Total size: {_format_size(total_size)}",
    ]
    if top_files_length > 0 and files:
        largest = sorted(files, key=lambda record: (-record.size, record.path))[:top_files_length]
        lines.append("")
        lines.append(f"Top {len(largest)} files by size:")
        for rank, record in enumerate(largest, start=1):
            lines.append(f"{rank}. {record.path} ({_format_size(record.size)})")
    return "\n".join(lines)


def directory_structure(records: Sequence[FileRecord]) -> str:
    """Indented tree, two spaces per level, directories suffixed with ``/``."""
    lines: list[str] = []
    for depth, record in iter_tree(build_directory_tree(records)):
        suffix = "/" if record.is_dir else ""
        lines.append(f"{'  ' * depth}{record.name}{suffix}")
    return "\n".join(lines)


def _file_body(record: FileRecord, options: FormatOptions) -> str:
    if record.change_status == "deleted":
        return "[file deleted]"
    if record.is_metadata_only:
        return f"[content not read: {record.size} bytes]"
    if record.content_read and not record.is_text:
        return "[binary file]"
    content = record.content
    if isinstance(content, bytes):
        content = content.decode(record.encoding or "utf-8", errors="replace")
    return transform_content(
        content,
        record.path,
        strip_comments=options.remove_comments,
        drop_empty_lines=options.remove_empty_lines,
        line_numbers=options.show_line_numbers,
    )


class PlainFormatter:
    """Sections: header, summary, directory structure, files, instructions."""

    def format(self, records: Sequence[FileRecord], options: FormatOptions) -> str:
        flat = _flatten(records)
        out: list[str] = [REPORT_PREAMBLE, ""]
        if options.header_text:
            out.extend([options.header_text, ""])

        if options.file_summary:
            out.extend([SECTION_RULE, "File Summary", SECTION_RULE])
            out.extend([file_summary(flat, options.top_files_length), ""])

        if options.directory_structure:
            out.extend([SECTION_RULE, "Directory Structure", SECTION_RULE])
            out.extend([directory_structure(flat), ""])

        out.extend([SECTION_RULE, "Files", SECTION_RULE, ""])
        for record in flat:
            if record.is_dir:
                continue
            out.extend([FILE_RULE, f"File: {record.path}"])
            if record.change_status:
                out.append(f"Status: {record.change_status}")
            if record.old_path:
                out.append(f"Old path: {record.old_path}")
            out.append(FILE_RULE)
            out.extend([_file_body(record, options), ""])

        if options.instruction_text:
            out.extend([SECTION_RULE, "Instructions", SECTION_RULE, options.instruction_text])
        return "\n".join(out).rstrip("\n") + "\n"


_FORMATTERS: dict[OutputStyle, type[PlainFormatter]] = {
    OutputStyle.PLAIN: PlainFormatter,
}


def resolve_formatter(style: OutputStyle) -> PlainFormatter:
    """Return the formatter strategy for ``style``."""
    return _FORMATTERS[style]()


__all__ = [
    "FormatOptions",
    "PlainFormatter",
    "directory_structure",
    "file_summary",
    "resolve_formatter",
]
