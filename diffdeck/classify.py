"""Content classification: MIME sniffing, text detection, encoding, lines.

MIME sniffing looks at no more than ``SNIFF_LEN`` leading bytes and follows
the usual content-sniffing table (signatures, byte-order marks, then a
binary-byte scan). Encoding detection is statistical and best-effort.
"""

from __future__ import annotations

import codecs
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from pathlib import PurePosixPath

from charset_normalizer import from_bytes
from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

from .errors import EncodingDetectionError

SNIFF_LEN = 512
UNKNOWN_LANGUAGE = "Unknown"
TEXT_PLAIN_UTF8 = "text/plain; charset=utf-8"
OCTET_STREAM = "application/octet-stream"

DEFAULT_TEXTUAL_MIME_TYPES = frozenset(
    {
        "application/json",
        "application/xml",
        "application/javascript",
        "application/x-javascript",
        "application/ecmascript",
    }
)

_WHITESPACE = b"\t\n\x0c\r "

# Tags recognized after optional leading whitespace; must be followed by
# a space or ``>`` to count.
_HTML_TAGS = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

_EXACT_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", TEXT_PLAIN_UTF8),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"ID3", "audio/mpeg"),
    (b"OggS\x00", "application/ogg"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"\x1aE\xdf\xa3", "video/webm"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"\x00asm", "application/wasm"),
)

_BINARY_BYTES = frozenset(
    [*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)]
)


@dataclass(frozen=True)
class Classification:
    """MIME type plus whether the content counts as text."""

    mime_type: str
    is_text: bool


def _base_type(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()


def _match_html(sample: bytes) -> bool:
    for tag in _HTML_TAGS:
        if len(sample) < len(tag) + 1:
            continue
        if sample[: len(tag)].upper() != tag:
            continue
        terminator = sample[len(tag)]
        if terminator in (0x20, 0x3E):
            return True
    return False


def _match_riff(sample: bytes) -> str | None:
    if len(sample) < 12 or sample[:4] != b"RIFF":
        return None
    kind = sample[8:12]
    if kind == b"WAVE":
        return "audio/wave"
    if kind == b"AVI ":
        return "video/avi"
    if kind == b"WEBP" and sample[12:14] == b"VP":
        return "image/webp"
    return None


def _match_mp4(sample: bytes) -> bool:
    if len(sample) < 12 or sample[4:8] != b"ftyp":
        return False
    box_size = int.from_bytes(sample[:4], "big")
    if box_size % 4 != 0 or len(sample) < box_size:
        return False
    for offset in range(8, box_size, 4):
        if offset == 12:
            continue
        if sample[offset : offset + 3] == b"mp4":
            return True
    return False


def sniff_mime_type(data: bytes) -> str:
    """Return the MIME type of ``data`` from its first ``SNIFF_LEN`` bytes."""
    sample = bytes(data[:SNIFF_LEN])
    stripped = sample.lstrip(_WHITESPACE)
    if _match_html(stripped):
        return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    for signature, mime_type in _EXACT_SIGNATURES:
        if sample.startswith(signature):
            return mime_type

    riff = _match_riff(sample)
    if riff is not None:
        return riff
    if _match_mp4(sample):
        return "video/mp4"

    if any(byte in _BINARY_BYTES for byte in sample):
        return OCTET_STREAM
    return TEXT_PLAIN_UTF8


class FileClassifier:
    """Classify raw bytes as text or binary and derive text metadata.

    ``textual_mime_types`` lists the non-``text/`` MIME types that still count
    as text. It is explicit so callers can extend it.
    """

    def __init__(self, textual_mime_types: Iterable[str] = DEFAULT_TEXTUAL_MIME_TYPES) -> None:
        self.textual_mime_types = frozenset(_base_type(item) for item in textual_mime_types)

    def is_textual(self, mime_type: str) -> bool:
        base = _base_type(mime_type)
        return base.startswith("text/") or base in self.textual_mime_types

    def classify(self, data: bytes) -> Classification:
        mime_type = sniff_mime_type(data)
        return Classification(mime_type=mime_type, is_text=self.is_textual(mime_type))

    def detect_encoding(self, data: bytes) -> str:
        return detect_encoding(data)

    def count_lines(self, data: bytes | str) -> int:
        return count_lines(data)


def detect_encoding(data: bytes) -> str:
    """Detect the character encoding of ``data`` over its full content.

    Returns a normalized codec name such as ``utf-8`` or ``ascii``. Raises
    ``EncodingDetectionError`` when nothing plausible is found.
    """
    if not data:
        raise EncodingDetectionError("no content to analyze")
    best = from_bytes(bytes(data)).best()
    if best is None:
        raise EncodingDetectionError("no plausible encoding")
    try:
        return codecs.lookup(best.encoding).name
    except LookupError:
        return best.encoding


def count_lines(data: bytes | str) -> int:
    """Count lines: newlines plus one for an unterminated last line."""
    if not data:
        return 0
    newline = b"\n" if isinstance(data, (bytes, bytearray)) else "\n"
    count = data.count(newline)
    if not data.endswith(newline):
        count += 1
    return count


def decode_text(data: bytes, encoding: str = "") -> str:
    """Decode ``data`` using ``encoding`` with tolerant fallbacks.

    Attempts the detected encoding, then UTF-8, UTF-8 with BOM, latin-1; as a
    final fallback decodes with UTF-8 replacement semantics.
    """
    candidates = [encoding] if encoding else []
    candidates.extend(("utf-8", "utf-8-sig", "latin-1"))
    for candidate in candidates:
        try:
            return data.decode(candidate)
        except (UnicodeDecodeError, LookupError):
            continue
    return data.decode("utf-8", errors="replace")


@lru_cache(maxsize=1024)
def detect_language(path: str) -> str:
    """Return the Pygments language name for ``path`` or ``"Unknown"``."""
    name = PurePosixPath(path.replace("\\", "/")).name
    if not name:
        return UNKNOWN_LANGUAGE
    try:
        return get_lexer_for_filename(name).name
    except ClassNotFound:
        return UNKNOWN_LANGUAGE


__all__ = [
    "Classification",
    "DEFAULT_TEXTUAL_MIME_TYPES",
    "FileClassifier",
    "OCTET_STREAM",
    "SNIFF_LEN",
    "TEXT_PLAIN_UTF8",
    "UNKNOWN_LANGUAGE",
    "count_lines",
    "decode_text",
    "detect_encoding",
    "detect_language",
    "sniff_mime_type",
]
