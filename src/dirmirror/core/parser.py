"""Decode single record lines of a tree listing."""

from __future__ import annotations

import re

from dirmirror.core.errors import MalformedLineError, SkippedLineError
from dirmirror.models.entry import (
    DIR_TAG,
    FILE_TAG,
    LEGACY_UNKNOWN_TAG,
    MAX_SIZE,
    MODE_MASK,
    UNKNOWN_TAG,
    DirectoryEntry,
    Entry,
    FileEntry,
)

_OCTAL_RE = re.compile(r"[0-7]+")
_DECIMAL_RE = re.compile(r"[0-9]+")


def strip_newline(line: str) -> str:
    """Drop a trailing LF or CRLF."""
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def measure_indent(line: str) -> int:
    """Count the leading tab characters of ``line``."""
    return len(line) - len(line.lstrip("\t"))


def parse_line(line: str, indent: int, line_no: int = 0) -> Entry:
    """Decode a record line whose indent has already been measured.

    Raises:
        MalformedLineError: a DIR or FIL record is missing fields or has
            an unparseable number. Replay must stop.
        SkippedLineError: the tag is the unknown-entry tag or is not
            recognised at all. The line is skipped.
    """
    line = strip_newline(line)
    tag, *fields = line[indent:].split("\t")

    if tag == DIR_TAG:
        name, mode = _expect(fields, ("filename", "mode"), line, line_no)
        return DirectoryEntry(name=name, mode=_parse_mode(mode, line, line_no))
    if tag == FILE_TAG:
        name, mode, size = _expect(fields, ("filename", "mode", "len"), line, line_no)
        return FileEntry(
            name=name,
            mode=_parse_mode(mode, line, line_no),
            size=_parse_size(size, line, line_no),
        )
    raise SkippedLineError(line_no, line, unknown=tag in (UNKNOWN_TAG, LEGACY_UNKNOWN_TAG))


def _expect(fields: list[str], names: tuple[str, ...], line: str, line_no: int) -> list[str]:
    if len(fields) < len(names):
        raise MalformedLineError(line_no, line, f"MISSING {names[len(fields)]}")
    if len(fields) > len(names):
        raise MalformedLineError(line_no, line, f"{len(fields) - len(names)} unexpected field(s)")
    if not fields[0]:
        raise MalformedLineError(line_no, line, "EMPTY filename")
    return fields


def _parse_mode(text: str, line: str, line_no: int) -> int:
    if not _OCTAL_RE.fullmatch(text):
        raise MalformedLineError(line_no, line, f"INVALID mode {text!r}")
    mode = int(text, 8)
    if mode > MODE_MASK:
        raise MalformedLineError(line_no, line, f"mode {text} exceeds permission bits")
    return mode


def _parse_size(text: str, line: str, line_no: int) -> int:
    if not _DECIMAL_RE.fullmatch(text):
        raise MalformedLineError(line_no, line, f"INVALID len {text!r}")
    size = int(text)
    if size > MAX_SIZE:
        raise MalformedLineError(line_no, line, f"len {text} does not fit 64 bits")
    return size
