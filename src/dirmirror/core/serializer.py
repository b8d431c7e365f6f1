"""Render an Entry tree as tab-indented record lines."""

from __future__ import annotations

from typing import Iterator, TextIO

from dirmirror.models.entry import (
    DIR_TAG,
    FILE_TAG,
    UNKNOWN_TAG,
    DirectoryEntry,
    Entry,
    FileEntry,
    UnknownEntry,
)
from dirmirror.utils import format_mode


def format_entry(entry: Entry, depth: int = 0) -> str:
    """Format a single entry as one record line, without its children."""
    indent = "\t" * depth
    match entry:
        case DirectoryEntry(name=name, mode=mode):
            return f"{indent}{DIR_TAG}\t{name}\t{format_mode(mode)}"
        case FileEntry(name=name, mode=mode, size=size):
            return f"{indent}{FILE_TAG}\t{name}\t{format_mode(mode)}\t{size}"
        case UnknownEntry(description=description):
            return f"{indent}{UNKNOWN_TAG}\t{_flatten(description)}"
    raise TypeError(f"Not an entry: {entry!r}")


def iter_lines(entry: Entry, depth: int = 0) -> Iterator[str]:
    """Yield the record lines for ``entry`` and, depth first, its descendants."""
    yield format_entry(entry, depth)
    if isinstance(entry, DirectoryEntry):
        for child in entry.children:
            yield from iter_lines(child, depth + 1)


def write_tree(root: DirectoryEntry, stream: TextIO) -> int:
    """Write the whole tree to ``stream``, one line per entry. Returns the line count."""
    count = 0
    for line in iter_lines(root):
        stream.write(line + "\n")
        count += 1
    return count


def _flatten(text: str) -> str:
    return text.replace("\t", " ").replace("\r", " ").replace("\n", " ")
