"""Entry dataclasses for scanned directory trees."""

from __future__ import annotations

from dataclasses import dataclass

DIR_TAG = "DIR"
FILE_TAG = "FIL"
UNKNOWN_TAG = "UNK"
LEGACY_UNKNOWN_TAG = "UKN"

MODE_MASK = 0o7777
MAX_SIZE = 2**64 - 1


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """A directory and its children in listing order.

    The scanned root is the one directory whose ``name`` is a full path
    rather than a bare filename; its ``mode`` is the ``0`` sentinel.
    """

    name: str
    mode: int
    children: tuple[Entry, ...] = ()


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A regular file."""

    name: str
    mode: int
    size: int


@dataclass(frozen=True, slots=True)
class UnknownEntry:
    """Anything the scanner could not classify or read. Never replayed."""

    description: str


Entry = DirectoryEntry | FileEntry | UnknownEntry


def is_valid_name(name: str) -> bool:
    """Whether ``name`` can be written as a single field of a record line."""
    return bool(name) and "\t" not in name and "\n" not in name and "\r" not in name
