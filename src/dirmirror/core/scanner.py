"""Recursive directory scanner producing an Entry tree."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Callable

from dirmirror.models.entry import DirectoryEntry, Entry, FileEntry, UnknownEntry, is_valid_name
from dirmirror.settings import DEFAULT_MAX_DEPTH

log = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]  # (entries_seen,)


class ProgressCounter:
    """Counts visited entries and forwards the running total to a callback."""

    def __init__(self, on_progress: ProgressCallback | None = None) -> None:
        self.count = 0
        self._on_progress = on_progress

    def tick(self) -> None:
        self.count += 1
        if self._on_progress:
            self._on_progress(self.count)


class DirectoryScanner:
    """Builds an Entry tree for a directory, one recursion level per subdirectory.

    Nothing raised by the filesystem escapes ``scan()``: unreadable
    entries become ``UnknownEntry`` children and directories deeper than
    ``max_depth`` are kept with no children. Every such event is logged
    and appended to ``diagnostics``.
    """

    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        counter: ProgressCounter | None = None,
    ) -> None:
        self.max_depth = max_depth
        self.counter = counter or ProgressCounter()
        self.diagnostics: list[str] = []

    def scan(self, root: Path | str) -> DirectoryEntry:
        """Scan ``root`` and return it as a directory named by its full input path.

        The root carries mode ``0``, a sentinel rather than its real
        permission bits.
        """
        children = self._list(Path(root), depth=0)
        return DirectoryEntry(name=str(root), mode=0, children=tuple(children))

    def _list(self, directory: Path, depth: int) -> list[Entry]:
        entries: list[Entry] = []
        try:
            with os.scandir(directory) as it:
                for item in it:
                    entries.append(self._classify(item, depth))
        except OSError as e:
            entries.append(self._unknown(f"Error collecting dir entries of {directory}: {e}"))
        return entries

    def _classify(self, item: os.DirEntry, depth: int) -> Entry:
        self.counter.tick()

        name = item.name
        try:
            name.encode("utf-8")
        except UnicodeEncodeError:
            return self._unknown(f"Unparseable filename: {name!r}")
        if not is_valid_name(name):
            return self._unknown(f"Unsupported filename: {name!r}")

        try:
            st = item.stat(follow_symlinks=False)
        except OSError as e:
            return self._unknown(f"Unrequestable metadata: {name} ({e})")

        mode = stat.S_IMODE(st.st_mode)
        if stat.S_ISDIR(st.st_mode):
            if depth < self.max_depth:
                children = self._list(Path(item.path), depth + 1)
            else:
                message = f"DIR {item.path} is too DEEP {depth}!"
                log.warning(message)
                self.diagnostics.append(message)
                children = []
            return DirectoryEntry(name=name, mode=mode, children=tuple(children))
        if stat.S_ISREG(st.st_mode):
            return FileEntry(name=name, mode=mode, size=st.st_size)
        if stat.S_ISLNK(st.st_mode):
            return self._unknown(f"Symlink: {name}")
        return self._unknown(f"Not a regular file or directory: {name}")

    def _unknown(self, description: str) -> UnknownEntry:
        log.warning(description)
        self.diagnostics.append(description)
        return UnknownEntry(description=description)
