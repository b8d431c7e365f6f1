"""Reconstruct each entry's ancestor path from indentation alone."""

from __future__ import annotations

import logging

from dirmirror.core.errors import IndentJumpError, MissingRootError, OrphanChildError
from dirmirror.models.entry import DirectoryEntry, Entry

log = logging.getLogger(__name__)


class PathStackTracker:
    """Tracks the chain of directory names above the line being replayed.

    Lines are fed in two steps. ``advance()`` validates a line's indent
    against the previous line and unwinds the stack; ``place()`` then
    records the decoded entry (or ``None`` for a skipped line) and returns
    the ancestors to reconcile it under.

    After every ``place()`` of a non-root entry at indent ``i``,
    ``ancestors[:i]`` is the root name followed by every directory
    strictly between the root and that entry.
    """

    def __init__(self) -> None:
        self.current_depth = 0
        self.was_previous_dir = False
        self.ancestors: list[str] = []

    @property
    def root(self) -> str | None:
        """Root name recorded by the most recent indent-0 line."""
        return self.ancestors[0] if self.ancestors else None

    def advance(self, indent: int, line_no: int, line: str) -> None:
        """Check that a line at ``indent`` may follow the previous one.

        Nothing is changed here; ``place()`` unwinds the stack.

        Raises:
            OrphanChildError: the indent grows by one but the previous
                line was not a directory.
            IndentJumpError: the indent grows by more than one.
        """
        depth = self.current_depth
        if indent == depth + 1:
            if not self.was_previous_dir:
                raise OrphanChildError(line_no, line)
        elif indent > depth + 1:
            raise IndentJumpError(line_no, line, f"indent {indent} after {depth}")

    def place(self, indent: int, entry: Entry | None, line_no: int = 0, line: str = "") -> list[str] | None:
        """Record the entry at ``indent`` and return its ancestors.

        Returns ``None`` for root lines and skipped lines, which are not
        reconciled. A skipped line at indent 0 below a seeded root leaves
        the tracker untouched.

        Raises:
            MissingRootError: an indent-0 record is not a directory, or
                the first record is skipped.
        """
        if entry is None and indent == 0 and self.ancestors:
            log.debug("Skipped top-level line %d kept root %s", line_no, self.ancestors[0])
            return None

        # Close every directory that is not an ancestor of this line,
        # including a directory pushed by the previous line when this
        # line is not its child.
        del self.ancestors[indent:]
        self.current_depth = indent
        self.was_previous_dir = isinstance(entry, DirectoryEntry)

        if indent == 0:
            if not isinstance(entry, DirectoryEntry):
                raise MissingRootError(line_no, line)
            self.ancestors = [entry.name]
            log.debug("Root seeded: %s", entry.name)
            return None

        if entry is None:
            return None

        parents = list(self.ancestors)
        if isinstance(entry, DirectoryEntry):
            self.ancestors.append(entry.name)
        return parents
