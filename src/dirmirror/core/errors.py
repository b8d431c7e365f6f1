"""Exceptions raised while collecting or replaying a tree listing."""

from __future__ import annotations


class DirMirrorError(Exception):
    """Base class for dirmirror errors."""


class StreamStructureError(DirMirrorError):
    """The listing is structurally broken and replay cannot continue."""

    reason = "Bad input"

    def __init__(self, line_no: int, line: str, detail: str = "") -> None:
        self.line_no = line_no
        self.line = line
        self.detail = detail
        message = f"{self.reason} at line {line_no}"
        if detail:
            message += f" ({detail})"
        super().__init__(f"{message}! Quitting at:\n{line}")


class IndentJumpError(StreamStructureError):
    reason = "Indent moved TOO FAR from depth"


class OrphanChildError(StreamStructureError):
    reason = "Indent INCREASED when not following dir"


class MissingRootError(StreamStructureError):
    reason = "Top-level line is not a root DIR record"


class MalformedLineError(StreamStructureError):
    reason = "Malformed record"


class SkippedLineError(DirMirrorError):
    """A line that is reported and skipped without aborting the replay."""

    def __init__(self, line_no: int, line: str, *, unknown: bool) -> None:
        self.line_no = line_no
        self.line = line
        self.unknown = unknown
        label = "Unexpected UNKNOWN" if unknown else "UNRECOGNIZED line"
        super().__init__(f"{label} at line {line_no}:\n{line}")


class PathInvariantError(DirMirrorError):
    """Source and destination paths disagree on their relative layout.

    This means the ancestor stack is wrong; it is never caught.
    """
