"""Result dataclasses for the collect and replay pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dirmirror.models.entry import DirectoryEntry


class Action(str, Enum):
    """What the reconciler did (or would do) for one entry."""

    CREATE_DIR = "create_dir"
    CHMOD_DIR = "chmod_dir"
    COPY_FILE = "copy_file"
    RECOPY_FILE = "recopy_file"
    CHMOD_FILE = "chmod_file"
    NONE = "none"


@dataclass(slots=True)
class ReconcileOutcome:
    """Decision taken for a single replayed entry."""

    kind: str
    src: Path
    dst: Path
    action: Action = Action.NONE
    error: str = ""
    bytes_copied: int = 0

    @property
    def failed(self) -> bool:
        return bool(self.error)


@dataclass(slots=True)
class CollectResult:
    """Result of scanning a source directory."""

    root: DirectoryEntry
    entries_visited: int = 0
    diagnostics: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ReplayResult:
    """Aggregated result of replaying a listing onto a destination."""

    dst_root: Path
    dry_run: bool = False
    counts: dict[Action, int] = field(default_factory=lambda: {action: 0 for action in Action})
    bytes_copied: int = 0
    lines_read: int = 0
    skipped_lines: int = 0
    errors: list[str] = field(default_factory=list)
    elapsed: float = 0.0

    def record(self, outcome: ReconcileOutcome) -> None:
        """Fold one reconcile outcome into the totals."""
        if outcome.failed:
            self.errors.append(outcome.error)
            return
        self.counts[outcome.action] += 1
        self.bytes_copied += outcome.bytes_copied

    @property
    def changed(self) -> int:
        """Number of entries that needed a filesystem action."""
        return sum(n for action, n in self.counts.items() if action is not Action.NONE)
