"""dirmirror data models."""

from dirmirror.models.entry import DirectoryEntry, Entry, FileEntry, UnknownEntry
from dirmirror.models.result import Action, CollectResult, ReconcileOutcome, ReplayResult

__all__ = [
    "Action",
    "CollectResult",
    "DirectoryEntry",
    "Entry",
    "FileEntry",
    "ReconcileOutcome",
    "ReplayResult",
    "UnknownEntry",
]
