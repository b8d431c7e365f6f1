"""Apply the minimal filesystem action that makes a destination entry match its record."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path

from dirmirror.core.errors import PathInvariantError
from dirmirror.models.entry import DIR_TAG, FILE_TAG, DirectoryEntry, Entry, FileEntry
from dirmirror.models.result import Action, ReconcileOutcome
from dirmirror.utils import format_mode

log = logging.getLogger(__name__)


class EntryReconciler:
    """Reconciles one replayed entry at a time into ``dst_root``.

    Files are copied from the source tree recorded in the listing, so the
    source root (``ancestors[0]``) must still exist with the same layout.
    Failures of a single entry are reported in the outcome and never
    raised; only a path layout mismatch raises.
    """

    def __init__(self, dst_root: Path | str, *, dry_run: bool = False) -> None:
        self.dst_root = Path(dst_root)
        self.dry_run = dry_run

    def reconcile(self, entry: Entry, ancestors: list[str]) -> ReconcileOutcome | None:
        """Reconcile ``entry`` whose parent chain (root first) is ``ancestors``.

        Returns ``None`` for entries that are never replayed.
        """
        if not isinstance(entry, (DirectoryEntry, FileEntry)):
            return None

        src, dst = self.resolve(entry.name, ancestors)
        if isinstance(entry, DirectoryEntry):
            outcome = ReconcileOutcome(kind=DIR_TAG, src=src, dst=dst)
            self._reconcile_dir(entry, outcome)
        else:
            outcome = ReconcileOutcome(kind=FILE_TAG, src=src, dst=dst)
            self._reconcile_file(entry, outcome)

        if outcome.failed:
            log.warning(outcome.error)
        elif outcome.action is not Action.NONE:
            log.info("%s %s", outcome.action.value, dst)
        return outcome

    def resolve(self, name: str, ancestors: list[str]) -> tuple[Path, Path]:
        """Return the (source, destination) paths for ``name`` under ``ancestors``.

        Raises:
            PathInvariantError: the two paths do not share the same
                relative layout below their roots.
        """
        if not ancestors:
            raise PathInvariantError(f"No root recorded for {name!r}")

        src_root = Path(ancestors[0])
        segments = [*ancestors[1:], name]
        src = src_root.joinpath(*segments)
        dst = self.dst_root.joinpath(*segments)

        try:
            src_rel = src.relative_to(src_root).parts
            dst_rel = dst.relative_to(self.dst_root).parts
        except ValueError as e:
            raise PathInvariantError(f"{name!r} escapes its root: {e}") from e
        if src_rel != dst_rel or len(src_rel) != len(segments) or {".", ".."} & set(src_rel):
            raise PathInvariantError(
                f"Relative layout mismatch: {src} ({'/'.join(src_rel)}) -> {dst} ({'/'.join(dst_rel)})"
            )
        return src, dst

    def _reconcile_dir(self, entry: DirectoryEntry, outcome: ReconcileOutcome) -> None:
        dst = outcome.dst
        if not dst.exists():
            outcome.action = Action.CREATE_DIR
            if self.dry_run:
                return
            try:
                dst.mkdir(mode=entry.mode)
                # mkdir is subject to the umask
                os.chmod(dst, entry.mode)
            except OSError as e:
                outcome.error = f"FAILED creating directory with mode {format_mode(entry.mode)}!\n{dst}\n{e}"
            return

        try:
            current = stat.S_IMODE(dst.stat().st_mode)
        except OSError as e:
            outcome.error = f"FAILED getting metadata from directory!\n{dst}\n{e}"
            return

        if current != entry.mode:
            outcome.action = Action.CHMOD_DIR
            self._chmod(dst, entry.mode, outcome, "directory")

    def _reconcile_file(self, entry: FileEntry, outcome: ReconcileOutcome) -> None:
        src, dst = outcome.src, outcome.dst
        if not dst.exists():
            outcome.action = Action.COPY_FILE
            self._copy(src, dst, outcome, "creating")
            return

        try:
            st = dst.stat()
        except OSError as e:
            outcome.error = f"FAILED getting metadata from file!\n{src}\n{dst}\n{e}"
            return

        if not stat.S_ISREG(st.st_mode):
            outcome.error = f"FAILED updating file!\n{src}\n{dst}\nnot a regular file"
            return

        if st.st_size != entry.size:
            outcome.action = Action.RECOPY_FILE
            self._copy(src, dst, outcome, "updating")
        elif stat.S_IMODE(st.st_mode) != entry.mode:
            outcome.action = Action.CHMOD_FILE
            self._chmod(dst, entry.mode, outcome, "file")

    def _copy(self, src: Path, dst: Path, outcome: ReconcileOutcome, verb: str) -> None:
        if self.dry_run:
            return
        try:
            shutil.copy(src, dst)
            outcome.bytes_copied = dst.stat().st_size
        except OSError as e:
            outcome.error = f"FAILED {verb} file!\n{src}\n{dst}\n{e}"

    def _chmod(self, path: Path, mode: int, outcome: ReconcileOutcome, what: str) -> None:
        if self.dry_run:
            return
        try:
            os.chmod(path, mode)
        except OSError as e:
            outcome.error = f"FAILED setting permissions on {what}!\n{path}\n{e}"
