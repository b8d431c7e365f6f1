"""Collect and replay pipeline orchestration."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Iterable

from dirmirror.core.errors import SkippedLineError
from dirmirror.core.parser import measure_indent, parse_line, strip_newline
from dirmirror.core.reconciler import EntryReconciler
from dirmirror.core.scanner import DirectoryScanner, ProgressCallback, ProgressCounter
from dirmirror.core.tracker import PathStackTracker
from dirmirror.models.result import CollectResult, ReconcileOutcome, ReplayResult
from dirmirror.settings import DEFAULT_MAX_DEPTH

log = logging.getLogger(__name__)

OutcomeCallback = Callable[[ReconcileOutcome], None]
DiagnosticCallback = Callable[[str], None]


class MirrorEngine:
    """Runs the collect pipeline (scan) and the replay pipeline (parse, track, reconcile)."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.max_depth = max_depth

    def collect(
        self,
        src: Path | str,
        on_progress: ProgressCallback | None = None,
    ) -> CollectResult:
        """Scan ``src`` into an Entry tree rooted at a directory named ``str(src)``."""
        counter = ProgressCounter(on_progress)
        scanner = DirectoryScanner(max_depth=self.max_depth, counter=counter)
        root = scanner.scan(src)
        log.info("Collected %d entries under %s", counter.count, src)
        return CollectResult(root=root, entries_visited=counter.count, diagnostics=scanner.diagnostics)

    def replay(
        self,
        lines: Iterable[str],
        dst_root: Path | str,
        *,
        dry_run: bool = False,
        on_progress: ProgressCallback | None = None,
        on_outcome: OutcomeCallback | None = None,
        on_diagnostic: DiagnosticCallback | None = None,
    ) -> ReplayResult:
        """Replay listing ``lines`` onto ``dst_root``, one line at a time.

        The root line only seeds the ancestor stack; every other DIR and
        FIL line is handed to the reconciler.

        Raises:
            StreamStructureError: a malformed DIR/FIL line or an
                impossible indentation change. Nothing after the
                offending line is applied.
            PathInvariantError: source and destination layouts diverged.
        """
        started = time.monotonic()
        counter = ProgressCounter(on_progress)
        tracker = PathStackTracker()
        reconciler = EntryReconciler(dst_root, dry_run=dry_run)
        result = ReplayResult(dst_root=Path(dst_root), dry_run=dry_run)

        for line_no, raw in enumerate(lines, 1):
            result.lines_read += 1
            line = strip_newline(raw)
            if not line:
                self._skip(result, f"EMPTY line {line_no}! Unparseable", on_diagnostic)
                continue

            indent = measure_indent(line)
            tracker.advance(indent, line_no, line)
            try:
                entry = parse_line(line, indent, line_no)
            except SkippedLineError as e:
                tracker.place(indent, None, line_no, line)
                self._skip(result, str(e), on_diagnostic)
                continue

            ancestors = tracker.place(indent, entry, line_no, line)
            if ancestors is None:
                continue

            counter.tick()
            outcome = reconciler.reconcile(entry, ancestors)
            if outcome is None:
                continue
            result.record(outcome)
            if on_outcome:
                on_outcome(outcome)

        result.elapsed = time.monotonic() - started
        log.info(
            "Replayed %d lines onto %s: %d changed, %d failed, %d skipped",
            result.lines_read,
            dst_root,
            result.changed,
            len(result.errors),
            result.skipped_lines,
        )
        return result

    def replay_file(self, listing: Path | str, dst_root: Path | str, **kwargs) -> ReplayResult:
        """Replay a listing file written by ``collect`` + ``write_tree``."""
        with open(listing, encoding="utf-8") as f:
            return self.replay(f, dst_root, **kwargs)

    @staticmethod
    def _skip(result: ReplayResult, message: str, on_diagnostic: DiagnosticCallback | None) -> None:
        result.skipped_lines += 1
        log.warning(message)
        if on_diagnostic:
            on_diagnostic(message)
