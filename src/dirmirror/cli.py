"""CLI interface for dirmirror."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from dirmirror.core.engine import MirrorEngine
from dirmirror.core.errors import StreamStructureError
from dirmirror.core.scanner import ProgressCallback
from dirmirror.core.serializer import write_tree
from dirmirror.models.result import Action, ReconcileOutcome, ReplayResult
from dirmirror.settings import Settings
from dirmirror.utils import bytes_to_human, format_elapsed

USAGE = (
    "Must provide a dir path for SRC (FROM) and no DST (TO) when collecting files!\n"
    "Must provide a file path for SRC (FROM) and a dir path for DST (TO) when copying files!"
)

_ACTION_LABELS = {
    Action.CREATE_DIR: ("created", "green"),
    Action.CHMOD_DIR: ("chmod", "yellow"),
    Action.COPY_FILE: ("copied", "green"),
    Action.RECOPY_FILE: ("updated", "cyan"),
    Action.CHMOD_FILE: ("chmod", "yellow"),
}


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _progress_printer(enabled: bool) -> ProgressCallback | None:
    if not enabled:
        return None

    def on_progress(count: int) -> None:
        click.echo(f"\rEntries: {count}", err=True, nl=False)

    return on_progress


@click.command(context_settings={"help_option_names": ["-h", "--help"], "allow_extra_args": True})
@click.pass_context
@click.argument("src", required=False)
@click.argument("dst", required=False)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.option("--dry-run", is_flag=True, help="Report what replay would change without touching DST")
@click.option("--max-depth", type=click.IntRange(min=0), default=None, help="Deepest directory level to descend into")
@click.option("--progress/--no-progress", default=None, help="Show a running entry count on stderr")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file to use instead of the XDG default",
)
def main(
    ctx: click.Context,
    src: str | None,
    dst: str | None,
    verbose: int,
    dry_run: bool,
    max_depth: int | None,
    progress: bool | None,
    config_path: Path | None,
) -> None:
    """Record a directory tree, or replay a recording onto a directory.

    \b
    dirmirror SRC_DIR              print the tree listing of SRC_DIR
    dirmirror LISTING_FILE DST_DIR replay LISTING_FILE onto DST_DIR
    """
    _setup_logging(verbose)
    settings = Settings(config_path)
    engine = MirrorEngine(max_depth=settings.max_depth if max_depth is None else max_depth)
    on_progress = _progress_printer(settings.progress_enabled if progress is None else progress)

    if src is None or ctx.args:
        _usage()
    if dst is None:
        if not Path(src).is_dir():
            _usage()
        _collect(engine, Path(src), on_progress)
    else:
        if not Path(src).is_file() or not Path(dst).is_dir():
            _usage()
        _replay(engine, Path(src), Path(dst), dry_run, on_progress)


def _usage() -> None:
    click.echo(USAGE)
    sys.exit(1)


# ── collect ──────────────────────────────────────────────────────────────

def _collect(engine: MirrorEngine, src: Path, on_progress: ProgressCallback | None) -> None:
    result = engine.collect(src, on_progress=on_progress)
    if on_progress:
        click.echo(err=True)
    write_tree(result.root, sys.stdout)
    sys.stdout.flush()


# ── replay ───────────────────────────────────────────────────────────────

def _replay(
    engine: MirrorEngine,
    listing: Path,
    dst: Path,
    dry_run: bool,
    on_progress: ProgressCallback | None,
) -> None:
    try:
        result = engine.replay_file(
            listing,
            dst,
            dry_run=dry_run,
            on_progress=on_progress,
            on_outcome=_print_outcome,
            on_diagnostic=click.echo,
        )
    except StreamStructureError as e:
        if on_progress:
            click.echo(err=True)
        click.echo(click.style(str(e), fg="red"))
        sys.exit(1)
    except UnicodeDecodeError as e:
        if on_progress:
            click.echo(err=True)
        click.echo(click.style(f"Listing is not valid UTF-8: {listing} ({e})", fg="red"))
        sys.exit(1)

    if on_progress:
        click.echo(err=True)
    _print_summary(result)
    if result.errors:
        sys.exit(1)


def _print_outcome(outcome: ReconcileOutcome) -> None:
    line = f"{outcome.kind}: {outcome.src} -> {outcome.dst}"
    if outcome.failed:
        click.echo(line)
        click.echo(click.style(outcome.error, fg="red"))
        return
    label = _ACTION_LABELS.get(outcome.action)
    if label:
        text, color = label
        line += f"  [{click.style(text, fg=color)}]"
    click.echo(line)


def _print_summary(result: ReplayResult) -> None:
    counts = result.counts
    heading = "Dry run summary" if result.dry_run else "Summary"
    click.echo(f"\n{click.style(heading, bold=True)} ({format_elapsed(result.elapsed)})")
    click.echo(f"  Directories created: {counts[Action.CREATE_DIR]:,}")
    click.echo(f"  Files copied:        {counts[Action.COPY_FILE]:,}")
    click.echo(f"  Files updated:       {counts[Action.RECOPY_FILE]:,}")
    click.echo(f"  Modes changed:       {counts[Action.CHMOD_DIR] + counts[Action.CHMOD_FILE]:,}")
    click.echo(f"  Unchanged:           {counts[Action.NONE]:,}")
    if result.skipped_lines:
        click.echo(f"  Skipped lines:       {result.skipped_lines:,}")
    if not result.dry_run:
        click.echo(f"  Bytes copied:        {click.style(bytes_to_human(result.bytes_copied), fg='green', bold=True)}")
    if result.errors:
        click.echo(click.style(f"  Failures:            {len(result.errors):,}", fg="red"))
