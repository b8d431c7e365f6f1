"""Tests for per-entry reconciliation."""

from __future__ import annotations

import os
import stat

import pytest

from dirmirror.core.errors import PathInvariantError
from dirmirror.core.reconciler import EntryReconciler
from dirmirror.models.entry import DirectoryEntry, FileEntry, UnknownEntry
from dirmirror.models.result import Action


def _mode(path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


@pytest.fixture
def src(tmp_path):
    root = tmp_path / "src"
    (root / "sub").mkdir(parents=True)
    (root / "sub" / "data.bin").write_bytes(b"abcdefghij")
    os.chmod(root / "sub" / "data.bin", 0o640)
    return root


class TestResolve:
    def test_substitutes_destination_root(self, src, dst):
        reconciler = EntryReconciler(dst)
        s, d = reconciler.resolve("data.bin", [str(src), "sub"])
        assert s == src / "sub" / "data.bin"
        assert d == dst / "sub" / "data.bin"

    @pytest.mark.parametrize("name", ["a/b", "..", ".", "/etc/passwd"])
    def test_layout_mismatch_aborts(self, src, dst, name):
        with pytest.raises(PathInvariantError):
            EntryReconciler(dst).resolve(name, [str(src)])

    def test_requires_root(self, dst):
        with pytest.raises(PathInvariantError):
            EntryReconciler(dst).resolve("x", [])


class TestDirectories:
    def test_creates_missing_directory_with_mode(self, src, dst):
        outcome = EntryReconciler(dst).reconcile(DirectoryEntry(name="sub", mode=0o705), [str(src)])
        assert outcome.action is Action.CREATE_DIR
        assert not outcome.failed
        assert (dst / "sub").is_dir()
        assert _mode(dst / "sub") == 0o705

    def test_fixes_mode_of_existing_directory(self, src, dst):
        (dst / "sub").mkdir()
        os.chmod(dst / "sub", 0o700)
        outcome = EntryReconciler(dst).reconcile(DirectoryEntry(name="sub", mode=0o755), [str(src)])
        assert outcome.action is Action.CHMOD_DIR
        assert _mode(dst / "sub") == 0o755

    def test_matching_directory_is_left_alone(self, src, dst):
        (dst / "sub").mkdir()
        os.chmod(dst / "sub", 0o755)
        outcome = EntryReconciler(dst).reconcile(DirectoryEntry(name="sub", mode=0o755), [str(src)])
        assert outcome.action is Action.NONE

    def test_create_failure_is_reported_not_raised(self, src, dst):
        entry = DirectoryEntry(name="child", mode=0o755)
        outcome = EntryReconciler(dst).reconcile(entry, [str(src), "missing_parent"])
        assert outcome.failed
        assert "FAILED creating directory" in outcome.error
        assert not (dst / "missing_parent").exists()


class TestFiles:
    def test_copies_missing_file(self, src, dst):
        (dst / "sub").mkdir()
        entry = FileEntry(name="data.bin", mode=0o640, size=10)
        outcome = EntryReconciler(dst).reconcile(entry, [str(src), "sub"])
        assert outcome.action is Action.COPY_FILE
        assert outcome.bytes_copied == 10
        assert (dst / "sub" / "data.bin").read_bytes() == b"abcdefghij"
        assert _mode(dst / "sub" / "data.bin") == 0o640

    def test_size_mismatch_recopies(self, src, dst):
        (dst / "sub").mkdir()
        target = dst / "sub" / "data.bin"
        target.write_bytes(b"short")
        os.chmod(target, 0o640)
        outcome = EntryReconciler(dst).reconcile(FileEntry(name="data.bin", mode=0o640, size=10), [str(src), "sub"])
        assert outcome.action is Action.RECOPY_FILE
        assert target.stat().st_size == 10
        assert target.read_bytes() == b"abcdefghij"

    def test_mode_only_update_keeps_content(self, src, dst):
        (dst / "sub").mkdir()
        target = dst / "sub" / "data.bin"
        target.write_bytes(b"ZZZZZZZZZZ")
        os.chmod(target, 0o600)
        outcome = EntryReconciler(dst).reconcile(FileEntry(name="data.bin", mode=0o640, size=10), [str(src), "sub"])
        assert outcome.action is Action.CHMOD_FILE
        assert _mode(target) == 0o640
        assert target.read_bytes() == b"ZZZZZZZZZZ"

    def test_matching_file_is_left_alone(self, src, dst):
        (dst / "sub").mkdir()
        target = dst / "sub" / "data.bin"
        target.write_bytes(b"ZZZZZZZZZZ")
        os.chmod(target, 0o640)
        outcome = EntryReconciler(dst).reconcile(FileEntry(name="data.bin", mode=0o640, size=10), [str(src), "sub"])
        assert outcome.action is Action.NONE
        assert target.read_bytes() == b"ZZZZZZZZZZ"

    def test_directory_in_place_of_file_is_reported_not_copied_into(self, src, dst):
        (dst / "sub" / "data.bin").mkdir(parents=True)
        outcome = EntryReconciler(dst).reconcile(FileEntry(name="data.bin", mode=0o640, size=10), [str(src), "sub"])
        assert outcome.failed
        assert "not a regular file" in outcome.error
        assert (dst / "sub" / "data.bin").is_dir()
        assert list((dst / "sub" / "data.bin").iterdir()) == []

    def test_missing_source_is_reported_not_raised(self, src, dst):
        outcome = EntryReconciler(dst).reconcile(FileEntry(name="gone.txt", mode=0o644, size=1), [str(src)])
        assert outcome.action is Action.COPY_FILE
        assert outcome.failed
        assert "FAILED creating file" in outcome.error
        assert str(src / "gone.txt") in outcome.error


class TestDryRun:
    def test_reports_without_touching_destination(self, src, dst):
        reconciler = EntryReconciler(dst, dry_run=True)
        dir_outcome = reconciler.reconcile(DirectoryEntry(name="sub", mode=0o755), [str(src)])
        file_outcome = reconciler.reconcile(FileEntry(name="data.bin", mode=0o640, size=10), [str(src), "sub"])
        assert dir_outcome.action is Action.CREATE_DIR
        assert file_outcome.action is Action.COPY_FILE
        assert file_outcome.bytes_copied == 0
        assert list(dst.iterdir()) == []

    def test_dry_run_chmod(self, src, dst):
        (dst / "sub").mkdir()
        os.chmod(dst / "sub", 0o700)
        outcome = EntryReconciler(dst, dry_run=True).reconcile(DirectoryEntry(name="sub", mode=0o755), [str(src)])
        assert outcome.action is Action.CHMOD_DIR
        assert _mode(dst / "sub") == 0o700


def test_unknown_entries_are_ignored(src, dst):
    assert EntryReconciler(dst).reconcile(UnknownEntry(description="Symlink: x"), [str(src)]) is None
