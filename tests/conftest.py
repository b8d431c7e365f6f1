"""Shared test fixtures."""

from __future__ import annotations

import hashlib
import io
import os
from pathlib import Path

import pytest

from dirmirror.core.engine import MirrorEngine
from dirmirror.core.serializer import write_tree


@pytest.fixture
def isolate_config(tmp_path, monkeypatch):
    """Point the settings lookup at an empty temp config home."""
    config_home = tmp_path / "config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "dirmirror" / "settings.json"


@pytest.fixture
def sample_tree(tmp_path):
    """root/{a.txt (644, 10 bytes), sub/ (755, empty)}."""
    root = tmp_path / "root"
    root.mkdir()
    (root / "a.txt").write_bytes(b"0123456789")
    os.chmod(root / "a.txt", 0o644)
    (root / "sub").mkdir()
    os.chmod(root / "sub", 0o755)
    return root


@pytest.fixture
def nested_tree(tmp_path):
    """A few levels of directories with files at every level."""
    root = tmp_path / "nested"
    root.mkdir()
    (root / "top.bin").write_bytes(os.urandom(257))
    os.chmod(root / "top.bin", 0o600)
    deep = root / "one" / "two" / "three"
    deep.mkdir(parents=True)
    os.chmod(root / "one", 0o750)
    os.chmod(root / "one" / "two", 0o711)
    os.chmod(deep, 0o755)
    (root / "one" / "empty").mkdir()
    os.chmod(root / "one" / "empty", 0o700)
    (root / "one" / "one.txt").write_text("level one\n")
    os.chmod(root / "one" / "one.txt", 0o640)
    (deep / "leaf.txt").write_text("x" * 4096)
    os.chmod(deep / "leaf.txt", 0o444)
    (root / "tail.txt").write_text("after the subtree")
    os.chmod(root / "tail.txt", 0o664)
    return root


@pytest.fixture
def dst(tmp_path):
    path = tmp_path / "dst"
    path.mkdir()
    return path


def listing_for(root: Path, max_depth: int = 20) -> list[str]:
    """Collect ``root`` and return the listing as lines with newlines."""
    result = MirrorEngine(max_depth=max_depth).collect(root)
    buffer = io.StringIO()
    write_tree(result.root, buffer)
    return buffer.getvalue().splitlines(keepends=True)


def snapshot(root: Path) -> dict[str, tuple[str, int, str]]:
    """Map each relative path under ``root`` to (kind, mode, sha256)."""
    found: dict[str, tuple[str, int, str]] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames:
            path = Path(dirpath) / name
            found[str(path.relative_to(root))] = ("dir", path.stat().st_mode & 0o7777, "")
        for name in filenames:
            path = Path(dirpath) / name
            digest = hashlib.sha256(path.read_bytes()).hexdigest()
            found[str(path.relative_to(root))] = ("file", path.stat().st_mode & 0o7777, digest)
    return found
