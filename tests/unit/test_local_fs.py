# tests/unit/test_local_fs.py
import os
from pathlib import Path

import pytest

from docstore.adapters.fs.local_fs import LocalFS
from docstore.domain.errors import DirectoryNotEmpty, FilesystemError


def build_tree(root: Path) -> None:
    (root / "src" / "pkg").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "README.md").write_text("readme")
    (root / "src" / "main.py").write_text("print(1)\n")
    (root / "src" / "pkg" / "mod.py").write_text("x = 1\n")
    (root / "docs" / "index.md").write_text("# hi\n")


def test_walk_parent_before_child_and_groups_contiguous(tmp_path: Path):
    build_tree(tmp_path)
    entries = list(LocalFS().walk(tmp_path))
    order = [e.path for e in entries]

    assert sorted(order) == sorted(
        ["src", "docs", "README.md", "src/pkg", "src/main.py", "src/pkg/mod.py", "docs/index.md"]
    )
    for e in entries:
        if e.depth > 0:
            assert order.index(e.parent_path) < order.index(e.path)

    # every sibling group is one contiguous run with directories first
    runs = []
    for e in entries:
        key = (e.parent_path, e.depth)
        if not runs or runs[-1][0] != key:
            runs.append((key, []))
        runs[-1][1].append(e)
    keys = [k for k, _ in runs]
    assert len(keys) == len(set(keys))
    for _, group in runs:
        flags = [g.is_directory for g in group]
        assert flags == sorted(flags, reverse=True)


def test_walk_stats_entries(tmp_path: Path):
    (tmp_path / "a.bin").write_bytes(b"12345")
    [entry] = list(LocalFS().walk(tmp_path))
    assert entry.stat.size == 5
    assert entry.stat.is_file and not entry.stat.is_directory
    assert entry.stat.mtime_ms > 0


def test_walk_skip_stat_reports_kind_only(tmp_path: Path):
    (tmp_path / "a.bin").write_bytes(b"12345")
    [entry] = list(LocalFS().walk(tmp_path, skip_stat=True))
    assert entry.stat.size == 0
    assert entry.stat.is_file


def test_walk_skip_symbolic_link(tmp_path: Path):
    (tmp_path / "real").mkdir()
    (tmp_path / "real" / "f.txt").write_text("x")
    try:
        os.symlink(tmp_path / "real", tmp_path / "link")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported here")

    with_links = [e.path for e in LocalFS().walk(tmp_path)]
    without_links = [e.path for e in LocalFS().walk(tmp_path, skip_symbolic_link=True)]

    assert "link" in with_links
    # links are reported but never descended into
    assert "link/f.txt" not in with_links
    assert "link" not in without_links


def test_walk_missing_root_raises(tmp_path: Path):
    with pytest.raises(FilesystemError):
        list(LocalFS().walk(tmp_path / "nope"))


def test_stat_missing_path_carries_error(tmp_path: Path):
    stat = LocalFS().stat(tmp_path / "nope.txt")
    assert stat.error is not None
    assert not stat.exists


def test_list_dir_directories_first(tmp_path: Path):
    build_tree(tmp_path)
    entries = LocalFS().list_dir(tmp_path, depth=2)
    assert [e.is_directory for e in entries] == [True, True, False]
    assert {e.depth for e in entries} == {2}


def test_remove_dir_refuses_non_empty(tmp_path: Path):
    (tmp_path / "d").mkdir()
    (tmp_path / "d" / "f").write_text("x")
    with pytest.raises(DirectoryNotEmpty):
        LocalFS().remove_dir(tmp_path / "d")


def test_append_text_appends(tmp_path: Path):
    fs = LocalFS()
    target = tmp_path / "log.txt"
    fs.append_text(target, "one\n")
    fs.append_text(target, "two")
    assert fs.read_text(target) == "one\ntwo"
