"""Tests for the file manifest."""

import dataclasses
from pathlib import Path

import pytest

from mpybox.models.manifest import (
    ENTRY_FILE_NAME,
    FileManifest,
    build_manifest,
    scan_library_dirs,
)


def test_entry_file_comes_first(manifest, project_dir, library_dir):
    assert manifest.files[0] == (project_dir / ENTRY_FILE_NAME).resolve()
    assert manifest.files[1:] == [(library_dir / "helpers.py").resolve()]
    assert len(manifest) == 2
    assert list(manifest) == manifest.files


def test_is_entry(manifest):
    assert manifest.is_entry(manifest.entry)
    assert not manifest.is_entry(manifest.libraries[0])


def test_paths_are_absolute(tmp_path, monkeypatch):
    (tmp_path / ENTRY_FILE_NAME).write_text("pass")
    monkeypatch.chdir(tmp_path)

    manifest = build_manifest(ENTRY_FILE_NAME)

    assert manifest.entry.is_absolute()
    assert manifest.libraries == ()


def test_library_scan_is_sorted_and_one_level_deep(tmp_path):
    lib = tmp_path / "lib"
    (lib / "nested").mkdir(parents=True)
    (lib / "b.py").write_text("b")
    (lib / "a.py").write_text("a")
    (lib / "nested" / "c.py").write_text("c")

    assert [p.name for p in scan_library_dirs([lib])] == ["a.py", "b.py"]


def test_library_dirs_keep_their_order(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (first / "z.py").write_text("z")
    (second / "a.py").write_text("a")

    assert [p.name for p in scan_library_dirs([first, second])] == ["z.py", "a.py"]


def test_missing_library_dir_skipped(tmp_path, library_dir):
    found = scan_library_dirs([tmp_path / "missing", library_dir])
    assert [p.name for p in found] == ["helpers.py"]


def test_library_named_like_entry_is_ignored(tmp_path):
    lib = tmp_path / "lib"
    lib.mkdir()
    (lib / ENTRY_FILE_NAME).write_text("print('shadow')")
    (lib / "util.py").write_text("pass")

    assert [p.name for p in scan_library_dirs([lib])] == ["util.py"]


def test_manifest_is_immutable(manifest):
    with pytest.raises(dataclasses.FrozenInstanceError):
        manifest.entry = Path("/other/main.py")  # type: ignore[misc]


def test_manifest_without_libraries():
    manifest = FileManifest(entry=Path("/project/main.py"))
    assert manifest.files == [Path("/project/main.py")]
