from __future__ import annotations

from pathlib import Path

import pytest

from media.audio import DirectoryNotFoundError, discover_audio_files


def test_discover_skips_subdirectories(tmp_path: Path) -> None:
    (tmp_path / "a.wav").write_bytes(b"a")
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "b.wav").write_bytes(b"b")

    names = {path.name for path in discover_audio_files(tmp_path)}

    assert names == {"a.wav", "notes.txt"}


def test_discover_sorted_by_name(tmp_path: Path) -> None:
    for name in ("c.wav", "a.wav", "b.wav"):
        (tmp_path / name).write_bytes(b"")

    assert [path.name for path in discover_audio_files(tmp_path, sort=True)] == ["a.wav", "b.wav", "c.wav"]


def test_discover_empty_directory(tmp_path: Path) -> None:
    assert discover_audio_files(tmp_path) == []


def test_discover_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(DirectoryNotFoundError, match="does not exist"):
        discover_audio_files(tmp_path / "missing")


def test_discover_rejects_file_path(tmp_path: Path) -> None:
    path = tmp_path / "a.wav"
    path.write_bytes(b"a")

    with pytest.raises(DirectoryNotFoundError):
        discover_audio_files(path)
