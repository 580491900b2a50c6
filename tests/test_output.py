from __future__ import annotations

from pathlib import Path

from output.text import write_text_file


def test_write_text_file_creates_parent_dirs(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "file.txt"
    write_text_file(out, "hello\n")
    assert out.read_text(encoding="utf-8") == "hello\n"


def test_write_text_file_overwrites_and_keeps_newlines(tmp_path: Path) -> None:
    out = tmp_path / "file.txt"
    out.write_text("old content that is longer\n", encoding="utf-8")

    write_text_file(out, "one\ntwo\n")

    assert out.read_bytes() == b"one\ntwo\n"


def test_write_text_file_empty(tmp_path: Path) -> None:
    out = tmp_path / "empty.txt"
    write_text_file(out, "")
    assert out.exists()
    assert out.read_bytes() == b""
