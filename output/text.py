"""Plain text transcript output."""

from __future__ import annotations

from pathlib import Path


def write_text_file(output_path: Path, text: str) -> None:
    """Write transcript text to disk, replacing any existing file.

    Args:
        output_path: Destination `.txt` path.
        text: Transcript content. Newlines are written as-is on every OS.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as f:
        f.write(text)
