"""Audio file discovery for batch transcription."""

from __future__ import annotations

from pathlib import Path


class MediaError(RuntimeError):
    """Base error for media handling failures."""


class DirectoryNotFoundError(MediaError):
    """Raised when the input directory is missing or cannot be listed."""


def discover_audio_files(directory: Path, sort: bool = False) -> list[Path]:
    """Return the files directly inside `directory`.

    Subdirectories are skipped and not descended into. Without `sort`, files
    come back in the order the filesystem lists them, which is not guaranteed
    to be stable across hosts.

    Args:
        directory: Input directory.
        sort: When True, order files by name.

    Raises:
        DirectoryNotFoundError: If the directory does not exist, is not a
            directory, or cannot be listed.
    """

    if not directory.is_dir():
        raise DirectoryNotFoundError(f"Input directory does not exist: {directory}")

    try:
        files = [entry for entry in directory.iterdir() if entry.is_file()]
    except OSError as exc:
        raise DirectoryNotFoundError(f"Cannot list input directory {directory}: {exc}") from exc

    if sort:
        files.sort(key=lambda path: path.name)
    return files
