"""Console entry point for the `transcriber` command."""

from __future__ import annotations


def main() -> None:
    """Run the Transcriber CLI over a directory of audio files."""

    from .cli import create_cli_app

    app = create_cli_app()
    app(prog_name="transcriber")


if __name__ == "__main__":
    main()
