"""Logging setup for batch transcription runs."""

from __future__ import annotations

import logging


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for a transcription run.

    Args:
        verbose: When True, sets the log level to DEBUG. Otherwise INFO, so
            per-file progress is visible.
    """

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )
