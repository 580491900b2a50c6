"""CLI commands for Transcriber."""

from __future__ import annotations

from dataclasses import replace
import logging
from pathlib import Path
from typing import Optional

import click
import typer
from typer.core import TyperCommand

from .config import ConfigurationError, get_config_path, load_config
from .logging import configure_logging
from .orchestrator import ErrorPolicy, RunSettings, TranscriptionOrchestrator
from media.audio import MediaError
from recognition import RecognitionError, RecognitionMode, create_backend

SIGNUP_URL = "https://www.microsoft.com/cognitive-services/"


class HelpOnMissingArgumentCommand(TyperCommand):
    """Show the full help, not only the usage line, when an argument is missing."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.MissingParameter as exc:
            typer.echo(ctx.get_help())
            typer.secho(f"Error: {exc.format_message()}", fg=typer.colors.RED, err=True)
            ctx.exit(2)


def create_cli_app() -> typer.Typer:
    """Create the Typer CLI app (kept as a factory to avoid global state)."""

    app = typer.Typer(
        add_completion=False,
        help="Transcribe every audio file in a directory with a cloud speech service.",
        no_args_is_help=True,
    )

    @app.command(
        cls=HelpOnMissingArgumentCommand,
        no_args_is_help=True,
        epilog=(
            f"Sign up at {SIGNUP_URL} with a client/subscription id "
            "to get a client secret key."
        ),
    )
    def run(
        input_directory: Path = typer.Argument(
            ...,
            metavar="INPUT_DIRECTORY",
            help="Specify an input directory of audio files.",
        ),
        subscription_key: str = typer.Argument(
            ...,
            metavar="SUBSCRIPTION_KEY",
            help="Specify the subscription key to access the Speech Recognition Service.",
        ),
        out: Optional[Path] = typer.Option(
            None,
            "--out",
            "-o",
            dir_okay=False,
            help="Transcript file (default: ~/Documents/testspeechapi/apitranscript.txt).",
        ),
        config_file: Optional[Path] = typer.Option(
            None,
            "--config",
            dir_okay=False,
            help="Config file (default: per-user config.toml).",
        ),
        region: Optional[str] = typer.Option(
            None,
            "--region",
            help="Speech service region (overrides config; default: westus).",
        ),
        locale: Optional[str] = typer.Option(
            None,
            "--locale",
            help="Recognition locale (overrides config; default: en-us).",
        ),
        mode: Optional[RecognitionMode] = typer.Option(
            None,
            "--mode",
            help="Recognition mode (overrides config; default: continuous).",
        ),
        sort: Optional[bool] = typer.Option(
            None,
            "--sort/--no-sort",
            help="Process files in name order instead of directory order.",
        ),
        on_error: Optional[ErrorPolicy] = typer.Option(
            None,
            "--on-error",
            help="Stop at the first failing file, or skip it (default: abort).",
        ),
        verbose: bool = typer.Option(
            False,
            "--verbose",
            help="Enable debug logging.",
        ),
    ) -> None:
        """Transcribe all files in INPUT_DIRECTORY into one text file."""

        configure_logging(verbose=verbose)
        logger = logging.getLogger("transcriber")

        try:
            config = load_config(config_file)
        except ConfigurationError as exc:
            typer.secho(f"Config error: {exc}", fg=typer.colors.RED, err=True)
            typer.secho(f"Config path: {config_file or get_config_path()}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=2) from exc

        settings = RunSettings.from_config(config)
        settings = replace(
            settings,
            output_path=out or settings.output_path,
            region=region or settings.region,
            locale=locale or settings.locale,
            mode=mode or settings.mode,
            sort_files=settings.sort_files if sort is None else sort,
            on_error=on_error or settings.on_error,
        )

        try:
            backend = create_backend(config.recognition)
            orchestrator = TranscriptionOrchestrator(backend, settings)
            logger.debug("Transcribing %s into %s", input_directory, settings.output_path)
            outcome = orchestrator.run(input_directory, subscription_key)
        except (ConfigurationError, MediaError) as exc:
            typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=2) from exc
        except RecognitionError as exc:
            typer.secho(f"Recognition error: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc
        except ModuleNotFoundError as exc:
            typer.secho(str(exc), fg=typer.colors.RED, err=True)
            raise typer.Exit(code=2) from exc
        except Exception as exc:  # noqa: BLE001 - intentional CLI boundary
            typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc

        for failed in outcome.failed:
            typer.secho(f"Failed: {failed.path}: {failed.error}", fg=typer.colors.RED, err=True)

        typer.echo(str(outcome.output_path))
        if outcome.failed:
            raise typer.Exit(code=1)

    return app
