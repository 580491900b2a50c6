"""Batch transcription of every audio file in a directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from pathlib import Path
import threading
from typing import Optional

from .config import AppConfig, ConfigurationError, resolve_output_path
from media.audio import discover_audio_files
from output.text import write_text_file
from recognition import (
    RecognitionBackend,
    RecognitionCancelled,
    RecognitionError,
    RecognitionMode,
    RecognitionResult,
    RequestContext,
    SubscriptionKeyCredential,
)

logger = logging.getLogger(__name__)


class ErrorPolicy(str, Enum):
    """What to do when one file fails."""

    ABORT = "abort"
    CONTINUE = "continue"


@dataclass(frozen=True, slots=True)
class RunSettings:
    """Settings for one orchestrator."""

    output_path: Path
    locale: str = "en-us"
    mode: RecognitionMode = RecognitionMode.LONG_DICTATION
    region: str = "westus"
    sort_files: bool = False
    on_error: ErrorPolicy = ErrorPolicy.ABORT

    @classmethod
    def from_config(cls, config: AppConfig) -> "RunSettings":
        return cls(
            output_path=resolve_output_path(config.output),
            locale=config.recognition.locale,
            mode=RecognitionMode(config.recognition.mode),
            region=config.recognition.region,
            sort_files=config.output.sort_files,
            on_error=ErrorPolicy(config.output.on_error),
        )


class TranscriptAccumulator:
    """Transcript text collected over one run, across all files."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def on_result(self, result: RecognitionResult) -> None:
        """Append the top phrase of `result`, if it has one."""

        phrase = result.top_phrase
        if phrase is not None:
            self._lines.append(phrase.display_text)

    def text(self) -> str:
        return "".join(f"{line}\n" for line in self._lines)


@dataclass(slots=True)
class FileOutcome:
    """Result of transcribing one file."""

    path: Path
    lines: int = 0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class RunOutcome:
    """Result of a whole run."""

    output_path: Path
    transcript: str = ""
    files: list[FileOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[FileOutcome]:
        return [outcome for outcome in self.files if not outcome.ok]


class TranscriptionOrchestrator:
    """Stream each file of a directory to a recognition backend, one at a time.

    Phrases from all files are collected in processing order and written to a
    single transcript file once the run ends. The transcript is also written
    when the run stops on an error, before the error propagates.
    """

    def __init__(self, backend: RecognitionBackend, settings: RunSettings) -> None:
        self._backend = backend
        self._settings = settings
        self._cancel_event = threading.Event()

    def cancel(self) -> None:
        """Stop the in-flight recognition; it raises `RecognitionCancelled`."""

        self._cancel_event.set()

    def run(self, input_directory: Path, credential: str) -> RunOutcome:
        """Transcribe every file in `input_directory`.

        Raises:
            ConfigurationError: If the credential is empty.
            DirectoryNotFoundError: If the directory cannot be listed.
            RecognitionError: On the first failing file with the abort policy,
                or on cancellation with either policy.
            OSError: If a file cannot be opened with the abort policy.
        """

        if not credential or not credential.strip():
            raise ConfigurationError("A subscription key is required.")

        settings = self._settings
        files = discover_audio_files(input_directory, sort=settings.sort_files)
        logger.info("Found %d file(s) in %s", len(files), input_directory)

        subscription = SubscriptionKeyCredential(key=credential.strip(), region=settings.region)
        accumulator = TranscriptAccumulator()
        outcome = RunOutcome(output_path=settings.output_path)

        try:
            for path in files:
                outcome.files.append(self._transcribe_file(path, subscription, accumulator))
        except BaseException:
            # Keep what was collected; the run's own error is the one to surface.
            try:
                self._write_transcript(outcome, accumulator)
            except OSError as exc:
                logger.error("Failed to write transcript to %s: %s", settings.output_path, exc)
            raise

        self._write_transcript(outcome, accumulator)
        return outcome

    def _write_transcript(self, outcome: RunOutcome, accumulator: TranscriptAccumulator) -> None:
        outcome.transcript = accumulator.text()
        write_text_file(outcome.output_path, outcome.transcript)
        logger.info("Transcript written to %s", outcome.output_path)

    def _transcribe_file(
        self,
        path: Path,
        subscription: SubscriptionKeyCredential,
        accumulator: TranscriptAccumulator,
    ) -> FileOutcome:
        settings = self._settings
        lines_before = accumulator.line_count
        context = RequestContext()

        try:
            with self._backend.open_session(settings.locale, settings.mode, subscription) as session:
                session.on_result(accumulator.on_result)
                with path.open("rb") as audio:
                    session.recognize(audio, context, self._cancel_event)
        except RecognitionCancelled:
            raise
        except (RecognitionError, OSError) as exc:
            if settings.on_error is ErrorPolicy.ABORT:
                raise
            logger.error("File %s failed (request %s): %s", path, context.request_id, exc)
            return FileOutcome(path=path, lines=accumulator.line_count - lines_before, error=exc)

        logger.info("File %s processed", path)
        return FileOutcome(path=path, lines=accumulator.line_count - lines_before)
