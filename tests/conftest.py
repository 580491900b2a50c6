from __future__ import annotations

from pathlib import Path
import threading
from typing import BinaryIO, Optional

import pytest

from recognition import (
    Phrase,
    RecognitionBackend,
    RecognitionCancelled,
    RecognitionMode,
    RecognitionResult,
    RecognitionSession,
    RequestContext,
    SubscriptionKeyCredential,
)


def result(*texts: str) -> RecognitionResult:
    """Build a result event whose phrases are `texts`, best first."""

    return RecognitionResult(
        phrases=tuple(Phrase(display_text=text, confidence=1.0 - i / 10) for i, text in enumerate(texts))
    )


class FakeSession(RecognitionSession):
    """Session that replays scripted events keyed by the audio bytes it reads."""

    def __init__(self, backend: "FakeBackend") -> None:
        self.backend = backend
        self.handler = None
        self.closed = False
        self.audio: Optional[BinaryIO] = None
        self.audio_bytes = b""
        self.context: Optional[RequestContext] = None

    def on_result(self, handler) -> None:
        self.handler = handler

    def recognize(
        self,
        audio: BinaryIO,
        context: RequestContext,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        assert self.handler is not None, "handler must be registered before streaming"
        if cancel_event is not None and cancel_event.is_set():
            raise RecognitionCancelled("Recognition was cancelled.")
        self.audio = audio
        self.context = context
        self.audio_bytes = audio.read()
        events, error = self.backend.script.get(self.audio_bytes, ([], None))
        for event in events:
            self.handler(event)
        if error is not None:
            raise error

    def close(self) -> None:
        self.closed = True


class FakeBackend(RecognitionBackend):
    """Backend whose sessions replay `script[audio_bytes] = (events, error)`."""

    def __init__(self, script: Optional[dict] = None) -> None:
        self.script = script or {}
        self.sessions: list[FakeSession] = []
        self.calls: list[tuple[str, RecognitionMode, SubscriptionKeyCredential]] = []

    def open_session(
        self,
        locale: str,
        mode: RecognitionMode,
        credential: SubscriptionKeyCredential,
    ) -> RecognitionSession:
        self.calls.append((locale, mode, credential))
        session = FakeSession(self)
        self.sessions.append(session)
        return session


@pytest.fixture
def audio_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "audio"
    directory.mkdir()
    return directory


def write_audio(directory: Path, name: str) -> Path:
    """Create an audio file whose bytes are its own name."""

    path = directory / name
    path.write_bytes(name.encode("ascii"))
    return path
