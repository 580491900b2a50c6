"""Azure Speech recognition backend implementation."""

from __future__ import annotations

import json
import logging
import queue
import threading
from typing import Any, BinaryIO, Optional

import azure.cognitiveservices.speech as speechsdk

from .base import (
    AuthenticationError,
    Phrase,
    RecognitionBackend,
    RecognitionCancelled,
    RecognitionConnectionError,
    RecognitionError,
    RecognitionMode,
    RecognitionResult,
    RecognitionSession,
    RequestContext,
    ResultHandler,
    ServiceError,
    StreamError,
    SubscriptionKeyCredential,
)

logger = logging.getLogger(__name__)

# Seconds between cancellation checks while waiting for service events.
_POLL_INTERVAL = 0.2

_EVENT_RESULT = "result"
_EVENT_CANCELED = "canceled"
_EVENT_STOPPED = "stopped"


class _StreamReader(speechsdk.audio.PullAudioInputStreamCallback):
    """Feed the SDK from an open binary stream owned by the caller."""

    def __init__(self, stream: BinaryIO) -> None:
        super().__init__()
        self._stream = stream
        self.error: Optional[OSError] = None

    def read(self, buffer: memoryview) -> int:
        if self.error is not None:
            return 0
        try:
            data = self._stream.read(buffer.nbytes)
        except OSError as exc:
            # The SDK calls this from its own thread; report after recognition ends.
            self.error = exc
            return 0
        size = len(data)
        buffer[:size] = data
        return size

    def close(self) -> None:
        pass


def phrases_from_result(result: Any) -> tuple[Phrase, ...]:
    """Extract ranked phrases from an SDK recognition result.

    Uses the detailed N-best list when present and falls back to the plain
    result text. Results without recognized speech yield no phrases.
    """

    if result.reason != speechsdk.ResultReason.RecognizedSpeech:
        return ()

    try:
        payload = json.loads(result.json or "{}")
    except (TypeError, ValueError):
        payload = {}

    phrases: list[Phrase] = []
    for item in payload.get("NBest") or []:
        display = item.get("Display")
        if isinstance(display, str) and display:
            phrases.append(Phrase(display_text=display, confidence=float(item.get("Confidence", 0.0))))
    phrases.sort(key=lambda phrase: phrase.confidence, reverse=True)

    if not phrases and result.text:
        phrases.append(Phrase(display_text=result.text))
    return tuple(phrases)


def error_from_cancellation(details: Any) -> Optional[RecognitionError]:
    """Map SDK cancellation details to a recognition error.

    Returns None when the cancellation only marks the end of the audio stream.
    """

    reason = details.reason
    if reason == speechsdk.CancellationReason.EndOfStream:
        return None
    if reason == speechsdk.CancellationReason.CancelledByUser:
        return RecognitionCancelled("Recognition was cancelled.")

    code = details.code
    message = details.error_details or f"Recognition failed ({code})."
    codes = speechsdk.CancellationErrorCode
    if code in (codes.AuthenticationFailure, codes.Forbidden):
        return AuthenticationError(message)
    if code in (codes.ConnectionFailure, codes.ServiceTimeout):
        return RecognitionConnectionError(message)
    if code == codes.BadRequest:
        return StreamError(message)
    return ServiceError(message)


class AzureSpeechSession(RecognitionSession):
    """Recognition session backed by an Azure `SpeechRecognizer`.

    SDK callbacks run on SDK threads. They only enqueue events; `recognize`
    drains the queue and calls the result handler on the caller's thread.
    """

    def __init__(self, speech_config: Any, mode: RecognitionMode) -> None:
        self._speech_config = speech_config
        self._mode = mode
        self._handler: Optional[ResultHandler] = None
        self._recognizer: Any = None
        self._closed = False

    def on_result(self, handler: ResultHandler) -> None:
        self._handler = handler

    def recognize(
        self,
        audio: BinaryIO,
        context: RequestContext,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        if self._closed:
            raise RuntimeError("Recognition session is closed.")

        logger.debug(
            "Recognition request %s from %s %s (%s)",
            context.request_id,
            context.application_name,
            context.application_version,
            self._mode.value,
        )

        reader = _StreamReader(audio)
        try:
            self._recognizer = self._build_recognizer(reader)
        except RuntimeError as exc:
            raise ServiceError(f"Failed to create speech recognizer: {exc}") from exc
        events: queue.Queue = queue.Queue()

        if self._mode is RecognitionMode.SHORT_PHRASE:
            self._recognize_once(events, cancel_event)
        else:
            self._recognize_continuous(events, cancel_event)

        if reader.error is not None:
            raise StreamError(f"Failed to read audio stream: {reader.error}") from reader.error

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        recognizer, self._recognizer = self._recognizer, None
        if recognizer is not None:
            for signal in (recognizer.recognized, recognizer.canceled, recognizer.session_stopped):
                signal.disconnect_all()

    def _build_recognizer(self, reader: _StreamReader) -> Any:
        """Create the SDK recognizer reading audio from `reader`."""

        stream = speechsdk.audio.PullAudioInputStream(reader)
        audio_config = speechsdk.audio.AudioConfig(stream=stream)
        return speechsdk.SpeechRecognizer(speech_config=self._speech_config, audio_config=audio_config)

    def _recognize_once(self, events: queue.Queue, cancel_event: Optional[threading.Event]) -> None:
        # A single-shot request cannot be interrupted once sent.
        if cancel_event is not None and cancel_event.is_set():
            raise RecognitionCancelled("Recognition was cancelled.")

        try:
            result = self._recognizer.recognize_once_async().get()
        except RuntimeError as exc:
            raise ServiceError(f"Recognition failed: {exc}") from exc

        if result.reason == speechsdk.ResultReason.Canceled:
            events.put((_EVENT_CANCELED, speechsdk.CancellationDetails(result)))
        else:
            events.put((_EVENT_RESULT, result))
        events.put((_EVENT_STOPPED, None))
        self._drain(events, cancel_event)

    def _recognize_continuous(
        self, events: queue.Queue, cancel_event: Optional[threading.Event]
    ) -> None:
        recognizer = self._recognizer
        recognizer.recognized.connect(lambda evt: events.put((_EVENT_RESULT, evt.result)))
        recognizer.canceled.connect(lambda evt: events.put((_EVENT_CANCELED, evt.cancellation_details)))
        recognizer.session_stopped.connect(lambda evt: events.put((_EVENT_STOPPED, None)))

        try:
            recognizer.start_continuous_recognition_async().get()
        except RuntimeError as exc:
            raise ServiceError(f"Failed to start recognition: {exc}") from exc

        try:
            self._drain(events, cancel_event)
        finally:
            try:
                recognizer.stop_continuous_recognition_async().get()
            except RuntimeError as exc:
                logger.warning("Failed to stop recognition: %s", exc)

    def _drain(self, events: queue.Queue, cancel_event: Optional[threading.Event]) -> None:
        """Deliver queued events to the handler until the session stops."""

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise RecognitionCancelled("Recognition was cancelled.")
            try:
                kind, payload = events.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue

            if kind == _EVENT_STOPPED:
                return
            if kind == _EVENT_CANCELED:
                error = error_from_cancellation(payload)
                if error is not None:
                    raise error
                continue

            result = RecognitionResult(phrases=phrases_from_result(payload))
            if self._handler is not None:
                self._handler(result)


class AzureSpeechBackend(RecognitionBackend):
    """Recognition backend backed by the `azure-cognitiveservices-speech` SDK."""

    def __init__(self, endpoint: str = "") -> None:
        """Create an AzureSpeechBackend.

        Args:
            endpoint: Optional explicit service endpoint URL. When empty, the
                endpoint is derived from the credential's region.
        """

        self._endpoint = endpoint

    def open_session(
        self,
        locale: str,
        mode: RecognitionMode,
        credential: SubscriptionKeyCredential,
    ) -> RecognitionSession:
        if not credential.key:
            raise AuthenticationError("A subscription key is required.")

        try:
            if self._endpoint:
                speech_config = speechsdk.SpeechConfig(subscription=credential.key, endpoint=self._endpoint)
            else:
                speech_config = speechsdk.SpeechConfig(subscription=credential.key, region=credential.region)
        except (ValueError, RuntimeError) as exc:
            raise RecognitionConnectionError(f"Invalid speech service settings: {exc}") from exc

        speech_config.speech_recognition_language = locale
        speech_config.output_format = speechsdk.OutputFormat.Detailed
        return AzureSpeechSession(speech_config, mode)
