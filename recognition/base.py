"""Base interfaces and types for speech recognition backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
import threading
from typing import BinaryIO, Callable, Optional
import uuid


class RecognitionError(RuntimeError):
    """Base error for recognition failures."""


class AuthenticationError(RecognitionError):
    """Raised when the service rejects the subscription credential."""


class RecognitionConnectionError(RecognitionError, ConnectionError):
    """Raised when the service cannot be reached."""


class ServiceError(RecognitionError):
    """Raised when the service reports an error for a request."""


class StreamError(RecognitionError):
    """Raised when the audio stream cannot be read or is rejected."""


class RecognitionCancelled(RecognitionError):
    """Raised when recognition stops because the run was cancelled."""


class RecognitionMode(str, Enum):
    """Service endpoint selection."""

    SHORT_PHRASE = "short"
    LONG_DICTATION = "continuous"


@dataclass(frozen=True, slots=True)
class Phrase:
    """One recognition hypothesis."""

    display_text: str
    confidence: float = 0.0


@dataclass(frozen=True, slots=True)
class RecognitionResult:
    """A recognition result event; phrases are ordered best first."""

    phrases: tuple[Phrase, ...] = ()

    @property
    def top_phrase(self) -> Optional[Phrase]:
        return self.phrases[0] if self.phrases else None


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Metadata attached to one recognition request."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    application_name: str = "transcriber"
    application_version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class SubscriptionKeyCredential:
    """Long-lived subscription key for the speech service.

    Exchanging the key for short-lived access tokens, and refreshing them,
    is left to the backend SDK.
    """

    key: str
    region: str = "westus"

    def __repr__(self) -> str:
        return f"SubscriptionKeyCredential(key='***', region={self.region!r})"


ResultHandler = Callable[[RecognitionResult], None]


class RecognitionSession(ABC):
    """A connection to the recognition service scoped to one audio submission."""

    def __enter__(self) -> "RecognitionSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @abstractmethod
    def on_result(self, handler: ResultHandler) -> None:
        """Register the handler invoked for every result event.

        A session holds a single handler; registering again replaces it.
        """

    @abstractmethod
    def recognize(
        self,
        audio: BinaryIO,
        context: RequestContext,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Stream `audio` to the service and block until recognition ends.

        Args:
            audio: Binary stream opened by the caller. The session reads it
                but does not close it.
            context: Request metadata for this submission.
            cancel_event: When set, in-flight recognition stops and
                `RecognitionCancelled` is raised.

        Raises:
            StreamError, ServiceError, AuthenticationError,
            RecognitionConnectionError, RecognitionCancelled.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the session's resources. Safe to call more than once."""


class RecognitionBackend(ABC):
    """Interface for speech recognition services."""

    @abstractmethod
    def open_session(
        self,
        locale: str,
        mode: RecognitionMode,
        credential: SubscriptionKeyCredential,
    ) -> RecognitionSession:
        """Open a new recognition session.

        Raises:
            AuthenticationError: If the credential is rejected up front.
            RecognitionConnectionError: If the service is unreachable.
        """
