"""Recognition backend factory and exports."""

from __future__ import annotations

from app.config import ConfigurationError, RecognitionConfig

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
    ServiceError,
    StreamError,
    SubscriptionKeyCredential,
)

__all__ = [
    "AuthenticationError",
    "Phrase",
    "RecognitionBackend",
    "RecognitionCancelled",
    "RecognitionConnectionError",
    "RecognitionError",
    "RecognitionMode",
    "RecognitionResult",
    "RecognitionSession",
    "RequestContext",
    "ServiceError",
    "StreamError",
    "SubscriptionKeyCredential",
    "create_backend",
]


def create_backend(config: RecognitionConfig) -> RecognitionBackend:
    """Create a recognition backend from configuration.

    The SDK is imported lazily so the rest of the app works without it.
    """

    backend = (config.backend or "").strip().lower()
    if backend in {"azure", "azure-speech", "cognitive-services"}:
        try:
            from .azure_speech import AzureSpeechBackend
        except ModuleNotFoundError as exc:
            raise ModuleNotFoundError(
                "Missing dependency: azure-cognitiveservices-speech. Install with `pip install -e .`."
            ) from exc

        return AzureSpeechBackend(endpoint=config.endpoint)
    raise ConfigurationError(f"Unsupported recognition backend: {config.backend!r}")
