"""Base class for STT (Speech-to-Text) providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from stt_eval.stt.config import AssemblyAIConfig, DeepgramConfig


@dataclass
class TranscriptionResult:
    """Result of a transcription operation."""

    transcript: str
    confidence: float | None
    raw: Any


class ProviderError(Exception):
    """A vendor API call did not succeed.

    Attributes:
        provider: Provider name ("deepgram" or "assemblyai").
        status_code: HTTP status of the failed call, if there was one.
        body: Raw error text returned by the vendor.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.body = body


class ProviderTimeoutError(ProviderError):
    """A polled job did not finish within the allowed number of attempts."""


class BaseSTT(ABC):
    """Abstract base class for STT providers."""

    name: str

    @abstractmethod
    async def transcribe(
        self,
        audio_data: bytes,
        config: DeepgramConfig | AssemblyAIConfig,
        language: str,
        content_type: str = "audio/webm",
    ) -> TranscriptionResult:
        """Transcribe a recorded clip.

        Args:
            audio_data: Encoded audio bytes as recorded by the browser.
            config: Provider options for the session.
            language: Language parameter derived from the session locale.
            content_type: MIME type of ``audio_data``.

        Returns:
            TranscriptionResult with transcript, confidence and raw payload.

        Raises:
            ProviderError: If any vendor call fails.
        """
        pass
