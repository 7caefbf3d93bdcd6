"""Deepgram pre-recorded transcription provider."""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from stt_eval.core.logging import get_logger
from stt_eval.stt.base import BaseSTT, ProviderError, TranscriptionResult
from stt_eval.stt.config import AssemblyAIConfig, DeepgramConfig
from stt_eval.stt.requests import DEEPGRAM_LISTEN_URL, build_deepgram_request

logger = get_logger(__name__)


class DeepgramSTT(BaseSTT):
    """Single request/response adapter for Deepgram's ``/v1/listen``.

    The audio is posted as the raw request body; every option travels in the
    query string built by ``build_deepgram_request``.
    """

    name = "deepgram"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEEPGRAM_LISTEN_URL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Deepgram provider.

        Args:
            api_key: Deepgram API key.
            base_url: Listen endpoint URL.
            timeout: Per-request timeout in seconds.
            client: Optional shared client. When omitted a client is opened
                    for each transcription.
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def transcribe(
        self,
        audio_data: bytes,
        config: DeepgramConfig | AssemblyAIConfig,
        language: str,
        content_type: str = "audio/webm",
    ) -> TranscriptionResult:
        request = build_deepgram_request(config, language, base_url=self.base_url)

        logger.info(
            "deepgram_request_start",
            model=config.model,
            language=language,
            audio_bytes=len(audio_data),
        )
        start_time = time.perf_counter()

        async with self._http() as client:
            try:
                response = await client.post(
                    request.url,
                    headers={
                        "Authorization": f"Token {self.api_key}",
                        "Content-Type": content_type,
                    },
                    content=audio_data,
                )
            except httpx.HTTPError as e:
                raise ProviderError(
                    f"Deepgram API error: {e}", provider=self.name
                ) from e

        if not response.is_success:
            raise ProviderError(
                f"Deepgram API error: {response.text}",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            raw = response.json()
        except ValueError as e:
            raise ProviderError(
                "Deepgram API error: invalid JSON response",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            ) from e
        if not isinstance(raw, dict):
            raise ProviderError(
                f"Deepgram API error: unexpected response: {response.text}",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )

        result = self._format_response(raw)

        logger.info(
            "deepgram_request_completed",
            transcript_length=len(result.transcript),
            confidence=result.confidence,
            latency_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return result

    @staticmethod
    def _format_response(raw: dict[str, Any]) -> TranscriptionResult:
        channels = (raw.get("results") or {}).get("channels") or [{}]
        alternatives = channels[0].get("alternatives") or [{}]
        alternative = alternatives[0]

        return TranscriptionResult(
            transcript=alternative.get("transcript") or "",
            confidence=alternative.get("confidence") or 0,
            raw=raw,
        )
