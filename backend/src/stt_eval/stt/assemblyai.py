"""AssemblyAI async transcription provider."""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from stt_eval.core.logging import get_logger
from stt_eval.stt.base import (
    BaseSTT,
    ProviderError,
    ProviderTimeoutError,
    TranscriptionResult,
)
from stt_eval.stt.config import AssemblyAIConfig, DeepgramConfig
from stt_eval.stt.requests import build_assemblyai_request

logger = get_logger(__name__)

ASSEMBLYAI_BASE_URL = "https://api.assemblyai.com/v2"
DEFAULT_POLL_MAX_ATTEMPTS = 60
DEFAULT_POLL_INTERVAL_SECONDS = 1.0


class AssemblyAISTT(BaseSTT):
    """Upload -> submit job -> poll adapter for AssemblyAI.

    Polling is linear: one status request per interval until the job reports
    ``completed`` or ``error``, or the attempt ceiling is reached. A failure
    in any phase aborts the whole call; nothing is resumed.
    """

    name = "assemblyai"

    def __init__(
        self,
        api_key: str,
        base_url: str = ASSEMBLYAI_BASE_URL,
        timeout: float = 60.0,
        poll_max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the AssemblyAI provider.

        Args:
            api_key: AssemblyAI API key.
            base_url: API root (``.../v2``).
            timeout: Per-request timeout in seconds.
            poll_max_attempts: Status requests before giving up.
            poll_interval: Seconds to wait between status requests.
            client: Optional shared client. When omitted a client is opened
                    for each transcription.
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.poll_max_attempts = poll_max_attempts
        self.poll_interval = poll_interval
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
        start_time = time.perf_counter()

        async with self._http() as client:
            upload_url = await self._upload_audio(client, audio_data)
            transcript_id = await self._submit_transcription(
                client, upload_url, config, language
            )
            raw = await self._poll_for_completion(client, transcript_id)

        result = TranscriptionResult(
            transcript=raw.get("text") or "",
            confidence=raw.get("confidence") or 0,
            raw=raw,
        )

        logger.info(
            "assemblyai_transcription_completed",
            transcript_id=transcript_id,
            transcript_length=len(result.transcript),
            confidence=result.confidence,
            latency_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return result

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        phase: str,
        required: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        headers = {"authorization": self.api_key, **kwargs.pop("headers", {})}
        try:
            response = await client.request(
                method, f"{self.base_url}{path}", headers=headers, **kwargs
            )
        except httpx.HTTPError as e:
            raise ProviderError(
                f"AssemblyAI {phase} error: {e}", provider=self.name
            ) from e

        if not response.is_success:
            raise ProviderError(
                f"AssemblyAI {phase} error: {response.text}",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"AssemblyAI {phase} error: invalid JSON response",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            ) from e
        if not isinstance(data, dict) or (required and not data.get(required)):
            raise ProviderError(
                f"AssemblyAI {phase} error: unexpected response: {response.text}",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )
        return data

    async def _upload_audio(self, client: httpx.AsyncClient, audio_data: bytes) -> str:
        data = await self._request(
            client, "POST", "/upload", "upload", "upload_url", content=audio_data
        )
        logger.debug("assemblyai_audio_uploaded", audio_bytes=len(audio_data))
        return data["upload_url"]

    async def _submit_transcription(
        self,
        client: httpx.AsyncClient,
        audio_url: str,
        config: DeepgramConfig | AssemblyAIConfig,
        language: str,
    ) -> str:
        body = build_assemblyai_request(config, language, audio_url)
        data = await self._request(
            client, "POST", "/transcript", "transcription", "id", json=body
        )
        logger.info(
            "assemblyai_job_submitted",
            transcript_id=data["id"],
            language_code=body["language_code"],
        )
        return data["id"]

    async def _poll_for_completion(
        self, client: httpx.AsyncClient, transcript_id: str
    ) -> dict[str, Any]:
        for attempt in range(1, self.poll_max_attempts + 1):
            data = await self._request(
                client, "GET", f"/transcript/{transcript_id}", "polling"
            )
            status = data.get("status")
            logger.debug(
                "assemblyai_poll", transcript_id=transcript_id, attempt=attempt, status=status
            )

            if status == "completed":
                return data
            if status == "error":
                raise ProviderError(
                    f"AssemblyAI transcription failed: {data.get('error')}",
                    provider=self.name,
                    body=data.get("error"),
                )

            await asyncio.sleep(self.poll_interval)

        raise ProviderTimeoutError(
            f"AssemblyAI transcription timeout ({self.poll_max_attempts} attempts)",
            provider=self.name,
        )
