"""Unit tests for STT providers."""

import json

import httpx
import pytest

from stt_eval.core.config import Settings
from stt_eval.stt import (
    AssemblyAISTT,
    DeepgramSTT,
    ProviderError,
    ProviderTimeoutError,
    get_stt_provider,
)
from stt_eval.stt.base import TranscriptionResult
from stt_eval.stt.config import AssemblyAIConfig, DeepgramConfig

DEEPGRAM_URL = "https://dg.test/v1/listen"
ASSEMBLYAI_URL = "https://aai.test/v2"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _deepgram_payload(transcript: str, confidence: float | None) -> dict:
    alternative = {"transcript": transcript}
    if confidence is not None:
        alternative["confidence"] = confidence
    return {"results": {"channels": [{"alternatives": [alternative]}]}}


class TestTranscriptionResult:
    """Tests for TranscriptionResult dataclass."""

    def test_create_result(self) -> None:
        result = TranscriptionResult(transcript="A9X", confidence=0.9, raw={})
        assert result.transcript == "A9X"
        assert result.confidence == 0.9
        assert result.raw == {}


class TestDeepgramSTT:
    """Tests for DeepgramSTT with a mocked HTTP transport."""

    @pytest.mark.asyncio
    async def test_transcribe_success(self) -> None:
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json=_deepgram_payload("A9X 42 Beta", 0.97))

        async with _client(handler) as client:
            stt = DeepgramSTT(api_key="dg-key", base_url=DEEPGRAM_URL, client=client)
            config = DeepgramConfig(model="nova-2", replace={"dash": "-"})
            result = await stt.transcribe(b"audio-bytes", config, "en-US", "audio/ogg")

        assert result.transcript == "A9X 42 Beta"
        assert result.confidence == 0.97
        assert result.raw == _deepgram_payload("A9X 42 Beta", 0.97)

        request = captured["request"]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Token dg-key"
        assert request.headers["Content-Type"] == "audio/ogg"
        assert request.content == b"audio-bytes"
        assert request.url.params.get_list("replace") == ["dash:-"]
        assert request.url.params["language"] == "en-US"
        assert request.url.params["model"] == "nova-2"

    @pytest.mark.asyncio
    async def test_missing_confidence_defaults_to_zero(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_deepgram_payload("hello", None))

        async with _client(handler) as client:
            stt = DeepgramSTT(api_key="k", base_url=DEEPGRAM_URL, client=client)
            result = await stt.transcribe(b"x", DeepgramConfig(), "en-US")

        assert result.confidence == 0

    @pytest.mark.asyncio
    async def test_empty_results(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"results": {"channels": []}})

        async with _client(handler) as client:
            stt = DeepgramSTT(api_key="k", base_url=DEEPGRAM_URL, client=client)
            result = await stt.transcribe(b"x", DeepgramConfig(), "en-US")

        assert result.transcript == ""
        assert result.confidence == 0

    @pytest.mark.asyncio
    async def test_http_error_raises_provider_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text='{"err_msg":"Invalid credentials"}')

        async with _client(handler) as client:
            stt = DeepgramSTT(api_key="bad", base_url=DEEPGRAM_URL, client=client)
            with pytest.raises(ProviderError) as exc_info:
                await stt.transcribe(b"x", DeepgramConfig(), "en-US")

        assert exc_info.value.provider == "deepgram"
        assert exc_info.value.status_code == 401
        assert "Invalid credentials" in exc_info.value.body
        assert "Deepgram API error" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error_raises_provider_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        async with _client(handler) as client:
            stt = DeepgramSTT(api_key="k", base_url=DEEPGRAM_URL, client=client)
            with pytest.raises(ProviderError):
                await stt.transcribe(b"x", DeepgramConfig(), "en-US")

    @pytest.mark.asyncio
    async def test_non_json_body_raises_provider_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        async with _client(handler) as client:
            stt = DeepgramSTT(api_key="k", base_url=DEEPGRAM_URL, client=client)
            with pytest.raises(ProviderError, match="invalid JSON") as exc_info:
                await stt.transcribe(b"x", DeepgramConfig(), "en-US")

        assert exc_info.value.status_code == 200
        assert exc_info.value.body == "<html>gateway</html>"

    @pytest.mark.asyncio
    async def test_non_object_body_raises_provider_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=["unexpected"])

        async with _client(handler) as client:
            stt = DeepgramSTT(api_key="k", base_url=DEEPGRAM_URL, client=client)
            with pytest.raises(ProviderError, match="unexpected response"):
                await stt.transcribe(b"x", DeepgramConfig(), "en-US")


class FakeAssemblyAI:
    """Routes AssemblyAI endpoints and counts status polls."""

    def __init__(self, completed_on: int | None = None):
        self.completed_on = completed_on
        self.polls = 0
        self.uploads: list[bytes] = []
        self.submitted: list[dict] = []
        self.fail: dict[str, httpx.Response] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        assert request.headers["authorization"] == "aai-key"

        if path == "/v2/upload":
            if "upload" in self.fail:
                return self.fail["upload"]
            self.uploads.append(request.content)
            return httpx.Response(200, json={"upload_url": "https://cdn.test/clip"})

        if path == "/v2/transcript" and request.method == "POST":
            if "submit" in self.fail:
                return self.fail["submit"]
            self.submitted.append(json.loads(request.content))
            return httpx.Response(200, json={"id": "tx-1", "status": "queued"})

        if path == "/v2/transcript/tx-1":
            self.polls += 1
            if "poll" in self.fail:
                return self.fail["poll"]
            if self.completed_on is not None and self.polls >= self.completed_on:
                return httpx.Response(
                    200,
                    json={
                        "id": "tx-1",
                        "status": "completed",
                        "text": "Payment code X7Q4-9Z.",
                        "confidence": 0.88,
                    },
                )
            return httpx.Response(200, json={"id": "tx-1", "status": "queued"})

        return httpx.Response(404, text="not found")


def _assemblyai(client: httpx.AsyncClient) -> AssemblyAISTT:
    return AssemblyAISTT(
        api_key="aai-key", base_url=ASSEMBLYAI_URL, poll_interval=0, client=client
    )


class TestAssemblyAISTT:
    """Tests for AssemblyAISTT upload/submit/poll flow."""

    @pytest.mark.asyncio
    async def test_completes_after_three_polls(self) -> None:
        fake = FakeAssemblyAI(completed_on=3)
        async with _client(fake) as client:
            config = AssemblyAIConfig(numerals=True, word_boost=["code"])
            result = await _assemblyai(client).transcribe(b"clip", config, "es")

        assert fake.polls == 3
        assert fake.uploads == [b"clip"]
        assert result.transcript == "Payment code X7Q4-9Z."
        assert result.confidence == 0.88
        assert result.raw["status"] == "completed"

        body = fake.submitted[0]
        assert body["audio_url"] == "https://cdn.test/clip"
        assert body["language_code"] == "es"
        assert body["format_text"] is True
        assert body["word_boost"] == ["code"]

    @pytest.mark.asyncio
    async def test_times_out_after_sixty_polls(self) -> None:
        fake = FakeAssemblyAI(completed_on=None)
        async with _client(fake) as client:
            with pytest.raises(ProviderTimeoutError, match="timeout"):
                await _assemblyai(client).transcribe(
                    b"clip", AssemblyAIConfig(), "en-US"
                )

        assert fake.polls == 60

    @pytest.mark.asyncio
    async def test_custom_poll_ceiling(self) -> None:
        fake = FakeAssemblyAI(completed_on=None)
        async with _client(fake) as client:
            stt = AssemblyAISTT(
                api_key="aai-key",
                base_url=ASSEMBLYAI_URL,
                poll_max_attempts=5,
                poll_interval=0,
                client=client,
            )
            with pytest.raises(ProviderTimeoutError):
                await stt.transcribe(b"clip", AssemblyAIConfig(), "en-US")

        assert fake.polls == 5

    @pytest.mark.asyncio
    async def test_job_error_status(self) -> None:
        fake = FakeAssemblyAI()
        fake.fail["poll"] = httpx.Response(
            200, json={"id": "tx-1", "status": "error", "error": "Audio too short"}
        )
        async with _client(fake) as client:
            with pytest.raises(ProviderError, match="Audio too short") as exc_info:
                await _assemblyai(client).transcribe(
                    b"clip", AssemblyAIConfig(), "en-US"
                )

        assert not isinstance(exc_info.value, ProviderTimeoutError)
        assert fake.polls == 1

    @pytest.mark.asyncio
    async def test_upload_failure_stops_immediately(self) -> None:
        fake = FakeAssemblyAI(completed_on=1)
        fake.fail["upload"] = httpx.Response(413, text="payload too large")
        async with _client(fake) as client:
            with pytest.raises(ProviderError, match="upload error: payload too large"):
                await _assemblyai(client).transcribe(
                    b"clip", AssemblyAIConfig(), "en-US"
                )

        assert fake.submitted == []
        assert fake.polls == 0

    @pytest.mark.asyncio
    async def test_submit_failure(self) -> None:
        fake = FakeAssemblyAI(completed_on=1)
        fake.fail["submit"] = httpx.Response(400, text="bad word_boost")
        async with _client(fake) as client:
            with pytest.raises(ProviderError) as exc_info:
                await _assemblyai(client).transcribe(
                    b"clip", AssemblyAIConfig(), "en-US"
                )

        assert exc_info.value.status_code == 400
        assert exc_info.value.body == "bad word_boost"
        assert fake.uploads == [b"clip"]
        assert fake.polls == 0

    @pytest.mark.asyncio
    async def test_poll_http_failure(self) -> None:
        fake = FakeAssemblyAI(completed_on=3)
        fake.fail["poll"] = httpx.Response(500, text="internal error")
        async with _client(fake) as client:
            with pytest.raises(ProviderError, match="polling error"):
                await _assemblyai(client).transcribe(
                    b"clip", AssemblyAIConfig(), "en-US"
                )

        assert fake.polls == 1

    @pytest.mark.asyncio
    async def test_upload_without_url_raises_provider_error(self) -> None:
        fake = FakeAssemblyAI(completed_on=1)
        fake.fail["upload"] = httpx.Response(200, json={"oops": 1})
        async with _client(fake) as client:
            with pytest.raises(ProviderError, match="upload error") as exc_info:
                await _assemblyai(client).transcribe(
                    b"clip", AssemblyAIConfig(), "en-US"
                )

        assert '"oops"' in exc_info.value.body
        assert fake.submitted == []

    @pytest.mark.asyncio
    async def test_submit_without_id_raises_provider_error(self) -> None:
        fake = FakeAssemblyAI(completed_on=1)
        fake.fail["submit"] = httpx.Response(200, json={"status": "queued"})
        async with _client(fake) as client:
            with pytest.raises(ProviderError, match="transcription error"):
                await _assemblyai(client).transcribe(
                    b"clip", AssemblyAIConfig(), "en-US"
                )

        assert fake.polls == 0

    @pytest.mark.asyncio
    async def test_poll_non_json_raises_provider_error(self) -> None:
        fake = FakeAssemblyAI(completed_on=3)
        fake.fail["poll"] = httpx.Response(200, text="<html>bad gateway</html>")
        async with _client(fake) as client:
            with pytest.raises(
                ProviderError, match="polling error: invalid JSON"
            ) as exc_info:
                await _assemblyai(client).transcribe(
                    b"clip", AssemblyAIConfig(), "en-US"
                )

        assert not isinstance(exc_info.value, ProviderTimeoutError)
        assert exc_info.value.body == "<html>bad gateway</html>"
        assert fake.polls == 1


class TestGetSttProvider:
    """Tests for the provider factory."""

    def _settings(self) -> Settings:
        return Settings(
            _env_file=None,
            deepgram_api_key="dg",
            assemblyai_api_key="aai",
            poll_max_attempts=10,
            poll_interval_seconds=0.5,
        )

    def test_deepgram(self) -> None:
        stt = get_stt_provider("deepgram", self._settings())
        assert isinstance(stt, DeepgramSTT)
        assert stt.api_key == "dg"

    def test_assemblyai(self) -> None:
        stt = get_stt_provider("assemblyai", self._settings())
        assert isinstance(stt, AssemblyAISTT)
        assert stt.api_key == "aai"
        assert stt.poll_max_attempts == 10
        assert stt.poll_interval == 0.5

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown STT provider"):
            get_stt_provider("whisper", self._settings())
