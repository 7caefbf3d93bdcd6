"""REST endpoints for sessions, transcription, analytics and playback."""

import math
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from stt_eval.analytics import (
    DailyTrend,
    OverallStats,
    PromptDifficulty,
    ProviderComparison,
    TesterStats,
    calculate_daily_trends,
    calculate_overall_stats,
    calculate_prompt_difficulty,
    calculate_provider_comparison,
    calculate_tester_stats,
    fetch_all_analytics_data,
)
from stt_eval.core.config import Settings, get_settings
from stt_eval.core.logging import get_logger
from stt_eval.db import (
    AttemptRepository,
    SessionRepository,
    TesterRepository,
    get_engine,
)
from stt_eval.prompts import Prompt, select_prompts
from stt_eval.storage import AudioStorageError, AudioStore, get_audio_store
from stt_eval.stt import (
    ProviderError,
    ProviderTimeoutError,
    default_config_for,
    get_stt_provider,
    parse_stt_config,
)
from stt_eval.stt.requests import language_for_locale

router = APIRouter(prefix="/api/v1")
logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "audio/webm"
# Durations outside 0..MAX_DURATION_MS are stored as null.
MAX_DURATION_MS = 24 * 60 * 60 * 1000


class CreateSessionRequest(BaseModel):
    """Request body for starting a session."""

    name: str | None = None
    locale: str | None = None
    notes: str | None = None
    config: dict[str, Any] | None = None


class CreateSessionResponse(BaseModel):
    session_id: str
    provider: str
    config: dict[str, Any]


class TranscribeResponse(BaseModel):
    transcript: str
    confidence: float | None
    raw: Any
    audio_url: str | None


class AttemptResponse(BaseModel):
    id: str
    expected_prompt: str
    transcript: str
    confidence: float | None
    provider: str | None
    duration_ms: int | None
    audio_url: str | None
    created_at: datetime


class SessionResponse(BaseModel):
    id: str
    tester_name: str
    locale: str
    provider: str
    config: dict[str, Any]
    notes: str | None
    created_at: datetime
    attempts: list[AttemptResponse]


class AnalyticsResponse(BaseModel):
    overall: OverallStats
    providers: list[ProviderComparison]
    testers: list[TesterStats]
    prompts: list[PromptDifficulty]
    daily_trends: list[DailyTrend]


class SignedUrlRequest(BaseModel):
    path: str


class SignedUrlResponse(BaseModel):
    signed_url: str
    expires_in: int


def _api_key_for(provider: str, settings: Settings) -> str | None:
    match provider:
        case "deepgram":
            return settings.deepgram_api_key
        case "assemblyai":
            return settings.assemblyai_api_key
        case _:
            return None


def _parse_duration_ms(value: str | None) -> int | None:
    if not value:
        return None
    try:
        duration = float(value)
    except ValueError:
        return None
    if not math.isfinite(duration) or not 0 <= duration <= MAX_DURATION_MS:
        return None
    return round(duration)


@router.post("/session")
async def create_session(
    body: CreateSessionRequest | None = None,
) -> CreateSessionResponse:
    """Start a testing session for a tester.

    The session's provider is taken from the config's ``provider`` tag.

    Raises:
        HTTPException: 400 if name is missing or the config is invalid,
            500 if the session cannot be stored.
    """
    body = body or CreateSessionRequest()
    name = (body.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="name is required")

    locale = "es" if body.locale == "es" else "en"
    notes = (body.notes or "").strip() or None

    try:
        config = parse_stt_config(body.config)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"invalid config: {e}") from e

    try:
        with Session(get_engine()) as db:
            tester = TesterRepository(db).get_or_create(name)
            eval_session = SessionRepository(db).create(
                tester_name=name,
                provider=config.provider,
                config=config.model_dump(),
                locale=locale,
                notes=notes,
                tester_id=tester.id,
            )
            response = CreateSessionResponse(
                session_id=eval_session.id,
                provider=eval_session.provider,
                config=eval_session.config,
            )
    except SQLAlchemyError as e:
        logger.error("session_create_failed", tester=name, error=str(e))
        raise HTTPException(status_code=500, detail=str(e)) from e

    logger.info(
        "session_created",
        session_id=response.session_id,
        tester=name,
        locale=locale,
        provider=response.provider,
    )
    return response


@router.post("/transcribe")
async def transcribe(
    audio: UploadFile | None = File(default=None),
    session_id: str | None = Form(default=None),
    expected_prompt: str | None = Form(default=None),
    locale: str | None = Form(default=None),
    duration_ms: str | None = Form(default=None),
    settings: Settings = Depends(get_settings),
    audio_store: AudioStore = Depends(get_audio_store),
) -> TranscribeResponse:
    """Transcribe one recorded clip with the session's provider and log it.

    Raises:
        HTTPException: 400 on missing fields, 404 for an unknown session,
            500 if the provider key is missing or the attempt cannot be
            stored, 502 on a provider error, 504 on a provider timeout.
    """
    if audio is None or not session_id or not expected_prompt:
        raise HTTPException(
            status_code=400,
            detail="audio, session_id, and expected_prompt are required",
        )

    with Session(get_engine()) as db:
        eval_session = SessionRepository(db).get(session_id)
        if eval_session is None:
            raise HTTPException(status_code=404, detail="Session not found")
        provider = eval_session.provider or "deepgram"
        stored_config = eval_session.config

    try:
        config = parse_stt_config(stored_config)
    except ValidationError as e:
        raise HTTPException(
            status_code=500, detail=f"stored session config is invalid: {e}"
        ) from e

    if not _api_key_for(provider, settings):
        label = "Deepgram" if provider == "deepgram" else "AssemblyAI"
        raise HTTPException(status_code=500, detail=f"{label} API key not configured")

    try:
        stt = get_stt_provider(provider, settings)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    audio_data = await audio.read()
    content_type = audio.content_type or DEFAULT_CONTENT_TYPE
    language = language_for_locale(locale or "en")

    # Storing the clip is best effort
    audio_url: str | None = None
    try:
        audio_url = audio_store.upload(
            session_id, audio_data, content_type=content_type, filename=audio.filename
        )
    except AudioStorageError as e:
        logger.warning("audio_upload_failed", session_id=session_id, error=str(e))

    try:
        result = await stt.transcribe(audio_data, config, language, content_type)
    except ProviderTimeoutError as e:
        logger.error("transcription_timeout", session_id=session_id, provider=provider)
        raise HTTPException(status_code=504, detail=str(e)) from e
    except ProviderError as e:
        logger.error(
            "transcription_failed",
            session_id=session_id,
            provider=provider,
            status_code=e.status_code,
            error=str(e),
        )
        raise HTTPException(status_code=502, detail=str(e)) from e

    try:
        with Session(get_engine()) as db:
            attempt = AttemptRepository(db).create(
                session_id=session_id,
                expected_prompt=expected_prompt,
                transcript=result.transcript,
                confidence=result.confidence,
                provider=provider,
                raw=result.raw,
                duration_ms=_parse_duration_ms(duration_ms),
                audio_url=audio_url,
            )
            attempt_id = attempt.id
    except SQLAlchemyError as e:
        logger.error("attempt_insert_failed", session_id=session_id, error=str(e))
        raise HTTPException(status_code=500, detail=str(e)) from e

    logger.info(
        "attempt_recorded",
        session_id=session_id,
        attempt_id=attempt_id,
        provider=provider,
        confidence=result.confidence,
    )

    return TranscribeResponse(
        transcript=result.transcript,
        confidence=result.confidence,
        raw=result.raw,
        audio_url=audio_url,
    )


@router.get("/sessions")
async def list_sessions() -> list[SessionResponse]:
    """List all sessions, newest first, each with its attempts."""
    with Session(get_engine()) as db:
        data = fetch_all_analytics_data(db)
        return [
            SessionResponse(
                id=s.id,
                tester_name=s.tester_name,
                locale=s.locale,
                provider=s.provider,
                config=s.config,
                notes=s.notes,
                created_at=s.created_at,
                attempts=[
                    AttemptResponse(
                        id=a.id,
                        expected_prompt=a.expected_prompt,
                        transcript=a.transcript,
                        confidence=a.confidence,
                        provider=a.provider,
                        duration_ms=a.duration_ms,
                        audio_url=a.audio_url,
                        created_at=a.created_at,
                    )
                    for a in s.attempts
                ],
            )
            for s in data.sessions
        ]


@router.get("/analytics")
async def get_analytics(
    prompt_limit: int = Query(default=10, ge=1, le=100),
) -> AnalyticsResponse:
    """Recompute every dashboard aggregate from the stored rows.

    Args:
        prompt_limit: Number of prompt difficulty rows to return.
    """
    with Session(get_engine()) as db:
        data = fetch_all_analytics_data(db)

        return AnalyticsResponse(
            overall=calculate_overall_stats(data.sessions, data.all_attempts),
            providers=calculate_provider_comparison(data.all_attempts),
            testers=calculate_tester_stats(data.sessions),
            prompts=calculate_prompt_difficulty(data.all_attempts)[:prompt_limit],
            daily_trends=calculate_daily_trends(data.all_attempts),
        )


@router.get("/prompts")
async def list_prompts(
    locale: str = Query(default="en"),
    settings: Settings = Depends(get_settings),
) -> list[Prompt]:
    """Prompt catalogue for a locale."""
    return select_prompts(locale, settings.example_set)


@router.get("/config/defaults")
async def get_default_config(
    provider: str = Query(default="deepgram"),
) -> dict[str, Any]:
    """Default STT config for a provider."""
    try:
        return default_config_for(provider).model_dump()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post("/audio/signed-url")
async def create_signed_audio_url(
    body: SignedUrlRequest,
    settings: Settings = Depends(get_settings),
    audio_store: AudioStore = Depends(get_audio_store),
) -> SignedUrlResponse:
    """Issue a time-limited playback URL for a stored clip."""
    try:
        signed_url = audio_store.create_signed_url(body.path)
    except AudioStorageError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return SignedUrlResponse(
        signed_url=signed_url, expires_in=settings.signed_url_expiry_seconds
    )


@router.get("/audio/{token}")
async def get_audio(
    token: str,
    settings: Settings = Depends(get_settings),
    audio_store: AudioStore = Depends(get_audio_store),
) -> FileResponse:
    """Serve a stored clip through a signed token."""
    try:
        path = audio_store.resolve_signed_token(
            token, max_age=settings.signed_url_expiry_seconds
        )
    except AudioStorageError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return FileResponse(path)
