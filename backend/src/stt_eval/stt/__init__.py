"""STT (Speech-to-Text) providers for the evaluation service."""

from stt_eval.core.config import Settings
from stt_eval.core.logging import get_logger
from stt_eval.stt.assemblyai import AssemblyAISTT
from stt_eval.stt.base import (
    BaseSTT,
    ProviderError,
    ProviderTimeoutError,
    TranscriptionResult,
)
from stt_eval.stt.config import (
    DEFAULT_ASSEMBLYAI_CONFIG,
    DEFAULT_DEEPGRAM_CONFIG,
    AssemblyAIConfig,
    BaseSTTConfig,
    DeepgramConfig,
    STTConfig,
    default_config_for,
    parse_stt_config,
)
from stt_eval.stt.deepgram import DeepgramSTT

logger = get_logger(__name__)


def get_stt_provider(provider: str, settings: Settings) -> BaseSTT:
    """Instantiate the adapter for ``provider``.

    Raises:
        ValueError: If the provider is not supported.
    """
    match provider:
        case "deepgram":
            stt: BaseSTT = DeepgramSTT(
                api_key=settings.deepgram_api_key or "",
                base_url=settings.deepgram_base_url,
                timeout=settings.http_timeout_seconds,
            )
        case "assemblyai":
            stt = AssemblyAISTT(
                api_key=settings.assemblyai_api_key or "",
                base_url=settings.assemblyai_base_url,
                timeout=settings.http_timeout_seconds,
                poll_max_attempts=settings.poll_max_attempts,
                poll_interval=settings.poll_interval_seconds,
            )
        case _:
            raise ValueError(f"Unknown STT provider: {provider}")

    logger.info("stt_provider_selected", provider=provider)
    return stt


__all__ = [
    "AssemblyAIConfig",
    "AssemblyAISTT",
    "BaseSTT",
    "BaseSTTConfig",
    "DEFAULT_ASSEMBLYAI_CONFIG",
    "DEFAULT_DEEPGRAM_CONFIG",
    "DeepgramConfig",
    "DeepgramSTT",
    "ProviderError",
    "ProviderTimeoutError",
    "STTConfig",
    "TranscriptionResult",
    "default_config_for",
    "get_stt_provider",
    "parse_stt_config",
]
