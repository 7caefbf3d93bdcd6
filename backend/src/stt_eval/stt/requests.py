"""Translate an STT config into a vendor request."""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from stt_eval.stt.config import AssemblyAIConfig, DeepgramConfig

DEEPGRAM_LISTEN_URL = "https://api.deepgram.com/v1/listen"
KEYWORDS_INTENSIFIER = "3"
BASELINE_DEEPGRAM_MODEL = "base"


@dataclass
class DeepgramRequest:
    """Query parameters for a Deepgram pre-recorded request.

    ``params`` keeps insertion order and may repeat a name (``redact``,
    ``replace``).
    """

    base_url: str = DEEPGRAM_LISTEN_URL
    params: list[tuple[str, str]] = field(default_factory=list)

    @property
    def query_string(self) -> str:
        return urlencode(self.params)

    @property
    def url(self) -> str:
        return f"{self.base_url}?{self.query_string}"

    def values(self, name: str) -> list[str]:
        """All values sent for ``name``, in order."""
        return [value for key, value in self.params if key == name]


def _flag(value: bool | None) -> str:
    return "true" if value else "false"


def language_for_locale(locale: str | None) -> str:
    """Map a session locale to the language parameter sent to providers."""
    if locale == "es":
        return "es"
    return "en-US"


def build_deepgram_request(
    config: DeepgramConfig | AssemblyAIConfig,
    language: str,
    base_url: str = DEEPGRAM_LISTEN_URL,
) -> DeepgramRequest:
    """Build the Deepgram query string for ``config``.

    A non-Deepgram config contributes only its common fields.
    """
    if not isinstance(config, DeepgramConfig):
        config = DeepgramConfig(**config.common_fields())

    request = DeepgramRequest(base_url=base_url)
    params = request.params

    params.append(("smart_format", _flag(config.smart_format)))
    params.append(("punctuate", _flag(config.punctuate)))
    params.append(("numerals", _flag(config.numerals)))
    params.append(("filler_words", _flag(config.filler_words)))
    params.append(("profanity_filter", _flag(config.profanity_filter)))
    params.append(("diarize", "false"))

    if config.detect_language:
        params.append(("detect_language", "true"))
    else:
        params.append(("language", language))

    if config.model and config.model != BASELINE_DEEPGRAM_MODEL:
        params.append(("model", config.model))

    keywords = (config.keywords or "").strip()
    if keywords:
        params.append(("keywords", keywords))
        params.append(("keywords:intensifier", KEYWORDS_INTENSIFIER))

    for item in config.redact:
        params.append(("redact", item))

    if config.utterances:
        params.append(("utterances", "true"))

    for find, replacement in config.replace.items():
        if find:
            params.append(("replace", f"{find}:{replacement}"))

    return request


def build_assemblyai_request(
    config: DeepgramConfig | AssemblyAIConfig,
    language: str,
    audio_url: str,
) -> dict[str, Any]:
    """Build the AssemblyAI transcript job body for ``config``.

    A non-AssemblyAI config contributes only its common fields.
    """
    if not isinstance(config, AssemblyAIConfig):
        config = AssemblyAIConfig(**config.common_fields())

    return {
        "audio_url": audio_url,
        "language_code": "es" if language == "es" else "en_us",
        "punctuate": config.punctuate,
        "format_text": config.numerals,
        "filter_profanity": config.profanity_filter,
        "speaker_labels": config.speaker_labels,
        "entity_detection": config.entity_detection,
        "word_boost": list(config.word_boost),
        "boost_param": config.boost_param,
    }
