"""Provider configuration models.

A config is a tagged union on ``provider``. Fields shared by every vendor live
on ``BaseSTTConfig``; vendor-only options live on the variant that uses them.
Keys belonging to the other variant are dropped on parse rather than rejected,
so stored configs written by older clients keep loading.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationInfo, field_validator

ProviderName = Literal["deepgram", "assemblyai"]
BoostParam = Literal["low", "default", "high"]

PROVIDERS: tuple[str, ...] = ("deepgram", "assemblyai")


class BaseSTTConfig(BaseModel):
    """Options understood by every provider."""

    model_config = ConfigDict(extra="ignore")

    model: str = ""
    punctuate: bool = False
    numerals: bool = False
    profanity_filter: bool = False
    language: str = "en"

    @field_validator(
        "model",
        "punctuate",
        "numerals",
        "profanity_filter",
        "language",
        "smart_format",
        "filler_words",
        "replace",
        "keywords",
        "detect_language",
        "redact",
        "utterances",
        "speaker_labels",
        "entity_detection",
        "word_boost",
        "boost_param",
        mode="before",
        check_fields=False,
    )
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        """Treat an explicit ``null`` option as if it were left out."""
        if value is None and info.field_name is not None:
            field = cls.model_fields[info.field_name]
            if not field.is_required():
                return field.get_default(call_default_factory=True)
        return value

    def common_fields(self) -> dict[str, Any]:
        """Return only the fields declared on ``BaseSTTConfig``."""
        return self.model_dump(include=set(BaseSTTConfig.model_fields))


class DeepgramConfig(BaseSTTConfig):
    """Deepgram pre-recorded options."""

    provider: Literal["deepgram"] = "deepgram"
    model: str = "base"
    smart_format: bool = False
    filler_words: bool = False
    replace: dict[str, str] = Field(default_factory=dict)
    keywords: str | None = None
    detect_language: bool = False
    redact: list[str] = Field(default_factory=list)
    utterances: bool = False


class AssemblyAIConfig(BaseSTTConfig):
    """AssemblyAI async transcription options."""

    provider: Literal["assemblyai"] = "assemblyai"
    model: str = "best"
    speaker_labels: bool = False
    entity_detection: bool = False
    word_boost: list[str] = Field(default_factory=list)
    boost_param: BoostParam = "default"


STTConfig = Annotated[DeepgramConfig | AssemblyAIConfig, Field(discriminator="provider")]

_config_adapter: TypeAdapter[DeepgramConfig | AssemblyAIConfig] = TypeAdapter(STTConfig)


DEFAULT_DEEPGRAM_CONFIG = DeepgramConfig(
    model="nova-2",
    punctuate=True,
    numerals=True,
    profanity_filter=False,
    language="en",
    smart_format=False,
    filler_words=False,
    keywords="payment code, account number, confirmation, reference, dash, guion, raya",
    detect_language=False,
    redact=[],
    utterances=False,
    # Deepgram applies replacements in order.
    replace={
        "dash": "-",
        "Dash": "-",
        "at": "@",
        "At": "@",
        "dollar": "$",
        "dólar": "$",
        "guion": "-",
        "Guion": "-",
        "guión": "-",
        "Guión": "-",
        "raya": "-",
        "Raya": "-",
        "menos": "-",
        "Menos": "-",
        "arroba": "@",
        "Arroba": "@",
        "email": "email",
        "Email": "email",
        "space": " ",
        "Space": " ",
        "punto": ".",
        "coma": ",",
    },
)

DEFAULT_ASSEMBLYAI_CONFIG = AssemblyAIConfig(
    model="best",
    punctuate=True,
    numerals=True,
    profanity_filter=False,
    language="en",
    speaker_labels=False,
    entity_detection=False,
    word_boost=["payment", "code", "account", "dash", "guion", "raya"],
    boost_param="high",
)


def default_config_for(provider: str) -> DeepgramConfig | AssemblyAIConfig:
    """Return a fresh copy of the default config for ``provider``.

    Raises:
        ValueError: If the provider is not supported.
    """
    match provider:
        case "deepgram":
            return DEFAULT_DEEPGRAM_CONFIG.model_copy(deep=True)
        case "assemblyai":
            return DEFAULT_ASSEMBLYAI_CONFIG.model_copy(deep=True)
        case _:
            raise ValueError(f"Unknown STT provider: {provider}")


def parse_stt_config(
    data: dict[str, Any] | None,
) -> DeepgramConfig | AssemblyAIConfig:
    """Build the config variant selected by ``data["provider"]``.

    A missing or empty provider selects Deepgram. Empty data yields the
    default Deepgram config.

    Raises:
        pydantic.ValidationError: If the data does not describe a valid config.
    """
    if not data:
        return default_config_for("deepgram")

    payload = dict(data)
    if not payload.get("provider"):
        payload["provider"] = "deepgram"
    return _config_adapter.validate_python(payload)
