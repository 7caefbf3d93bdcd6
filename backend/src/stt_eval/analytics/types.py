"""Input and output types for dashboard aggregations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from pydantic import BaseModel


class AttemptLike(Protocol):
    """Attributes the aggregations read from an attempt row."""

    expected_prompt: str
    provider: str | None
    confidence: float | None
    duration_ms: int | None
    created_at: datetime | str


@dataclass
class SessionWithAttempts:
    """A session row together with its attempts."""

    id: str
    tester_name: str
    locale: str
    provider: str
    config: dict
    notes: str | None
    created_at: datetime
    attempts: list[AttemptLike] = field(default_factory=list)


@dataclass
class AnalyticsData:
    """Everything the dashboard aggregates over."""

    sessions: list[SessionWithAttempts]
    all_attempts: list[AttemptLike]


class ProviderComparison(BaseModel):
    provider: str
    total_attempts: int
    avg_confidence: float
    high_confidence_rate: float
    avg_duration: float


class TesterStats(BaseModel):
    name: str
    total_attempts: int
    avg_confidence: float
    high_confidence_rate: float


class PromptDifficulty(BaseModel):
    prompt: str
    total_attempts: int
    avg_confidence: float
    failure_rate: float
    by_provider: dict[str, float]


class DailyTrend(BaseModel):
    date: str
    attempts: int
    avg_confidence: float
    provider_counts: dict[str, int]


class OverallStats(BaseModel):
    total_sessions: int
    total_attempts: int
    avg_confidence: float
