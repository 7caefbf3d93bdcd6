"""Aggregations behind the comparison dashboard.

Every function is a pure fold over rows already loaded in memory. Averages
divide by the group's total attempt count, including attempts without a
confidence, so missing confidences pull the average down.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from stt_eval.analytics.types import (
    AttemptLike,
    DailyTrend,
    OverallStats,
    PromptDifficulty,
    ProviderComparison,
    SessionWithAttempts,
    TesterStats,
)

UNKNOWN_PROVIDER = "unknown"
HIGH_CONFIDENCE_THRESHOLD = 0.9
FAILURE_CONFIDENCE_THRESHOLD = 0.8
PROMPT_LABEL_LENGTH = 40


def _ratio(numerator: float, denominator: int) -> float:
    return numerator / denominator if denominator > 0 else 0


def _provider_key(attempt: AttemptLike) -> str:
    return attempt.provider or UNKNOWN_PROVIDER


def _utc_date(created_at: datetime | str) -> str:
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.astimezone(timezone.utc).date().isoformat()


def _prompt_label(prompt: str) -> str:
    if len(prompt) > PROMPT_LABEL_LENGTH:
        return prompt[:PROMPT_LABEL_LENGTH] + "..."
    return prompt


def calculate_provider_comparison(
    attempts: Iterable[AttemptLike],
) -> list[ProviderComparison]:
    """Compare providers by confidence and recording duration."""
    groups: dict[str, dict[str, float]] = {}

    for attempt in attempts:
        group = groups.setdefault(
            _provider_key(attempt),
            {"total": 0, "confidence": 0.0, "high": 0, "duration": 0.0},
        )
        group["total"] += 1
        if attempt.confidence is not None:
            group["confidence"] += attempt.confidence
            if attempt.confidence > HIGH_CONFIDENCE_THRESHOLD:
                group["high"] += 1
        if attempt.duration_ms:
            group["duration"] += attempt.duration_ms

    return [
        ProviderComparison(
            provider=provider,
            total_attempts=int(g["total"]),
            avg_confidence=_ratio(g["confidence"], int(g["total"])),
            high_confidence_rate=_ratio(g["high"], int(g["total"])),
            avg_duration=_ratio(g["duration"], int(g["total"])),
        )
        for provider, g in groups.items()
    ]


def calculate_tester_stats(sessions: Iterable[SessionWithAttempts]) -> list[TesterStats]:
    """Per-tester totals across all of their sessions."""
    groups: dict[str, dict[str, float]] = {}

    for session in sessions:
        group = groups.setdefault(
            session.tester_name, {"total": 0, "confidence": 0.0, "high": 0}
        )
        for attempt in session.attempts:
            group["total"] += 1
            if attempt.confidence is not None:
                group["confidence"] += attempt.confidence
                if attempt.confidence > HIGH_CONFIDENCE_THRESHOLD:
                    group["high"] += 1

    return [
        TesterStats(
            name=name,
            total_attempts=int(g["total"]),
            avg_confidence=_ratio(g["confidence"], int(g["total"])),
            high_confidence_rate=_ratio(g["high"], int(g["total"])),
        )
        for name, g in groups.items()
    ]


def calculate_prompt_difficulty(
    attempts: Iterable[AttemptLike],
) -> list[PromptDifficulty]:
    """Per-prompt confidence and failure rate, with a per-provider breakdown.

    Groups on the full prompt text; only the returned label is truncated.
    The per-provider breakdown averages confidence-bearing attempts only.
    """
    groups: dict[str, dict] = {}

    for attempt in attempts:
        group = groups.setdefault(
            attempt.expected_prompt,
            {"total": 0, "confidence": 0.0, "failures": 0, "by_provider": {}},
        )
        group["total"] += 1
        if attempt.confidence is None:
            continue

        group["confidence"] += attempt.confidence
        if attempt.confidence < FAILURE_CONFIDENCE_THRESHOLD:
            group["failures"] += 1

        per_provider = group["by_provider"].setdefault(
            _provider_key(attempt), {"total": 0, "sum": 0.0}
        )
        per_provider["total"] += 1
        per_provider["sum"] += attempt.confidence

    return [
        PromptDifficulty(
            prompt=_prompt_label(prompt),
            total_attempts=g["total"],
            avg_confidence=_ratio(g["confidence"], g["total"]),
            failure_rate=_ratio(g["failures"], g["total"]),
            by_provider={
                provider: _ratio(p["sum"], p["total"])
                for provider, p in g["by_provider"].items()
            },
        )
        for prompt, g in groups.items()
    ]


def calculate_daily_trends(attempts: Iterable[AttemptLike]) -> list[DailyTrend]:
    """Attempts per UTC calendar day, oldest day first."""
    groups: dict[str, dict] = {}

    for attempt in attempts:
        date = _utc_date(attempt.created_at)
        group = groups.setdefault(
            date, {"attempts": 0, "confidence": 0.0, "providers": {}}
        )
        group["attempts"] += 1
        if attempt.confidence is not None:
            group["confidence"] += attempt.confidence
        provider = _provider_key(attempt)
        group["providers"][provider] = group["providers"].get(provider, 0) + 1

    return sorted(
        (
            DailyTrend(
                date=date,
                attempts=g["attempts"],
                avg_confidence=_ratio(g["confidence"], g["attempts"]),
                provider_counts=g["providers"],
            )
            for date, g in groups.items()
        ),
        key=lambda trend: trend.date,
    )


def calculate_overall_stats(
    sessions: Sequence[SessionWithAttempts], attempts: Sequence[AttemptLike]
) -> OverallStats:
    """Headline totals for the dashboard."""
    confidence_sum = sum(attempt.confidence or 0 for attempt in attempts)
    return OverallStats(
        total_sessions=len(sessions),
        total_attempts=len(attempts),
        avg_confidence=_ratio(confidence_sum, len(attempts)),
    )
