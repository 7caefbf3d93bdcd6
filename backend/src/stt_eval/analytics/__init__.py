"""Dashboard aggregations over sessions and attempts."""

from stt_eval.analytics.calculations import (
    calculate_daily_trends,
    calculate_overall_stats,
    calculate_prompt_difficulty,
    calculate_provider_comparison,
    calculate_tester_stats,
)
from stt_eval.analytics.queries import fetch_all_analytics_data
from stt_eval.analytics.types import (
    AnalyticsData,
    DailyTrend,
    OverallStats,
    PromptDifficulty,
    ProviderComparison,
    SessionWithAttempts,
    TesterStats,
)

__all__ = [
    "AnalyticsData",
    "DailyTrend",
    "OverallStats",
    "PromptDifficulty",
    "ProviderComparison",
    "SessionWithAttempts",
    "TesterStats",
    "calculate_daily_trends",
    "calculate_overall_stats",
    "calculate_prompt_difficulty",
    "calculate_provider_comparison",
    "calculate_tester_stats",
    "fetch_all_analytics_data",
]
