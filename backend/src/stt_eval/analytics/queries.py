"""Load dashboard data from the row store."""

from sqlmodel import Session

from stt_eval.analytics.types import AnalyticsData, SessionWithAttempts
from stt_eval.db.models import Attempt
from stt_eval.db.repository import AttemptRepository, SessionRepository


def fetch_all_analytics_data(session: Session) -> AnalyticsData:
    """Read every session and attempt, newest first, and nest the attempts.

    Args:
        session: SQLModel session for database operations

    Returns:
        AnalyticsData with sessions (each carrying its attempts) and the flat
        attempt list.
    """
    eval_sessions = SessionRepository(session).list_all()
    attempts = AttemptRepository(session).list_all()

    attempts_by_session: dict[str, list[Attempt]] = {}
    for attempt in attempts:
        attempts_by_session.setdefault(attempt.session_id, []).append(attempt)

    sessions_with_attempts = [
        SessionWithAttempts(
            id=s.id,
            tester_name=s.tester_name,
            locale=s.locale,
            provider=s.provider,
            config=s.config,
            notes=s.notes,
            created_at=s.created_at,
            attempts=attempts_by_session.get(s.id, []),
        )
        for s in eval_sessions
    ]

    return AnalyticsData(sessions=sessions_with_attempts, all_attempts=attempts)
