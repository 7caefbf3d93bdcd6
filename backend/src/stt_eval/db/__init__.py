"""Database module for evaluation persistence."""

from stt_eval.db.models import Attempt, EvalSession, Tester
from stt_eval.db.repository import (
    AttemptRepository,
    SessionRepository,
    TesterRepository,
    get_engine,
    get_session,
    init_db,
)

__all__ = [
    "Attempt",
    "EvalSession",
    "Tester",
    "AttemptRepository",
    "SessionRepository",
    "TesterRepository",
    "get_engine",
    "get_session",
    "init_db",
]
