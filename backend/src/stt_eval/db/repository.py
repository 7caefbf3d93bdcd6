"""Repository layer for database operations.

Provides insert and read operations for testers, sessions and attempts.
Sessions and attempts are never updated or deleted.
Uses SQLite for local persistence (data/stt_eval.db).
"""

from collections.abc import Generator
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine, select

from stt_eval.db.models import Attempt, EvalSession, Tester, generate_id, utc_now


def _enable_sqlite_fk(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Module-level engine (initialized on first use)
_engine = None


def get_engine(db_path: Path | None = None):
    """Get or create the database engine.

    Args:
        db_path: Optional custom database path. Defaults to settings.database_path

    Returns:
        SQLModel engine instance
    """
    global _engine
    if _engine is None:
        if db_path is None:
            from stt_eval.core.config import settings

            db_path = settings.database_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        database_url = f"sqlite:///{db_path}"
        _engine = create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
        # Enable foreign key constraints for SQLite
        event.listen(_engine, "connect", _enable_sqlite_fk)
    return _engine


def init_db(db_path: Path | None = None) -> None:
    """Initialize the database by creating all tables.

    Args:
        db_path: Optional custom database path
    """
    engine = get_engine(db_path)
    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """Get a database session.

    Yields:
        Database session
    """
    engine = get_engine()
    with Session(engine) as session:
        yield session


class TesterRepository:
    """Repository for Tester lookups."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_name(self, name: str) -> Tester | None:
        statement = select(Tester).where(Tester.name == name).limit(1)
        return self.session.exec(statement).first()

    def get_or_create(self, name: str) -> Tester:
        """Return the tester called ``name``, inserting it if absent."""
        tester = self.get_by_name(name)
        if tester is not None:
            return tester

        tester = Tester(id=generate_id(), name=name, created_at=utc_now())
        self.session.add(tester)
        self.session.commit()
        self.session.refresh(tester)
        return tester


class SessionRepository:
    """Repository for evaluation session rows."""

    def __init__(self, session: Session):
        """Initialize repository with a database session.

        Args:
            session: SQLModel session for database operations
        """
        self.session = session

    def create(
        self,
        tester_name: str,
        provider: str,
        config: dict[str, Any],
        locale: str = "en",
        notes: str | None = None,
        tester_id: str | None = None,
    ) -> EvalSession:
        """Create a new evaluation session.

        Args:
            tester_name: Name of the tester
            provider: Provider selected for the session
            config: STT config snapshot
            locale: Prompt locale ("en" or "es")
            notes: Optional notes
            tester_id: Optional tester row ID

        Returns:
            Created EvalSession instance
        """
        eval_session = EvalSession(
            id=generate_id(),
            tester_id=tester_id,
            tester_name=tester_name,
            locale=locale,
            provider=provider,
            config=config,
            notes=notes,
            created_at=utc_now(),
        )
        self.session.add(eval_session)
        self.session.commit()
        self.session.refresh(eval_session)
        return eval_session

    def get(self, session_id: str) -> EvalSession | None:
        """Get a session by ID, or None if not found."""
        return self.session.get(EvalSession, session_id)

    def list_all(self) -> list[EvalSession]:
        """List every session, newest first."""
        statement = select(EvalSession).order_by(EvalSession.created_at.desc())
        return list(self.session.exec(statement).all())


class AttemptRepository:
    """Repository for transcription attempt rows."""

    def __init__(self, session: Session):
        """Initialize repository with a database session.

        Args:
            session: SQLModel session for database operations
        """
        self.session = session

    def create(
        self,
        session_id: str,
        expected_prompt: str,
        transcript: str,
        confidence: float | None,
        provider: str,
        raw: Any = None,
        duration_ms: int | None = None,
        audio_url: str | None = None,
    ) -> Attempt:
        """Record a transcription attempt.

        Args:
            session_id: Parent session ID
            expected_prompt: Prompt the tester read
            transcript: Provider transcript
            confidence: Provider confidence, if any
            provider: Provider name
            raw: Full provider response
            duration_ms: Recording length in milliseconds
            audio_url: Storage path of the clip

        Returns:
            Created Attempt instance
        """
        attempt = Attempt(
            id=generate_id(),
            session_id=session_id,
            expected_prompt=expected_prompt,
            transcript=transcript,
            confidence=confidence,
            provider=provider,
            raw=raw,
            duration_ms=duration_ms,
            audio_url=audio_url,
            created_at=utc_now(),
        )
        self.session.add(attempt)
        self.session.commit()
        self.session.refresh(attempt)
        return attempt

    def get(self, attempt_id: str) -> Attempt | None:
        return self.session.get(Attempt, attempt_id)

    def list_all(self) -> list[Attempt]:
        """List every attempt, newest first."""
        statement = select(Attempt).order_by(Attempt.created_at.desc())
        return list(self.session.exec(statement).all())

    def list_by_session(self, session_id: str) -> list[Attempt]:
        """List a session's attempts, newest first."""
        statement = (
            select(Attempt)
            .where(Attempt.session_id == session_id)
            .order_by(Attempt.created_at.desc())
        )
        return list(self.session.exec(statement).all())
