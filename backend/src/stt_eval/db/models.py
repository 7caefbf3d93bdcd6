"""SQLModel models for evaluation sessions and attempts.

Schema design:
- Table names: snake_case plural, ``stt_`` prefix for evaluation data
- Column names: snake_case
- Foreign keys: {table_singular}_id
- Sessions and attempts are insert-only
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel


def generate_id() -> str:
    """Generate a UUID-based ID for database records."""
    return str(uuid4())


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


class Tester(SQLModel, table=True):
    """A person recording prompts, looked up by name."""

    __tablename__ = "testers"
    __table_args__ = {"extend_existing": True}

    id: str = Field(default_factory=generate_id, primary_key=True)
    name: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=utc_now)


class EvalSession(SQLModel, table=True):
    """A tester's configured testing run.

    Attributes:
        id: UUID-based primary key
        tester_id: Foreign key to the tester
        tester_name: Tester name as entered when the session started
        locale: Prompt locale ("en" or "es")
        provider: Provider used for every attempt in the session
        config: Snapshot of the STT config used for the run
        notes: Optional free-form notes
        created_at: When the session was created
    """

    __tablename__ = "stt_sessions"
    __table_args__ = {"extend_existing": True}

    id: str = Field(default_factory=generate_id, primary_key=True)
    tester_id: str | None = Field(default=None, foreign_key="testers.id", index=True)
    tester_name: str
    locale: str = "en"
    provider: str = "deepgram"
    config: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    attempts: list["Attempt"] = Relationship(back_populates="session")


class Attempt(SQLModel, table=True):
    """One recorded utterance and its transcription.

    Attributes:
        id: UUID-based primary key
        session_id: Foreign key to parent session
        expected_prompt: Prompt the tester was asked to read
        transcript: Transcript returned by the provider
        confidence: Provider confidence (0..1), None if not reported
        provider: Provider that produced the transcript
        duration_ms: Recording length in milliseconds
        raw: Full provider response
        audio_url: Storage path of the recorded clip, if it was stored
        created_at: When the attempt was recorded
    """

    __tablename__ = "stt_attempts"
    __table_args__ = {"extend_existing": True}

    id: str = Field(default_factory=generate_id, primary_key=True)
    session_id: str = Field(foreign_key="stt_sessions.id", index=True)
    expected_prompt: str
    transcript: str = ""
    confidence: float | None = None
    provider: str | None = None
    duration_ms: int | None = None
    raw: Any = Field(default=None, sa_column=Column(JSON))
    audio_url: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    session: EvalSession | None = Relationship(back_populates="attempts")
