from typing import Optional
from datetime import date, datetime
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class UserCardProgress(SQLModel, table=True):
    __tablename__ = "user_card_progress"
    __table_args__ = (UniqueConstraint("user_id", "flashcard_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    flashcard_id: int = Field(foreign_key="flashcards.id", index=True)
    confidence_level: int = Field(default=0)  # 0-5
    times_seen: int = Field(default=0)
    last_seen: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    next_review_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    mastery_status: str = Field(default="new")  # new | learning | mastered

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class StudySession(SQLModel, table=True):
    __tablename__ = "study_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    deck_id: Optional[int] = Field(default=None, foreign_key="decks.id")
    started_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    ended_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    cards_studied: int = Field(default=0)
    average_confidence: Optional[float] = None
    study_duration: Optional[int] = None  # seconds


class SessionCard(SQLModel, table=True):
    __tablename__ = "session_cards"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="study_sessions.id", index=True)
    flashcard_id: int = Field(foreign_key="flashcards.id")
    confidence_rating: int
    response_time: Optional[int] = None  # milliseconds
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class UserStats(SQLModel, table=True):
    __tablename__ = "user_stats"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)
    total_cards_studied: int = Field(default=0)
    study_streak_days: int = Field(default=0)
    total_study_time: int = Field(default=0)  # seconds
    last_active_date: Optional[date] = None

    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
