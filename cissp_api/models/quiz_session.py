from typing import Optional
from datetime import datetime
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class QuizSession(SQLModel, table=True):
    __tablename__ = "quiz_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    flashcard_id: Optional[int] = Field(default=None, foreign_key="flashcards.id")
    deck_id: Optional[int] = Field(default=None, foreign_key="decks.id")
    quiz_type: str  # "flashcard" or "deck"

    started_at: datetime = Field(sa_type=UTCDateTime)
    ended_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    total_questions: int
    correct_answers: int
    score_percentage: float
    quiz_duration: int  # seconds


class QuizSessionAnswer(SQLModel, table=True):
    __tablename__ = "quiz_session_answers"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="quiz_sessions.id", index=True)
    quiz_question_id: Optional[int] = Field(default=None, foreign_key="quiz_questions.id")
    deck_quiz_question_id: Optional[int] = Field(default=None, foreign_key="deck_quiz_questions.id")
    selected_option_index: int
    is_correct: bool
    time_spent: Optional[int] = None  # seconds
    question_order: int = Field(default=0)


class QuizProgressBase(SQLModel):
    times_taken: int = Field(default=0)
    total_questions_answered: int = Field(default=0)
    total_correct_answers: int = Field(default=0)
    average_score: float = Field(default=0.0)
    best_score: float = Field(default=0.0)
    last_score: float = Field(default=0.0)
    last_taken: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class UserQuizProgress(QuizProgressBase, table=True):
    """Aggregated results of one user's quizzes on one flashcard."""

    __tablename__ = "user_quiz_progress"
    __table_args__ = (UniqueConstraint("user_id", "flashcard_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    flashcard_id: int = Field(foreign_key="flashcards.id")
    mastery_status: str = Field(default="new")


class DeckQuizProgress(QuizProgressBase, table=True):
    __tablename__ = "deck_quiz_progress"
    __table_args__ = (UniqueConstraint("user_id", "deck_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    deck_id: int = Field(foreign_key="decks.id")
    mastery_percentage: float = Field(default=0.0)
