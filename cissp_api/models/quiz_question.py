from typing import Any, Dict, List, Optional
from datetime import datetime
from sqlalchemy import JSON
from sqlmodel import SQLModel, Field
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class QuizQuestionBase(SQLModel):
    question_text: str
    # [{"text": "...", "isCorrect": bool}]
    options: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    explanation: Optional[str] = None

    # Each justification field maps an option label to its reasoning
    elimination_tactics: Optional[Dict[str, str]] = Field(default=None, sa_type=JSON)
    correct_answer_with_justification: Optional[Dict[str, str]] = Field(default=None, sa_type=JSON)
    compare_remaining_options_with_justification: Optional[Dict[str, str]] = Field(default=None, sa_type=JSON)
    correct_options_justification: Optional[Dict[str, str]] = Field(default=None, sa_type=JSON)

    order: int = Field(default=0)
    created_by: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class QuizQuestion(QuizQuestionBase, table=True):
    """Question attached to a single flashcard."""

    __tablename__ = "quiz_questions"

    id: Optional[int] = Field(default=None, primary_key=True)
    flashcard_id: int = Field(foreign_key="flashcards.id", index=True)


class DeckQuizQuestion(QuizQuestionBase, table=True):
    """Question attached to a whole deck."""

    __tablename__ = "deck_quiz_questions"

    id: Optional[int] = Field(default=None, primary_key=True)
    deck_id: int = Field(foreign_key="decks.id", index=True)
    difficulty: Optional[int] = None  # 1-5
    sub_topic_id: Optional[int] = Field(default=None, foreign_key="sub_topics.id", index=True)
