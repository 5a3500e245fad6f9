from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class UserFeedback(SQLModel, table=True):
    __tablename__ = "user_feedback"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)

    # What the report is about; at least one question/card id is set
    flashcard_id: Optional[int] = Field(default=None, foreign_key="flashcards.id")
    quiz_question_id: Optional[int] = Field(default=None, foreign_key="quiz_questions.id")
    deck_quiz_question_id: Optional[int] = Field(default=None, foreign_key="deck_quiz_questions.id")
    deck_id: Optional[int] = Field(default=None, foreign_key="decks.id")
    class_id: Optional[int] = Field(default=None, foreign_key="classes.id")

    feedback_type: str
    feedback_text: str
    screenshot_url: Optional[str] = None
    user_agent: Optional[str] = None
    page_url: Optional[str] = None

    status: str = Field(default="pending", index=True)
    priority: str = Field(default="medium")
    admin_response: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
