from datetime import datetime
from typing import Literal, Optional
from pydantic import Field, model_validator
from cissp_api.schemas.base import CamelModel

FeedbackType = Literal["content_error", "typo", "unclear_explanation", "technical_issue", "general_suggestion"]
FeedbackStatus = Literal["pending", "in_review", "resolved", "closed", "rejected"]
FeedbackPriority = Literal["low", "medium", "high", "critical"]


class FeedbackCreate(CamelModel):
    flashcard_id: Optional[int] = None
    quiz_question_id: Optional[int] = None
    deck_quiz_question_id: Optional[int] = None
    deck_id: Optional[int] = None
    class_id: Optional[int] = None
    feedback_type: FeedbackType
    feedback_text: str = Field(min_length=10, max_length=500)
    screenshot_url: Optional[str] = None
    page_url: Optional[str] = None
    user_agent: Optional[str] = None

    model_config = CamelModel.model_config | {"str_strip_whitespace": True}

    @model_validator(mode="after")
    def check_target(self) -> "FeedbackCreate":
        if not (self.flashcard_id or self.quiz_question_id or self.deck_quiz_question_id):
            raise ValueError("At least one of flashcardId, quizQuestionId or deckQuizQuestionId is required")
        return self


class FeedbackUpdate(CamelModel):
    status: Optional[FeedbackStatus] = None
    priority: Optional[FeedbackPriority] = None
    admin_response: Optional[str] = Field(default=None, max_length=1000)


class BookmarkCreate(CamelModel):
    flashcard_id: int


class FeedbackRead(CamelModel):
    id: int
    user_id: str
    flashcard_id: Optional[int] = None
    quiz_question_id: Optional[int] = None
    deck_quiz_question_id: Optional[int] = None
    deck_id: Optional[int] = None
    class_id: Optional[int] = None
    feedback_type: str
    feedback_text: str
    screenshot_url: Optional[str] = None
    user_agent: Optional[str] = None
    page_url: Optional[str] = None
    status: str
    priority: str
    admin_response: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class BookmarkRead(CamelModel):
    id: int
    user_id: str
    flashcard_id: int
    created_at: datetime


# Bookmark joined with its card, deck and class for the bookmarks page
class BookmarkedCard(CamelModel):
    id: int
    flashcard_id: int
    question: str
    answer: str
    deck_id: int
    deck_name: str
    class_id: int
    class_name: str
    created_at: datetime
