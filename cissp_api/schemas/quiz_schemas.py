from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from cissp_api.schemas.base import CamelModel, PatchModel


class QuizOption(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(min_length=1)
    is_correct: bool = Field(alias="isCorrect")


def _check_options(options: List[QuizOption]) -> List[QuizOption]:
    if not any(option.is_correct for option in options):
        raise ValueError("At least one option must be correct")
    return options


class QuizFileQuestion(BaseModel):
    """One question as it appears in an uploaded or AI generated quiz file."""

    model_config = ConfigDict(extra="ignore")

    question: str = Field(min_length=1)
    options: List[QuizOption] = Field(min_length=2, max_length=6)
    explanation: Optional[str] = None
    difficulty: Optional[int] = Field(default=None, ge=1, le=5)
    elimination_tactics: Optional[Dict[str, str]] = None
    correct_answer_with_justification: Optional[Dict[str, str]] = None
    compare_remaining_options_with_justification: Optional[Dict[str, str]] = None
    correct_options_justification: Optional[Dict[str, str]] = None

    @field_validator("options")
    @classmethod
    def options_have_answer(cls, value: List[QuizOption]) -> List[QuizOption]:
        return _check_options(value)


class QuizFile(BaseModel):
    questions: List[QuizFileQuestion] = Field(min_length=1, max_length=50)


class QuizUploadRequest(CamelModel):
    # None clears every question; validated by the service
    quiz_data: Optional[Dict[str, Any]] = None


class QuizQuestionUpdate(PatchModel):
    nullable_fields = frozenset({
        "explanation",
        "difficulty",
        "elimination_tactics",
        "correct_answer_with_justification",
        "compare_remaining_options_with_justification",
        "correct_options_justification",
        "sub_topic_id",
    })

    question_text: Optional[str] = Field(default=None, min_length=1)
    options: Optional[List[QuizOption]] = Field(default=None, min_length=2, max_length=6)
    explanation: Optional[str] = None
    difficulty: Optional[int] = Field(default=None, ge=1, le=5)
    order: Optional[int] = Field(default=None, ge=0)
    elimination_tactics: Optional[Dict[str, str]] = None
    correct_answer_with_justification: Optional[Dict[str, str]] = None
    compare_remaining_options_with_justification: Optional[Dict[str, str]] = None
    correct_options_justification: Optional[Dict[str, str]] = None
    sub_topic_id: Optional[int] = None

    @field_validator("options")
    @classmethod
    def options_have_answer(cls, value: Optional[List[QuizOption]]) -> Optional[List[QuizOption]]:
        if value is None:
            return value
        return _check_options(value)


class QuizQuestionRead(CamelModel):
    id: int
    question_text: str
    options: List[Dict[str, Any]]
    explanation: Optional[str] = None
    elimination_tactics: Optional[Dict[str, str]] = None
    correct_answer_with_justification: Optional[Dict[str, str]] = None
    compare_remaining_options_with_justification: Optional[Dict[str, str]] = None
    correct_options_justification: Optional[Dict[str, str]] = None
    order: int
    created_by: str
    created_at: datetime
    updated_at: datetime


class FlashcardQuizQuestionRead(QuizQuestionRead):
    flashcard_id: int


class DeckQuizQuestionRead(QuizQuestionRead):
    deck_id: int
    difficulty: Optional[int] = None
    sub_topic_id: Optional[int] = None
