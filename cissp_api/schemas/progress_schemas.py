from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import Field, model_validator
from cissp_api.schemas.base import CamelModel
from cissp_api.schemas.flashcard_schemas import FlashcardRead

MAX_EPOCH_MS = 253402300799999

StudyMode = Literal["progressive", "random", "all"]


class CardProgressRequest(CamelModel):
    flashcard_id: int
    confidence_level: int = Field(ge=1, le=5)
    session_id: Optional[int] = None


class StudySessionCreate(CamelModel):
    deck_ids: List[int] = Field(min_length=1)


class SessionCardCreate(CamelModel):
    flashcard_id: int
    confidence_rating: int = Field(ge=1, le=5)
    response_time: Optional[int] = Field(default=None, ge=0)


class EndSessionRequest(CamelModel):
    cards_studied: Optional[int] = Field(default=None, ge=0)


class QuizAnswerIn(CamelModel):
    quiz_question_id: Optional[int] = None
    deck_quiz_question_id: Optional[int] = None
    selected_option_index: int = Field(ge=0)
    is_correct: bool
    time_spent: Optional[int] = Field(default=None, ge=0)


class QuizCompleteRequest(CamelModel):
    quiz_type: Literal["flashcard", "deck"]
    flashcard_id: Optional[int] = None
    deck_id: Optional[int] = None
    answers: List[QuizAnswerIn] = Field(min_length=1)
    total_questions: int = Field(ge=0)
    correct_answers: int = Field(ge=0)
    # Epoch milliseconds, as sent by the browser; capped at 9999-12-31
    start_time: int = Field(ge=0, le=MAX_EPOCH_MS)

    @model_validator(mode="after")
    def check_target(self) -> "QuizCompleteRequest":
        if self.quiz_type == "flashcard" and self.flashcard_id is None:
            raise ValueError("flashcardId is required for flashcard quizzes")
        if self.quiz_type == "deck" and self.deck_id is None:
            raise ValueError("deckId is required for deck quizzes")
        if self.correct_answers > self.total_questions:
            raise ValueError("correctAnswers cannot exceed totalQuestions")
        return self


class ClassProgressResponse(CamelModel):
    total_cards: int
    studied_cards: int
    mastered_cards: int
    learning_cards: int
    new_cards: int
    progress: int


class StudyCard(FlashcardRead):
    deck_name: str
    class_name: str


class StudyQueue(CamelModel):
    flashcards: List[StudyCard]
    mode: StudyMode
    class_id: int
    class_name: str
    total_cards: int
    study_cards_count: int


class CardProgressRead(CamelModel):
    id: int
    user_id: str
    flashcard_id: int
    confidence_level: int
    times_seen: int
    last_seen: Optional[datetime] = None
    next_review_date: Optional[datetime] = None
    mastery_status: str
    created_at: datetime
    updated_at: datetime


class DueCard(CamelModel):
    flashcard_id: int
    deck_id: int
    question: str
    answer: str
    confidence_level: int
    mastery_status: str
    next_review_date: Optional[datetime] = None


class StudySessionRead(CamelModel):
    id: int
    user_id: str
    deck_id: Optional[int] = None
    started_at: datetime
    ended_at: Optional[datetime] = None
    cards_studied: int
    average_confidence: Optional[float] = None
    study_duration: Optional[int] = None


class SessionCardRead(CamelModel):
    id: int
    session_id: int
    flashcard_id: int
    confidence_rating: int
    response_time: Optional[int] = None
    created_at: datetime


class UserStatsRead(CamelModel):
    user_id: str
    total_cards_studied: int
    study_streak_days: int
    total_study_time: int
    last_active_date: Optional[date] = None
    updated_at: datetime


class QuizProgressRead(CamelModel):
    id: int
    user_id: str
    times_taken: int
    total_questions_answered: int
    total_correct_answers: int
    average_score: float
    best_score: float
    last_score: float
    last_taken: Optional[datetime] = None
    updated_at: datetime


class FlashcardQuizProgressRead(QuizProgressRead):
    flashcard_id: int
    mastery_status: str


class DeckQuizProgressRead(QuizProgressRead):
    deck_id: int
    mastery_percentage: float
