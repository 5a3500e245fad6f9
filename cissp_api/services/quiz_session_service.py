from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
import structlog
from sqlmodel import Session, select
from cissp_api.exceptions import NotFoundError, ValidationError
from cissp_api.models.deck import Deck
from cissp_api.models.flashcard import Flashcard
from cissp_api.models.quiz_session import QuizSession, QuizSessionAnswer, UserQuizProgress, DeckQuizProgress
from cissp_api.schemas.progress_schemas import QuizCompleteRequest
from cissp_api.utils.dates import utcnow

logger = structlog.get_logger(__name__)


def quiz_mastery(average_score: float, best_score: float) -> str:
    if average_score >= 80 and best_score >= 90:
        return "mastered"
    if average_score >= 60 or best_score >= 70:
        return "learning"
    return "new"


def _started_at(start_time_ms: int, now: datetime) -> datetime:
    try:
        started = datetime.fromtimestamp(start_time_ms / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise ValidationError("startTime is out of range")
    # Clock skew from the browser must not produce negative durations
    return min(started, now)


def _apply_result(progress: Union[UserQuizProgress, DeckQuizProgress], total: int, correct: int, score: float, now: datetime) -> None:
    progress.times_taken += 1
    progress.total_questions_answered += total
    progress.total_correct_answers += correct
    if progress.total_questions_answered:
        progress.average_score = round(progress.total_correct_answers / progress.total_questions_answered * 100, 2)
    progress.best_score = max(progress.best_score, score)
    progress.last_score = score
    progress.last_taken = now
    progress.updated_at = now


def complete_quiz(session: Session, user_id: str, payload: QuizCompleteRequest) -> Dict[str, Any]:
    if payload.quiz_type == "flashcard":
        if not session.get(Flashcard, payload.flashcard_id):
            raise NotFoundError("Flashcard not found")
    elif not session.get(Deck, payload.deck_id):
        raise NotFoundError("Deck not found")

    now = utcnow()
    started_at = _started_at(payload.start_time, now)
    total = payload.total_questions
    correct = payload.correct_answers
    score = round(correct / total * 100, 2) if total else 0.0

    quiz_session = QuizSession(
        user_id=user_id,
        flashcard_id=payload.flashcard_id if payload.quiz_type == "flashcard" else None,
        deck_id=payload.deck_id if payload.quiz_type == "deck" else None,
        quiz_type=payload.quiz_type,
        started_at=started_at,
        ended_at=now,
        total_questions=total,
        correct_answers=correct,
        score_percentage=score,
        quiz_duration=int((now - started_at).total_seconds()),
    )
    session.add(quiz_session)
    session.flush()

    for index, answer in enumerate(payload.answers):
        session.add(
            QuizSessionAnswer(
                session_id=quiz_session.id,
                quiz_question_id=answer.quiz_question_id if payload.quiz_type == "flashcard" else None,
                deck_quiz_question_id=answer.deck_quiz_question_id if payload.quiz_type == "deck" else None,
                selected_option_index=answer.selected_option_index,
                is_correct=answer.is_correct,
                time_spent=answer.time_spent,
                question_order=index,
            )
        )

    mastery_status: Optional[str] = None
    if payload.quiz_type == "flashcard":
        progress = session.exec(
            select(UserQuizProgress).where(
                UserQuizProgress.user_id == user_id, UserQuizProgress.flashcard_id == payload.flashcard_id
            )
        ).first() or UserQuizProgress(user_id=user_id, flashcard_id=payload.flashcard_id)
        _apply_result(progress, total, correct, score, now)
        progress.mastery_status = quiz_mastery(progress.average_score, progress.best_score)
        mastery_status = progress.mastery_status
    else:
        progress = session.exec(
            select(DeckQuizProgress).where(
                DeckQuizProgress.user_id == user_id, DeckQuizProgress.deck_id == payload.deck_id
            )
        ).first() or DeckQuizProgress(user_id=user_id, deck_id=payload.deck_id)
        _apply_result(progress, total, correct, score, now)
        progress.mastery_percentage = progress.average_score
    session.add(progress)
    session.commit()

    logger.info(
        "quiz_completed",
        user_id=user_id,
        quiz_type=payload.quiz_type,
        quiz_session_id=quiz_session.id,
        score=score,
    )
    return {
        "session_id": quiz_session.id,
        "score_percentage": score,
        "mastery_status": mastery_status,
        "average_score": progress.average_score,
        "best_score": progress.best_score,
    }


def get_flashcard_quiz_progress(session: Session, user_id: str, flashcard_id: int) -> Optional[UserQuizProgress]:
    return session.exec(
        select(UserQuizProgress).where(
            UserQuizProgress.user_id == user_id, UserQuizProgress.flashcard_id == flashcard_id
        )
    ).first()


def get_deck_quiz_progress(session: Session, user_id: str, deck_id: int) -> Optional[DeckQuizProgress]:
    return session.exec(
        select(DeckQuizProgress).where(DeckQuizProgress.user_id == user_id, DeckQuizProgress.deck_id == deck_id)
    ).first()
