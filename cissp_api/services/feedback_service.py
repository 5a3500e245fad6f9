from typing import Any, Dict, Optional
import structlog
from sqlalchemy import case
from sqlmodel import Session, select, func, col
from cissp_api.exceptions import NotFoundError
from cissp_api.models.feedback import UserFeedback
from cissp_api.models.flashcard import Flashcard
from cissp_api.models.quiz_question import QuizQuestion, DeckQuizQuestion
from cissp_api.schemas.feedback_schemas import FeedbackCreate, FeedbackUpdate
from cissp_api.utils.dates import utcnow

logger = structlog.get_logger(__name__)

FINAL_STATUSES = ("resolved", "closed")
PRIORITY_RANK = {"low": 0, "medium": 1, "high": 2, "critical": 3}


def create_feedback(
    session: Session, user_id: str, payload: FeedbackCreate, user_agent: Optional[str] = None
) -> UserFeedback:
    for model, ref_id, label in (
        (Flashcard, payload.flashcard_id, "Flashcard"),
        (QuizQuestion, payload.quiz_question_id, "Quiz question"),
        (DeckQuizQuestion, payload.deck_quiz_question_id, "Deck quiz question"),
    ):
        if ref_id is not None and not session.get(model, ref_id):
            raise NotFoundError(f"{label} not found")

    data = payload.model_dump()
    data["user_agent"] = data["user_agent"] or user_agent
    feedback = UserFeedback(**data, user_id=user_id, status="pending", priority="medium")
    session.add(feedback)
    session.commit()
    session.refresh(feedback)
    logger.info("feedback_submitted", user_id=user_id, feedback_id=feedback.id, feedback_type=feedback.feedback_type)
    return feedback


def list_feedback(
    session: Session,
    status: Optional[str] = None,
    feedback_type: Optional[str] = None,
    priority: Optional[str] = None,
    flashcard_id: Optional[int] = None,
    deck_id: Optional[int] = None,
    class_id: Optional[int] = None,
    limit: int = 50,
    offset: int = 0,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> Dict[str, Any]:
    filters = []
    if status:
        filters.append(UserFeedback.status == status)
    if feedback_type:
        filters.append(UserFeedback.feedback_type == feedback_type)
    if priority:
        filters.append(UserFeedback.priority == priority)
    if flashcard_id is not None:
        filters.append(UserFeedback.flashcard_id == flashcard_id)
    if deck_id is not None:
        filters.append(UserFeedback.deck_id == deck_id)
    if class_id is not None:
        filters.append(UserFeedback.class_id == class_id)

    total = session.exec(select(func.count(UserFeedback.id)).where(*filters)).one()

    # Priority sorts by severity, not alphabetically
    if sort_by == "priority":
        order_column = case(PRIORITY_RANK, value=UserFeedback.priority)
    elif sort_by == "status":
        order_column = col(UserFeedback.status)
    else:
        order_column = col(UserFeedback.created_at)
    ordering = order_column.asc() if sort_order == "asc" else order_column.desc()

    rows = session.exec(
        select(UserFeedback).where(*filters).order_by(ordering, col(UserFeedback.id).desc()).offset(offset).limit(limit)
    ).all()

    counts = dict(session.exec(select(UserFeedback.status, func.count(UserFeedback.id)).group_by(UserFeedback.status)).all())
    return {
        "feedback": list(rows),
        "total": total,
        "limit": limit,
        "offset": offset,
        "status_counts": {name: counts.get(name, 0) for name in ("pending", "in_review", "resolved", "closed", "rejected")},
    }


def get_feedback(session: Session, feedback_id: int) -> UserFeedback:
    feedback = session.get(UserFeedback, feedback_id)
    if not feedback:
        raise NotFoundError("Feedback not found")
    return feedback


def update_feedback(session: Session, feedback_id: int, payload: FeedbackUpdate, admin_id: str) -> UserFeedback:
    feedback = get_feedback(session, feedback_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)

    new_status = data.get("status")
    if new_status in FINAL_STATUSES and feedback.status not in FINAL_STATUSES:
        feedback.resolved_by = admin_id
        feedback.resolved_at = utcnow()

    for key, value in data.items():
        setattr(feedback, key, value)
    feedback.updated_at = utcnow()
    session.add(feedback)
    session.commit()
    session.refresh(feedback)
    logger.info("feedback_updated", feedback_id=feedback_id, admin_id=admin_id, **data)
    return feedback


def delete_feedback(session: Session, feedback_id: int) -> None:
    feedback = get_feedback(session, feedback_id)
    session.delete(feedback)
    session.commit()
