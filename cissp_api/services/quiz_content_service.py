"""Admin-managed quiz questions for flashcards and decks.

Both question kinds share the same file format and validation; the only
differences are the parent key and the optional per-question difficulty and
sub-topic on deck questions.
"""

from typing import Any, Dict, List, Optional, Type, Union
import pydantic
import structlog
from sqlalchemy import delete, update
from sqlmodel import Session, select, func, col
from cissp_api.exceptions import NotFoundError, PaymentRequiredError, ValidationError, format_validation_errors
from cissp_api.models.deck import Deck
from cissp_api.models.flashcard import Flashcard
from cissp_api.models.quiz_question import QuizQuestion, DeckQuizQuestion
from cissp_api.models.quiz_session import QuizSessionAnswer
from cissp_api.models.feedback import UserFeedback
from cissp_api.models.topic import SubTopic
from cissp_api.schemas.quiz_schemas import QuizFile, QuizFileQuestion, QuizQuestionUpdate
from cissp_api.services.billing_service import user_has_paid_access
from cissp_api.utils.dates import utcnow

logger = structlog.get_logger(__name__)

AnyQuestion = Union[QuizQuestion, DeckQuizQuestion]


def validate_quiz_file(data: Any) -> QuizFile:
    """Validate an uploaded or generated quiz document."""
    try:
        return QuizFile.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        path = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"Invalid quiz data: {path}: {first['msg']}", details=format_validation_errors(e.errors())) from e


def _target(kind: str):
    if kind == "flashcard":
        return QuizQuestion, "flashcard_id", Flashcard, "Flashcard not found"
    return DeckQuizQuestion, "deck_id", Deck, "Deck not found"


def _require_parent(session: Session, kind: str, parent_id: int) -> None:
    _, _, parent_model, missing = _target(kind)
    if not session.get(parent_model, parent_id):
        raise NotFoundError(missing)


def _row_from_file(model: Type[AnyQuestion], question: QuizFileQuestion, parent: Dict[str, int], order: int, admin_id: str) -> AnyQuestion:
    fields: Dict[str, Any] = dict(
        question_text=question.question,
        options=[option.model_dump(by_alias=True) for option in question.options],
        explanation=question.explanation,
        elimination_tactics=question.elimination_tactics,
        correct_answer_with_justification=question.correct_answer_with_justification,
        compare_remaining_options_with_justification=question.compare_remaining_options_with_justification,
        correct_options_justification=question.correct_options_justification,
        order=order,
        created_by=admin_id,
        **parent,
    )
    if model is DeckQuizQuestion:
        fields["difficulty"] = question.difficulty
    return model(**fields)


def list_questions(session: Session, kind: str, parent_id: int) -> List[AnyQuestion]:
    model, parent_key, _, _ = _target(kind)
    parent_column = getattr(model, parent_key)
    return list(session.exec(select(model).where(parent_column == parent_id).order_by(model.order)).all())


def count_questions(session: Session, kind: str, parent_id: int) -> int:
    model, parent_key, _, _ = _target(kind)
    parent_column = getattr(model, parent_key)
    return session.exec(select(func.count(model.id)).where(parent_column == parent_id)).one()


def append_questions(
    session: Session, kind: str, parent_id: int, quiz: QuizFile, admin_id: str
) -> List[AnyQuestion]:
    """Append questions after the current highest order."""
    _require_parent(session, kind, parent_id)
    model, parent_key, _, _ = _target(kind)
    parent_column = getattr(model, parent_key)
    max_order = session.exec(select(func.max(model.order)).where(parent_column == parent_id)).one()
    start = 0 if max_order is None else max_order + 1

    parent = {parent_key: parent_id}
    rows = [_row_from_file(model, question, parent, start + i, admin_id) for i, question in enumerate(quiz.questions)]
    session.add_all(rows)
    session.commit()
    for row in rows:
        session.refresh(row)
    logger.info("quiz_questions_added", kind=kind, parent_id=parent_id, added=len(rows))
    return rows


def clear_questions(session: Session, kind: str, parent_id: int) -> int:
    _require_parent(session, kind, parent_id)
    model, parent_key, _, _ = _target(kind)
    parent_column = getattr(model, parent_key)
    question_ids = select(model.id).where(parent_column == parent_id)
    _detach(session, kind, question_ids)
    result = session.exec(delete(model).where(parent_column == parent_id))
    session.commit()
    logger.info("quiz_questions_cleared", kind=kind, parent_id=parent_id, deleted=result.rowcount)
    return result.rowcount


def upload_quiz(
    session: Session, kind: str, parent_id: int, quiz_data: Optional[Dict[str, Any]], admin_id: str
) -> Dict[str, Any]:
    """Apply a quiz upload: ``None`` removes all questions, anything else is appended."""
    if quiz_data is None:
        deleted = clear_questions(session, kind, parent_id)
        return {"added": 0, "deleted": deleted, "count": 0}

    quiz = validate_quiz_file(quiz_data)
    rows = append_questions(session, kind, parent_id, quiz, admin_id)
    return {"added": len(rows), "deleted": 0, "count": count_questions(session, kind, parent_id)}


def _get_question(session: Session, kind: str, parent_id: int, question_id: int) -> AnyQuestion:
    model, parent_key, _, _ = _target(kind)
    question = session.get(model, question_id)
    if not question or getattr(question, parent_key) != parent_id:
        raise NotFoundError("Quiz question not found")
    return question


def update_question(
    session: Session, kind: str, parent_id: int, question_id: int, payload: QuizQuestionUpdate
) -> AnyQuestion:
    question = _get_question(session, kind, parent_id, question_id)
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise ValidationError("No valid fields provided for update")
    if "difficulty" in data and kind == "flashcard":
        raise ValidationError("Difficulty can only be set on deck quiz questions")
    if "sub_topic_id" in data:
        if kind == "flashcard":
            raise ValidationError("Sub-topics can only be set on deck quiz questions")
        if data["sub_topic_id"] is not None and not session.get(SubTopic, data["sub_topic_id"]):
            raise NotFoundError("Sub-topic not found")
    if payload.options is not None:
        data["options"] = [option.model_dump(by_alias=True) for option in payload.options]

    for key, value in data.items():
        setattr(question, key, value)
    question.updated_at = utcnow()
    session.add(question)
    session.commit()
    session.refresh(question)
    return question


def delete_question(session: Session, kind: str, parent_id: int, question_id: int) -> None:
    question = _get_question(session, kind, parent_id, question_id)
    _detach(session, kind, [question.id])
    session.delete(question)
    session.commit()


def _detach(session: Session, kind: str, question_ids) -> None:
    """Null out answer and feedback references before questions are removed."""
    key = "quiz_question_id" if kind == "flashcard" else "deck_quiz_question_id"
    for model in (QuizSessionAnswer, UserFeedback):
        session.exec(update(model).where(col(getattr(model, key)).in_(question_ids)).values({key: None}))


def get_published_questions(session: Session, kind: str, parent_id: int, user_id: str) -> List[AnyQuestion]:
    """Questions for a learner; the parent must be published and premium decks need paid access."""
    if kind == "flashcard":
        card = session.get(Flashcard, parent_id)
        if not card or not card.is_published:
            raise NotFoundError("Flashcard not found")
        deck = session.get(Deck, card.deck_id)
    else:
        deck = session.get(Deck, parent_id)
        if not deck or not deck.is_published:
            raise NotFoundError("Deck not found")
    if deck and deck.is_premium and not user_has_paid_access(session, user_id):
        raise PaymentRequiredError("This deck requires lifetime access")
    return list_questions(session, kind, parent_id)
