from typing import Any, Dict, List, Optional
import structlog
from sqlalchemy import delete, update
from sqlmodel import Session, select, func, col
from cissp_api.exceptions import NotFoundError, ValidationError, PaymentRequiredError
from cissp_api.models.study_class import StudyClass
from cissp_api.models.deck import Deck
from cissp_api.models.flashcard import Flashcard
from cissp_api.models.quiz_question import QuizQuestion, DeckQuizQuestion
from cissp_api.models.progress import UserCardProgress, SessionCard, StudySession
from cissp_api.models.quiz_session import QuizSession, QuizSessionAnswer, UserQuizProgress, DeckQuizProgress
from cissp_api.models.bookmark import BookmarkedFlashcard
from cissp_api.models.feedback import UserFeedback
from cissp_api.models.user import User
from cissp_api.schemas.deck_schemas import ClassCreate, ClassUpdate, DeckCreate, DeckUpdate
from cissp_api.schemas.flashcard_schemas import FlashcardCreate, FlashcardUpdate
from cissp_api.services.billing_service import user_has_paid_access
from cissp_api.services.progress_service import percentage
from cissp_api.utils.dates import utcnow

logger = structlog.get_logger(__name__)


def _changes(payload) -> Dict[str, Any]:
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise ValidationError("No valid fields provided for update")
    return data


# ---------------------------------------------------------
# Classes
# ---------------------------------------------------------

def list_classes(session: Session) -> List[StudyClass]:
    statement = select(StudyClass).order_by(StudyClass.order, col(StudyClass.created_at).desc())
    return list(session.exec(statement).all())


def get_class(session: Session, class_id: int) -> StudyClass:
    study_class = session.get(StudyClass, class_id)
    if not study_class:
        raise NotFoundError("Class not found")
    return study_class


def get_class_with_decks(session: Session, class_id: int) -> Dict[str, Any]:
    study_class = get_class(session, class_id)
    decks = session.exec(select(Deck).where(Deck.class_id == class_id).order_by(Deck.order)).all()
    return {
        **study_class.model_dump(),
        "decks": [{**deck.model_dump(), "flashcard_count": _count_cards(session, deck.id)} for deck in decks],
    }


def create_class(session: Session, payload: ClassCreate, admin_id: str) -> StudyClass:
    study_class = StudyClass(**payload.model_dump(), created_by=admin_id)
    session.add(study_class)
    session.commit()
    session.refresh(study_class)
    logger.info("class_created", class_id=study_class.id, admin_id=admin_id)
    return study_class


def update_class(session: Session, class_id: int, payload: ClassUpdate) -> StudyClass:
    study_class = get_class(session, class_id)
    for key, value in _changes(payload).items():
        setattr(study_class, key, value)
    study_class.updated_at = utcnow()
    session.add(study_class)
    session.commit()
    session.refresh(study_class)
    return study_class


def delete_class(session: Session, class_id: int) -> None:
    get_class(session, class_id)
    deck_ids = session.exec(select(Deck.id).where(Deck.class_id == class_id)).all()
    for deck_id in deck_ids:
        _delete_deck_rows(session, deck_id)
    session.exec(update(UserFeedback).where(UserFeedback.class_id == class_id).values(class_id=None))
    session.exec(delete(StudyClass).where(StudyClass.id == class_id))
    session.commit()
    logger.info("class_deleted", class_id=class_id, decks_deleted=len(deck_ids))


# ---------------------------------------------------------
# Decks
# ---------------------------------------------------------

def list_decks(session: Session, class_id: Optional[int] = None) -> List[Deck]:
    statement = select(Deck)
    if class_id is not None:
        statement = statement.where(Deck.class_id == class_id)
    statement = statement.order_by(Deck.order, col(Deck.created_at).desc())
    return list(session.exec(statement).all())


def get_deck(session: Session, deck_id: int) -> Deck:
    deck = session.get(Deck, deck_id)
    if not deck:
        raise NotFoundError("Deck not found")
    return deck


def get_deck_with_flashcards(session: Session, deck_id: int) -> Dict[str, Any]:
    deck = get_deck(session, deck_id)
    cards = session.exec(select(Flashcard).where(Flashcard.deck_id == deck_id).order_by(Flashcard.order)).all()
    return {**deck.model_dump(), "flashcards": [card.model_dump() for card in cards]}


def create_deck(session: Session, payload: DeckCreate, admin_id: str) -> Deck:
    get_class(session, payload.class_id)
    deck = Deck(**payload.model_dump(), created_by=admin_id)
    session.add(deck)
    session.commit()
    session.refresh(deck)
    logger.info("deck_created", deck_id=deck.id, class_id=deck.class_id, admin_id=admin_id)
    return deck


def update_deck(session: Session, deck_id: int, payload: DeckUpdate) -> Deck:
    deck = get_deck(session, deck_id)
    data = _changes(payload)
    if "class_id" in data:
        get_class(session, data["class_id"])
    for key, value in data.items():
        setattr(deck, key, value)
    deck.updated_at = utcnow()
    session.add(deck)
    session.commit()
    session.refresh(deck)
    return deck


def delete_deck(session: Session, deck_id: int) -> None:
    get_deck(session, deck_id)
    _delete_deck_rows(session, deck_id)
    session.commit()
    logger.info("deck_deleted", deck_id=deck_id)


def _delete_deck_rows(session: Session, deck_id: int) -> None:
    card_ids = session.exec(select(Flashcard.id).where(Flashcard.deck_id == deck_id)).all()
    for card_id in card_ids:
        _delete_flashcard_rows(session, card_id)

    question_ids = select(DeckQuizQuestion.id).where(DeckQuizQuestion.deck_id == deck_id)
    session.exec(
        update(QuizSessionAnswer)
        .where(col(QuizSessionAnswer.deck_quiz_question_id).in_(question_ids))
        .values(deck_quiz_question_id=None)
    )
    session.exec(
        update(UserFeedback)
        .where(col(UserFeedback.deck_quiz_question_id).in_(question_ids))
        .values(deck_quiz_question_id=None)
    )
    session.exec(delete(DeckQuizQuestion).where(DeckQuizQuestion.deck_id == deck_id))
    session.exec(delete(DeckQuizProgress).where(DeckQuizProgress.deck_id == deck_id))
    session.exec(update(QuizSession).where(QuizSession.deck_id == deck_id).values(deck_id=None))
    session.exec(update(StudySession).where(StudySession.deck_id == deck_id).values(deck_id=None))
    session.exec(update(UserFeedback).where(UserFeedback.deck_id == deck_id).values(deck_id=None))
    session.exec(delete(Deck).where(Deck.id == deck_id))


# ---------------------------------------------------------
# Flashcards
# ---------------------------------------------------------

def _count_cards(session: Session, deck_id: int, published_only: bool = False) -> int:
    statement = select(func.count(Flashcard.id)).where(Flashcard.deck_id == deck_id)
    if published_only:
        statement = statement.where(Flashcard.is_published == True)  # noqa: E712
    return session.exec(statement).one()


def _refresh_card_count(session: Session, deck_id: int) -> None:
    deck = session.get(Deck, deck_id)
    if deck:
        deck.card_count = _count_cards(session, deck_id)
        session.add(deck)


def list_flashcards(session: Session, deck_id: Optional[int] = None) -> List[Flashcard]:
    statement = select(Flashcard)
    if deck_id is not None:
        statement = statement.where(Flashcard.deck_id == deck_id)
    return list(session.exec(statement.order_by(Flashcard.deck_id, Flashcard.order)).all())


def get_flashcard(session: Session, flashcard_id: int) -> Flashcard:
    card = session.get(Flashcard, flashcard_id)
    if not card:
        raise NotFoundError("Flashcard not found")
    return card


def create_flashcard(session: Session, payload: FlashcardCreate, admin_id: str) -> Flashcard:
    get_deck(session, payload.deck_id)
    card = Flashcard(**payload.model_dump(), created_by=admin_id)
    session.add(card)
    session.flush()
    _refresh_card_count(session, card.deck_id)
    session.commit()
    session.refresh(card)
    logger.info("flashcard_created", flashcard_id=card.id, deck_id=card.deck_id)
    return card


def update_flashcard(session: Session, flashcard_id: int, payload: FlashcardUpdate) -> Flashcard:
    card = get_flashcard(session, flashcard_id)
    for key, value in _changes(payload).items():
        setattr(card, key, value)
    card.updated_at = utcnow()
    session.add(card)
    session.commit()
    session.refresh(card)
    return card


def delete_flashcard(session: Session, flashcard_id: int) -> None:
    card = get_flashcard(session, flashcard_id)
    deck_id = card.deck_id
    _delete_flashcard_rows(session, flashcard_id)
    session.flush()
    _refresh_card_count(session, deck_id)
    session.commit()
    logger.info("flashcard_deleted", flashcard_id=flashcard_id, deck_id=deck_id)


def _delete_flashcard_rows(session: Session, flashcard_id: int) -> None:
    question_ids = select(QuizQuestion.id).where(QuizQuestion.flashcard_id == flashcard_id)
    session.exec(
        update(QuizSessionAnswer)
        .where(col(QuizSessionAnswer.quiz_question_id).in_(question_ids))
        .values(quiz_question_id=None)
    )
    session.exec(
        update(UserFeedback).where(col(UserFeedback.quiz_question_id).in_(question_ids)).values(quiz_question_id=None)
    )
    session.exec(delete(QuizQuestion).where(QuizQuestion.flashcard_id == flashcard_id))
    session.exec(delete(UserQuizProgress).where(UserQuizProgress.flashcard_id == flashcard_id))
    session.exec(delete(UserCardProgress).where(UserCardProgress.flashcard_id == flashcard_id))
    session.exec(delete(SessionCard).where(SessionCard.flashcard_id == flashcard_id))
    session.exec(delete(BookmarkedFlashcard).where(BookmarkedFlashcard.flashcard_id == flashcard_id))
    session.exec(update(QuizSession).where(QuizSession.flashcard_id == flashcard_id).values(flashcard_id=None))
    session.exec(update(UserFeedback).where(UserFeedback.flashcard_id == flashcard_id).values(flashcard_id=None))
    session.exec(delete(Flashcard).where(Flashcard.id == flashcard_id))


# ---------------------------------------------------------
# User facing reads
# ---------------------------------------------------------

def list_published_classes(session: Session) -> List[Dict[str, Any]]:
    classes = session.exec(
        select(StudyClass).where(StudyClass.is_published == True).order_by(StudyClass.order)  # noqa: E712
    ).all()
    result = []
    for study_class in classes:
        deck_ids = session.exec(
            select(Deck.id).where(Deck.class_id == study_class.id, Deck.is_published == True)  # noqa: E712
        ).all()
        card_total = sum(_count_cards(session, deck_id, published_only=True) for deck_id in deck_ids)
        result.append({**study_class.model_dump(), "deck_count": len(deck_ids), "card_count": card_total})
    return result


def get_published_class(session: Session, class_id: int, user: User) -> Dict[str, Any]:
    """Class with its published decks and the caller's progress on each deck."""
    study_class = session.get(StudyClass, class_id)
    if not study_class or not study_class.is_published:
        raise NotFoundError("Class not found")

    decks = session.exec(
        select(Deck)
        .where(Deck.class_id == class_id, Deck.is_published == True)  # noqa: E712
        .order_by(Deck.order)
    ).all()

    deck_rows = []
    for deck in decks:
        card_count = _count_cards(session, deck.id, published_only=True)
        studied = session.exec(
            select(func.count(UserCardProgress.id))
            .join(Flashcard, Flashcard.id == UserCardProgress.flashcard_id)
            .where(
                UserCardProgress.user_id == user.id,
                Flashcard.deck_id == deck.id,
                Flashcard.is_published == True,  # noqa: E712
            )
        ).one()
        deck_rows.append(
            {
                "id": deck.id,
                "name": deck.name,
                "description": deck.description,
                "type": deck.type,
                "order": deck.order,
                "is_premium": deck.is_premium,
                "card_count": card_count,
                "studied_count": studied,
                "progress": percentage(studied, card_count),
            }
        )

    return {**study_class.model_dump(), "decks": deck_rows}


def get_published_flashcards(session: Session, deck_id: int, user: User) -> Dict[str, Any]:
    deck = session.get(Deck, deck_id)
    if not deck or not deck.is_published:
        raise NotFoundError("Deck not found")
    if deck.is_premium and not user_has_paid_access(session, user.id):
        raise PaymentRequiredError("This deck requires lifetime access")

    cards = session.exec(
        select(Flashcard)
        .where(Flashcard.deck_id == deck_id, Flashcard.is_published == True)  # noqa: E712
        .order_by(Flashcard.order)
    ).all()
    return {"deck": deck, "flashcards": list(cards)}
