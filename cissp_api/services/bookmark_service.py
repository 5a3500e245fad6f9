from typing import Any, Dict, List, Tuple
import structlog
from sqlmodel import Session, select, col
from cissp_api.exceptions import NotFoundError
from cissp_api.models.bookmark import BookmarkedFlashcard
from cissp_api.models.deck import Deck
from cissp_api.models.flashcard import Flashcard
from cissp_api.models.study_class import StudyClass

logger = structlog.get_logger(__name__)


def list_bookmarks(session: Session, user_id: str) -> List[Dict[str, Any]]:
    rows = session.exec(
        select(BookmarkedFlashcard, Flashcard, Deck, StudyClass)
        .join(Flashcard, Flashcard.id == BookmarkedFlashcard.flashcard_id)
        .join(Deck, Deck.id == Flashcard.deck_id)
        .join(StudyClass, StudyClass.id == Deck.class_id)
        .where(BookmarkedFlashcard.user_id == user_id)
        .order_by(col(BookmarkedFlashcard.created_at).desc(), col(BookmarkedFlashcard.id).desc())
    ).all()
    return [
        {
            "id": bookmark.id,
            "flashcard_id": card.id,
            "question": card.question,
            "answer": card.answer,
            "deck_id": deck.id,
            "deck_name": deck.name,
            "class_id": study_class.id,
            "class_name": study_class.name,
            "created_at": bookmark.created_at,
        }
        for bookmark, card, deck, study_class in rows
    ]


def add_bookmark(session: Session, user_id: str, flashcard_id: int) -> Tuple[BookmarkedFlashcard, bool]:
    """Returns the bookmark and whether it was newly created."""
    if not session.get(Flashcard, flashcard_id):
        raise NotFoundError("Flashcard not found")

    existing = session.exec(
        select(BookmarkedFlashcard).where(
            BookmarkedFlashcard.user_id == user_id, BookmarkedFlashcard.flashcard_id == flashcard_id
        )
    ).first()
    if existing:
        return existing, False

    bookmark = BookmarkedFlashcard(user_id=user_id, flashcard_id=flashcard_id)
    session.add(bookmark)
    session.commit()
    session.refresh(bookmark)
    logger.info("bookmark_added", user_id=user_id, flashcard_id=flashcard_id)
    return bookmark, True


def remove_bookmark(session: Session, user_id: str, flashcard_id: int) -> None:
    bookmark = session.exec(
        select(BookmarkedFlashcard).where(
            BookmarkedFlashcard.user_id == user_id, BookmarkedFlashcard.flashcard_id == flashcard_id
        )
    ).first()
    if not bookmark:
        raise NotFoundError("Bookmark not found")
    session.delete(bookmark)
    session.commit()
