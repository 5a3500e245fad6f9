import math
import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence
import structlog
from sqlmodel import Session, select, func, col
from cissp_api.exceptions import NotFoundError, ValidationError
from cissp_api.models.deck import Deck
from cissp_api.models.flashcard import Flashcard
from cissp_api.models.study_class import StudyClass
from cissp_api.models.progress import UserCardProgress, StudySession, SessionCard
from cissp_api.services.billing_service import user_has_paid_access
from cissp_api.utils.dates import utcnow

logger = structlog.get_logger(__name__)

REVIEW_INTERVALS = {
    5: timedelta(days=7),
    4: timedelta(days=3),
    3: timedelta(days=1),
}
RELEARN_INTERVAL = timedelta(hours=12)
STUDY_MODES = ("progressive", "random", "all")


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, rounding halves up."""
    if not whole:
        return 0
    return math.floor(part / whole * 100 + 0.5)


def mastery_for_confidence(confidence: int) -> str:
    if confidence >= 4:
        return "mastered"
    if confidence >= 3:
        return "learning"
    return "new"


def next_review_date(confidence: int, now: Optional[datetime] = None) -> datetime:
    now = now or utcnow()
    return now + REVIEW_INTERVALS.get(confidence, RELEARN_INTERVAL)


def record_card_progress(
    session: Session,
    user_id: str,
    flashcard_id: int,
    confidence_level: int,
    session_id: Optional[int] = None,
) -> UserCardProgress:
    if not session.get(Flashcard, flashcard_id):
        raise NotFoundError("Flashcard not found")

    study_session = None
    if session_id is not None:
        study_session = session.get(StudySession, session_id)
        if not study_session or study_session.user_id != user_id:
            raise NotFoundError("Study session not found")

    now = utcnow()
    progress = session.exec(
        select(UserCardProgress).where(
            UserCardProgress.user_id == user_id, UserCardProgress.flashcard_id == flashcard_id
        )
    ).first()
    if not progress:
        progress = UserCardProgress(user_id=user_id, flashcard_id=flashcard_id)

    progress.confidence_level = confidence_level
    progress.mastery_status = mastery_for_confidence(confidence_level)
    progress.times_seen += 1
    progress.last_seen = now
    progress.next_review_date = next_review_date(confidence_level, now)
    progress.updated_at = now
    session.add(progress)

    if study_session:
        session.add(SessionCard(session_id=study_session.id, flashcard_id=flashcard_id, confidence_rating=confidence_level))

    session.commit()
    session.refresh(progress)
    logger.debug("card_progress_recorded", user_id=user_id, flashcard_id=flashcard_id, confidence=confidence_level)
    return progress


def get_card_progress(session: Session, user_id: str, flashcard_id: int) -> Optional[UserCardProgress]:
    return session.exec(
        select(UserCardProgress).where(
            UserCardProgress.user_id == user_id, UserCardProgress.flashcard_id == flashcard_id
        )
    ).first()


def get_class_progress(session: Session, user_id: str, class_id: int) -> Dict[str, Any]:
    if not session.get(StudyClass, class_id):
        raise NotFoundError("Class not found")

    published_cards = (
        select(Flashcard.id)
        .join(Deck, Deck.id == Flashcard.deck_id)
        .where(
            Deck.class_id == class_id,
            Deck.is_published == True,  # noqa: E712
            Flashcard.is_published == True,  # noqa: E712
        )
    )
    total = session.exec(select(func.count()).select_from(published_cards.subquery())).one()

    rows = session.exec(
        select(UserCardProgress.mastery_status, func.count(UserCardProgress.id))
        .where(UserCardProgress.user_id == user_id, col(UserCardProgress.flashcard_id).in_(published_cards))
        .group_by(UserCardProgress.mastery_status)
    ).all()
    by_status = {status: count for status, count in rows}
    studied = sum(by_status.values())
    mastered = by_status.get("mastered", 0)
    learning = by_status.get("learning", 0)

    return {
        "total_cards": total,
        "studied_cards": studied,
        "mastered_cards": mastered,
        "learning_cards": learning,
        "new_cards": total - mastered - learning,
        "progress": percentage(studied, total),
    }


def get_due_cards(session: Session, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    rows = session.exec(
        select(UserCardProgress, Flashcard)
        .join(Flashcard, Flashcard.id == UserCardProgress.flashcard_id)
        .where(UserCardProgress.user_id == user_id, UserCardProgress.next_review_date <= utcnow())
        .order_by(UserCardProgress.next_review_date)
        .limit(limit)
    ).all()
    return [
        {
            "flashcard_id": card.id,
            "deck_id": card.deck_id,
            "question": card.question,
            "answer": card.answer,
            "confidence_level": progress.confidence_level,
            "mastery_status": progress.mastery_status,
            "next_review_date": progress.next_review_date,
        }
        for progress, card in rows
    ]


def parse_id_list(raw: Optional[str]) -> Optional[List[int]]:
    """Parse a comma separated ``?decks=1,2`` filter; blank means no filter."""
    if raw is None or not raw.strip():
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise ValidationError("decks must be a comma separated list of ids")


def _needs_study(progress: Optional[UserCardProgress], now: datetime) -> bool:
    if progress is None:
        return True
    if progress.confidence_level < 4:
        return True
    return progress.next_review_date is not None and progress.next_review_date <= now


def _progressive_key(card: Flashcard, progress_map: Dict[int, UserCardProgress]):
    progress = progress_map.get(card.id)
    if progress is None:
        return (0, 0, 0.0)
    last_seen = progress.last_seen.timestamp() if progress.last_seen else 0.0
    return (1, progress.confidence_level, last_seen)


def order_for_mode(
    mode: str, cards: Sequence[Flashcard], progress_map: Dict[int, UserCardProgress], now: Optional[datetime] = None
) -> List[Flashcard]:
    if mode == "random":
        shuffled = list(cards)
        random.SystemRandom().shuffle(shuffled)
        return shuffled
    if mode == "all":
        return list(cards)

    now = now or utcnow()
    pending = [card for card in cards if _needs_study(progress_map.get(card.id), now)]
    if not pending:
        # Everything is mastered and not yet due; review the whole class
        return list(cards)
    return sorted(pending, key=lambda card: _progressive_key(card, progress_map))


def get_study_queue(
    session: Session, user_id: str, class_id: int, mode: str = "progressive", deck_ids: Optional[List[int]] = None
) -> Dict[str, Any]:
    if mode not in STUDY_MODES:
        raise ValidationError(f"mode must be one of: {', '.join(STUDY_MODES)}")

    study_class = session.get(StudyClass, class_id)
    if not study_class or not study_class.is_published:
        raise NotFoundError("Class not found")

    conditions = [
        Deck.class_id == class_id,
        Deck.is_published == True,  # noqa: E712
        Flashcard.is_published == True,  # noqa: E712
    ]
    if deck_ids:
        conditions.append(col(Deck.id).in_(deck_ids))
    if not user_has_paid_access(session, user_id):
        conditions.append(Deck.is_premium == False)  # noqa: E712

    rows = session.exec(
        select(Flashcard, Deck)
        .join(Deck, Deck.id == Flashcard.deck_id)
        .where(*conditions)
        .order_by(Deck.order, Deck.id, Flashcard.order)
    ).all()
    cards = [card for card, _ in rows]
    deck_names = {deck.id: deck.name for _, deck in rows}

    progress_map: Dict[int, UserCardProgress] = {}
    if cards:
        progress_rows = session.exec(
            select(UserCardProgress).where(
                UserCardProgress.user_id == user_id,
                col(UserCardProgress.flashcard_id).in_([card.id for card in cards]),
            )
        ).all()
        progress_map = {progress.flashcard_id: progress for progress in progress_rows}

    queue = order_for_mode(mode, cards, progress_map)
    logger.debug("study_queue_built", user_id=user_id, class_id=class_id, mode=mode, cards=len(queue))
    return {
        "flashcards": [
            {**card.model_dump(), "deck_name": deck_names[card.deck_id], "class_name": study_class.name}
            for card in queue
        ],
        "mode": mode,
        "class_id": study_class.id,
        "class_name": study_class.name,
        "total_cards": len(cards),
        "study_cards_count": len(queue),
    }
