from datetime import timedelta
from typing import List, Optional
import structlog
from sqlmodel import Session, select, func
from cissp_api.exceptions import NotFoundError, ValidationError
from cissp_api.models.deck import Deck
from cissp_api.models.flashcard import Flashcard
from cissp_api.models.progress import StudySession, SessionCard, UserStats
from cissp_api.utils.dates import utcnow

logger = structlog.get_logger(__name__)


def start_session(session: Session, user_id: str, deck_ids: List[int]) -> StudySession:
    if not deck_ids:
        raise ValidationError("At least one deck is required")
    # Multi-deck sessions are keyed on the first deck
    if not session.get(Deck, deck_ids[0]):
        raise NotFoundError("Deck not found")

    study_session = StudySession(user_id=user_id, deck_id=deck_ids[0])
    session.add(study_session)
    session.commit()
    session.refresh(study_session)
    logger.info("study_session_started", user_id=user_id, session_id=study_session.id, deck_ids=deck_ids)
    return study_session


def get_owned_session(session: Session, user_id: str, session_id: int) -> StudySession:
    study_session = session.get(StudySession, session_id)
    if not study_session or study_session.user_id != user_id:
        raise NotFoundError("Study session not found")
    return study_session


def add_session_card(
    session: Session,
    user_id: str,
    session_id: int,
    flashcard_id: int,
    confidence_rating: int,
    response_time: Optional[int] = None,
) -> SessionCard:
    study_session = get_owned_session(session, user_id, session_id)
    if not session.get(Flashcard, flashcard_id):
        raise NotFoundError("Flashcard not found")
    card = SessionCard(
        session_id=study_session.id,
        flashcard_id=flashcard_id,
        confidence_rating=confidence_rating,
        response_time=response_time,
    )
    session.add(card)
    session.commit()
    session.refresh(card)
    return card


def end_session(session: Session, user_id: str, session_id: int, cards_studied: Optional[int] = None) -> StudySession:
    study_session = get_owned_session(session, user_id, session_id)
    if study_session.ended_at:
        raise ValidationError("Study session already ended")

    now = utcnow()
    rated_count, avg_rating = session.exec(
        select(func.count(SessionCard.id), func.avg(SessionCard.confidence_rating)).where(
            SessionCard.session_id == study_session.id
        )
    ).one()

    study_session.ended_at = now
    study_session.study_duration = max(int((now - study_session.started_at).total_seconds()), 0)
    study_session.average_confidence = round(float(avg_rating), 2) if avg_rating is not None else 0.0
    study_session.cards_studied = cards_studied if cards_studied is not None else rated_count
    session.add(study_session)

    update_user_stats(session, user_id, study_session.cards_studied, study_session.study_duration)
    session.commit()
    session.refresh(study_session)
    logger.info(
        "study_session_ended",
        user_id=user_id,
        session_id=study_session.id,
        cards_studied=study_session.cards_studied,
        duration=study_session.study_duration,
    )
    return study_session


def update_user_stats(session: Session, user_id: str, cards: int, seconds: int) -> UserStats:
    """Accumulate totals and advance the daily streak. Caller commits."""
    stats = session.exec(select(UserStats).where(UserStats.user_id == user_id)).first()
    if not stats:
        stats = UserStats(user_id=user_id)

    today = utcnow().date()
    if stats.last_active_date != today:
        continues = stats.last_active_date == today - timedelta(days=1)
        stats.study_streak_days = stats.study_streak_days + 1 if continues else 1

    stats.total_cards_studied += cards
    stats.total_study_time += seconds
    stats.last_active_date = today
    stats.updated_at = utcnow()
    session.add(stats)
    return stats


def get_user_stats(session: Session, user_id: str) -> UserStats:
    stats = session.exec(select(UserStats).where(UserStats.user_id == user_id)).first()
    if not stats:
        stats = UserStats(user_id=user_id)
        session.add(stats)
        session.commit()
        session.refresh(stats)
    return stats
