from typing import Annotated, Optional

from fastapi import APIRouter, Query, status

from cissp_api.dependencies import CurrentUser, DbSession
from cissp_api.schemas.progress_schemas import (
    CardProgressRead,
    CardProgressRequest,
    ClassProgressResponse,
    DueCard,
    EndSessionRequest,
    SessionCardCreate,
    SessionCardRead,
    StudyMode,
    StudyQueue,
    StudySessionCreate,
    StudySessionRead,
    UserStatsRead,
)
from cissp_api.services import progress_service, study_session_service

router = APIRouter(prefix="/api", tags=["progress"])


@router.post("/progress/card")
def record_card_progress(request: CardProgressRequest, session: DbSession, user: CurrentUser):
    progress = progress_service.record_card_progress(
        session, user.id, request.flashcard_id, request.confidence_level, request.session_id
    )
    return {"success": True, "progress": CardProgressRead.model_validate(progress)}


@router.get("/progress/card")
def get_card_progress(flashcard_id: Annotated[int, Query(alias="flashcardId")], session: DbSession, user: CurrentUser):
    progress = progress_service.get_card_progress(session, user.id, flashcard_id)
    return {"progress": CardProgressRead.model_validate(progress) if progress else None}


@router.get("/progress/classes/{class_id}", response_model=ClassProgressResponse)
def get_class_progress(class_id: int, session: DbSession, user: CurrentUser):
    return progress_service.get_class_progress(session, user.id, class_id)


@router.get("/progress/due")
def get_due_cards(session: DbSession, user: CurrentUser, limit: Annotated[int, Query(ge=1, le=200)] = 50):
    cards = progress_service.get_due_cards(session, user.id, limit)
    return {"cards": [DueCard.model_validate(card) for card in cards], "count": len(cards)}


@router.get("/classes/{class_id}/study", response_model=StudyQueue)
def get_study_queue(
    class_id: int,
    session: DbSession,
    user: CurrentUser,
    mode: StudyMode = "progressive",
    decks: Optional[str] = None,
):
    deck_ids = progress_service.parse_id_list(decks)
    return progress_service.get_study_queue(session, user.id, class_id, mode, deck_ids)


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
def start_study_session(request: StudySessionCreate, session: DbSession, user: CurrentUser):
    study_session = study_session_service.start_session(session, user.id, request.deck_ids)
    return {"sessionId": study_session.id, "startedAt": study_session.started_at}


@router.post("/sessions/{session_id}/cards", status_code=status.HTTP_201_CREATED)
def add_session_card(session_id: int, request: SessionCardCreate, session: DbSession, user: CurrentUser):
    card = study_session_service.add_session_card(
        session, user.id, session_id, request.flashcard_id, request.confidence_rating, request.response_time
    )
    return {"success": True, "sessionCard": SessionCardRead.model_validate(card)}


@router.post("/sessions/{session_id}/end")
def end_study_session(session_id: int, session: DbSession, user: CurrentUser, request: Optional[EndSessionRequest] = None):
    cards_studied = request.cards_studied if request else None
    study_session = study_session_service.end_session(session, user.id, session_id, cards_studied)
    return {"success": True, "session": StudySessionRead.model_validate(study_session)}


@router.get("/stats")
def get_stats(session: DbSession, user: CurrentUser):
    return {"stats": UserStatsRead.model_validate(study_session_service.get_user_stats(session, user.id))}
