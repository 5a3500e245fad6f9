from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Header, Query, Request, status

from cissp_api.dependencies import AdminUser, CurrentUser, DbSession
from cissp_api.rate_limit import limiter
from cissp_api.schemas.feedback_schemas import (
    FeedbackCreate,
    FeedbackPriority,
    FeedbackRead,
    FeedbackStatus,
    FeedbackType,
    FeedbackUpdate,
)
from cissp_api.services import feedback_service
from cissp_api.utils.config import settings

router = APIRouter(prefix="/api", tags=["feedback"])


@router.post("/feedback", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.FEEDBACK_RATE_LIMIT)
def submit_feedback(
    request: Request,
    payload: FeedbackCreate,
    session: DbSession,
    user: CurrentUser,
    user_agent: Annotated[Optional[str], Header()] = None,
):
    feedback = feedback_service.create_feedback(session, user.id, payload, user_agent)
    return {"success": True, "feedbackId": feedback.id, "message": "Thank you for your feedback"}


@router.get("/admin/feedback")
def list_feedback(
    session: DbSession,
    admin: AdminUser,
    status_filter: Annotated[Optional[FeedbackStatus], Query(alias="status")] = None,
    feedback_type: Annotated[Optional[FeedbackType], Query(alias="type")] = None,
    priority: Optional[FeedbackPriority] = None,
    flashcard_id: Annotated[Optional[int], Query(alias="flashcardId")] = None,
    deck_id: Annotated[Optional[int], Query(alias="deckId")] = None,
    class_id: Annotated[Optional[int], Query(alias="classId")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    sort_by: Annotated[Literal["createdAt", "priority", "status"], Query(alias="sortBy")] = "createdAt",
    sort_order: Annotated[Literal["asc", "desc"], Query(alias="sortOrder")] = "desc",
):
    result = feedback_service.list_feedback(
        session,
        status=status_filter,
        feedback_type=feedback_type,
        priority=priority,
        flashcard_id=flashcard_id,
        deck_id=deck_id,
        class_id=class_id,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {
        "feedback": [FeedbackRead.model_validate(row) for row in result["feedback"]],
        "pagination": {"total": result["total"], "limit": limit, "offset": offset},
        "statusCounts": result["status_counts"],
    }


@router.get("/admin/feedback/{feedback_id}")
def get_feedback(feedback_id: int, session: DbSession, admin: AdminUser):
    return {"feedback": FeedbackRead.model_validate(feedback_service.get_feedback(session, feedback_id))}


@router.patch("/admin/feedback/{feedback_id}")
def update_feedback(feedback_id: int, payload: FeedbackUpdate, session: DbSession, admin: AdminUser):
    feedback = feedback_service.update_feedback(session, feedback_id, payload, admin.id)
    return {"success": True, "feedback": FeedbackRead.model_validate(feedback)}


@router.delete("/admin/feedback/{feedback_id}")
def delete_feedback(feedback_id: int, session: DbSession, admin: AdminUser):
    feedback_service.delete_feedback(session, feedback_id)
    return {"success": True}
