from fastapi import APIRouter, Response, status

from cissp_api.dependencies import CurrentUser, DbSession
from cissp_api.schemas.feedback_schemas import BookmarkCreate, BookmarkedCard, BookmarkRead
from cissp_api.services import bookmark_service

router = APIRouter(prefix="/api/bookmarks", tags=["bookmarks"])


@router.get("")
def list_bookmarks(session: DbSession, user: CurrentUser):
    bookmarks = bookmark_service.list_bookmarks(session, user.id)
    return {"bookmarks": [BookmarkedCard.model_validate(row) for row in bookmarks], "count": len(bookmarks)}


@router.post("", status_code=status.HTTP_201_CREATED)
def add_bookmark(request: BookmarkCreate, response: Response, session: DbSession, user: CurrentUser):
    bookmark, created = bookmark_service.add_bookmark(session, user.id, request.flashcard_id)
    body = BookmarkRead.model_validate(bookmark)
    if not created:
        response.status_code = status.HTTP_200_OK
        return {"success": True, "message": "Already bookmarked", "bookmark": body}
    return {"success": True, "message": "Bookmarked", "bookmark": body}


@router.delete("/{flashcard_id}")
def remove_bookmark(flashcard_id: int, session: DbSession, user: CurrentUser):
    bookmark_service.remove_bookmark(session, user.id, flashcard_id)
    return {"success": True}
