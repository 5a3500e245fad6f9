from fastapi import APIRouter, status

from cissp_api.dependencies import CurrentUser, DbSession
from cissp_api.schemas.progress_schemas import DeckQuizProgressRead, FlashcardQuizProgressRead, QuizCompleteRequest
from cissp_api.services import quiz_session_service

router = APIRouter(prefix="/api", tags=["quiz-sessions"])


@router.post("/quiz-sessions/complete", status_code=status.HTTP_201_CREATED)
def complete_quiz(request: QuizCompleteRequest, session: DbSession, user: CurrentUser):
    result = quiz_session_service.complete_quiz(session, user.id, request)
    return {
        "success": True,
        "sessionId": result["session_id"],
        "scorePercentage": result["score_percentage"],
        "masteryStatus": result["mastery_status"],
        "averageScore": result["average_score"],
        "bestScore": result["best_score"],
    }


@router.get("/quiz-progress/flashcards/{flashcard_id}")
def get_flashcard_quiz_progress(flashcard_id: int, session: DbSession, user: CurrentUser):
    progress = quiz_session_service.get_flashcard_quiz_progress(session, user.id, flashcard_id)
    return {"progress": FlashcardQuizProgressRead.model_validate(progress) if progress else None}


@router.get("/quiz-progress/decks/{deck_id}")
def get_deck_quiz_progress(deck_id: int, session: DbSession, user: CurrentUser):
    progress = quiz_session_service.get_deck_quiz_progress(session, user.id, deck_id)
    return {"progress": DeckQuizProgressRead.model_validate(progress) if progress else None}
