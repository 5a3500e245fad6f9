"""Learner facing content: classes, decks, flashcards and their quizzes."""

from fastapi import APIRouter

from cissp_api.dependencies import CurrentUser, DbSession
from cissp_api.schemas.deck_schemas import ClassSummary, DeckRead, PublishedClass
from cissp_api.schemas.flashcard_schemas import FlashcardRead
from cissp_api.schemas.quiz_schemas import DeckQuizQuestionRead, FlashcardQuizQuestionRead
from cissp_api.services import content_service, quiz_content_service

router = APIRouter(prefix="/api", tags=["content"])


@router.get("/classes")
def list_classes(session: DbSession, user: CurrentUser):
    classes = content_service.list_published_classes(session)
    return {"classes": [ClassSummary.model_validate(row) for row in classes]}


@router.get("/classes/{class_id}")
def get_class(class_id: int, session: DbSession, user: CurrentUser):
    return {"class": PublishedClass.model_validate(content_service.get_published_class(session, class_id, user))}


@router.get("/decks/{deck_id}/flashcards")
def get_deck_flashcards(deck_id: int, session: DbSession, user: CurrentUser):
    data = content_service.get_published_flashcards(session, deck_id, user)
    cards = [FlashcardRead.model_validate(card) for card in data["flashcards"]]
    return {"deck": DeckRead.model_validate(data["deck"]), "flashcards": cards, "count": len(cards)}


def _quiz_payload(questions, read_schema, empty_message: str):
    if not questions:
        return {"success": False, "message": empty_message, "questions": []}
    return {"success": True, "questions": [read_schema.model_validate(q) for q in questions], "count": len(questions)}


@router.get("/flashcards/{flashcard_id}/quiz")
def get_flashcard_quiz(flashcard_id: int, session: DbSession, user: CurrentUser):
    questions = quiz_content_service.get_published_questions(session, "flashcard", flashcard_id, user.id)
    return _quiz_payload(questions, FlashcardQuizQuestionRead, "No quiz available for this flashcard")


@router.get("/decks/{deck_id}/quiz")
def get_deck_quiz(deck_id: int, session: DbSession, user: CurrentUser):
    questions = quiz_content_service.get_published_questions(session, "deck", deck_id, user.id)
    return _quiz_payload(questions, DeckQuizQuestionRead, "No quiz available for this deck")


@router.get("/decks/{deck_id}/has-quiz")
def deck_has_quiz(deck_id: int, session: DbSession, user: CurrentUser):
    count = quiz_content_service.count_questions(session, "deck", deck_id)
    return {"hasQuiz": count > 0, "count": count}
