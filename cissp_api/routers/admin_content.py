"""Admin CRUD for classes, decks, flashcards and quiz questions."""

from typing import Annotated, Optional

from fastapi import APIRouter, Query, status

from cissp_api.dependencies import AdminUser, DbSession
from cissp_api.schemas.deck_schemas import (
    ClassCreate,
    ClassRead,
    ClassUpdate,
    ClassWithDecks,
    DeckCreate,
    DeckRead,
    DeckUpdate,
    DeckWithFlashcards,
)
from cissp_api.schemas.flashcard_schemas import FlashcardCreate, FlashcardRead, FlashcardUpdate
from cissp_api.schemas.quiz_schemas import (
    DeckQuizQuestionRead,
    FlashcardQuizQuestionRead,
    QuizQuestionUpdate,
    QuizUploadRequest,
)
from cissp_api.services import content_service, quiz_content_service

router = APIRouter(prefix="/api/admin", tags=["admin-content"])


# --- Classes ---

@router.get("/classes")
def list_classes(session: DbSession, admin: AdminUser):
    return {"classes": [ClassRead.model_validate(row) for row in content_service.list_classes(session)]}


@router.get("/classes/{class_id}")
def get_class(class_id: int, session: DbSession, admin: AdminUser):
    return {"class": ClassWithDecks.model_validate(content_service.get_class_with_decks(session, class_id))}


@router.post("/classes", status_code=status.HTTP_201_CREATED)
def create_class(request: ClassCreate, session: DbSession, admin: AdminUser):
    study_class = content_service.create_class(session, request, admin.id)
    return {"success": True, "class": ClassRead.model_validate(study_class)}


@router.patch("/classes/{class_id}")
def update_class(class_id: int, request: ClassUpdate, session: DbSession, admin: AdminUser):
    study_class = content_service.update_class(session, class_id, request)
    return {"success": True, "class": ClassRead.model_validate(study_class)}


@router.delete("/classes/{class_id}")
def delete_class(class_id: int, session: DbSession, admin: AdminUser):
    content_service.delete_class(session, class_id)
    return {"success": True}


# --- Decks ---

@router.get("/decks")
def list_decks(session: DbSession, admin: AdminUser, class_id: Annotated[Optional[int], Query(alias="classId")] = None):
    return {"decks": [DeckRead.model_validate(row) for row in content_service.list_decks(session, class_id)]}


@router.get("/decks/{deck_id}")
def get_deck(deck_id: int, session: DbSession, admin: AdminUser):
    return {"deck": DeckWithFlashcards.model_validate(content_service.get_deck_with_flashcards(session, deck_id))}


@router.post("/decks", status_code=status.HTTP_201_CREATED)
def create_deck(request: DeckCreate, session: DbSession, admin: AdminUser):
    deck = content_service.create_deck(session, request, admin.id)
    return {"success": True, "deck": DeckRead.model_validate(deck)}


@router.patch("/decks/{deck_id}")
def update_deck(deck_id: int, request: DeckUpdate, session: DbSession, admin: AdminUser):
    deck = content_service.update_deck(session, deck_id, request)
    return {"success": True, "deck": DeckRead.model_validate(deck)}


@router.delete("/decks/{deck_id}")
def delete_deck(deck_id: int, session: DbSession, admin: AdminUser):
    content_service.delete_deck(session, deck_id)
    return {"success": True}


# --- Flashcards ---

@router.get("/flashcards")
def list_flashcards(session: DbSession, admin: AdminUser, deck_id: Annotated[Optional[int], Query(alias="deckId")] = None):
    cards = content_service.list_flashcards(session, deck_id)
    return {"flashcards": [FlashcardRead.model_validate(card) for card in cards]}


@router.get("/flashcards/{flashcard_id}")
def get_flashcard(flashcard_id: int, session: DbSession, admin: AdminUser):
    return {"flashcard": FlashcardRead.model_validate(content_service.get_flashcard(session, flashcard_id))}


@router.post("/flashcards", status_code=status.HTTP_201_CREATED)
def create_flashcard(request: FlashcardCreate, session: DbSession, admin: AdminUser):
    card = content_service.create_flashcard(session, request, admin.id)
    return {"success": True, "flashcard": FlashcardRead.model_validate(card)}


@router.patch("/flashcards/{flashcard_id}")
def update_flashcard(flashcard_id: int, request: FlashcardUpdate, session: DbSession, admin: AdminUser):
    card = content_service.update_flashcard(session, flashcard_id, request)
    return {"success": True, "flashcard": FlashcardRead.model_validate(card)}


@router.delete("/flashcards/{flashcard_id}")
def delete_flashcard(flashcard_id: int, session: DbSession, admin: AdminUser):
    content_service.delete_flashcard(session, flashcard_id)
    return {"success": True}


# --- Quiz questions (flashcard and deck share the same routes shape) ---

def _register_quiz_routes(kind: str, parent: str) -> None:
    base = f"/{parent}/{{parent_id}}/quiz"
    read_schema = FlashcardQuizQuestionRead if kind == "flashcard" else DeckQuizQuestionRead

    def list_quiz(parent_id: int, session: DbSession, admin: AdminUser):
        questions = quiz_content_service.list_questions(session, kind, parent_id)
        return {"questions": [read_schema.model_validate(q) for q in questions], "count": len(questions)}

    def upload_quiz(parent_id: int, request: QuizUploadRequest, session: DbSession, admin: AdminUser):
        result = quiz_content_service.upload_quiz(session, kind, parent_id, request.quiz_data, admin.id)
        return {"success": True, **result}

    def update_question(
        parent_id: int, question_id: int, request: QuizQuestionUpdate, session: DbSession, admin: AdminUser
    ):
        question = quiz_content_service.update_question(session, kind, parent_id, question_id, request)
        return {"success": True, "question": read_schema.model_validate(question)}

    def delete_question(parent_id: int, question_id: int, session: DbSession, admin: AdminUser):
        quiz_content_service.delete_question(session, kind, parent_id, question_id)
        return {"success": True}

    def clear_quiz(parent_id: int, session: DbSession, admin: AdminUser):
        deleted = quiz_content_service.clear_questions(session, kind, parent_id)
        return {"success": True, "deleted": deleted}

    router.add_api_route(base, list_quiz, methods=["GET"], name=f"list_{kind}_quiz")
    router.add_api_route(base, upload_quiz, methods=["PUT"], name=f"upload_{kind}_quiz")
    router.add_api_route(base, clear_quiz, methods=["DELETE"], name=f"clear_{kind}_quiz")
    router.add_api_route(f"{base}/{{question_id}}", update_question, methods=["PATCH"], name=f"update_{kind}_quiz_question")
    router.add_api_route(f"{base}/{{question_id}}", delete_question, methods=["DELETE"], name=f"delete_{kind}_quiz_question")


_register_quiz_routes("flashcard", "flashcards")
_register_quiz_routes("deck", "decks")
