from datetime import datetime
from typing import List, Literal, Optional
from pydantic import Field
from cissp_api.schemas.base import CamelModel, PatchModel
from cissp_api.schemas.flashcard_schemas import FlashcardRead


class ClassCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    order: int = Field(default=0, ge=0)
    icon: Optional[str] = None
    color: str = "purple"
    is_published: bool = False


class ClassUpdate(PatchModel):
    nullable_fields = frozenset({"description", "icon"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=0)
    icon: Optional[str] = None
    color: Optional[str] = None
    is_published: Optional[bool] = None


class DeckCreate(CamelModel):
    class_id: int
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    type: Literal["flashcard", "quiz"] = "flashcard"
    order: int = Field(default=0, ge=0)
    is_premium: bool = False
    is_published: bool = False


class DeckUpdate(PatchModel):
    nullable_fields = frozenset({"description"})

    class_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[Literal["flashcard", "quiz"]] = None
    order: Optional[int] = Field(default=None, ge=0)
    is_premium: Optional[bool] = None
    is_published: Optional[bool] = None


# User facing deck with the caller's progress folded in
class DeckWithProgress(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    type: str
    order: int
    is_premium: bool
    card_count: int
    studied_count: int
    progress: int


class ClassRead(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    order: int
    icon: Optional[str] = None
    color: str
    is_published: bool
    created_by: str
    created_at: datetime
    updated_at: datetime


class ClassSummary(ClassRead):
    deck_count: int
    card_count: int


class PublishedClass(ClassRead):
    decks: List[DeckWithProgress]


class DeckRead(CamelModel):
    id: int
    class_id: int
    name: str
    description: Optional[str] = None
    type: str
    card_count: int
    order: int
    is_premium: bool
    is_published: bool
    created_by: str
    created_at: datetime
    updated_at: datetime


class DeckWithCount(DeckRead):
    flashcard_count: int


class ClassWithDecks(ClassRead):
    decks: List[DeckWithCount]


class DeckWithFlashcards(DeckRead):
    flashcards: List[FlashcardRead]
