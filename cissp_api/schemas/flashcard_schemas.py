from datetime import datetime
from typing import Optional
from pydantic import Field
from cissp_api.schemas.base import CamelModel, PatchModel


class FlashcardCreate(CamelModel):
    deck_id: int
    question: str = Field(min_length=1, max_length=5000)
    answer: str = Field(min_length=1, max_length=5000)
    explanation: Optional[str] = Field(default=None, max_length=2000)
    difficulty: Optional[int] = Field(default=None, ge=1, le=5)
    order: int = Field(default=0, ge=0)
    is_published: bool = True

    model_config = CamelModel.model_config | {"str_strip_whitespace": True}


class FlashcardUpdate(PatchModel):
    nullable_fields = frozenset({"explanation", "difficulty"})

    question: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    answer: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    explanation: Optional[str] = Field(default=None, max_length=2000)
    difficulty: Optional[int] = Field(default=None, ge=1, le=5)
    order: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None

    model_config = CamelModel.model_config | {"str_strip_whitespace": True}


class FlashcardRead(CamelModel):
    id: int
    deck_id: int
    question: str
    answer: str
    explanation: Optional[str] = None
    difficulty: Optional[int] = None
    order: int
    is_published: bool
    created_by: str
    created_at: datetime
    updated_at: datetime
