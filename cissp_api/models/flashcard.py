from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field, Relationship
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class Flashcard(SQLModel, table=True):
    __tablename__ = "flashcards"

    id: Optional[int] = Field(default=None, primary_key=True)
    deck_id: int = Field(foreign_key="decks.id", index=True)
    question: str
    answer: str
    explanation: Optional[str] = None
    difficulty: Optional[int] = None  # 1-5
    order: int = Field(default=0)
    is_published: bool = Field(default=True)
    created_by: str

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    deck: Optional["Deck"] = Relationship(back_populates="cards")
