from typing import List, Optional
from datetime import datetime
from sqlmodel import SQLModel, Field, Relationship
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class Deck(SQLModel, table=True):
    __tablename__ = "decks"

    id: Optional[int] = Field(default=None, primary_key=True)
    class_id: int = Field(foreign_key="classes.id", index=True)
    name: str
    description: Optional[str] = None
    type: str = Field(default="flashcard")  # "flashcard" or "quiz"
    card_count: int = Field(default=0)
    order: int = Field(default=0)
    is_premium: bool = Field(default=False)
    is_published: bool = Field(default=False)
    created_by: str

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    study_class: Optional["StudyClass"] = Relationship(back_populates="decks")
    cards: List["Flashcard"] = Relationship(back_populates="deck")
