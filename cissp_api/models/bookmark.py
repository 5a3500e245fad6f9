from typing import Optional
from datetime import datetime
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class BookmarkedFlashcard(SQLModel, table=True):
    __tablename__ = "bookmarked_flashcards"
    __table_args__ = (UniqueConstraint("user_id", "flashcard_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    flashcard_id: int = Field(foreign_key="flashcards.id")
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
