from typing import List, Optional
from datetime import datetime
from sqlmodel import SQLModel, Field, Relationship
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class StudyClass(SQLModel, table=True):
    """Top level of the content tree (one CISSP domain or topic area)."""

    __tablename__ = "classes"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    order: int = Field(default=0)
    icon: Optional[str] = None
    color: str = Field(default="purple")
    is_published: bool = Field(default=False)
    created_by: str

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    decks: List["Deck"] = Relationship(back_populates="study_class")
