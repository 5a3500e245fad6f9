from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class Topic(SQLModel, table=True):
    """Numbered objective inside one of the eight CISSP domains, e.g. 1.2."""

    __tablename__ = "topics"

    id: Optional[int] = Field(default=None, primary_key=True)
    domain_number: int = Field(index=True)  # 1-8
    topic_code: str = Field(max_length=20, unique=True, index=True)
    topic_name: str
    order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class SubTopic(SQLModel, table=True):
    __tablename__ = "sub_topics"

    id: Optional[int] = Field(default=None, primary_key=True)
    topic_id: int = Field(foreign_key="topics.id", index=True)
    sub_topic_name: str
    order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
