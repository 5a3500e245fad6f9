from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class User(SQLModel, table=True):
    __tablename__ = "users"

    # Id issued by the upstream identity provider
    id: str = Field(primary_key=True)
    email: str = Field(default="", index=True)
    name: Optional[str] = None
    role: str = Field(default="user")  # "user" or "admin"

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
