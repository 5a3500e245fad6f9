from datetime import datetime
from typing import Optional
from cissp_api.schemas.base import CamelModel


class UserRead(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    role: str
    created_at: datetime
