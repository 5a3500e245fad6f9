from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class Subscription(SQLModel, table=True):
    __tablename__ = "subscriptions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)

    stripe_customer_id: Optional[str] = Field(default=None, index=True)
    stripe_subscription_id: Optional[str] = Field(default=None, index=True)

    # free | pro_monthly | pro_yearly | lifetime
    plan_type: str = Field(default="free")
    # active | canceled | past_due | trialing | inactive
    status: str = Field(default="active")

    current_period_start: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    current_period_end: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    cancel_at_period_end: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class Payment(SQLModel, table=True):
    __tablename__ = "payments"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    stripe_payment_intent_id: str = Field(index=True)
    amount: int  # cents
    currency: str = Field(default="usd")
    status: str  # succeeded | failed | pending
    payment_method: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
