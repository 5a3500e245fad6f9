from typing import Optional
from cissp_api.schemas.base import CamelModel


class CheckoutRequest(CamelModel):
    price_id: Optional[str] = None


class CheckoutResponse(CamelModel):
    session_id: str
    url: Optional[str] = None


class SubscriptionStatusResponse(CamelModel):
    has_paid_access: bool
    plan_type: str
    status: str
