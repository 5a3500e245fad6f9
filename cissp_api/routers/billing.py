from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
import structlog

from cissp_api.dependencies import CurrentUser, DbSession
from cissp_api.exceptions import error_body
from cissp_api.schemas.billing_schemas import CheckoutRequest, CheckoutResponse, SubscriptionStatusResponse
from cissp_api.services import billing_service, webhook_service
from cissp_api.services.stripe_gateway import StripeGateway, get_stripe_gateway
from cissp_api.utils.config import settings

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["billing"])

Gateway = Annotated[StripeGateway, Depends(get_stripe_gateway)]


@router.get("/subscription/status", response_model=SubscriptionStatusResponse)
def subscription_status(session: DbSession, user: CurrentUser):
    return billing_service.get_subscription_status(session, user.id)


@router.post("/checkout", response_model=CheckoutResponse)
def create_checkout(request: CheckoutRequest, session: DbSession, user: CurrentUser, gateway: Gateway):
    return billing_service.create_checkout_session(session, user, request.price_id, gateway)


@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    session: DbSession,
    gateway: Gateway,
    stripe_signature: Annotated[Optional[str], Header()] = None,
):
    payload = await request.body()
    try:
        event = webhook_service.construct_event(payload, stripe_signature, settings.STRIPE_WEBHOOK_SECRET)
    except webhook_service.WebhookSignatureError as e:
        logger.warning("stripe_webhook_rejected", reason=str(e))
        return JSONResponse(status_code=400, content=error_body(str(e), 400))

    try:
        webhook_service.handle_event(session, event, gateway)
    except Exception:
        session.rollback()
        logger.exception("stripe_webhook_failed", event_id=event.get("id"), event_type=event.get("type"))
        return JSONResponse(status_code=500, content=error_body("Webhook processing failed", 500))

    return {"received": True}
