"""Stripe webhook verification and event handling.

Stripe delivers both ``checkout.session.completed`` and
``payment_intent.succeeded`` for a single purchase, so every write here is an
upsert or guarded by an existence check.
"""

import json
from typing import Any, Dict, Optional

import stripe
import structlog
from sqlmodel import Session, select, or_

from cissp_api.models.subscription import Payment, Subscription
from cissp_api.models.user import User
from cissp_api.services.billing_service import get_subscription
from cissp_api.services.stripe_gateway import StripeGateway, payment_intent_fields, subscription_fields
from cissp_api.utils.config import settings
from cissp_api.utils.dates import utcnow

logger = structlog.get_logger(__name__)

STATUS_MAP = {
    "active": "active",
    "trialing": "trialing",
    "past_due": "past_due",
    "canceled": "canceled",
    "unpaid": "past_due",
    "incomplete": "inactive",
    "incomplete_expired": "inactive",
}


class WebhookSignatureError(Exception):
    pass


def construct_event(payload: bytes, signature: Optional[str], secret: str) -> Dict[str, Any]:
    """Verify the Stripe signature and return the event as a plain dict."""
    if not signature:
        raise WebhookSignatureError("No signature")
    try:
        stripe.Webhook.construct_event(payload, signature, secret)
    except ValueError as e:
        raise WebhookSignatureError("Invalid payload") from e
    except stripe.SignatureVerificationError as e:
        raise WebhookSignatureError("Invalid signature") from e
    return json.loads(payload)


def map_status(stripe_status: Optional[str]) -> str:
    return STATUS_MAP.get(stripe_status or "", "inactive")


def is_lifetime_price(price_id: Optional[str]) -> bool:
    # Without a configured lifetime price every one-time checkout is the lifetime product
    if settings.STRIPE_LIFETIME_PRICE_ID:
        return price_id == settings.STRIPE_LIFETIME_PRICE_ID
    return bool(price_id)


def _user_id_from_metadata(metadata: Dict[str, Any]) -> Optional[str]:
    return metadata.get("userId")


def _ensure_subscription_row(session: Session, user_id: str) -> Subscription:
    subscription = get_subscription(session, user_id)
    if not subscription:
        subscription = Subscription(user_id=user_id)
    return subscription


def upsert_subscription(session: Session, user_id: str, data: Dict[str, Any]) -> Subscription:
    subscription = session.exec(
        select(Subscription).where(Subscription.stripe_subscription_id == data["id"])
    ).first() or _ensure_subscription_row(session, user_id)

    if subscription.plan_type != "lifetime":
        subscription.plan_type = "pro_yearly" if data.get("interval") == "year" else "pro_monthly"
        subscription.status = map_status(data.get("status"))
    subscription.stripe_subscription_id = data["id"]
    subscription.stripe_customer_id = data.get("customer") or subscription.stripe_customer_id
    subscription.current_period_start = data.get("current_period_start")
    subscription.current_period_end = data.get("current_period_end")
    subscription.cancel_at_period_end = data.get("cancel_at_period_end", False)
    subscription.updated_at = utcnow()
    session.add(subscription)
    session.commit()
    logger.info(
        "subscription_synced",
        user_id=user_id,
        stripe_subscription_id=data["id"],
        plan_type=subscription.plan_type,
        status=subscription.status,
    )
    return subscription


def grant_lifetime_access(session: Session, user_id: str, customer_id: Optional[str]) -> Subscription:
    subscription = _ensure_subscription_row(session, user_id)
    subscription.plan_type = "lifetime"
    subscription.status = "active"
    subscription.stripe_customer_id = customer_id or subscription.stripe_customer_id
    subscription.current_period_end = None
    subscription.cancel_at_period_end = False
    subscription.updated_at = utcnow()
    session.add(subscription)
    session.commit()
    logger.info("lifetime_access_granted", user_id=user_id)
    return subscription


def record_payment(session: Session, user_id: str, intent: Dict[str, Any], status: str) -> Optional[Payment]:
    existing = session.exec(
        select(Payment).where(Payment.stripe_payment_intent_id == intent["id"], Payment.status == status)
    ).first()
    if existing:
        logger.info("payment_already_recorded", payment_intent_id=intent["id"], status=status)
        return None

    payment = Payment(
        user_id=user_id,
        stripe_payment_intent_id=intent["id"],
        amount=intent["amount"],
        currency=intent["currency"],
        status=status,
        payment_method=intent.get("payment_method"),
    )
    session.add(payment)
    session.commit()
    logger.info("payment_recorded", user_id=user_id, payment_intent_id=intent["id"], status=status)
    return payment


def _user_exists(session: Session, user_id: str) -> bool:
    if session.get(User, user_id):
        return True
    logger.warning("webhook_unknown_user", user_id=user_id)
    return False


def _handle_checkout_completed(session: Session, checkout: Dict[str, Any], gateway: StripeGateway) -> None:
    metadata = checkout.get("metadata") or {}
    user_id = _user_id_from_metadata(metadata) or checkout.get("client_reference_id")
    if not user_id:
        logger.warning("checkout_without_user", checkout_session_id=checkout.get("id"))
        return
    if not _user_exists(session, user_id):
        return

    if checkout.get("mode") == "subscription" and checkout.get("subscription"):
        upsert_subscription(session, user_id, gateway.retrieve_subscription(checkout["subscription"]))
    elif checkout.get("mode") == "payment" and checkout.get("payment_intent"):
        intent = gateway.retrieve_payment_intent(checkout["payment_intent"])
        record_payment(session, user_id, intent, "succeeded")
        if is_lifetime_price(metadata.get("priceId") or intent["metadata"].get("priceId")):
            grant_lifetime_access(session, user_id, checkout.get("customer") or intent.get("customer"))


def _handle_subscription_changed(session: Session, raw: Dict[str, Any]) -> None:
    data = subscription_fields(raw)
    user_id = _user_id_from_metadata(data["metadata"])
    if not user_id:
        conditions = [Subscription.stripe_subscription_id == data["id"]]
        if data["customer"]:
            conditions.append(Subscription.stripe_customer_id == data["customer"])
        existing = session.exec(select(Subscription).where(or_(*conditions))).first()
        user_id = existing.user_id if existing else None
    if not user_id:
        logger.warning("subscription_without_user", stripe_subscription_id=data["id"])
        return
    if not _user_exists(session, user_id):
        return
    upsert_subscription(session, user_id, data)


def _handle_subscription_deleted(session: Session, raw: Dict[str, Any]) -> None:
    subscription = session.exec(
        select(Subscription).where(Subscription.stripe_subscription_id == raw.get("id"))
    ).first()
    if not subscription:
        logger.warning("subscription_delete_unknown", stripe_subscription_id=raw.get("id"))
        return
    subscription.status = "canceled"
    subscription.updated_at = utcnow()
    session.add(subscription)
    session.commit()
    logger.info("subscription_canceled", user_id=subscription.user_id)


def _handle_payment_intent(session: Session, raw: Dict[str, Any], status: str) -> None:
    intent = payment_intent_fields(raw)
    user_id = _user_id_from_metadata(intent["metadata"])
    if not user_id:
        logger.warning("payment_without_user", payment_intent_id=intent["id"])
        return
    if not _user_exists(session, user_id):
        return

    record_payment(session, user_id, intent, status)
    if status == "succeeded" and is_lifetime_price(intent["metadata"].get("priceId")):
        grant_lifetime_access(session, user_id, intent.get("customer"))


def handle_event(session: Session, event: Dict[str, Any], gateway: StripeGateway) -> None:
    event_type = event.get("type")
    obj = (event.get("data") or {}).get("object") or {}
    log = logger.bind(event_id=event.get("id"), event_type=event_type)

    if event_type == "checkout.session.completed":
        _handle_checkout_completed(session, obj, gateway)
    elif event_type in ("customer.subscription.created", "customer.subscription.updated"):
        _handle_subscription_changed(session, obj)
    elif event_type == "customer.subscription.deleted":
        _handle_subscription_deleted(session, obj)
    elif event_type == "payment_intent.succeeded":
        _handle_payment_intent(session, obj, "succeeded")
    elif event_type == "payment_intent.payment_failed":
        _handle_payment_intent(session, obj, "failed")
    else:
        log.info("webhook_event_ignored")
        return
    log.info("webhook_event_processed")
