"""Thin wrapper over the Stripe SDK so the rest of the app deals in plain dicts."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import stripe

from cissp_api.utils.config import settings


def _field(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    try:
        return obj[key]
    except (KeyError, TypeError):
        return None


def _timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def subscription_fields(subscription: Any) -> Dict[str, Any]:
    """Flatten a Stripe subscription (SDK object or webhook payload)."""
    items = _field(_field(subscription, "items"), "data") or []
    first_item = items[0] if items else None
    price = _field(first_item, "price")
    recurring = _field(price, "recurring")
    # Newer API versions moved the billing period onto the subscription item
    period_start = _field(subscription, "current_period_start") or _field(first_item, "current_period_start")
    period_end = _field(subscription, "current_period_end") or _field(first_item, "current_period_end")
    customer = _field(subscription, "customer")
    if not isinstance(customer, str):
        customer = _field(customer, "id")
    return {
        "id": _field(subscription, "id"),
        "customer": customer,
        "status": _field(subscription, "status"),
        "price_id": _field(price, "id"),
        "interval": _field(recurring, "interval"),
        "current_period_start": _timestamp(period_start),
        "current_period_end": _timestamp(period_end),
        "cancel_at_period_end": bool(_field(subscription, "cancel_at_period_end")),
        "metadata": dict(_field(subscription, "metadata") or {}),
    }


def payment_intent_fields(payment_intent: Any) -> Dict[str, Any]:
    customer = _field(payment_intent, "customer")
    if customer is not None and not isinstance(customer, str):
        customer = _field(customer, "id")
    method_types = _field(payment_intent, "payment_method_types") or []
    return {
        "id": _field(payment_intent, "id"),
        "amount": _field(payment_intent, "amount") or 0,
        "currency": _field(payment_intent, "currency") or "usd",
        "customer": customer,
        "payment_method": method_types[0] if method_types else None,
        "metadata": dict(_field(payment_intent, "metadata") or {}),
    }


class StripeGateway:
    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def create_checkout_session(self, **params: Any) -> Dict[str, Any]:
        checkout_session = stripe.checkout.Session.create(api_key=self.api_key, **params)
        return {"id": checkout_session.id, "url": checkout_session.url}

    def retrieve_subscription(self, subscription_id: str) -> Dict[str, Any]:
        return subscription_fields(stripe.Subscription.retrieve(subscription_id, api_key=self.api_key))

    def retrieve_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        return payment_intent_fields(stripe.PaymentIntent.retrieve(payment_intent_id, api_key=self.api_key))


def get_stripe_gateway() -> StripeGateway:
    return StripeGateway(settings.STRIPE_SECRET_KEY)
