"""Tests for Stripe webhook verification and event handling."""

import json
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from cissp_api.models.subscription import Payment
from cissp_api.models.user import User
from cissp_api.services import webhook_service
from cissp_api.services.billing_service import get_subscription
from cissp_api.services.stripe_gateway import subscription_fields

from conftest import FakeStripeGateway, sign_stripe_payload


def _event(event_type: str, obj: dict[str, Any], event_id: str = "evt_test_1") -> str:
    return json.dumps({"id": event_id, "object": "event", "type": event_type, "data": {"object": obj}})


def _post(client: TestClient, payload: str, signature: str | None = None):
    headers = {"Content-Type": "application/json"}
    headers["Stripe-Signature"] = signature if signature is not None else sign_stripe_payload(payload)
    return client.post("/api/webhooks/stripe", content=payload, headers=headers)


def _intent(user_id: str, intent_id: str = "pi_123", price_id: str = "price_lifetime") -> dict[str, Any]:
    return {
        "id": intent_id,
        "object": "payment_intent",
        "amount": 19900,
        "currency": "usd",
        "customer": "cus_123",
        "payment_method_types": ["card"],
        "metadata": {"userId": user_id, "priceId": price_id},
    }


def _subscription(user_id: str, sub_status: str = "active", interval: str = "month") -> dict[str, Any]:
    return {
        "id": "sub_123",
        "object": "subscription",
        "customer": "cus_123",
        "status": sub_status,
        "cancel_at_period_end": False,
        "current_period_start": 1760000000,
        "current_period_end": 1762600000,
        "metadata": {"userId": user_id},
        "items": {"data": [{"price": {"id": "price_pro", "recurring": {"interval": interval}}}]},
    }


class TestSignature:
    def test_missing_signature(self, client: TestClient) -> None:
        response = client.post("/api/webhooks/stripe", content=_event("ping", {}))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "No signature"

    def test_bad_signature(self, client: TestClient) -> None:
        payload = _event("payment_intent.succeeded", {})

        response = _post(client, payload, sign_stripe_payload(payload, secret="whsec_wrong"))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Invalid signature"

    def test_unknown_event_is_acknowledged(self, client: TestClient) -> None:
        response = _post(client, _event("invoice.created", {"id": "in_1"}))

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"received": True}


class TestPaymentEvents:
    def test_payment_succeeded_grants_lifetime(
        self, client: TestClient, db_session: Session, test_user: User
    ) -> None:
        response = _post(client, _event("payment_intent.succeeded", _intent(test_user.id)))

        assert response.status_code == status.HTTP_200_OK
        subscription = get_subscription(db_session, test_user.id)
        db_session.refresh(subscription)
        assert subscription.plan_type == "lifetime"
        assert subscription.status == "active"
        assert subscription.stripe_customer_id == "cus_123"

        payment = db_session.exec(select(Payment)).one()
        assert (payment.amount, payment.status, payment.payment_method) == (19900, "succeeded", "card")

    def test_redelivered_payment_is_recorded_once(
        self, client: TestClient, db_session: Session, test_user: User
    ) -> None:
        payload = _event("payment_intent.succeeded", _intent(test_user.id))
        _post(client, payload)
        _post(client, payload)

        assert len(db_session.exec(select(Payment)).all()) == 1

    def test_other_price_does_not_grant_lifetime(
        self, client: TestClient, db_session: Session, test_user: User
    ) -> None:
        _post(client, _event("payment_intent.succeeded", _intent(test_user.id, price_id="price_other")))

        assert get_subscription(db_session, test_user.id).plan_type == "free"
        assert len(db_session.exec(select(Payment)).all()) == 1

    def test_failed_payment(self, client: TestClient, db_session: Session, test_user: User) -> None:
        _post(client, _event("payment_intent.payment_failed", _intent(test_user.id)))

        payment = db_session.exec(select(Payment)).one()
        assert payment.status == "failed"
        assert get_subscription(db_session, test_user.id).plan_type == "free"

    def test_unknown_user_is_ignored(self, client: TestClient, db_session: Session) -> None:
        response = _post(client, _event("payment_intent.succeeded", _intent("user_ghost")))

        assert response.status_code == status.HTTP_200_OK
        assert db_session.exec(select(Payment)).all() == []

    def test_checkout_completed_in_payment_mode(
        self, client: TestClient, db_session: Session, test_user: User, stripe_gateway: FakeStripeGateway
    ) -> None:
        stripe_gateway.payment_intents["pi_777"] = {
            "id": "pi_777",
            "amount": 19900,
            "currency": "usd",
            "customer": "cus_777",
            "payment_method": "card",
            "metadata": {"userId": test_user.id, "priceId": "price_lifetime"},
        }
        checkout = {
            "id": "cs_test_123",
            "object": "checkout.session",
            "mode": "payment",
            "payment_intent": "pi_777",
            "customer": "cus_777",
            "client_reference_id": test_user.id,
            "metadata": {"userId": test_user.id, "priceId": "price_lifetime"},
        }

        _post(client, _event("checkout.session.completed", checkout))

        subscription = get_subscription(db_session, test_user.id)
        db_session.refresh(subscription)
        assert subscription.plan_type == "lifetime"
        assert subscription.stripe_customer_id == "cus_777"

    def test_checkout_completed_in_subscription_mode(
        self, client: TestClient, db_session: Session, test_user: User, stripe_gateway: FakeStripeGateway
    ) -> None:
        stripe_gateway.subscriptions["sub_123"] = subscription_fields(_subscription(test_user.id, "active", "year"))
        checkout = {
            "id": "cs_test_456",
            "object": "checkout.session",
            "mode": "subscription",
            "subscription": "sub_123",
            "customer": "cus_123",
            "client_reference_id": test_user.id,
            "metadata": {"userId": test_user.id, "priceId": "price_pro"},
        }

        response = _post(client, _event("checkout.session.completed", checkout))

        assert response.status_code == status.HTTP_200_OK
        subscription = get_subscription(db_session, test_user.id)
        db_session.refresh(subscription)
        assert (subscription.plan_type, subscription.status) == ("pro_yearly", "active")
        assert subscription.stripe_subscription_id == "sub_123"
        assert subscription.stripe_customer_id == "cus_123"
        assert subscription.current_period_end == datetime(2025, 11, 8, 11, 6, 40, tzinfo=timezone.utc)
        assert db_session.exec(select(Payment)).all() == []

    def test_handler_failure_returns_500(
        self, client: TestClient, test_user: User, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def boom(*args: Any, **kwargs: Any) -> None:
            raise RuntimeError("database is locked")

        monkeypatch.setattr(webhook_service, "record_payment", boom)

        response = _post(client, _event("payment_intent.succeeded", _intent(test_user.id)))

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error"] == "Webhook processing failed"


class TestSubscriptionEvents:
    def test_created_and_updated(self, client: TestClient, db_session: Session, test_user: User) -> None:
        _post(client, _event("customer.subscription.created", _subscription(test_user.id, "trialing")))
        subscription = get_subscription(db_session, test_user.id)
        db_session.refresh(subscription)
        assert (subscription.plan_type, subscription.status) == ("pro_monthly", "trialing")
        assert subscription.stripe_subscription_id == "sub_123"

        _post(client, _event("customer.subscription.updated", _subscription(test_user.id, "unpaid", "year")))
        db_session.refresh(subscription)
        assert (subscription.plan_type, subscription.status) == ("pro_yearly", "past_due")

    def test_update_never_downgrades_lifetime(
        self, client: TestClient, db_session: Session, test_user: User
    ) -> None:
        _post(client, _event("payment_intent.succeeded", _intent(test_user.id)))
        _post(client, _event("customer.subscription.updated", _subscription(test_user.id, "past_due")))

        subscription = get_subscription(db_session, test_user.id)
        db_session.refresh(subscription)
        assert (subscription.plan_type, subscription.status) == ("lifetime", "active")

    def test_deleted_cancels(self, client: TestClient, db_session: Session, test_user: User) -> None:
        _post(client, _event("customer.subscription.created", _subscription(test_user.id)))

        _post(client, _event("customer.subscription.deleted", {"id": "sub_123", "object": "subscription"}))

        subscription = get_subscription(db_session, test_user.id)
        db_session.refresh(subscription)
        assert subscription.status == "canceled"


@pytest.mark.parametrize(
    ("stripe_status", "expected"),
    [("active", "active"), ("unpaid", "past_due"), ("incomplete_expired", "inactive"), (None, "inactive")],
)
def test_map_status(stripe_status: str | None, expected: str) -> None:
    assert webhook_service.map_status(stripe_status) == expected
