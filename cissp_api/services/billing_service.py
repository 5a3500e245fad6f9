from typing import Any, Dict, Optional
import stripe
import structlog
from sqlmodel import Session, select
from cissp_api.exceptions import ServiceError, ValidationError
from cissp_api.models.subscription import Subscription
from cissp_api.models.user import User
from cissp_api.services.stripe_gateway import StripeGateway
from cissp_api.utils.config import settings

logger = structlog.get_logger(__name__)


def get_subscription(session: Session, user_id: str) -> Optional[Subscription]:
    return session.exec(select(Subscription).where(Subscription.user_id == user_id)).first()


def has_paid_access(subscription: Optional[Subscription]) -> bool:
    """Lifetime never expires; recurring plans count only while in good standing."""
    if not subscription:
        return False
    if subscription.plan_type == "lifetime":
        return True
    if subscription.plan_type in ("pro_monthly", "pro_yearly"):
        return subscription.status in ("active", "trialing")
    return False


def user_has_paid_access(session: Session, user_id: str) -> bool:
    return has_paid_access(get_subscription(session, user_id))


def get_subscription_status(session: Session, user_id: str) -> Dict[str, Any]:
    subscription = get_subscription(session, user_id)
    if not subscription:
        return {"has_paid_access": False, "plan_type": "free", "status": "inactive"}
    return {
        "has_paid_access": has_paid_access(subscription),
        "plan_type": subscription.plan_type,
        "status": subscription.status,
    }


def create_checkout_session(
    session: Session, user: User, price_id: Optional[str], gateway: StripeGateway
) -> Dict[str, Any]:
    """One-time payment checkout for lifetime access."""
    if not price_id:
        raise ValidationError("Price ID is required")

    if user_has_paid_access(session, user.id):
        raise ValidationError("You already have lifetime access", redirectTo="/dashboard")

    metadata = {"userId": user.id, "userEmail": user.email, "priceId": price_id}
    try:
        checkout = gateway.create_checkout_session(
            mode="payment",
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=f"{settings.APP_URL}/dashboard?success=true&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.APP_URL}/pricing?canceled=true",
            customer_email=user.email or None,
            client_reference_id=user.id,
            metadata=metadata,
            payment_intent_data={"metadata": metadata},
        )
    except stripe.StripeError as e:
        logger.error("checkout_session_failed", user_id=user.id, error=str(e))
        raise ServiceError("Failed to create checkout session") from e

    logger.info("checkout_session_created", user_id=user.id, checkout_session_id=checkout["id"])
    return {"session_id": checkout["id"], "url": checkout.get("url")}
