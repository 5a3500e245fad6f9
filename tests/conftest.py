"""Pytest configuration and fixtures."""

import hashlib
import hmac
import os
import time
from collections.abc import Generator
from types import SimpleNamespace
from typing import Any

# Settings are read once at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("STRIPE_LIFETIME_PRICE_ID", "price_lifetime")
os.environ.setdefault("GROQ_API_KEY", "gsk_test_dummy")
os.environ.setdefault("AI_RETRY_BASE_DELAY_SECONDS", "0")

import pytest
import stripe
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from cissp_api.db.session import get_session
from cissp_api.main import app
from cissp_api.models.deck import Deck
from cissp_api.models.flashcard import Flashcard
from cissp_api.models.study_class import StudyClass
from cissp_api.models.user import User
from cissp_api.rate_limit import limiter
from cissp_api.services.stripe_gateway import get_stripe_gateway
from cissp_api.services.user_service import ensure_user
from cissp_api.utils.groq_client import get_ai_client

test_engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)

USER_ID = "user_learner"
ADMIN_ID = "user_admin"


class FakeStripeGateway:
    """Records outgoing Stripe calls and serves canned objects."""

    def __init__(self) -> None:
        self.checkout_calls: list[dict[str, Any]] = []
        self.subscriptions: dict[str, dict[str, Any]] = {}
        self.payment_intents: dict[str, dict[str, Any]] = {}
        self.fail_checkout = False

    def create_checkout_session(self, **params: Any) -> dict[str, Any]:
        if self.fail_checkout:
            raise stripe.StripeError("card processor unavailable")
        self.checkout_calls.append(params)
        return {"id": "cs_test_123", "url": "https://checkout.stripe.com/c/pay/cs_test_123"}

    def retrieve_subscription(self, subscription_id: str) -> dict[str, Any]:
        return self.subscriptions[subscription_id]

    def retrieve_payment_intent(self, payment_intent_id: str) -> dict[str, Any]:
        return self.payment_intents[payment_intent_id]


class FakeCompletions:
    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeAiClient:
    """Stands in for the Groq client: ``client.chat.completions.create``."""

    def __init__(self, responses: list[Any] | None = None) -> None:
        self.completions = FakeCompletions(responses or [])
        self.chat = SimpleNamespace(completions=self.completions)

    def queue(self, *responses: Any) -> None:
        self.completions.responses.extend(responses)


def make_completion(content: str | None, total_tokens: int = 1500) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=total_tokens),
    )


def sign_stripe_payload(payload: str, secret: str = "whsec_test_secret") -> str:
    timestamp = int(time.time())
    signature = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def quiz_question(text: str = "Which control BEST prevents tailgating?", correct_index: int = 1) -> dict[str, Any]:
    options = ["Security guard", "Mantrap", "CCTV", "Badge reader"]
    return {
        "question": text,
        "options": [{"text": option, "isCorrect": i == correct_index} for i, option in enumerate(options)],
        "explanation": "A mantrap physically allows one person at a time.",
    }


@pytest.fixture(autouse=True)
def reset_rate_limits() -> Generator[None, None, None]:
    limiter.reset()
    yield


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    SQLModel.metadata.create_all(test_engine)
    with Session(test_engine) as session:
        yield session
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def stripe_gateway() -> FakeStripeGateway:
    return FakeStripeGateway()


@pytest.fixture
def ai_client() -> FakeAiClient:
    return FakeAiClient()


@pytest.fixture
def client(
    db_session: Session, stripe_gateway: FakeStripeGateway, ai_client: FakeAiClient
) -> Generator[TestClient, Any, None]:
    """Create a test client bound to the test database and fake upstreams."""

    def override_get_session() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_stripe_gateway] = lambda: stripe_gateway
    app.dependency_overrides[get_ai_client] = lambda: ai_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db_session: Session) -> User:
    return ensure_user(db_session, USER_ID, "learner@example.com", "Lea Learner")


@pytest.fixture
def admin_user(db_session: Session) -> User:
    user = ensure_user(db_session, ADMIN_ID, "admin@example.com", "Ada Admin")
    user.role = "admin"
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def user_headers(test_user: User) -> dict[str, str]:
    return {"X-User-Id": test_user.id, "X-User-Email": test_user.email}


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return {"X-User-Id": admin_user.id, "X-User-Email": admin_user.email}


@pytest.fixture
def test_class(db_session: Session) -> StudyClass:
    study_class = StudyClass(name="Security and Risk Management", order=1, is_published=True, created_by=ADMIN_ID)
    db_session.add(study_class)
    db_session.commit()
    db_session.refresh(study_class)
    return study_class


@pytest.fixture
def test_deck(db_session: Session, test_class: StudyClass) -> Deck:
    deck = Deck(class_id=test_class.id, name="Governance", order=1, is_published=True, created_by=ADMIN_ID)
    db_session.add(deck)
    db_session.commit()
    db_session.refresh(deck)
    return deck


@pytest.fixture
def premium_deck(db_session: Session, test_class: StudyClass) -> Deck:
    deck = Deck(
        class_id=test_class.id,
        name="Advanced Risk Frameworks",
        order=2,
        is_premium=True,
        is_published=True,
        created_by=ADMIN_ID,
    )
    db_session.add(deck)
    db_session.commit()
    db_session.refresh(deck)
    return deck


@pytest.fixture
def test_flashcards(db_session: Session, test_deck: Deck) -> list[Flashcard]:
    cards = [
        Flashcard(deck_id=test_deck.id, question="What is due care?", answer="Acting responsibly", order=0, created_by=ADMIN_ID),
        Flashcard(deck_id=test_deck.id, question="What is due diligence?", answer="Verifying due care", order=1, created_by=ADMIN_ID),
        Flashcard(deck_id=test_deck.id, question="Define risk", answer="Threat x vulnerability", order=2, created_by=ADMIN_ID),
        Flashcard(
            deck_id=test_deck.id,
            question="Draft card",
            answer="Not ready",
            order=3,
            is_published=False,
            created_by=ADMIN_ID,
        ),
    ]
    db_session.add_all(cards)
    test_deck.card_count = len(cards)
    db_session.add(test_deck)
    db_session.commit()
    for card in cards:
        db_session.refresh(card)
    return cards
