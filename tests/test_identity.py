"""Tests for caller identity and first-request provisioning."""

from fastapi import status
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from cissp_api.models.progress import UserStats
from cissp_api.models.subscription import Subscription
from cissp_api.models.user import User


class TestCurrentUser:
    def test_missing_header_is_401(self, client: TestClient) -> None:
        response = client.get("/api/classes")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Authentication required"

    def test_first_request_provisions_user(self, client: TestClient, db_session: Session) -> None:
        response = client.get("/api/user/is-admin", headers={"X-User-Id": "user_new", "X-User-Email": "new@example.com"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"isAdmin": False}

        user = db_session.get(User, "user_new")
        assert user is not None
        assert user.email == "new@example.com"
        assert user.role == "user"

        subscription = db_session.exec(select(Subscription).where(Subscription.user_id == "user_new")).one()
        assert subscription.plan_type == "free"
        assert subscription.status == "active"
        assert db_session.exec(select(UserStats).where(UserStats.user_id == "user_new")).one() is not None

    def test_repeat_requests_do_not_duplicate_rows(self, client: TestClient, db_session: Session) -> None:
        headers = {"X-User-Id": "user_repeat"}
        client.get("/api/user/me", headers=headers)
        client.get("/api/user/me", headers=headers)

        subscriptions = db_session.exec(select(Subscription).where(Subscription.user_id == "user_repeat")).all()
        assert len(subscriptions) == 1


class TestAdminGuard:
    def test_admin_is_reported(self, client: TestClient, admin_headers: dict) -> None:
        response = client.get("/api/user/is-admin", headers=admin_headers)
        assert response.json() == {"isAdmin": True}

    def test_learner_cannot_reach_admin_routes(self, client: TestClient, user_headers: dict) -> None:
        response = client.get("/api/admin/classes", headers=user_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "Admin access required"
