"""Shared FastAPI dependencies."""

from typing import Annotated, Optional

from fastapi import Depends, Header
from sqlmodel import Session

from cissp_api.db.session import get_session
from cissp_api.exceptions import AuthenticationError, PermissionDeniedError
from cissp_api.models.user import User
from cissp_api.services.user_service import ensure_user

DbSession = Annotated[Session, Depends(get_session)]


def get_current_user(
    session: DbSession,
    x_user_id: Annotated[Optional[str], Header()] = None,
    x_user_email: Annotated[Optional[str], Header()] = None,
    x_user_name: Annotated[Optional[str], Header()] = None,
) -> User:
    """Resolve the caller forwarded by the identity proxy."""
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError()
    return ensure_user(session, x_user_id.strip(), x_user_email, x_user_name)


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_admin(user: CurrentUser) -> User:
    if not user.is_admin:
        raise PermissionDeniedError()
    return user


AdminUser = Annotated[User, Depends(require_admin)]
