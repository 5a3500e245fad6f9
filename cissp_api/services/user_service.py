from typing import Optional
import structlog
from sqlmodel import Session
from cissp_api.models.user import User
from cissp_api.models.subscription import Subscription
from cissp_api.models.progress import UserStats
from cissp_api.utils.dates import utcnow

logger = structlog.get_logger(__name__)


def ensure_user(session: Session, user_id: str, email: Optional[str] = None, name: Optional[str] = None) -> User:
    """Return the user row, creating it with a free subscription and empty stats on first sight."""
    user = session.get(User, user_id)
    if user:
        changed = False
        if email and user.email != email:
            user.email = email
            changed = True
        if name and user.name != name:
            user.name = name
            changed = True
        if changed:
            user.updated_at = utcnow()
            session.add(user)
            session.commit()
            session.refresh(user)
        return user

    user = User(id=user_id, email=email or "", name=name)
    session.add(user)
    session.add(Subscription(user_id=user_id, plan_type="free", status="active"))
    session.add(UserStats(user_id=user_id))
    session.commit()
    session.refresh(user)
    logger.info("user_created", user_id=user_id)
    return user
