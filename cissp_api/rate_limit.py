from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from cissp_api.utils.config import settings


def user_or_address(request: Request) -> str:
    """Limit per signed-in user; anonymous calls fall back to the client address."""
    return request.headers.get("x-user-id") or get_remote_address(request)


limiter = Limiter(key_func=user_or_address, enabled=settings.RATE_LIMIT_ENABLED)
