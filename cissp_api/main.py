from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from cissp_api.db.session import init_db
from cissp_api.exceptions import CisspError, error_body, format_validation_errors, status_code_for
from cissp_api.rate_limit import limiter
from cissp_api.routers import (
    admin_ai,
    admin_content,
    admin_topics,
    billing,
    bookmarks,
    content,
    feedback,
    health,
    progress,
    quiz_sessions,
    users,
)
from cissp_api.utils.config import configure_logging, settings

logger = structlog.get_logger(__name__)

# Client facing text for exceptions that escape the services; str(exc) is never sent
_GENERIC_MESSAGES = {
    400: "Invalid request",
    401: "Authentication required",
    403: "Forbidden",
    404: "Not found",
    429: "Too many requests. Please try again later.",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.ENVIRONMENT)
    init_db()
    logger.info("startup", environment=settings.ENVIRONMENT)
    yield


app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)
app.state.limiter = limiter


@app.exception_handler(CisspError)
async def cissp_error_handler(request: Request, exc: CisspError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message, code=exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.status_code, exc.code, exc.details, **exc.extra),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = format_validation_errors(exc.errors())
    parts = ["Invalid request"]
    if details:
        parts += [part for part in (details[0]["path"], details[0]["message"]) if part]
    message = ": ".join(parts)
    return JSONResponse(status_code=400, content=error_body(message, 400, "VALIDATION_ERROR", details))


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("rate_limited", path=request.url.path, limit=str(exc.detail))
    return JSONResponse(
        status_code=429,
        content=error_body("Too many requests. Please try again later.", 429, "RATE_LIMITED"),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.exception("unhandled_error", path=request.url.path, status_code=status_code)
    message = _GENERIC_MESSAGES.get(status_code, "Internal server error")
    return JSONResponse(status_code=status_code, content=error_body(message, status_code))


app.include_router(health.router)
app.include_router(users.router)
app.include_router(content.router)
app.include_router(progress.router)
app.include_router(quiz_sessions.router)
app.include_router(bookmarks.router)
app.include_router(billing.router)
app.include_router(feedback.router)
app.include_router(admin_content.router)
app.include_router(admin_ai.router)
app.include_router(admin_topics.router)
