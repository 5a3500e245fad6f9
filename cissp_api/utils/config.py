"""Application configuration."""

import logging
import sys
from collections.abc import Callable
from functools import lru_cache
from typing import Any, Literal

import structlog
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    PROJECT_NAME: str = "CISSP Mastery API"
    VERSION: str = "0.1.0"

    # Database
    DATABASE_URL: str = "sqlite:///./cissp.db"

    # Environment
    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    # Public URL of the web app, used for checkout redirects
    APP_URL: str = "http://localhost:3000"

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    STRIPE_LIFETIME_PRICE_ID: str = ""

    # Groq
    GROQ_API_KEY: str = ""
    GROQ_API_URL: str = "https://api.groq.com/openai/v1"

    # AI quiz generation
    AI_DEFAULT_TIMEOUT_SECONDS: int = 60
    AI_DEFAULT_TEMPERATURE: float = 0.7
    AI_MAX_RETRIES: int = 1
    AI_RETRY_BASE_DELAY_SECONDS: float = 1.0
    AI_MAX_CONCURRENT_REQUESTS: int = 10

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    FEEDBACK_RATE_LIMIT: str = "10/hour"

    @model_validator(mode="after")
    def validate_production_secrets(self) -> "Settings":
        """Production deployments must be able to talk to Stripe."""
        if self.ENVIRONMENT == "production":
            if not self.STRIPE_SECRET_KEY:
                msg = "STRIPE_SECRET_KEY is required in production"
                raise ValueError(msg)
            if not self.STRIPE_WEBHOOK_SECRET:
                msg = "STRIPE_WEBHOOK_SECRET is required in production"
                raise ValueError(msg)
        return self


def configure_logging(environment: str = "development") -> None:
    """Configure structured logging with structlog."""
    use_json = environment == "production"

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if environment == "development" else logging.INFO,
    )

    processors: list[Callable[..., Any]] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
