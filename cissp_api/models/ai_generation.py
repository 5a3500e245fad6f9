from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from cissp_api.db.types import UTCDateTime
from cissp_api.utils.dates import utcnow


class AiModelConfiguration(SQLModel, table=True):
    __tablename__ = "ai_model_configurations"

    id: Optional[int] = Field(default=None, primary_key=True)
    # Provider model name (ex: llama-3.1-8b-instant)
    model_id: str = Field(unique=True, index=True)
    name: str
    provider: str = Field(default="groq")
    # Lower runs first
    priority: int = Field(default=100)
    enabled: bool = Field(default=True)

    timeout_seconds: int = Field(default=60)
    temperature: float = Field(default=0.7)
    max_tokens: int = Field(default=8000)
    cost_per_1k_tokens: float = Field(default=0.0)
    is_free: bool = Field(default=True)
    description: Optional[str] = None

    # Running stats
    last_used_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    success_count: int = Field(default=0)
    failure_count: int = Field(default=0)
    avg_response_time_ms: Optional[int] = None

    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class AiQuizGenerationLog(SQLModel, table=True):
    """One row per generation request, written before the model is called."""

    __tablename__ = "ai_quiz_generation_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    admin_id: str = Field(foreign_key="users.id", index=True)
    flashcard_id: Optional[int] = Field(default=None, foreign_key="flashcards.id")
    deck_id: Optional[int] = Field(default=None, foreign_key="decks.id")
    ai_model_config_id: Optional[int] = Field(default=None, foreign_key="ai_model_configurations.id")
    model_used: Optional[str] = None

    topic: str
    generation_type: str  # "flashcard" or "deck"
    num_questions_generated: int = Field(default=0)
    prompt_used: str

    # pending | success | failed | partial
    status: str = Field(default="pending", index=True)
    api_response_status: Optional[int] = None
    error_message: Optional[str] = None

    # Groq metrics
    total_cost_usd: float = Field(default=0.0)
    tokens_used: int = Field(default=0)
    response_time_ms: Optional[int] = None

    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=UTCDateTime)


class AdminAiQuotaConfig(SQLModel, table=True):
    __tablename__ = "admin_ai_quota_config"

    id: Optional[int] = Field(default=None, primary_key=True)
    admin_id: str = Field(foreign_key="users.id", unique=True, index=True)
    daily_quota_limit: int = Field(default=50)
    flashcard_questions_default: int = Field(default=5)
    deck_questions_default: int = Field(default=50)
    quota_reset_hour: int = Field(default=0)  # UTC hour
    is_enabled: bool = Field(default=True)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class AdminAiDailyUsage(SQLModel, table=True):
    __tablename__ = "admin_ai_daily_usage"

    id: Optional[int] = Field(default=None, primary_key=True)
    admin_id: str = Field(foreign_key="users.id", index=True)
    usage_date: str = Field(index=True)  # YYYY-MM-DD
    generations_used: int = Field(default=0)
    quota_limit: int = Field(default=50)
    last_reset_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
