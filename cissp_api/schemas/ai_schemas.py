from datetime import datetime
from typing import List, Literal, Optional
from pydantic import Field
from cissp_api.schemas.base import CamelModel, PatchModel

GenerationType = Literal["flashcard", "deck"]


class GenerateQuizRequest(CamelModel):
    topic: str = Field(min_length=3, max_length=500)
    generation_type: GenerationType
    custom_question_count: Optional[int] = Field(default=None, ge=1, le=50)
    target_flashcard_id: Optional[int] = None
    target_deck_id: Optional[int] = None

    model_config = CamelModel.model_config | {"str_strip_whitespace": True}


class QuotaStatus(CamelModel):
    is_quota_exceeded: bool
    used: int
    remaining: int
    limit: int
    reset_time: str
    is_enabled: bool


class QuotaConfigUpdate(PatchModel):
    nullable_fields = frozenset({"notes"})

    daily_quota_limit: Optional[int] = Field(default=None, ge=1, le=500)
    flashcard_questions_default: Optional[int] = Field(default=None, ge=1, le=50)
    deck_questions_default: Optional[int] = Field(default=None, ge=1, le=50)
    quota_reset_hour: Optional[int] = Field(default=None, ge=0, le=23)
    is_enabled: Optional[bool] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class AiModelCreate(CamelModel):
    model_id: str = Field(min_length=1, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    provider: str = "groq"
    priority: int = Field(default=100, ge=0)
    enabled: bool = True
    timeout_seconds: int = Field(default=60, ge=5, le=300)
    temperature: float = Field(default=0.7, ge=0, le=2)
    max_tokens: int = Field(default=8000, ge=256, le=32000)
    cost_per_1k_tokens: float = Field(default=0.0, ge=0)
    is_free: bool = True
    description: Optional[str] = None


class AiModelUpdate(PatchModel):
    nullable_fields = frozenset({"description"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    priority: Optional[int] = Field(default=None, ge=0)
    enabled: Optional[bool] = None
    timeout_seconds: Optional[int] = Field(default=None, ge=5, le=300)
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    max_tokens: Optional[int] = Field(default=None, ge=256, le=32000)
    cost_per_1k_tokens: Optional[float] = Field(default=None, ge=0)
    is_free: Optional[bool] = None
    description: Optional[str] = None


class AiModelRead(CamelModel):
    id: int
    model_id: str
    name: str
    provider: str
    priority: int
    enabled: bool
    timeout_seconds: int
    temperature: float
    max_tokens: int
    cost_per_1k_tokens: float
    is_free: bool
    description: Optional[str] = None
    last_used_at: Optional[datetime] = None
    success_count: int
    failure_count: int
    avg_response_time_ms: Optional[int] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class QuotaConfigRead(CamelModel):
    admin_id: str
    daily_quota_limit: int
    flashcard_questions_default: int
    deck_questions_default: int
    quota_reset_hour: int
    is_enabled: bool
    notes: Optional[str] = None
    updated_at: datetime


class GenerationLogRead(CamelModel):
    id: int
    admin_id: str
    flashcard_id: Optional[int] = None
    deck_id: Optional[int] = None
    ai_model_config_id: Optional[int] = None
    model_used: Optional[str] = None
    topic: str
    generation_type: str
    num_questions_generated: int
    prompt_used: str
    status: str
    api_response_status: Optional[int] = None
    error_message: Optional[str] = None
    total_cost_usd: float
    tokens_used: int
    response_time_ms: Optional[int] = None
    created_at: datetime


class ModelUsage(CamelModel):
    model: Optional[str] = None
    requests: int
    tokens: int
    cost_usd: float
    avg_latency_ms: int


class UsageSummary(CamelModel):
    total_requests: int
    total_tokens: int
    total_cost_usd: float


class DailyUsageStats(CamelModel):
    date: str
    summary: UsageSummary
    by_model: List[ModelUsage]
