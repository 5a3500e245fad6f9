from typing import Annotated, Any, Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from cissp_api.dependencies import AdminUser, DbSession
from cissp_api.schemas.ai_schemas import (
    AiModelCreate,
    AiModelRead,
    AiModelUpdate,
    DailyUsageStats,
    GenerateQuizRequest,
    GenerationLogRead,
    QuotaConfigRead,
    QuotaConfigUpdate,
    QuotaStatus,
)
from cissp_api.services import ai_model_service, usage_service
from cissp_api.services.ai_orchestrator import generate_quiz_service
from cissp_api.utils.groq_client import get_ai_client

router = APIRouter(prefix="/api/admin", tags=["admin-ai"])

AiClient = Annotated[Any, Depends(get_ai_client)]


@router.post("/ai-quiz/generate")
async def generate_quiz(request: GenerateQuizRequest, session: DbSession, admin: AdminUser, client: AiClient):
    result = await generate_quiz_service(session, admin, request, client)
    return {
        "success": True,
        "questions": result["questions"],
        "count": result["count"],
        "modelUsed": result["model_used"],
        "tokensUsed": result["tokens_used"],
        "costUsd": result["cost_usd"],
        "responseTimeMs": result["response_time_ms"],
        "logId": result["log_id"],
        "remainingQuota": result["remaining_quota"],
    }


@router.get("/ai-quiz/quota")
def get_quota(session: DbSession, admin: AdminUser):
    quota = QuotaStatus(**usage_service.check_quota(session, admin.id))
    config = usage_service.get_quota_config(session, admin.id)
    return {"quota": quota, "config": QuotaConfigRead.model_validate(config)}


@router.patch("/ai-quiz/quota")
def update_quota(request: QuotaConfigUpdate, session: DbSession, admin: AdminUser):
    config = usage_service.update_quota_config(session, admin.id, request)
    return {"success": True, "config": QuotaConfigRead.model_validate(config)}


@router.get("/ai-quiz/logs")
def list_logs(
    session: DbSession,
    admin: AdminUser,
    status_filter: Annotated[Optional[Literal["pending", "success", "failed", "partial"]], Query(alias="status")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    logs = usage_service.list_generation_logs(session, admin.id, status_filter, limit, offset)
    return {"logs": [GenerationLogRead.model_validate(log) for log in logs], "count": len(logs)}


@router.get("/ai-quiz/usage", response_model=DailyUsageStats)
def daily_usage(session: DbSession, admin: AdminUser):
    return usage_service.get_daily_usage_stats(session)


# --- Model configurations ---

@router.get("/ai-models")
def list_models(session: DbSession, admin: AdminUser):
    return {"models": [AiModelRead.model_validate(model) for model in ai_model_service.list_models(session)]}


@router.get("/ai-models/available")
def available_models(admin: AdminUser):
    return ai_model_service.list_available_models()


@router.post("/ai-models", status_code=status.HTTP_201_CREATED)
def create_model(request: AiModelCreate, session: DbSession, admin: AdminUser):
    model = ai_model_service.create_model(session, request, admin.id)
    return {"success": True, "model": AiModelRead.model_validate(model)}


@router.post("/ai-models/seed")
def seed_models(session: DbSession, admin: AdminUser):
    created = ai_model_service.seed_default_models(session, admin.id)
    models = [AiModelRead.model_validate(model) for model in ai_model_service.list_models(session)]
    return {"success": True, "created": len(created), "models": models}


@router.patch("/ai-models/{config_id}")
def update_model(config_id: int, request: AiModelUpdate, session: DbSession, admin: AdminUser):
    model = ai_model_service.update_model(session, config_id, request)
    return {"success": True, "model": AiModelRead.model_validate(model)}


@router.delete("/ai-models/{config_id}")
def delete_model(config_id: int, session: DbSession, admin: AdminUser):
    ai_model_service.delete_model(session, config_id)
    return {"success": True}
