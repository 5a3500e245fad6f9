from typing import Any, Dict, List
import requests
import structlog
from sqlmodel import Session, select
from cissp_api.exceptions import ConflictError, NotFoundError, ServiceError, ValidationError
from cissp_api.models.ai_generation import AiModelConfiguration, AiQuizGenerationLog
from cissp_api.schemas.ai_schemas import AiModelCreate, AiModelUpdate
from cissp_api.utils.config import settings
from cissp_api.utils.dates import utcnow

logger = structlog.get_logger(__name__)

# Fallback chain when no configuration rows exist, fastest first
DEFAULT_MODELS: List[Dict[str, Any]] = [
    {
        "model_id": "meta-llama/llama-4-scout-17b-16e-instruct",
        "name": "Llama 4 Scout 17B",
        "priority": 1,
        "timeout_seconds": 45,
        "max_tokens": 8000,
        "description": "High throughput model, good default for quiz batches",
    },
    {
        "model_id": "llama-3.3-70b-versatile",
        "name": "Llama 3.3 70B Versatile",
        "priority": 2,
        "timeout_seconds": 60,
        "max_tokens": 8000,
        "description": "Strongest reasoning, lower daily token allowance",
    },
    {
        "model_id": "llama-3.1-8b-instant",
        "name": "Llama 3.1 8B Instant",
        "priority": 3,
        "timeout_seconds": 45,
        "max_tokens": 8000,
        "description": "Last resort with the most generous rate limits",
    },
]


def list_models(session: Session) -> List[AiModelConfiguration]:
    statement = select(AiModelConfiguration).order_by(AiModelConfiguration.priority, AiModelConfiguration.id)
    return list(session.exec(statement).all())


def enabled_models(session: Session) -> List[AiModelConfiguration]:
    """Candidate models in priority order; built-in defaults if none are configured."""
    configured = list_models(session)
    if configured:
        return [model for model in configured if model.enabled]
    return [AiModelConfiguration(**entry) for entry in DEFAULT_MODELS]


def get_model(session: Session, config_id: int) -> AiModelConfiguration:
    model = session.get(AiModelConfiguration, config_id)
    if not model:
        raise NotFoundError("AI model configuration not found")
    return model


def create_model(session: Session, payload: AiModelCreate, admin_id: str) -> AiModelConfiguration:
    exists = session.exec(select(AiModelConfiguration).where(AiModelConfiguration.model_id == payload.model_id)).first()
    if exists:
        raise ConflictError(f"Model {payload.model_id} is already configured")
    model = AiModelConfiguration(**payload.model_dump(), created_by=admin_id)
    session.add(model)
    session.commit()
    session.refresh(model)
    logger.info("ai_model_created", model_id=model.model_id, admin_id=admin_id)
    return model


def update_model(session: Session, config_id: int, payload: AiModelUpdate) -> AiModelConfiguration:
    model = get_model(session, config_id)
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise ValidationError("No valid fields provided for update")
    for key, value in data.items():
        setattr(model, key, value)
    model.updated_at = utcnow()
    session.add(model)
    session.commit()
    session.refresh(model)
    return model


def delete_model(session: Session, config_id: int) -> None:
    model = get_model(session, config_id)
    for log in session.exec(select(AiQuizGenerationLog).where(AiQuizGenerationLog.ai_model_config_id == config_id)):
        log.ai_model_config_id = None
        session.add(log)
    session.delete(model)
    session.commit()
    logger.info("ai_model_deleted", model_id=model.model_id)


def seed_default_models(session: Session, admin_id: str) -> List[AiModelConfiguration]:
    """Insert the built-in model list, skipping model ids that already exist."""
    existing = set(session.exec(select(AiModelConfiguration.model_id)).all())
    created = []
    for entry in DEFAULT_MODELS:
        if entry["model_id"] in existing:
            continue
        model = AiModelConfiguration(**entry, created_by=admin_id)
        session.add(model)
        created.append(model)
    session.commit()
    for model in created:
        session.refresh(model)
    logger.info("ai_models_seeded", created=len(created), skipped=len(DEFAULT_MODELS) - len(created))
    return created


def record_model_result(session: Session, model: AiModelConfiguration, success: bool, response_time_ms: int) -> None:
    """Update running stats; built-in defaults have no row and are skipped."""
    if model.id is None:
        return
    row = session.get(AiModelConfiguration, model.id)
    if not row:
        return
    if success:
        previous = row.avg_response_time_ms
        row.avg_response_time_ms = (
            response_time_ms
            if previous is None
            else round((previous * row.success_count + response_time_ms) / (row.success_count + 1))
        )
        row.success_count += 1
    else:
        row.failure_count += 1
    row.last_used_at = utcnow()
    session.add(row)
    session.commit()


def list_available_models() -> Dict[str, Any]:
    """Models the upstream provider currently serves."""
    url = f"{settings.GROQ_API_URL}/models"
    headers = {
        "Authorization": f"Bearer {settings.GROQ_API_KEY}",
        "Content-Type": "application/json",
    }
    try:
        response = requests.get(url, headers=headers, timeout=15)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error("available_models_failed", error=str(e))
        raise ServiceError("Failed to fetch available models from provider") from e
    return response.json()

