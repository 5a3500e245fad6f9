from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional
import structlog
from sqlmodel import Session, select, func, col
from cissp_api.models.ai_generation import AdminAiQuotaConfig, AdminAiDailyUsage, AiQuizGenerationLog
from cissp_api.schemas.ai_schemas import QuotaConfigUpdate
from cissp_api.exceptions import ValidationError
from cissp_api.utils.dates import utcnow, to_iso_date

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------
# Quota config
# ---------------------------------------------------------

def get_quota_config(session: Session, admin_id: str) -> AdminAiQuotaConfig:
    """Returns the admin's config, creating the defaults on first use."""
    config = session.exec(select(AdminAiQuotaConfig).where(AdminAiQuotaConfig.admin_id == admin_id)).first()
    if config:
        return config

    config = AdminAiQuotaConfig(admin_id=admin_id)
    session.add(config)
    session.commit()
    session.refresh(config)
    logger.info("quota_config_created", admin_id=admin_id, daily_quota_limit=config.daily_quota_limit)
    return config


def update_quota_config(session: Session, admin_id: str, payload: QuotaConfigUpdate) -> AdminAiQuotaConfig:
    config = get_quota_config(session, admin_id)
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise ValidationError("No valid fields provided for update")
    for key, value in data.items():
        setattr(config, key, value)
    config.updated_at = utcnow()
    session.add(config)
    session.commit()
    session.refresh(config)
    logger.info("quota_config_updated", admin_id=admin_id, **data)
    return config


def default_question_count(session: Session, admin_id: str, generation_type: str) -> int:
    config = get_quota_config(session, admin_id)
    if generation_type == "deck":
        return config.deck_questions_default
    return config.flashcard_questions_default


# ---------------------------------------------------------
# Daily usage
# ---------------------------------------------------------

def last_reset_boundary(now: datetime, reset_hour: int) -> datetime:
    """Most recent moment the quota rolled over (UTC)."""
    boundary = now.replace(hour=reset_hour, minute=0, second=0, microsecond=0)
    if now < boundary:
        boundary -= timedelta(days=1)
    return boundary


def next_reset_time(now: datetime, reset_hour: int) -> datetime:
    return last_reset_boundary(now, reset_hour) + timedelta(days=1)


def needs_reset(last_reset_at: Optional[datetime], now: datetime, reset_hour: int) -> bool:
    if last_reset_at is None:
        return True
    if now - last_reset_at >= timedelta(days=1):
        return True
    return last_reset_at < last_reset_boundary(now, reset_hour)


def _usage_row(session: Session, config: AdminAiQuotaConfig, now: datetime) -> AdminAiDailyUsage:
    # Rows are keyed by the quota day, which starts at the reset hour
    usage_date = to_iso_date(last_reset_boundary(now, config.quota_reset_hour))
    usage = session.exec(
        select(AdminAiDailyUsage).where(
            AdminAiDailyUsage.admin_id == config.admin_id, AdminAiDailyUsage.usage_date == usage_date
        )
    ).first()
    if not usage:
        usage = AdminAiDailyUsage(
            admin_id=config.admin_id,
            usage_date=usage_date,
            generations_used=0,
            quota_limit=config.daily_quota_limit,
            last_reset_at=now,
        )
    elif needs_reset(usage.last_reset_at, now, config.quota_reset_hour):
        usage.generations_used = 0
        usage.last_reset_at = now
        logger.info("quota_reset", admin_id=config.admin_id, usage_date=usage_date)
    usage.quota_limit = config.daily_quota_limit
    return usage


def check_quota(session: Session, admin_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or utcnow()
    config = get_quota_config(session, admin_id)
    reset_time = next_reset_time(now, config.quota_reset_hour).astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    if not config.is_enabled:
        return {
            "is_quota_exceeded": True,
            "used": 0,
            "remaining": 0,
            "limit": config.daily_quota_limit,
            "reset_time": reset_time,
            "is_enabled": False,
        }

    usage = _usage_row(session, config, now)
    session.add(usage)
    session.commit()
    session.refresh(usage)

    used = usage.generations_used
    limit = config.daily_quota_limit
    return {
        "is_quota_exceeded": used >= limit,
        "used": used,
        "remaining": max(0, limit - used),
        "limit": limit,
        "reset_time": reset_time,
        "is_enabled": True,
    }


def increment_usage(session: Session, admin_id: str, now: Optional[datetime] = None) -> AdminAiDailyUsage:
    now = now or utcnow()
    config = get_quota_config(session, admin_id)
    usage = _usage_row(session, config, now)
    usage.generations_used += 1
    usage.updated_at = now
    session.add(usage)
    session.commit()
    session.refresh(usage)
    return usage


# ---------------------------------------------------------
# Generation logs
# ---------------------------------------------------------

def start_generation_log(
    session: Session,
    admin_id: str,
    topic: str,
    generation_type: str,
    prompt: str,
    flashcard_id: Optional[int] = None,
    deck_id: Optional[int] = None,
) -> AiQuizGenerationLog:
    log = AiQuizGenerationLog(
        admin_id=admin_id,
        topic=topic,
        generation_type=generation_type,
        prompt_used=prompt,
        flashcard_id=flashcard_id,
        deck_id=deck_id,
        status="pending",
    )
    session.add(log)
    session.commit()
    session.refresh(log)
    return log


def finish_generation_log(
    session: Session,
    log: AiQuizGenerationLog,
    status: str,
    response_time_ms: int,
    num_questions: int = 0,
    tokens_used: int = 0,
    cost_usd: float = 0.0,
    model_used: Optional[str] = None,
    model_config_id: Optional[int] = None,
    api_response_status: Optional[int] = None,
    error_message: Optional[str] = None,
) -> AiQuizGenerationLog:
    log.status = status
    log.response_time_ms = response_time_ms
    log.num_questions_generated = num_questions
    log.tokens_used = tokens_used
    log.total_cost_usd = cost_usd
    log.model_used = model_used
    log.ai_model_config_id = model_config_id
    log.api_response_status = api_response_status
    log.error_message = error_message
    session.add(log)
    session.commit()
    session.refresh(log)
    return log


def list_generation_logs(
    session: Session, admin_id: Optional[str] = None, status: Optional[str] = None, limit: int = 50, offset: int = 0
) -> List[AiQuizGenerationLog]:
    statement = select(AiQuizGenerationLog)
    if admin_id:
        statement = statement.where(AiQuizGenerationLog.admin_id == admin_id)
    if status:
        statement = statement.where(AiQuizGenerationLog.status == status)
    statement = statement.order_by(col(AiQuizGenerationLog.created_at).desc(), col(AiQuizGenerationLog.id).desc())
    return list(session.exec(statement.offset(offset).limit(limit)).all())


def get_daily_usage_stats(session: Session, day: Optional[date] = None) -> Dict[str, Any]:
    """Generation count, tokens and latency per model for one UTC day."""
    day = day or utcnow().date()
    start_of_day = datetime.combine(day, time.min, tzinfo=timezone.utc)
    end_of_day = start_of_day + timedelta(days=1)

    statement = (
        select(
            AiQuizGenerationLog.model_used,
            func.count(AiQuizGenerationLog.id).label("request_count"),
            func.sum(AiQuizGenerationLog.tokens_used).label("total_tokens_sum"),
            func.sum(AiQuizGenerationLog.total_cost_usd).label("total_cost"),
            func.avg(AiQuizGenerationLog.response_time_ms).label("avg_latency"),
        )
        .where(AiQuizGenerationLog.created_at >= start_of_day, AiQuizGenerationLog.created_at < end_of_day)
        .where(AiQuizGenerationLog.status == "success")
        .group_by(AiQuizGenerationLog.model_used)
    )

    stats = []
    grand_total_tokens = 0
    grand_total_requests = 0
    grand_total_cost = 0.0
    for model, reqs, tokens, cost, latency in session.exec(statement).all():
        grand_total_tokens += tokens or 0
        grand_total_requests += reqs
        grand_total_cost += cost or 0.0
        stats.append(
            {
                "model": model,
                "requests": reqs,
                "tokens": tokens or 0,
                "cost_usd": round(cost or 0.0, 6),
                "avg_latency_ms": round(latency) if latency is not None else 0,
            }
        )

    return {
        "date": str(day),
        "summary": {
            "total_requests": grand_total_requests,
            "total_tokens": grand_total_tokens,
            "total_cost_usd": round(grand_total_cost, 6),
        },
        "by_model": stats,
    }
