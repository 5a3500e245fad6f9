import asyncio
import json
import re
import time
from typing import Any, Callable, Dict, List, Optional
import groq
import structlog
from sqlmodel import Session
from cissp_api.exceptions import QuizGenerationError, QuotaExceededError, ValidationError
from cissp_api.models.ai_generation import AiModelConfiguration
from cissp_api.models.user import User
from cissp_api.schemas.ai_schemas import GenerateQuizRequest
from cissp_api.services import usage_service
from cissp_api.services.ai_model_service import enabled_models, record_model_result
from cissp_api.services.quiz_content_service import validate_quiz_file
from cissp_api.utils.config import settings

logger = structlog.get_logger(__name__)

sem = asyncio.Semaphore(settings.AI_MAX_CONCURRENT_REQUESTS)  # concurrent upstream calls

SYSTEM_PROMPT = (
    "You are a CISSP exam item writer. You write scenario based multiple choice questions "
    "that mirror the (ISC)2 exam style and you always answer with strictly valid JSON."
)

FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

AttemptHook = Callable[[AiModelConfiguration, bool, int], None]


# ---------------------------------------------------------
# 1. Prompt
# ---------------------------------------------------------

def build_prompt(topic: str, num_questions: int, generation_type: str) -> str:
    scope = (
        "a single flashcard concept" if generation_type == "flashcard" else "a full study deck covering the topic"
    )
    return f"""
    Create exactly {num_questions} CISSP practice questions about: '{topic}' ({scope}).

    Rules:
    - Every question has 4 options; mark correct ones with "isCorrect": true.
    - Prefer "BEST", "FIRST" and "MOST" style managerial questions.
    - Justify each option so a learner understands why it is right or wrong.

    JSON Output Format:
    {{ "questions": [{{
        "question": "...",
        "options": [{{ "text": "...", "isCorrect": false }}],
        "explanation": "...",
        "elimination_tactics": {{ "A": "..." }},
        "correct_answer_with_justification": {{ "C": "..." }},
        "compare_remaining_options_with_justification": {{ "B": "..." }},
        "correct_options_justification": {{ "C": "..." }}
    }}] }}
    """


# ---------------------------------------------------------
# 2. Response parsing
# ---------------------------------------------------------

def strip_code_fences(content: str) -> str:
    return FENCE_RE.sub("", content.strip()).strip()


def parse_quiz_content(content: str, model_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Turn raw model output into validated question dicts."""
    try:
        data = json.loads(strip_code_fences(content))
    except json.JSONDecodeError as e:
        raise QuizGenerationError(f"Model returned invalid JSON: {e.msg}", "PARSE_ERROR", model_id) from e

    if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
        raise QuizGenerationError("Response is missing a 'questions' list", "VALIDATION_ERROR", model_id)

    try:
        quiz = validate_quiz_file(data)
    except ValidationError as e:
        raise QuizGenerationError(e.message, "VALIDATION_ERROR", model_id) from e
    return [question.model_dump(by_alias=True, exclude_none=True) for question in quiz.questions]


# ---------------------------------------------------------
# 3. Single model call
# ---------------------------------------------------------

async def call_model(client: Any, model: AiModelConfiguration, prompt: str) -> Dict[str, Any]:
    async with sem:
        try:
            completion = await asyncio.wait_for(
                asyncio.to_thread(
                    client.chat.completions.create,
                    model=model.model_id,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    response_format={"type": "json_object"},
                    temperature=model.temperature,
                    max_tokens=model.max_tokens,
                ),
                timeout=model.timeout_seconds,
            )
        except (asyncio.TimeoutError, groq.APITimeoutError) as e:
            raise QuizGenerationError(
                f"Model {model.model_id} timed out after {model.timeout_seconds}s", "TIMEOUT", model.model_id
            ) from e
        except groq.APIError as e:
            raise QuizGenerationError(f"Model {model.model_id} failed: {e}", "API_ERROR", model.model_id) from e

    content = completion.choices[0].message.content if completion.choices else None
    if not content:
        raise QuizGenerationError(f"Model {model.model_id} returned an empty response", "INVALID_RESPONSE", model.model_id)

    tokens = completion.usage.total_tokens if completion.usage else 0
    return {
        "questions": parse_quiz_content(content, model.model_id),
        "tokens": tokens,
        "cost": round(tokens / 1000 * (model.cost_per_1k_tokens or 0.0), 6),
    }


# ---------------------------------------------------------
# 4. Fallback chain with retry
# ---------------------------------------------------------

async def generate_with_fallback(
    client: Any,
    models: List[AiModelConfiguration],
    prompt: str,
    max_retries: Optional[int] = None,
    base_delay: Optional[float] = None,
    on_attempt: Optional[AttemptHook] = None,
) -> Dict[str, Any]:
    """Try each model in order; retry the whole chain with exponential backoff.

    Timeouts, API errors and empty responses move on to the next model. Parse
    and validation errors stop immediately since another attempt is unlikely
    to fix a prompt the model misunderstood.
    """
    if not models:
        raise QuizGenerationError("No AI models are enabled", "NO_MODELS")

    max_retries = settings.AI_MAX_RETRIES if max_retries is None else max_retries
    base_delay = settings.AI_RETRY_BASE_DELAY_SECONDS if base_delay is None else base_delay
    last_error: Optional[QuizGenerationError] = None

    for attempt in range(max_retries + 1):
        for model in models:
            start_time = time.time()
            try:
                result = await call_model(client, model, prompt)
            except QuizGenerationError as e:
                elapsed_ms = int((time.time() - start_time) * 1000)
                if on_attempt:
                    on_attempt(model, False, elapsed_ms)
                logger.warning("ai_model_failed", model_id=model.model_id, error_code=e.error_code, attempt=attempt)
                if not e.retryable:
                    raise
                last_error = e
                continue

            elapsed_ms = int((time.time() - start_time) * 1000)
            if on_attempt:
                on_attempt(model, True, elapsed_ms)
            return {**result, "model": model, "response_time_ms": elapsed_ms}

        if attempt < max_retries:
            delay = base_delay * 2**attempt
            logger.info("ai_generation_backoff", attempt=attempt, delay=delay)
            await asyncio.sleep(delay)

    raise last_error


# ---------------------------------------------------------
# 5. The orchestrator
# ---------------------------------------------------------

PUBLIC_MESSAGES = {
    "TIMEOUT": ("AI generation timed out", 504),
    "PARSE_ERROR": ("AI generated invalid quiz format", 500),
    "VALIDATION_ERROR": ("AI generated invalid quiz format", 500),
    "NO_MODELS": ("No AI models are available", 503),
}


async def generate_quiz_service(session: Session, admin: User, request: GenerateQuizRequest, client: Any) -> Dict[str, Any]:
    quota = usage_service.check_quota(session, admin.id)
    if not quota["is_enabled"]:
        raise QuotaExceededError("AI quiz generation is disabled for your account", remaining_quota=0)
    if quota["is_quota_exceeded"]:
        raise QuotaExceededError(
            f"Daily AI generation quota exceeded. Resets at {quota['reset_time']}", remaining_quota=0
        )

    num_questions = request.custom_question_count or usage_service.default_question_count(
        session, admin.id, request.generation_type
    )
    prompt = build_prompt(request.topic, num_questions, request.generation_type)
    log = usage_service.start_generation_log(
        session,
        admin.id,
        request.topic,
        request.generation_type,
        prompt,
        flashcard_id=request.target_flashcard_id,
        deck_id=request.target_deck_id,
    )

    def on_attempt(model: AiModelConfiguration, success: bool, elapsed_ms: int) -> None:
        record_model_result(session, model, success, elapsed_ms)

    start_time = time.time()
    try:
        result = await generate_with_fallback(client, enabled_models(session), prompt, on_attempt=on_attempt)
    except QuizGenerationError as e:
        elapsed_ms = int((time.time() - start_time) * 1000)
        message, status_code = PUBLIC_MESSAGES.get(e.error_code, ("Failed to generate quiz questions", 500))
        usage_service.finish_generation_log(
            session,
            log,
            "failed",
            elapsed_ms,
            model_used=e.model_id,
            api_response_status=status_code,
            error_message=f"{e.error_code}: {e.message}",
        )
        logger.error("ai_generation_failed", admin_id=admin.id, log_id=log.id, error_code=e.error_code)
        error = QuizGenerationError(message, e.error_code, e.model_id)
        error.status_code = status_code
        error.details = e.message
        raise error from e

    model = result["model"]
    questions = result["questions"]
    usage_service.finish_generation_log(
        session,
        log,
        "success",
        result["response_time_ms"],
        num_questions=len(questions),
        tokens_used=result["tokens"],
        cost_usd=result["cost"],
        model_used=model.model_id,
        model_config_id=model.id,
        api_response_status=200,
    )
    usage_service.increment_usage(session, admin.id)
    remaining = usage_service.check_quota(session, admin.id)["remaining"]

    logger.info(
        "ai_generation_succeeded",
        admin_id=admin.id,
        log_id=log.id,
        model_id=model.model_id,
        questions=len(questions),
        tokens=result["tokens"],
    )
    return {
        "success": True,
        "questions": questions,
        "count": len(questions),
        "model_used": model.model_id,
        "tokens_used": result["tokens"],
        "cost_usd": result["cost"],
        "response_time_ms": result["response_time_ms"],
        "log_id": log.id,
        "remaining_quota": remaining,
    }
