"""Tests for AI quiz generation: parsing, model fallback and the admin endpoint."""

import asyncio
import json

import groq
import httpx
import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from cissp_api.exceptions import QuizGenerationError
from cissp_api.models.ai_generation import AdminAiDailyUsage, AiModelConfiguration, AiQuizGenerationLog
from cissp_api.services.ai_orchestrator import generate_with_fallback, parse_quiz_content, strip_code_fences

from conftest import FakeAiClient, make_completion, quiz_question

GROQ_REQUEST = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")


def _quiz_json(*texts: str) -> str:
    return json.dumps({"questions": [quiz_question(text) for text in texts]})


def _models(*model_ids: str) -> list[AiModelConfiguration]:
    return [
        AiModelConfiguration(model_id=model_id, name=model_id, priority=i, timeout_seconds=5)
        for i, model_id in enumerate(model_ids)
    ]


class TestParsing:
    def test_strips_json_fences(self) -> None:
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'

    def test_parses_fenced_quiz(self) -> None:
        questions = parse_quiz_content(f"```json\n{_quiz_json('What is BCP?')}\n```")

        assert len(questions) == 1
        assert questions[0]["question"] == "What is BCP?"
        assert questions[0]["options"][1] == {"text": "Mantrap", "isCorrect": True}

    def test_invalid_json(self) -> None:
        with pytest.raises(QuizGenerationError) as exc_info:
            parse_quiz_content("Sure! Here are your questions:", "llama-3.1-8b-instant")

        assert exc_info.value.error_code == "PARSE_ERROR"
        assert exc_info.value.model_id == "llama-3.1-8b-instant"
        assert exc_info.value.retryable is False

    def test_missing_questions_list(self) -> None:
        with pytest.raises(QuizGenerationError) as exc_info:
            parse_quiz_content('{"items": []}')
        assert exc_info.value.error_code == "VALIDATION_ERROR"

    def test_question_without_correct_option(self) -> None:
        bad = quiz_question()
        for option in bad["options"]:
            option["isCorrect"] = False

        with pytest.raises(QuizGenerationError) as exc_info:
            parse_quiz_content(json.dumps({"questions": [bad]}))
        assert exc_info.value.error_code == "VALIDATION_ERROR"


class TestFallback:
    def test_first_model_wins(self) -> None:
        client = FakeAiClient([make_completion(_quiz_json("Q1"), total_tokens=900)])

        result = asyncio.run(generate_with_fallback(client, _models("primary", "backup"), "prompt"))

        assert result["model"].model_id == "primary"
        assert result["tokens"] == 900
        assert [call["model"] for call in client.completions.calls] == ["primary"]

    def test_falls_through_on_api_errors(self) -> None:
        client = FakeAiClient(
            [
                groq.APIConnectionError(request=GROQ_REQUEST),
                groq.APITimeoutError(request=GROQ_REQUEST),
                make_completion(_quiz_json("Q1")),
            ]
        )
        attempts = []

        result = asyncio.run(
            generate_with_fallback(
                client,
                _models("a", "b", "c"),
                "prompt",
                on_attempt=lambda model, ok, ms: attempts.append((model.model_id, ok)),
            )
        )

        assert result["model"].model_id == "c"
        assert attempts == [("a", False), ("b", False), ("c", True)]

    def test_empty_response_moves_on(self) -> None:
        client = FakeAiClient([make_completion(None), make_completion(_quiz_json("Q1"))])

        result = asyncio.run(generate_with_fallback(client, _models("a", "b"), "prompt"))
        assert result["model"].model_id == "b"

    def test_retries_whole_chain(self) -> None:
        client = FakeAiClient(
            [
                groq.APIConnectionError(request=GROQ_REQUEST),
                groq.APIConnectionError(request=GROQ_REQUEST),
                make_completion(_quiz_json("Q1")),
            ]
        )

        result = asyncio.run(generate_with_fallback(client, _models("a", "b"), "prompt", max_retries=1, base_delay=0))

        assert result["model"].model_id == "a"
        assert len(client.completions.calls) == 3

    def test_gives_up_after_retries(self) -> None:
        client = FakeAiClient([groq.APITimeoutError(request=GROQ_REQUEST) for _ in range(4)])

        with pytest.raises(QuizGenerationError) as exc_info:
            asyncio.run(generate_with_fallback(client, _models("a", "b"), "prompt", max_retries=1, base_delay=0))

        assert exc_info.value.error_code == "TIMEOUT"
        assert len(client.completions.calls) == 4

    def test_parse_error_is_not_retried(self) -> None:
        client = FakeAiClient([make_completion("not json at all")])

        with pytest.raises(QuizGenerationError) as exc_info:
            asyncio.run(generate_with_fallback(client, _models("a", "b"), "prompt", max_retries=2, base_delay=0))

        assert exc_info.value.error_code == "PARSE_ERROR"
        assert len(client.completions.calls) == 1

    def test_no_models(self) -> None:
        with pytest.raises(QuizGenerationError) as exc_info:
            asyncio.run(generate_with_fallback(FakeAiClient(), [], "prompt"))
        assert exc_info.value.error_code == "NO_MODELS"


class TestGenerateEndpoint:
    URL = "/api/admin/ai-quiz/generate"

    def test_generates_with_default_models(
        self, client: TestClient, db_session: Session, admin_headers: dict, ai_client: FakeAiClient
    ) -> None:
        ai_client.queue(make_completion(_quiz_json("Q1", "Q2"), total_tokens=2400))

        response = client.post(
            self.URL, json={"topic": "Business continuity planning", "generationType": "flashcard"}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["count"] == 2
        assert body["modelUsed"] == "meta-llama/llama-4-scout-17b-16e-instruct"
        assert body["tokensUsed"] == 2400
        assert body["remainingQuota"] == 49

        call = ai_client.completions.calls[0]
        assert call["response_format"] == {"type": "json_object"}
        assert "exactly 5 CISSP practice questions" in call["messages"][1]["content"]

        log = db_session.get(AiQuizGenerationLog, body["logId"])
        db_session.refresh(log)
        assert log.status == "success"
        assert log.num_questions_generated == 2
        assert log.api_response_status == 200

    def test_uses_configured_models_and_records_stats(
        self, client: TestClient, db_session: Session, admin_headers: dict, ai_client: FakeAiClient
    ) -> None:
        client.post(
            "/api/admin/ai-models",
            json={"modelId": "custom-model", "name": "Custom", "priority": 1, "cost_per_1k_tokens": 0.5},
            headers=admin_headers,
        )
        ai_client.queue(make_completion(_quiz_json("Q1"), total_tokens=2000))

        body = client.post(
            self.URL,
            json={"topic": "Cryptography", "generationType": "deck", "customQuestionCount": 1},
            headers=admin_headers,
        ).json()

        assert body["modelUsed"] == "custom-model"
        assert body["costUsd"] == 1.0
        model = db_session.exec(select(AiModelConfiguration)).one()
        db_session.refresh(model)
        assert model.success_count == 1
        assert model.last_used_at is not None

    def test_quota_exceeded(
        self, client: TestClient, admin_headers: dict, ai_client: FakeAiClient
    ) -> None:
        client.patch("/api/admin/ai-quiz/quota", json={"dailyQuotaLimit": 1}, headers=admin_headers)
        ai_client.queue(make_completion(_quiz_json("Q1")))
        client.post(self.URL, json={"topic": "Access control", "generationType": "flashcard"}, headers=admin_headers)

        response = client.post(self.URL, json={"topic": "Access control", "generationType": "flashcard"}, headers=admin_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["remainingQuota"] == 0
        assert response.json()["error"].startswith("Daily AI generation quota exceeded")
        assert len(ai_client.completions.calls) == 1

    def test_disabled(self, client: TestClient, admin_headers: dict) -> None:
        client.patch("/api/admin/ai-quiz/quota", json={"isEnabled": False}, headers=admin_headers)

        response = client.post(self.URL, json={"topic": "Access control", "generationType": "flashcard"}, headers=admin_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["code"] == "QUOTA_EXCEEDED"

    def test_invalid_model_output(
        self, client: TestClient, db_session: Session, admin_headers: dict, ai_client: FakeAiClient
    ) -> None:
        ai_client.queue(make_completion("I cannot help with that."))

        response = client.post(self.URL, json={"topic": "Risk", "generationType": "flashcard"}, headers=admin_headers)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error"] == "AI generated invalid quiz format"

        log = db_session.exec(select(AiQuizGenerationLog)).one()
        db_session.refresh(log)
        assert log.status == "failed"
        assert log.error_message.startswith("PARSE_ERROR")
        assert db_session.exec(select(AdminAiDailyUsage)).one().generations_used == 0

    def test_all_models_time_out(self, client: TestClient, admin_headers: dict, ai_client: FakeAiClient) -> None:
        ai_client.queue(*[groq.APITimeoutError(request=GROQ_REQUEST) for _ in range(6)])

        response = client.post(self.URL, json={"topic": "Risk", "generationType": "flashcard"}, headers=admin_headers)

        assert response.status_code == status.HTTP_504_GATEWAY_TIMEOUT
        assert response.json()["error"] == "AI generation timed out"

    def test_short_topic_rejected(self, client: TestClient, admin_headers: dict) -> None:
        response = client.post(self.URL, json={"topic": "ab", "generationType": "deck"}, headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logs_and_usage(self, client: TestClient, admin_headers: dict, ai_client: FakeAiClient) -> None:
        ai_client.queue(make_completion(_quiz_json("Q1"), total_tokens=1000))
        client.post(self.URL, json={"topic": "Risk", "generationType": "flashcard"}, headers=admin_headers)

        logs = client.get("/api/admin/ai-quiz/logs?status=success", headers=admin_headers).json()
        usage = client.get("/api/admin/ai-quiz/usage", headers=admin_headers).json()

        assert logs["count"] == 1
        assert usage["summary"]["totalRequests"] == 1
        assert usage["summary"]["totalTokens"] == 1000
