"""Tests for quiz completion and quiz progress aggregation."""

import time

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from cissp_api.exceptions import ValidationError
from cissp_api.models.deck import Deck
from cissp_api.models.flashcard import Flashcard
from cissp_api.models.quiz_session import QuizSession, QuizSessionAnswer
from cissp_api.schemas.progress_schemas import MAX_EPOCH_MS
from cissp_api.services.quiz_session_service import _started_at, quiz_mastery
from cissp_api.utils.dates import utcnow


def _answers(correct: int, total: int) -> list[dict]:
    return [
        {"selectedOptionIndex": 1, "isCorrect": i < correct, "timeSpent": 12}
        for i in range(total)
    ]


def _payload(quiz_type: str, target_id: int, correct: int, total: int) -> dict:
    key = "flashcardId" if quiz_type == "flashcard" else "deckId"
    return {
        "quizType": quiz_type,
        key: target_id,
        "answers": _answers(correct, total),
        "totalQuestions": total,
        "correctAnswers": correct,
        "startTime": int(time.time() * 1000) - 45_000,
    }


@pytest.mark.parametrize(
    ("average", "best", "expected"),
    [(85.0, 95.0, "mastered"), (85.0, 85.0, "learning"), (50.0, 70.0, "learning"), (40.0, 60.0, "new")],
)
def test_quiz_mastery_thresholds(average: float, best: float, expected: str) -> None:
    assert quiz_mastery(average, best) == expected


class TestCompleteQuiz:
    def test_flashcard_quiz_records_session_and_answers(
        self, client: TestClient, db_session: Session, user_headers: dict, test_flashcards: list[Flashcard]
    ) -> None:
        card = test_flashcards[0]
        response = client.post(
            "/api/quiz-sessions/complete", json=_payload("flashcard", card.id, 5, 5), headers=user_headers
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["scorePercentage"] == 100.0
        assert body["masteryStatus"] == "mastered"

        quiz_session = db_session.exec(select(QuizSession)).one()
        assert quiz_session.quiz_type == "flashcard"
        assert 40 <= quiz_session.quiz_duration <= 60
        answers = db_session.exec(select(QuizSessionAnswer).order_by(QuizSessionAnswer.question_order)).all()
        assert [answer.question_order for answer in answers] == [0, 1, 2, 3, 4]

    def test_flashcard_progress_accumulates(
        self, client: TestClient, user_headers: dict, test_flashcards: list[Flashcard]
    ) -> None:
        card = test_flashcards[1]
        client.post("/api/quiz-sessions/complete", json=_payload("flashcard", card.id, 2, 5), headers=user_headers)
        second = client.post(
            "/api/quiz-sessions/complete", json=_payload("flashcard", card.id, 5, 5), headers=user_headers
        ).json()

        assert second["averageScore"] == 70.0
        assert second["bestScore"] == 100.0
        assert second["masteryStatus"] == "learning"

        progress = client.get(f"/api/quiz-progress/flashcards/{card.id}", headers=user_headers).json()["progress"]
        assert progress["timesTaken"] == 2
        assert progress["lastScore"] == 100.0

    def test_deck_quiz_tracks_mastery_percentage(
        self, client: TestClient, user_headers: dict, test_deck: Deck
    ) -> None:
        client.post("/api/quiz-sessions/complete", json=_payload("deck", test_deck.id, 8, 10), headers=user_headers)
        client.post("/api/quiz-sessions/complete", json=_payload("deck", test_deck.id, 6, 10), headers=user_headers)

        progress = client.get(f"/api/quiz-progress/decks/{test_deck.id}", headers=user_headers).json()["progress"]
        assert progress["averageScore"] == 70.0
        assert progress["bestScore"] == 80.0
        assert progress["masteryPercentage"] == 70.0

    def test_missing_target_id_is_rejected(self, client: TestClient, user_headers: dict) -> None:
        payload = _payload("deck", 1, 1, 1)
        del payload["deckId"]

        response = client.post("/api/quiz-sessions/complete", json=payload, headers=user_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_more_correct_than_total_is_rejected(
        self, client: TestClient, user_headers: dict, test_deck: Deck
    ) -> None:
        payload = _payload("deck", test_deck.id, 3, 3)
        payload["correctAnswers"] = 4

        response = client.post("/api/quiz-sessions/complete", json=payload, headers=user_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.parametrize("start_time", [10**20, -1])
    def test_out_of_range_start_time_is_rejected(
        self, client: TestClient, db_session: Session, user_headers: dict, test_deck: Deck, start_time: int
    ) -> None:
        payload = _payload("deck", test_deck.id, 1, 1)
        payload["startTime"] = start_time

        response = client.post("/api/quiz-sessions/complete", json=payload, headers=user_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"][0]["path"] == "startTime"
        assert db_session.exec(select(QuizSession)).all() == []

    def test_start_time_conversion_failure_is_a_validation_error(self) -> None:
        with pytest.raises(ValidationError, match="startTime is out of range"):
            _started_at(MAX_EPOCH_MS * 1000, utcnow())

    def test_unknown_deck(self, client: TestClient, user_headers: dict) -> None:
        response = client.post("/api/quiz-sessions/complete", json=_payload("deck", 999, 1, 1), headers=user_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_no_progress_yet(self, client: TestClient, user_headers: dict, test_deck: Deck) -> None:
        response = client.get(f"/api/quiz-progress/decks/{test_deck.id}", headers=user_headers)
        assert response.json() == {"progress": None}
