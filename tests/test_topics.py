"""Tests for the CISSP topic hierarchy and sub-topic tagging of deck questions."""

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from cissp_api.models.deck import Deck
from cissp_api.models.quiz_question import DeckQuizQuestion
from cissp_api.models.topic import SubTopic, Topic
from cissp_api.services import topic_service
from cissp_api.services.topic_outline import CISSP_OUTLINE

from conftest import quiz_question


def _create(client: TestClient, headers: dict, **overrides) -> dict:
    payload = {
        "domainNumber": 1,
        "topicCode": "1.2",
        "topicName": "Understand and apply security concepts",
        "subTopics": [
            {"subTopicName": "Confidentiality, integrity, and availability"},
            {"subTopicName": "Organizational roles and responsibilities"},
        ],
    }
    payload.update(overrides)
    response = client.post("/api/admin/topics", json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["topic"]


class TestTopicAdmin:
    def test_create_topic_with_sub_topics(self, client: TestClient, admin_headers: dict) -> None:
        topic = _create(client, admin_headers)

        assert topic["topicCode"] == "1.2"
        assert topic["order"] == 1
        assert [(sub["subTopicName"][:15], sub["order"]) for sub in topic["subTopics"]] == [
            ("Confidentiality", 1),
            ("Organizational ", 2),
        ]

    def test_duplicate_code_conflicts(self, client: TestClient, admin_headers: dict) -> None:
        _create(client, admin_headers)

        response = client.post(
            "/api/admin/topics",
            json={"domainNumber": 1, "topicCode": "1.2", "topicName": "Again"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    @pytest.mark.parametrize(
        "payload",
        [
            {"domainNumber": 9, "topicCode": "9.1", "topicName": "Out of range"},
            {"domainNumber": 1, "topicCode": "one", "topicName": "Bad code"},
            {"domainNumber": 1, "topicCode": "1.1", "topicName": ""},
        ],
    )
    def test_invalid_topic_is_rejected(self, client: TestClient, admin_headers: dict, payload: dict) -> None:
        response = client.post("/api/admin/topics", json=payload, headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_filters_by_domain_and_orders(self, client: TestClient, admin_headers: dict) -> None:
        _create(client, admin_headers, domainNumber=2, topicCode="2.1", topicName="Identify and classify", subTopics=[])
        _create(client, admin_headers, topicCode="1.3", topicName="Governance", order=3, subTopics=[])
        _create(client, admin_headers, topicCode="1.1", topicName="Ethics", order=1, subTopics=[])

        everything = client.get("/api/admin/topics", headers=admin_headers).json()
        domain_one = client.get("/api/admin/topics?domain=1", headers=admin_headers).json()

        assert [topic["topicCode"] for topic in everything["data"]] == ["1.1", "1.3", "2.1"]
        assert everything["count"] == 3
        assert [topic["topicCode"] for topic in domain_one["data"]] == ["1.1", "1.3"]

    def test_update_topic(self, client: TestClient, admin_headers: dict) -> None:
        topic = _create(client, admin_headers)

        response = client.patch(
            f"/api/admin/topics/{topic['id']}", json={"topicName": "Security concepts"}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["topic"]["topicName"] == "Security concepts"
        assert response.json()["topic"]["topicCode"] == "1.2"

    def test_update_rejects_null_name(self, client: TestClient, admin_headers: dict) -> None:
        topic = _create(client, admin_headers)

        response = client.patch(f"/api/admin/topics/{topic['id']}", json={"topicName": None}, headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "topic_name cannot be null" in response.json()["error"]

    def test_update_to_taken_code_conflicts(self, client: TestClient, admin_headers: dict) -> None:
        _create(client, admin_headers, topicCode="1.1", topicName="Ethics", subTopics=[])
        topic = _create(client, admin_headers)

        response = client.patch(f"/api/admin/topics/{topic['id']}", json={"topicCode": "1.1"}, headers=admin_headers)
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_sub_topic_crud(self, client: TestClient, admin_headers: dict) -> None:
        topic = _create(client, admin_headers)

        created = client.post(
            f"/api/admin/topics/{topic['id']}/sub-topics",
            json={"subTopicName": "Security control frameworks"},
            headers=admin_headers,
        )
        assert created.status_code == status.HTTP_201_CREATED
        sub_topic = created.json()["subTopic"]
        assert sub_topic["order"] == 3

        renamed = client.patch(
            f"/api/admin/sub-topics/{sub_topic['id']}", json={"subTopicName": "Control frameworks"}, headers=admin_headers
        )
        assert renamed.json()["subTopic"]["subTopicName"] == "Control frameworks"

        client.delete(f"/api/admin/sub-topics/{sub_topic['id']}", headers=admin_headers)
        listed = client.get(f"/api/admin/topics/{topic['id']}", headers=admin_headers).json()["topic"]
        assert len(listed["subTopics"]) == 2

    def test_sub_topic_for_missing_topic(self, client: TestClient, admin_headers: dict) -> None:
        response = client.post("/api/admin/topics/999/sub-topics", json={"subTopicName": "Orphan"}, headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_topic_removes_sub_topics_and_untags_questions(
        self, client: TestClient, db_session: Session, admin_headers: dict, test_deck: Deck
    ) -> None:
        topic = _create(client, admin_headers)
        sub_topic_id = topic["subTopics"][0]["id"]
        question = DeckQuizQuestion(
            deck_id=test_deck.id, question_text="Which pillar?", sub_topic_id=sub_topic_id, created_by="user_admin"
        )
        db_session.add(question)
        db_session.commit()

        response = client.delete(f"/api/admin/topics/{topic['id']}", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        db_session.expire_all()
        assert db_session.exec(select(Topic)).all() == []
        assert db_session.exec(select(SubTopic)).all() == []
        assert db_session.get(DeckQuizQuestion, question.id).sub_topic_id is None

    def test_learners_cannot_manage_topics(self, client: TestClient, user_headers: dict) -> None:
        response = client.get("/api/admin/topics", headers=user_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestSubTopicLookup:
    def test_exact_match_ignores_case(self, client: TestClient, admin_headers: dict) -> None:
        topic = _create(client, admin_headers)

        response = client.get(
            "/api/admin/topics/lookup",
            params={"topic_code": "1.2", "sub_topic_name": "ORGANIZATIONAL ROLES AND RESPONSIBILITIES"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] == {
            "topicId": topic["id"],
            "topicCode": "1.2",
            "topicName": "Understand and apply security concepts",
            "subTopicId": topic["subTopics"][1]["id"],
            "subTopicName": "Organizational roles and responsibilities",
        }

    def test_partial_match(self, client: TestClient, admin_headers: dict) -> None:
        topic = _create(client, admin_headers)

        response = client.get(
            "/api/admin/topics/lookup",
            params={"topic_code": "1.2", "sub_topic_name": "integrity"},
            headers=admin_headers,
        )

        assert response.json()["data"]["subTopicId"] == topic["subTopics"][0]["id"]

    def test_no_match_lists_available_names(self, client: TestClient, admin_headers: dict) -> None:
        _create(client, admin_headers)

        response = client.get(
            "/api/admin/topics/lookup",
            params={"topic_code": "1.2", "sub_topic_name": "Quantum cryptography"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["availableSubTopics"] == [
            "Confidentiality, integrity, and availability",
            "Organizational roles and responsibilities",
        ]

    def test_unknown_topic_code(self, client: TestClient, admin_headers: dict) -> None:
        response = client.get(
            "/api/admin/topics/lookup",
            params={"topic_code": "9.9", "sub_topic_name": "anything"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "Topic not found for code: 9.9"

    def test_both_parameters_are_required(self, client: TestClient, admin_headers: dict) -> None:
        response = client.get("/api/admin/topics/lookup", params={"topic_code": "1.2"}, headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestOutlineSeed:
    def test_seed_loads_every_domain_once(self, client: TestClient, db_session: Session, admin_headers: dict) -> None:
        expected_topics = sum(len(topics) for _, _, topics in CISSP_OUTLINE)

        first = client.post("/api/admin/topics/seed", headers=admin_headers).json()
        second = client.post("/api/admin/topics/seed", headers=admin_headers).json()

        assert first["topicsCreated"] == expected_topics
        assert second["topicsCreated"] == 0
        domains = {topic.domain_number for topic in db_session.exec(select(Topic)).all()}
        assert domains == set(range(1, 9))

    def test_seed_keeps_existing_topics(self, db_session: Session) -> None:
        db_session.add(Topic(domain_number=1, topic_code="1.1", topic_name="Custom ethics", order=1))
        db_session.commit()

        topic_service.seed_cissp_outline(db_session)

        topic = db_session.exec(select(Topic).where(Topic.topic_code == "1.1")).one()
        assert topic.topic_name == "Custom ethics"


class TestQuestionTagging:
    def _deck_question(self, client: TestClient, headers: dict, deck: Deck) -> str:
        url = f"/api/admin/decks/{deck.id}/quiz"
        client.put(url, json={"quizData": {"questions": [quiz_question()]}}, headers=headers)
        question_id = client.get(url, headers=headers).json()["questions"][0]["id"]
        return f"{url}/{question_id}"

    def test_tag_and_clear_sub_topic(self, client: TestClient, admin_headers: dict, test_deck: Deck) -> None:
        sub_topic_id = _create(client, admin_headers)["subTopics"][0]["id"]
        url = self._deck_question(client, admin_headers, test_deck)

        tagged = client.patch(url, json={"subTopicId": sub_topic_id}, headers=admin_headers)
        cleared = client.patch(url, json={"subTopicId": None}, headers=admin_headers)

        assert tagged.json()["question"]["subTopicId"] == sub_topic_id
        assert cleared.json()["question"]["subTopicId"] is None

    def test_unknown_sub_topic(self, client: TestClient, admin_headers: dict, test_deck: Deck) -> None:
        url = self._deck_question(client, admin_headers, test_deck)

        response = client.patch(url, json={"subTopicId": 999}, headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_flashcard_questions_cannot_be_tagged(
        self, client: TestClient, admin_headers: dict, test_flashcards: list
    ) -> None:
        sub_topic_id = _create(client, admin_headers)["subTopics"][0]["id"]
        url = f"/api/admin/flashcards/{test_flashcards[0].id}/quiz"
        client.put(url, json={"quizData": {"questions": [quiz_question()]}}, headers=admin_headers)
        question_id = client.get(url, headers=admin_headers).json()["questions"][0]["id"]

        response = client.patch(f"{url}/{question_id}", json={"subTopicId": sub_topic_id}, headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
