"""Admin management of the CISSP topic and sub-topic hierarchy."""

from typing import Annotated, Optional

from fastapi import APIRouter, Query, status

from cissp_api.dependencies import AdminUser, DbSession
from cissp_api.schemas.topic_schemas import (
    SubTopicCreate,
    SubTopicMatch,
    SubTopicRead,
    SubTopicUpdate,
    TopicCreate,
    TopicRead,
    TopicUpdate,
    TopicWithSubTopics,
)
from cissp_api.services import topic_service

router = APIRouter(prefix="/api/admin", tags=["admin-topics"])


@router.get("/topics")
def list_topics(
    session: DbSession,
    admin: AdminUser,
    domain: Annotated[Optional[int], Query(ge=1, le=8)] = None,
):
    topics = [TopicWithSubTopics.model_validate(topic) for topic in topic_service.list_topics(session, domain)]
    return {"success": True, "data": topics, "count": len(topics)}


@router.get("/topics/lookup")
def lookup_sub_topic(
    session: DbSession,
    admin: AdminUser,
    topic_code: Annotated[str, Query(min_length=1)],
    sub_topic_name: Annotated[str, Query(min_length=1)],
):
    match = topic_service.find_sub_topic(session, topic_code, sub_topic_name)
    return {"success": True, "data": SubTopicMatch.model_validate(match)}


@router.post("/topics/seed")
def seed_topics(session: DbSession, admin: AdminUser):
    created = topic_service.seed_cissp_outline(session)
    return {"success": True, "topicsCreated": created["topics"], "subTopicsCreated": created["sub_topics"]}


@router.post("/topics", status_code=status.HTTP_201_CREATED)
def create_topic(request: TopicCreate, session: DbSession, admin: AdminUser):
    topic = topic_service.create_topic(session, request)
    return {"success": True, "topic": TopicWithSubTopics.model_validate(topic)}


@router.get("/topics/{topic_id}")
def get_topic(topic_id: int, session: DbSession, admin: AdminUser):
    topic = topic_service.get_topic_with_sub_topics(session, topic_id)
    return {"topic": TopicWithSubTopics.model_validate(topic)}


@router.patch("/topics/{topic_id}")
def update_topic(topic_id: int, request: TopicUpdate, session: DbSession, admin: AdminUser):
    topic = topic_service.update_topic(session, topic_id, request)
    return {"success": True, "topic": TopicRead.model_validate(topic)}


@router.delete("/topics/{topic_id}")
def delete_topic(topic_id: int, session: DbSession, admin: AdminUser):
    topic_service.delete_topic(session, topic_id)
    return {"success": True}


@router.post("/topics/{topic_id}/sub-topics", status_code=status.HTTP_201_CREATED)
def create_sub_topic(topic_id: int, request: SubTopicCreate, session: DbSession, admin: AdminUser):
    sub_topic = topic_service.create_sub_topic(session, topic_id, request)
    return {"success": True, "subTopic": SubTopicRead.model_validate(sub_topic)}


@router.patch("/sub-topics/{sub_topic_id}")
def update_sub_topic(sub_topic_id: int, request: SubTopicUpdate, session: DbSession, admin: AdminUser):
    sub_topic = topic_service.update_sub_topic(session, sub_topic_id, request)
    return {"success": True, "subTopic": SubTopicRead.model_validate(sub_topic)}


@router.delete("/sub-topics/{sub_topic_id}")
def delete_sub_topic(sub_topic_id: int, session: DbSession, admin: AdminUser):
    topic_service.delete_sub_topic(session, sub_topic_id)
    return {"success": True}
