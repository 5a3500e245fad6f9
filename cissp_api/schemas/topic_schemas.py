from datetime import datetime
from typing import List, Optional
from pydantic import Field
from cissp_api.schemas.base import CamelModel, PatchModel


class SubTopicCreate(CamelModel):
    sub_topic_name: str = Field(min_length=1, max_length=500)
    order: Optional[int] = Field(default=None, ge=0)

    model_config = CamelModel.model_config | {"str_strip_whitespace": True}


class SubTopicUpdate(PatchModel):
    sub_topic_name: Optional[str] = Field(default=None, min_length=1, max_length=500)
    order: Optional[int] = Field(default=None, ge=0)

    model_config = CamelModel.model_config | {"str_strip_whitespace": True}


class TopicCreate(CamelModel):
    domain_number: int = Field(ge=1, le=8)
    topic_code: str = Field(min_length=1, max_length=20, pattern=r"^\d+(\.\d+)*$")
    topic_name: str = Field(min_length=1, max_length=500)
    order: Optional[int] = Field(default=None, ge=0)
    sub_topics: List[SubTopicCreate] = Field(default_factory=list)

    model_config = CamelModel.model_config | {"str_strip_whitespace": True}


class TopicUpdate(PatchModel):
    domain_number: Optional[int] = Field(default=None, ge=1, le=8)
    topic_code: Optional[str] = Field(default=None, min_length=1, max_length=20, pattern=r"^\d+(\.\d+)*$")
    topic_name: Optional[str] = Field(default=None, min_length=1, max_length=500)
    order: Optional[int] = Field(default=None, ge=0)

    model_config = CamelModel.model_config | {"str_strip_whitespace": True}


class SubTopicRead(CamelModel):
    id: int
    topic_id: int
    sub_topic_name: str
    order: int
    created_at: datetime
    updated_at: datetime


class TopicRead(CamelModel):
    id: int
    domain_number: int
    topic_code: str
    topic_name: str
    order: int
    created_at: datetime
    updated_at: datetime


class TopicWithSubTopics(TopicRead):
    sub_topics: List[SubTopicRead]


class SubTopicMatch(CamelModel):
    """Result of resolving a topic code plus sub-topic name to ids."""

    topic_id: int
    topic_code: str
    topic_name: str
    sub_topic_id: int
    sub_topic_name: str
