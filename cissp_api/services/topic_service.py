"""CISSP topic hierarchy: domains contain numbered topics, topics contain sub-topics.

Deck quiz questions can be tagged with a sub-topic so results can later be
broken down by exam objective.
"""

from typing import Any, Dict, List, Optional
import structlog
from sqlalchemy import delete, update
from sqlmodel import Session, select, func, col
from cissp_api.exceptions import ConflictError, NotFoundError, ValidationError
from cissp_api.models.quiz_question import DeckQuizQuestion
from cissp_api.models.topic import SubTopic, Topic
from cissp_api.schemas.topic_schemas import SubTopicCreate, SubTopicUpdate, TopicCreate, TopicUpdate
from cissp_api.services.topic_outline import CISSP_OUTLINE
from cissp_api.utils.dates import utcnow

logger = structlog.get_logger(__name__)


def _changes(payload) -> Dict[str, Any]:
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise ValidationError("No valid fields provided for update")
    return data


def _sub_topics_by_topic(session: Session, topic_ids: List[int]) -> Dict[int, List[SubTopic]]:
    grouped: Dict[int, List[SubTopic]] = {topic_id: [] for topic_id in topic_ids}
    if not topic_ids:
        return grouped
    rows = session.exec(
        select(SubTopic).where(col(SubTopic.topic_id).in_(topic_ids)).order_by(SubTopic.order, SubTopic.id)
    ).all()
    for sub_topic in rows:
        grouped[sub_topic.topic_id].append(sub_topic)
    return grouped


def _with_sub_topics(topic: Topic, sub_topics: List[SubTopic]) -> Dict[str, Any]:
    return {**topic.model_dump(), "sub_topics": sub_topics}


def list_topics(session: Session, domain_number: Optional[int] = None) -> List[Dict[str, Any]]:
    statement = select(Topic)
    if domain_number is not None:
        statement = statement.where(Topic.domain_number == domain_number)
    topics = session.exec(statement.order_by(Topic.domain_number, Topic.order, Topic.id)).all()
    grouped = _sub_topics_by_topic(session, [topic.id for topic in topics])
    return [_with_sub_topics(topic, grouped[topic.id]) for topic in topics]


def get_topic(session: Session, topic_id: int) -> Topic:
    topic = session.get(Topic, topic_id)
    if not topic:
        raise NotFoundError("Topic not found")
    return topic


def get_topic_with_sub_topics(session: Session, topic_id: int) -> Dict[str, Any]:
    topic = get_topic(session, topic_id)
    return _with_sub_topics(topic, _sub_topics_by_topic(session, [topic.id])[topic.id])


def find_sub_topic(session: Session, topic_code: str, sub_topic_name: str) -> Dict[str, Any]:
    """Resolve ``(topic code, sub-topic name)`` to ids.

    An exact case-insensitive name match wins; otherwise the first sub-topic
    whose name contains the search text (or is contained by it) is used.
    """
    topic = session.exec(select(Topic).where(Topic.topic_code == topic_code.strip())).first()
    if not topic:
        raise NotFoundError(f"Topic not found for code: {topic_code}")

    sub_topics = _sub_topics_by_topic(session, [topic.id])[topic.id]
    wanted = sub_topic_name.strip().lower()
    match = next((sub for sub in sub_topics if sub.sub_topic_name.lower() == wanted), None)
    if match is None and wanted:
        match = next(
            (sub for sub in sub_topics if wanted in sub.sub_topic_name.lower() or sub.sub_topic_name.lower() in wanted),
            None,
        )
    if match is None:
        error = NotFoundError("Sub-topic not found")
        error.extra["availableSubTopics"] = [sub.sub_topic_name for sub in sub_topics]
        raise error

    return {
        "topic_id": topic.id,
        "topic_code": topic.topic_code,
        "topic_name": topic.topic_name,
        "sub_topic_id": match.id,
        "sub_topic_name": match.sub_topic_name,
    }


def _next_order(session: Session, column, *conditions) -> int:
    current = session.exec(select(func.max(column)).where(*conditions)).one()
    return (current or 0) + 1


def _ensure_code_free(session: Session, topic_code: str, topic_id: Optional[int] = None) -> None:
    existing = session.exec(select(Topic).where(Topic.topic_code == topic_code)).first()
    if existing and existing.id != topic_id:
        raise ConflictError(f"Topic {topic_code} already exists")


def create_topic(session: Session, payload: TopicCreate) -> Dict[str, Any]:
    _ensure_code_free(session, payload.topic_code)
    order = payload.order
    if order is None:
        order = _next_order(session, Topic.order, Topic.domain_number == payload.domain_number)
    topic = Topic(
        domain_number=payload.domain_number,
        topic_code=payload.topic_code,
        topic_name=payload.topic_name,
        order=order,
    )
    session.add(topic)
    session.flush()
    for position, entry in enumerate(payload.sub_topics, start=1):
        session.add(
            SubTopic(
                topic_id=topic.id,
                sub_topic_name=entry.sub_topic_name,
                order=entry.order if entry.order is not None else position,
            )
        )
    session.commit()
    session.refresh(topic)
    logger.info("topic_created", topic_code=topic.topic_code, sub_topics=len(payload.sub_topics))
    return get_topic_with_sub_topics(session, topic.id)


def update_topic(session: Session, topic_id: int, payload: TopicUpdate) -> Topic:
    topic = get_topic(session, topic_id)
    data = _changes(payload)
    if "topic_code" in data:
        _ensure_code_free(session, data["topic_code"], topic_id)
    for key, value in data.items():
        setattr(topic, key, value)
    topic.updated_at = utcnow()
    session.add(topic)
    session.commit()
    session.refresh(topic)
    return topic


def _untag_questions(session: Session, sub_topic_ids) -> None:
    session.exec(
        update(DeckQuizQuestion)
        .where(col(DeckQuizQuestion.sub_topic_id).in_(sub_topic_ids))
        .values(sub_topic_id=None)
    )


def delete_topic(session: Session, topic_id: int) -> None:
    topic = get_topic(session, topic_id)
    sub_topic_ids = select(SubTopic.id).where(SubTopic.topic_id == topic_id)
    _untag_questions(session, sub_topic_ids)
    session.exec(delete(SubTopic).where(SubTopic.topic_id == topic_id))
    session.delete(topic)
    session.commit()
    logger.info("topic_deleted", topic_code=topic.topic_code)


def get_sub_topic(session: Session, sub_topic_id: int) -> SubTopic:
    sub_topic = session.get(SubTopic, sub_topic_id)
    if not sub_topic:
        raise NotFoundError("Sub-topic not found")
    return sub_topic


def create_sub_topic(session: Session, topic_id: int, payload: SubTopicCreate) -> SubTopic:
    get_topic(session, topic_id)
    order = payload.order
    if order is None:
        order = _next_order(session, SubTopic.order, SubTopic.topic_id == topic_id)
    sub_topic = SubTopic(topic_id=topic_id, sub_topic_name=payload.sub_topic_name, order=order)
    session.add(sub_topic)
    session.commit()
    session.refresh(sub_topic)
    return sub_topic


def update_sub_topic(session: Session, sub_topic_id: int, payload: SubTopicUpdate) -> SubTopic:
    sub_topic = get_sub_topic(session, sub_topic_id)
    for key, value in _changes(payload).items():
        setattr(sub_topic, key, value)
    sub_topic.updated_at = utcnow()
    session.add(sub_topic)
    session.commit()
    session.refresh(sub_topic)
    return sub_topic


def delete_sub_topic(session: Session, sub_topic_id: int) -> None:
    sub_topic = get_sub_topic(session, sub_topic_id)
    _untag_questions(session, [sub_topic.id])
    session.delete(sub_topic)
    session.commit()


def seed_cissp_outline(session: Session) -> Dict[str, int]:
    """Load the CISSP exam outline, skipping topic codes that already exist."""
    existing = set(session.exec(select(Topic.topic_code)).all())
    topics = sub_topics = 0
    for domain_number, _domain_name, outline_topics in CISSP_OUTLINE:
        for order, (code, name, names) in enumerate(outline_topics, start=1):
            if code in existing:
                continue
            topic = Topic(domain_number=domain_number, topic_code=code, topic_name=name, order=order)
            session.add(topic)
            session.flush()
            for position, sub_topic_name in enumerate(names, start=1):
                session.add(SubTopic(topic_id=topic.id, sub_topic_name=sub_topic_name, order=position))
            topics += 1
            sub_topics += len(names)
    session.commit()
    logger.info("topics_seeded", topics=topics, sub_topics=sub_topics, skipped=len(existing))
    return {"topics": topics, "sub_topics": sub_topics}
