"""
services/question_service.py

과목/챕터 트리와 문제은행 관리.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

import config
from question_bank.models.question_model import Question
from question_bank.models.topic_model import Topic
from question_bank.services.errors import NotFound, ValidationError
from question_bank.services.rule_resolver import normalize_type
from question_bank.services.store import Store

logger = logging.getLogger(__name__)


def _first_error(e: PydanticValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    msg = err.get("msg", "").removeprefix("Value error, ")
    return f"{loc}: {msg}" if loc else msg


# ── 토픽 ─────────────────────────────────────────────────────────────────────

def list_topics(store: Store) -> List[Dict[str, Any]]:
    topics = sorted(store.values("topics"), key=lambda t: (t.sort_order, t.created_at))
    out = []
    for t in topics:
        d = t.model_dump(mode="json")
        d["kind"] = "subject" if t.is_subject else "chapter"
        d["subject_id"] = t.parent_id
        out.append(d)
    return out


def create_topic(store: Store, name: Optional[str], parent_id: Optional[str], now: datetime) -> Topic:
    """parent_id 가 없으면 과목, 있으면 그 과목의 챕터."""
    if not name or not str(name).strip():
        raise ValidationError("토픽 이름은 필수입니다.")
    with store.lock:
        if parent_id:
            parent = store.topics.get(parent_id)
            if parent is None:
                raise NotFound("상위 과목을 찾을 수 없습니다.")
            if not parent.is_subject:
                raise ValidationError("챕터 아래에는 챕터를 만들 수 없습니다 (과목 → 챕터 2단계).")
        siblings = [t for t in store.topics.values() if t.parent_id == (parent_id or None)]
        topic = Topic(
            name=str(name).strip(),
            parent_id=parent_id or None,
            sort_order=len(siblings) + 1,
            created_at=now,
        )
        store.topics[topic.id] = topic
        store.save()
    return topic


def delete_topic(store: Store, topic_id: str) -> Dict[str, Any]:
    """하위 챕터와 거기 속한 문제까지 함께 삭제."""
    with store.lock:
        if topic_id not in store.topics:
            raise NotFound("토픽을 찾을 수 없습니다.")
        children = [t.id for t in store.children_of(topic_id)]
        doomed = {topic_id, *children}
        for tid in doomed:
            del store.topics[tid]
        question_ids = [q.id for q in store.questions.values() if q.topic_id in doomed]
        for qid in question_ids:
            del store.questions[qid]
        store.save()
    logger.info(f"토픽 삭제: {topic_id} (챕터 {len(children)}개, 문제 {len(question_ids)}개 함께 삭제)")
    return {
        "deleted_topic_id": topic_id,
        "deleted_child_chapter_count": len(children),
        "deleted_question_count": len(question_ids),
    }


def topic_stats(store: Store) -> Dict[str, Any]:
    counts: Dict[str, int] = {}
    for q in store.values("questions"):
        counts[q.topic_id] = counts.get(q.topic_id, 0) + 1

    topics = sorted(store.values("topics"), key=lambda t: (t.sort_order, t.created_at))
    chapters = [
        {"id": t.id, "name": t.name, "subject_id": t.parent_id, "count": counts.get(t.id, 0)}
        for t in topics if not t.is_subject
    ]
    subjects = []
    for s in topics:
        if not s.is_subject:
            continue
        own = [c for c in chapters if c["subject_id"] == s.id]
        subjects.append({
            "id": s.id,
            "name": s.name,
            "chapters": own,
            "total_count": sum(c["count"] for c in own),
        })
    return {"subjects": subjects, "chapters": chapters}


# ── 문제 ─────────────────────────────────────────────────────────────────────

def _require_chapter(store: Store, topic_id: Optional[str]) -> None:
    if not topic_id:
        raise ValidationError("챕터 ID 는 필수입니다.")
    chapter = store.topics.get(topic_id)
    if chapter is None:
        raise NotFound("챕터를 찾을 수 없습니다.")
    if chapter.is_subject or chapter.parent_id not in store.topics:
        raise ValidationError("문제는 과목에 속한 챕터에만 등록할 수 있습니다.")


def _normalized_type(label) -> str:
    qtype = normalize_type(label)
    if qtype is None:
        raise ValidationError(f"알 수 없는 문제 유형입니다: {label}")
    return qtype.value


def list_questions(
    store: Store,
    topic_id: Optional[str] = None,
    qtype: Optional[str] = None,
    difficulty: Optional[int] = None,
    page: int = 1,
    limit: int = config.DEFAULT_QUESTION_PAGE_SIZE,
) -> Dict[str, Any]:
    questions = store.values("questions")
    if topic_id:
        questions = [q for q in questions if q.topic_id == topic_id.strip()]
    if qtype:
        wanted = normalize_type(qtype)
        questions = [q for q in questions if q.type == wanted]
    if difficulty is not None:
        questions = [q for q in questions if q.difficulty == difficulty]
    start = (page - 1) * limit
    return {
        "questions": [q.model_dump(mode="json") for q in questions[start:start + limit]],
        "total": len(questions),
        "page": page,
        "limit": limit,
    }


def get_question(store: Store, question_id: str) -> Question:
    question = store.questions.get(question_id.strip())
    if question is None:
        raise NotFound("문제를 찾을 수 없습니다.")
    return question


def create_question(store: Store, data: Dict[str, Any], now: datetime) -> Question:
    topic_id = data.get("chapter_id") or data.get("topic_id")
    for key in ("type", "content", "answer", "score"):
        if data.get(key) in (None, "", []):
            raise ValidationError(f"필수 항목이 비어 있습니다: {key}")
    with store.lock:
        _require_chapter(store, topic_id)
        try:
            question = Question(
                topic_id=topic_id,
                type=_normalized_type(data["type"]),
                content=data["content"],
                options=data.get("options"),
                answer=data["answer"],
                analysis=data.get("analysis") or "",
                difficulty=data.get("difficulty") or 1,
                score=data["score"],
                tags=data.get("tags") or [],
                created_at=now,
                updated_at=now,
            )
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e))
        store.questions[question.id] = question
        store.save()
    return question


def update_question(store: Store, question_id: str, data: Dict[str, Any], now: datetime) -> Question:
    """부분 수정. 수정 후 전체를 다시 검증한다."""
    with store.lock:
        current = get_question(store, question_id)
        changes = {k: v for k, v in data.items() if v is not None and k not in ("id", "created_at")}
        if "chapter_id" in changes:
            changes["topic_id"] = changes.pop("chapter_id")
        if "topic_id" in changes:
            _require_chapter(store, changes["topic_id"])
        if "type" in changes:
            changes["type"] = _normalized_type(changes["type"])
        try:
            updated = Question.model_validate({**current.model_dump(), **changes, "updated_at": now})
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e))
        store.questions[updated.id] = updated
        store.save()
    return updated


def delete_question(store: Store, question_id: str) -> None:
    with store.lock:
        get_question(store, question_id)
        del store.questions[question_id.strip()]
        store.save()
