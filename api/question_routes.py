"""
api/question_routes.py — 과목/챕터 트리와 문제은행 엔드포인트

핸들러는 일반 def (스레드풀 실행). exam_routes 참고.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

import config
from api.deps import get_now, get_store, require_staff
from api.schemas import QuestionBody, TopicBody
from question_bank.models.user_model import CurrentUser
from question_bank.services import question_service
from question_bank.services.store import Store

router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.get("")
def list_questions(
    topic_id: Optional[str] = None,
    type: Optional[str] = None,
    difficulty: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_QUESTION_PAGE_SIZE, ge=1, le=200),
    store: Store = Depends(get_store),
):
    return question_service.list_questions(store, topic_id, type, difficulty, page, limit)


# ── 토픽 (/{question_id} 보다 먼저 등록) ─────────────────────────────────────

@router.get("/topics")
def list_topics(store: Store = Depends(get_store)):
    return question_service.list_topics(store)


@router.get("/stats")
def topic_stats(store: Store = Depends(get_store)):
    return question_service.topic_stats(store)


@router.post("/topics", status_code=201)
def create_topic(
    body: TopicBody,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    _: CurrentUser = Depends(require_staff),
):
    topic = question_service.create_topic(store, body.name, body.parent_id, now)
    return topic.model_dump(mode="json")


@router.delete("/topics/{topic_id}")
def delete_topic(
    topic_id: str,
    store: Store = Depends(get_store),
    _: CurrentUser = Depends(require_staff),
):
    return question_service.delete_topic(store, topic_id)


# ── 문제 ─────────────────────────────────────────────────────────────────────

@router.post("", status_code=201)
def create_question(
    body: QuestionBody,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    _: CurrentUser = Depends(require_staff),
):
    question = question_service.create_question(store, body.model_dump(exclude_unset=True), now)
    return question.model_dump(mode="json")


@router.get("/{question_id}")
def get_question(question_id: str, store: Store = Depends(get_store)):
    return question_service.get_question(store, question_id).model_dump(mode="json")


@router.put("/{question_id}")
def update_question(
    question_id: str,
    body: QuestionBody,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    _: CurrentUser = Depends(require_staff),
):
    question = question_service.update_question(store, question_id, body.model_dump(exclude_unset=True), now)
    return question.model_dump(mode="json")


@router.delete("/{question_id}")
def delete_question(
    question_id: str,
    store: Store = Depends(get_store),
    _: CurrentUser = Depends(require_staff),
):
    question_service.delete_question(store, question_id)
    return {"ok": True}
