"""
api/practice_routes.py — 연습 모드 엔드포인트

핸들러는 일반 def (스레드풀 실행). exam_routes 참고.
"""

import random
from datetime import datetime

from fastapi import APIRouter, Depends, Query

import config
from api.deps import get_current_user, get_now, get_rng, get_store
from api.schemas import PracticeStartBody, PracticeSubmitBody
from question_bank.models.user_model import CurrentUser
from question_bank.services import practice_service
from question_bank.services.store import Store

router = APIRouter(prefix="/api/practice", tags=["practice"])


@router.post("/start", status_code=201)
def start_practice(
    body: PracticeStartBody,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    user: CurrentUser = Depends(get_current_user),
):
    session = practice_service.start_practice(store, user.id, body.topic_ids, body.question_count, now)
    return session.summary()


@router.get("/question/{session_id}")
def next_question(
    session_id: str,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    rng: random.Random = Depends(get_rng),
    user: CurrentUser = Depends(get_current_user),
):
    return practice_service.next_question(store, session_id, user.id, now, rng)


@router.post("/submit")
def submit_practice(
    body: PracticeSubmitBody,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    user: CurrentUser = Depends(get_current_user),
):
    answers = [a.model_dump() for a in body.answers]
    return practice_service.submit_answers(store, body.practice_id, user.id, answers, body.completed, now)


@router.post("/{session_id}/abandon")
def abandon_practice(
    session_id: str,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    user: CurrentUser = Depends(get_current_user),
):
    return practice_service.abandon_practice(store, session_id, user.id, now).summary()


@router.get("/session/{session_id}")
def get_session(
    session_id: str,
    store: Store = Depends(get_store),
    user: CurrentUser = Depends(get_current_user),
):
    session = practice_service.get_session(store, session_id, user.id)
    answers = [a.model_dump(mode="json") for a in session.answers.values()]
    return {"session": session.summary(), "answers": answers}


@router.get("/result/{session_id}")
def get_result(
    session_id: str,
    store: Store = Depends(get_store),
    user: CurrentUser = Depends(get_current_user),
):
    return practice_service.get_result(store, session_id, user.id)


@router.get("/history")
def practice_history(
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=100),
    store: Store = Depends(get_store),
    user: CurrentUser = Depends(get_current_user),
):
    return practice_service.list_history(store, user.id, page, limit)
