"""
api/user_routes.py — 오답 노트 + 프로필 통계 엔드포인트

핸들러는 일반 def (스레드풀 실행). exam_routes 참고.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

import config
from api.deps import get_current_user, get_now, get_store
from question_bank.models.user_model import CurrentUser
from question_bank.services import wrongbook_service
from question_bank.services.store import Store

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/wrongbook")
def list_wrongbook(
    is_mastered: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=100),
    store: Store = Depends(get_store),
    user: CurrentUser = Depends(get_current_user),
):
    return wrongbook_service.list_wrong(store, user.id, is_mastered, page, limit)


@router.post("/wrongbook/{question_id}")
def record_wrong(
    question_id: str,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    user: CurrentUser = Depends(get_current_user),
):
    wrongbook_service.add_wrong(store, user.id, question_id, now)
    return {"ok": True}


@router.put("/wrongbook/{question_id}/master")
def master_wrong(
    question_id: str,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    user: CurrentUser = Depends(get_current_user),
):
    return wrongbook_service.mark_mastered(store, user.id, question_id, now).model_dump(mode="json")


@router.get("/profile")
def profile(
    store: Store = Depends(get_store),
    user: CurrentUser = Depends(get_current_user),
):
    return {"user": user.model_dump(mode="json"), "stats": wrongbook_service.learning_stats(store, user.id)}
