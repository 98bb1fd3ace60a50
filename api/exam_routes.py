"""
api/exam_routes.py — 시험 템플릿 관리 + 응시 엔드포인트

핸들러는 일반 def 로 둔다. 서비스가 저장소 잠금과 파일 기록을 하므로
FastAPI 스레드풀에서 실행되어야 이벤트 루프가 막히지 않는다.
"""

import random
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

import config
from api.deps import get_current_user, get_now, get_rng, get_store, require_staff
from api.schemas import AnswerBody, ExamBody
from question_bank.models.user_model import CurrentUser
from question_bank.services import exam_service
from question_bank.services.store import Store

router = APIRouter(prefix="/api/exams", tags=["exams"])


@router.get("")
def list_exams(
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=100),
    store: Store = Depends(get_store),
):
    return exam_service.list_exams(store, status, page, limit)


@router.post("", status_code=201)
def create_exam(
    body: ExamBody,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    user: CurrentUser = Depends(require_staff),
):
    exam = exam_service.create_exam(store, body.model_dump(exclude_unset=True), user.id, now)
    return exam.model_dump(mode="json")


# /{exam_id} 보다 먼저 등록
@router.get("/history")
def exam_history(
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=100),
    store: Store = Depends(get_store),
    user: CurrentUser = Depends(get_current_user),
):
    return exam_service.list_history(store, user.id, page, limit)


# ── 응시 ─────────────────────────────────────────────────────────────────────

@router.get("/submission/{submission_id}/question/{order}")
def get_submission_question(
    submission_id: str,
    order: int,
    store: Store = Depends(get_store),
    rng: random.Random = Depends(get_rng),
    user: CurrentUser = Depends(get_current_user),
):
    return exam_service.get_question(store, submission_id, user.id, order, rng)


@router.post("/submission/{submission_id}/answer")
def submit_answer(
    submission_id: str,
    body: AnswerBody,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    user: CurrentUser = Depends(get_current_user),
):
    return exam_service.submit_answer(
        store, submission_id, user.id, body.question_id, body.answer, body.completed, now
    )


@router.get("/submission/{submission_id}/result")
def get_result(
    submission_id: str,
    store: Store = Depends(get_store),
    user: CurrentUser = Depends(get_current_user),
):
    return exam_service.get_result(store, submission_id, user.id)


# ── 시험 템플릿 ──────────────────────────────────────────────────────────────

@router.get("/{exam_id}")
def get_exam(exam_id: str, store: Store = Depends(get_store)):
    return {"exam": exam_service.get_exam(store, exam_id).model_dump(mode="json")}


@router.put("/{exam_id}")
def update_exam(
    exam_id: str,
    body: ExamBody,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    _: CurrentUser = Depends(require_staff),
):
    exam = exam_service.update_exam(store, exam_id, body.model_dump(exclude_unset=True), now)
    return exam.model_dump(mode="json")


@router.delete("/{exam_id}")
def delete_exam(
    exam_id: str,
    store: Store = Depends(get_store),
    _: CurrentUser = Depends(require_staff),
):
    deleted = exam_service.delete_exam(store, exam_id)
    return {"ok": True, "deleted": deleted}


@router.post("/{exam_id}/start", status_code=201)
def start_exam(
    exam_id: str,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    rng: random.Random = Depends(get_rng),
    user: CurrentUser = Depends(get_current_user),
):
    submission = exam_service.start_exam(store, exam_id, user.id, now, rng)
    return submission.summary()


@router.get("/{exam_id}/preview")
def preview_exam(
    exam_id: str,
    store: Store = Depends(get_store),
    _: CurrentUser = Depends(require_staff),
):
    return exam_service.preview_distribution(store, exam_id)


@router.post("/{exam_id}/publish")
def publish_exam(
    exam_id: str,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    _: CurrentUser = Depends(require_staff),
):
    return exam_service.set_published(store, exam_id, True, now).model_dump(mode="json")


@router.post("/{exam_id}/unpublish")
def unpublish_exam(
    exam_id: str,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    _: CurrentUser = Depends(require_staff),
):
    return exam_service.set_published(store, exam_id, False, now).model_dump(mode="json")
