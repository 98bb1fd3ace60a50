"""
services/wrongbook_service.py

오답 노트 + 학습 통계.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from question_bank.models.session_state import SubmissionStatus
from question_bank.models.user_model import WrongQuestion
from question_bank.services.errors import NotFound
from question_bank.services.store import Store

logger = logging.getLogger(__name__)


def _find(store: Store, user_id: str, question_id: str) -> Optional[WrongQuestion]:
    for wq in store.wrong_questions.values():
        if wq.user_id == user_id and wq.question_id == question_id:
            return wq
    return None


def record_wrong(store: Store, user_id: str, question_ids: Iterable[str], now: datetime) -> None:
    """오답 기록. 이미 있으면 횟수 증가 + 숙달 해제. save() 는 호출자가 한다."""
    with store.lock:
        for qid in question_ids:
            wq = _find(store, user_id, qid)
            if wq is None:
                wq = WrongQuestion(user_id=user_id, question_id=qid, last_wrong_at=now)
                store.wrong_questions[wq.id] = wq
            else:
                wq.wrong_count += 1
                wq.last_wrong_at = now
                wq.is_mastered = False
                wq.mastered_at = None


def add_wrong(store: Store, user_id: str, question_id: str, now: datetime) -> None:
    """사용자가 직접 오답 노트에 추가."""
    with store.lock:
        if question_id not in store.questions:
            raise NotFound("문제를 찾을 수 없습니다.")
        record_wrong(store, user_id, [question_id], now)
        store.save()


def list_wrong(
    store: Store,
    user_id: str,
    is_mastered: Optional[bool] = None,
    page: int = 1,
    limit: int = 10,
) -> Dict[str, object]:
    items = [wq for wq in store.values("wrong_questions") if wq.user_id == user_id]
    if is_mastered is not None:
        items = [wq for wq in items if wq.is_mastered == is_mastered]
    items.sort(key=lambda wq: wq.last_wrong_at, reverse=True)

    start = (page - 1) * limit
    data = []
    for wq in items[start:start + limit]:
        d = wq.model_dump(mode="json")
        question = store.questions.get(wq.question_id)
        d["question"] = question.model_dump(mode="json") if question else None
        data.append(d)
    return {"wrong_questions": data, "total": len(items), "page": page, "limit": limit}


def mark_mastered(store: Store, user_id: str, question_id: str, now: datetime) -> WrongQuestion:
    with store.lock:
        wq = _find(store, user_id, question_id)
        if wq is None:
            raise NotFound("오답 기록을 찾을 수 없습니다.")
        wq.is_mastered = True
        wq.mastered_at = now
        store.save()
    return wq


def learning_stats(store: Store, user_id: str) -> Dict[str, object]:
    """프로필 화면용 학습 통계."""
    wrong: List[WrongQuestion] = [wq for wq in store.values("wrong_questions") if wq.user_id == user_id]
    mastered = sum(1 for wq in wrong if wq.is_mastered)

    with store.lock:
        practice_answers = [
            a
            for s in store.practice_sessions.values() if s.user_id == user_id
            for a in s.answers.values()
        ]
    practice_correct = sum(1 for a in practice_answers if a.is_correct)

    ratios = []
    for sub in store.values("submissions"):
        if sub.user_id != user_id or sub.status != SubmissionStatus.COMPLETED:
            continue
        total = sum(eq.score for eq in sub.questions)
        ratios.append(sub.score / total * 100 if total else 0.0)

    return {
        "total_wrong_questions": len(wrong),
        "mastered_wrong_questions": mastered,
        "mastery_rate": round(mastered / len(wrong) * 100, 1) if wrong else 0.0,
        "practice_answered": len(practice_answers),
        "practice_correct": practice_correct,
        "practice_accuracy": round(practice_correct / len(practice_answers) * 100, 1) if practice_answers else 0.0,
        "exams_completed": len(ratios),
        "average_exam_score": round(sum(ratios) / len(ratios), 1) if ratios else 0.0,
        "best_exam_score": round(max(ratios), 1) if ratios else 0.0,
    }
