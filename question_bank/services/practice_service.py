"""
services/practice_service.py

연습 모드. 제한 시간 없이 선택한 토픽에서 아직 안 푼 문제를 하나씩 무작위로 제공한다.
"""

import logging
import random
from datetime import datetime
from typing import Any, Dict, List, Optional

from question_bank.models.question_model import Answer
from question_bank.models.session_state import PracticeAnswer, PracticeSession, PracticeStatus
from question_bank.services import grading, wrongbook_service
from question_bank.services.errors import InvalidState, NotFound, ValidationError
from question_bank.services.rule_resolver import expand_chapters
from question_bank.services.store import Store

logger = logging.getLogger(__name__)


def start_practice(
    store: Store,
    user_id: str,
    topic_ids: Optional[List[str]],
    question_count: Optional[int],
    now: datetime,
) -> PracticeSession:
    if not topic_ids or not question_count or question_count <= 0:
        raise ValidationError("토픽 ID 와 문항 수는 필수입니다.")
    session = PracticeSession(
        user_id=user_id,
        topic_ids=list(dict.fromkeys(topic_ids)),
        total_questions=question_count,
        start_time=now,
    )
    with store.lock:
        store.practice_sessions[session.id] = session
        store.save()
    logger.info(f"연습 시작: session={session.id} user={user_id} 토픽 {session.topic_ids}")
    return session


def get_session(store: Store, session_id: str, user_id: str) -> PracticeSession:
    session = store.practice_sessions.get(session_id)
    if session is None or session.user_id != user_id:
        raise NotFound("연습 세션을 찾을 수 없습니다.")
    return session


def _require_in_progress(session: PracticeSession) -> None:
    if session.status != PracticeStatus.IN_PROGRESS:
        raise InvalidState("진행 중인 연습 세션이 아닙니다.")


def _complete(session: PracticeSession, now: datetime, reason: str) -> None:
    session.status = PracticeStatus.COMPLETED
    session.end_time = now
    logger.info(f"연습 종료({reason}): session={session.id} 정답 {session.correct_count}")


def next_question(
    store: Store,
    session_id: str,
    user_id: str,
    now: datetime,
    rng: random.Random,
) -> Dict[str, Any]:
    """
    아직 풀지도, 제공하지도 않은 문제 하나를 무작위로 제공.
    풀이 소진되었거나 목표 문항 수만큼 제공했으면 세션을 종료하고 NotFound.
    """
    with store.lock:
        session = get_session(store, session_id, user_id)
        _require_in_progress(session)

        chapters = expand_chapters(session.topic_ids, store.topics)
        available = [q for q in store.questions.values() if q.topic_id in chapters]
        if not available:
            raise NotFound("출제 가능한 문제가 없습니다.")

        seen = set(session.served_question_ids) | set(session.answers)
        remaining = [q for q in available if q.id not in seen]
        if not remaining or len(session.served_question_ids) >= session.total_questions:
            _complete(session, now, "문제 소진")
            store.save()
            raise NotFound("더 이상 풀 문제가 없습니다.")

        question = rng.choice(remaining)
        session.served_question_ids.append(question.id)
        store.save()

    display = question.public_dict()
    if display.get("options"):
        display["options"] = rng.sample(display["options"], len(display["options"]))
    return {
        "question": display,
        "served_count": len(session.served_question_ids),
        "total_questions": session.total_questions,
    }


def submit_answers(
    store: Store,
    session_id: str,
    user_id: str,
    answers: List[Dict[str, Any]],
    completed: bool,
    now: datetime,
) -> Dict[str, Any]:
    """
    답안 여러 개를 한 번에 채점·저장 (같은 문제는 덮어쓰기).

    Returns:
        {"session", "submitted_answers", "correct_count"(이번 제출분), "total_count"(누적 응답 수)}
    """
    with store.lock:
        session = get_session(store, session_id, user_id)
        _require_in_progress(session)

        # 전부 검증한 뒤에 반영 (중간 실패 시 일부만 저장되지 않도록)
        batch = []
        for item in answers:
            qid = item.get("question_id")
            user_answer: Answer = item.get("user_answer")
            if not qid or user_answer is None:
                raise ValidationError("question_id 와 user_answer 는 필수입니다.")
            question = store.questions.get(qid)
            if question is None:
                raise NotFound(f"문제를 찾을 수 없습니다: {qid}")
            batch.append((qid, user_answer, question))

        submitted: List[PracticeAnswer] = []
        wrong_ids = []
        for qid, user_answer, question in batch:
            correct = grading.is_correct(question, user_answer)
            if not correct:
                wrong_ids.append(qid)

            existing = session.answers.get(qid)
            if existing is not None:
                existing.user_answer = user_answer
                existing.is_correct = correct
                existing.answered_at = now
                submitted.append(existing)
            else:
                pa = PracticeAnswer(
                    session_id=session_id,
                    question_id=qid,
                    user_answer=user_answer,
                    is_correct=correct,
                    answered_at=now,
                )
                session.answers[qid] = pa
                submitted.append(pa)

        session.correct_count = sum(1 for a in session.answers.values() if a.is_correct)
        wrongbook_service.record_wrong(store, user_id, wrong_ids, now)
        if completed:
            _complete(session, now, "사용자 종료")
        store.save()

    return {
        "session": session.summary(),
        "submitted_answers": [a.model_dump(mode="json") for a in submitted],
        "correct_count": sum(1 for a in submitted if a.is_correct),
        "total_count": len(session.answers),
    }


def abandon_practice(store: Store, session_id: str, user_id: str, now: datetime) -> PracticeSession:
    with store.lock:
        session = get_session(store, session_id, user_id)
        _require_in_progress(session)
        session.status = PracticeStatus.ABANDONED
        session.end_time = now
        store.save()
    logger.info(f"연습 포기: session={session_id}")
    return session


def get_result(store: Store, session_id: str, user_id: str) -> Dict[str, Any]:
    """응답한 문제별 정답 공개."""
    session = get_session(store, session_id, user_id)
    with store.lock:
        answers = sorted(session.answers.values(), key=lambda a: a.answered_at)

    results = []
    for a in answers:
        question = store.questions.get(a.question_id)
        results.append({
            "question": question.model_dump(mode="json") if question else None,
            "user_answer": a.user_answer,
            "correct_answer": question.answer if question else None,
            "is_correct": a.is_correct,
        })
    correct = sum(1 for a in answers if a.is_correct)
    return {
        "session": session.summary(),
        "results": results,
        "total": len(answers),
        "correct": correct,
        "accuracy": round(correct / len(answers) * 100, 1) if answers else 0.0,
        "total_questions": session.total_questions,
    }


def list_history(store: Store, user_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
    sessions = sorted(
        (s for s in store.values("practice_sessions") if s.user_id == user_id),
        key=lambda s: s.start_time,
        reverse=True,
    )
    start = (page - 1) * limit
    return {
        "sessions": [s.summary() for s in sessions[start:start + limit]],
        "total": len(sessions),
        "page": page,
        "limit": limit,
    }
