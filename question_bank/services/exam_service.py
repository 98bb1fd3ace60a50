"""
services/exam_service.py

시험 템플릿 관리 + 응시(Submission) 상태 머신.

    start ──▶ in_progress ──(completed=True 제출 / 제한 시간 경과 후 첫 제출)──▶ completed

만료는 타이머 없이 다음 답안 제출 시점에 검사한다.
현재 시각(now)과 난수(rng)는 호출자가 주입한다.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

import config
from question_bank.models.exam_model import Exam, ExamRule, ExamStatus
from question_bank.models.question_model import TYPE_ORDER, Answer
from question_bank.models.session_state import (
    ExamAnswer, ExamQuestion, Submission, SubmissionStatus,
)
from question_bank.services import grading, wrongbook_service
from question_bank.services.errors import (
    Expired, InsufficientQuestions, InvalidState, NotCompleted, NotFound, ValidationError,
)
from question_bank.services.question_selector import count_available, select_questions
from question_bank.services.rule_resolver import resolve_rules
from question_bank.services.store import Store

logger = logging.getLogger(__name__)


# ── 시험 템플릿 ──────────────────────────────────────────────────────────────

def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value if v]
    return [str(value)] if value else []


def parse_rules(raw_rules: Optional[List[Dict[str, Any]]]) -> List[ExamRule]:
    """
    프론트엔드가 보내는 여러 규칙 형식을 ExamRule 로 통일.
    subject_ids / subject_id, chapter_ids / topic_ids / topic_id 를 모두 받는다.
    """
    rules = []
    for r in raw_rules or []:
        if isinstance(r, ExamRule):
            rules.append(r)
            continue
        chapters = r.get("chapter_ids") or r.get("topic_ids") or r.get("topic_id")
        subjects = r.get("subject_ids") or r.get("subject_id")
        try:
            rules.append(ExamRule(
                chapter_ids=list(dict.fromkeys(_as_list(chapters))),
                subject_ids=list(dict.fromkeys(_as_list(subjects))),
                question_types=r.get("question_types") or [],
            ))
        except PydanticValidationError as e:
            raise ValidationError(f"시험 규칙 형식이 올바르지 않습니다: {e.errors()[0]['msg']}")
    return rules


def _parse_duration(value) -> int:
    try:
        duration = int(value or 0)
    except (TypeError, ValueError):
        raise ValidationError("시험 시간(duration)은 정수(분)여야 합니다.")
    if duration < 0:
        raise ValidationError("시험 시간(duration)은 0보다 커야 합니다.")
    return duration or config.DEFAULT_EXAM_DURATION


def get_exam(store: Store, exam_id: str) -> Exam:
    exam = store.exams.get(exam_id)
    if exam is None:
        raise NotFound("시험을 찾을 수 없습니다.")
    return exam


def list_exams(store: Store, status: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
    exams = store.values("exams")
    if status:
        exams = [e for e in exams if e.status.value == status]
    start = (page - 1) * limit
    return {
        "exams": [e.model_dump(mode="json") for e in exams[start:start + limit]],
        "total": len(exams),
        "page": page,
        "limit": limit,
    }


def create_exam(store: Store, data: Dict[str, Any], created_by: str, now: datetime) -> Exam:
    """규칙 없이도 저장 가능 (문항 수 검사는 응시 시작 때)."""
    name = str(data.get("name") or "").strip()
    if not name:
        raise ValidationError("시험 이름은 필수입니다.")
    try:
        exam = Exam(
            name=name,
            description=data.get("description") or "",
            duration=_parse_duration(data.get("duration")),
            rules=parse_rules(data.get("rules")),
            is_active=data.get("is_active") is not False,
            status=data.get("status") or ExamStatus.DRAFT,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
    except PydanticValidationError as e:
        raise ValidationError(f"시험 정보가 올바르지 않습니다: {e.errors()[0]['msg']}")
    with store.lock:
        store.exams[exam.id] = exam
        store.save()
    logger.info(f"시험 생성: {exam.id} '{exam.name}' (규칙 {len(exam.rules)}개)")
    return exam


def update_exam(store: Store, exam_id: str, data: Dict[str, Any], now: datetime) -> Exam:
    with store.lock:
        exam = get_exam(store, exam_id)
        changes: Dict[str, Any] = {"updated_at": now}
        if data.get("name") is not None:
            changes["name"] = str(data["name"]).strip()
        if data.get("description") is not None:
            changes["description"] = data["description"]
        if data.get("duration") is not None:
            changes["duration"] = _parse_duration(data["duration"])
        if data.get("rules") is not None:
            changes["rules"] = parse_rules(data["rules"])
        if data.get("is_active") is not None:
            changes["is_active"] = data["is_active"]
        if data.get("status") is not None:
            changes["status"] = data["status"]
        try:
            updated = Exam.model_validate({**exam.model_dump(), **changes})
        except PydanticValidationError as e:
            raise ValidationError(f"시험 정보가 올바르지 않습니다: {e.errors()[0]['msg']}")
        store.exams[exam_id] = updated
        store.save()
    return updated


def delete_exam(store: Store, exam_id: str) -> bool:
    """없는 시험이면 False (이미 삭제된 것으로 간주). 응시 기록도 함께 삭제."""
    with store.lock:
        if store.exams.pop(exam_id, None) is None:
            return False
        for sid in [s.id for s in store.submissions.values() if s.exam_id == exam_id]:
            del store.submissions[sid]
        store.save()
    logger.info(f"시험 삭제: {exam_id}")
    return True


def set_published(store: Store, exam_id: str, published: bool, now: datetime) -> Exam:
    with store.lock:
        exam = get_exam(store, exam_id)
        exam.status = ExamStatus.PUBLISHED if published else ExamStatus.DRAFT
        if published:
            exam.is_active = True
        exam.updated_at = now
        store.save()
    return exam


def preview_distribution(store: Store, exam_id: str) -> Dict[str, Any]:
    """유형별 필요 문항 수 vs 출제 가능 문항 수."""
    exam = get_exam(store, exam_id)
    with store.lock:
        resolved = resolve_rules(exam.rules, store.topics)
        available = count_available(store.questions.values(), resolved)

    by_type = []
    for qtype in TYPE_ORDER:
        spec = resolved.specs.get(qtype)
        by_type.append({
            "type": qtype.value,
            "required": spec.count if spec else 0,
            "score": spec.score if spec else 0,
            "available": available[qtype],
        })
    warnings = [
        f"'{r['type']}' 유형 출제 가능 {r['available']}문항이 필요 {r['required']}문항보다 적습니다."
        for r in by_type if r["available"] < r["required"]
    ]
    return {
        "by_type": by_type,
        "total_required": sum(r["required"] for r in by_type),
        "total_available": sum(r["available"] for r in by_type),
        "chapter_ids": sorted(resolved.chapter_ids),
        "warnings": warnings,
    }


# ── 응시 상태 머신 ───────────────────────────────────────────────────────────

def start_exam(store: Store, exam_id: str, user_id: str, now: datetime, rng: random.Random) -> Submission:
    """
    규칙에 따라 문제를 뽑아 새 응시를 만든다.
    문항이 부족하면 InsufficientQuestions — 이 경우 응시는 생성되지 않는다.
    """
    with store.lock:
        exam = get_exam(store, exam_id)
        resolved = resolve_rules(exam.rules, store.topics)
        try:
            selected = select_questions(store.questions.values(), resolved, rng)
        except InsufficientQuestions as e:
            logger.warning(f"응시 시작 거부: exam={exam_id} user={user_id} ({e})")
            raise

        submission = Submission(
            exam_id=exam.id,
            user_id=user_id,
            start_time=now,
            end_time=now + timedelta(minutes=exam.duration),
        )
        submission.questions = [
            ExamQuestion(
                exam_id=exam.id,
                submission_id=submission.id,
                question_id=q.id,
                order=order,
                score=score,
            )
            for order, q, score in selected
        ]
        store.submissions[submission.id] = submission
        store.save()
    logger.info(
        f"응시 시작: submission={submission.id} exam={exam_id} user={user_id} "
        f"문항 {len(submission.questions)}개, 종료 {submission.end_time.isoformat()}"
    )
    return submission


def get_submission(store: Store, submission_id: str, user_id: str) -> Submission:
    """본인 응시만 조회 가능. 남의 것은 없는 것으로 취급."""
    submission = store.submissions.get(submission_id)
    if submission is None or submission.user_id != user_id:
        raise NotFound("응시 기록을 찾을 수 없습니다.")
    return submission


def _require_in_progress(submission: Submission) -> None:
    if submission.status != SubmissionStatus.IN_PROGRESS:
        raise InvalidState("진행 중인 응시가 아닙니다.")


def get_question(
    store: Store,
    submission_id: str,
    user_id: str,
    order: int,
    rng: random.Random,
) -> Dict[str, Any]:
    """
    순번으로 문항 조회. 상태를 바꾸지 않으므로 몇 번이든 다시 불러도 된다.
    보기는 표시용으로 섞고, 정답/해설은 내려주지 않는다.
    """
    submission = get_submission(store, submission_id, user_id)
    _require_in_progress(submission)

    eq = next((e for e in submission.questions if e.order == order), None)
    if eq is None:
        raise NotFound("해당 순번의 문항이 없습니다.")
    question = store.questions.get(eq.question_id)
    if question is None:
        raise NotFound("문항 데이터를 찾을 수 없습니다.")

    display = question.public_dict()
    if display.get("options"):
        display["options"] = rng.sample(display["options"], len(display["options"]))
    display["score"] = eq.score

    answer = submission.answers.get(question.id)
    return {
        "question": display,
        "order": eq.order,
        "total_questions": len(submission.questions),
        "user_answer": answer.answer if answer else None,
        "end_time": submission.end_time.isoformat(),
    }


def _finalize(store: Store, submission: Submission, now: datetime) -> None:
    """채점 후 completed 로 전이. 틀린 문항은 오답 노트에 기록."""
    results = grading.grade_questions(submission.questions, store.questions, submission.answers)
    submission.score = grading.calculate_score(results)
    submission.status = SubmissionStatus.COMPLETED
    submission.completed_at = now
    wrongbook_service.record_wrong(
        store, submission.user_id, grading.get_incorrect_question_ids(results), now
    )
    logger.info(
        f"응시 종료: submission={submission.id} 점수 {submission.score}/"
        f"{grading.max_score(submission.questions)}"
    )


def submit_answer(
    store: Store,
    submission_id: str,
    user_id: str,
    question_id: Optional[str],
    answer: Optional[Answer],
    completed: bool,
    now: datetime,
) -> Dict[str, Any]:
    """
    답안 저장 (같은 문항은 덮어쓰기). completed=True 면 즉시 채점·종료.
    question_id 없이 completed=True 만 보내면 답안 저장 없이 종료한다.

    Raises:
        Expired: now > end_time. 이미 저장된 답안으로 채점해 종료하고,
                 이번 답안은 저장하지 않는다.
    """
    with store.lock:
        submission = get_submission(store, submission_id, user_id)
        _require_in_progress(submission)

        if now > submission.end_time:
            _finalize(store, submission, now)
            store.save()
            logger.info(f"제한 시간 경과로 답안 거부: submission={submission_id}")
            raise Expired("시험 시간이 종료되었습니다.")

        if question_id is not None:
            if not any(eq.question_id == question_id for eq in submission.questions):
                raise NotFound("이 응시에 출제되지 않은 문항입니다.")
            if answer is None:
                raise ValidationError("답안(answer)이 비어 있습니다.")
            existing = submission.answers.get(question_id)
            if existing is not None:
                existing.answer = answer
                existing.updated_at = now
            else:
                submission.answers[question_id] = ExamAnswer(
                    submission_id=submission_id,
                    question_id=question_id,
                    answer=answer,
                    created_at=now,
                    updated_at=now,
                )
        elif not completed:
            raise ValidationError("question_id 가 필요합니다.")

        if completed:
            _finalize(store, submission, now)
        store.save()

    return {"submission": submission.summary(), "completed": completed}


def get_result(store: Store, submission_id: str, user_id: str) -> Dict[str, Any]:
    submission = get_submission(store, submission_id, user_id)
    if submission.status != SubmissionStatus.COMPLETED:
        raise NotCompleted("아직 제출되지 않은 응시입니다.")

    results = grading.grade_questions(submission.questions, store.questions, submission.answers)
    correct = sum(1 for r in results if r["is_correct"])
    unanswered = sum(1 for r in results if not r["answered"])

    report = []
    for r in results:
        question = r["question"]
        report.append({**r, "question": question.model_dump(mode="json") if question else None})

    return {
        "submission": submission.summary(),
        "results": report,
        "type_scores": grading.calculate_type_scores(results),
        "total_score": submission.score,
        "max_score": grading.max_score(submission.questions),
        "correct_count": correct,
        "wrong_count": len(results) - correct - unanswered,
        "unanswered_count": unanswered,
    }


def list_history(store: Store, user_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
    subs = sorted(
        (s for s in store.values("submissions") if s.user_id == user_id),
        key=lambda s: s.start_time,
        reverse=True,
    )
    start = (page - 1) * limit
    data = []
    for s in subs[start:start + limit]:
        d = s.summary()
        exam = store.exams.get(s.exam_id)
        d["exam_name"] = exam.name if exam else None
        d["max_score"] = grading.max_score(s.questions)
        data.append(d)
    return {"submissions": data, "total": len(subs), "page": page, "limit": limit}
