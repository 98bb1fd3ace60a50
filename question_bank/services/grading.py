"""
services/grading.py

답안 채점 및 결과 분석 비즈니스 로직.
순수 Python 함수로 구성 — 저장소 접근, 전역 상태 변경 없음.
"""

from collections import defaultdict
from typing import Dict, List, Mapping, Optional

from question_bank.models.question_model import TYPE_ORDER, Answer, Question
from question_bank.models.session_state import ExamAnswer, ExamQuestion


def _norm(value) -> str:
    return str(value).strip().lower()


def is_correct(question: Question, submitted: Optional[Answer]) -> bool:
    """
    정답 판정.

    - 정답이 보기 ID 리스트(다중선택): 제출값도 리스트여야 하고,
      집합으로 비교했을 때 같으면 정답 (순서/중복 무시).
    - 정답이 문자열(단일선택/빈칸/주관식): 앞뒤 공백 제거 + 소문자화 후 일치하면 정답.
      주관식도 같은 규칙으로 채점한다 (자동 채점의 한계, 수동 채점 없음).
    """
    if submitted is None:
        return False

    canonical = question.answer
    if isinstance(canonical, list):
        if not isinstance(submitted, list):
            return False
        return {_norm(a) for a in canonical} == {_norm(a) for a in submitted}

    if isinstance(submitted, list):
        return False
    return _norm(canonical) == _norm(submitted)


def grade_questions(
    exam_questions: List[ExamQuestion],
    questions: Mapping[str, Question],
    answers: Mapping[str, ExamAnswer],
) -> List[Dict[str, object]]:
    """
    출제 문항별 채점 결과.

    Returns:
        [{"order", "question_id", "question", "user_answer", "answered",
          "is_correct", "score", "max_score"}, ...] — 순번 순.
        score 는 이 시험의 배점(ExamQuestion.score)이며 문제 기본 배점은 쓰지 않는다.
        문제은행에서 삭제된 문제는 question=None, 오답 처리.
    """
    results = []
    for eq in sorted(exam_questions, key=lambda e: e.order):
        question = questions.get(eq.question_id)
        answer = answers.get(eq.question_id)
        user_answer = answer.answer if answer else None
        correct = question is not None and is_correct(question, user_answer)
        results.append({
            "order": eq.order,
            "question_id": eq.question_id,
            "question": question,
            "user_answer": user_answer,
            "answered": answer is not None,
            "is_correct": correct,
            "score": eq.score if correct else 0,
            "max_score": eq.score,
        })
    return results


def calculate_score(results: List[Dict[str, object]]) -> int:
    """정답 문항 배점의 합. 미응답은 0점."""
    return sum(r["score"] for r in results)


def max_score(exam_questions: List[ExamQuestion]) -> int:
    return sum(eq.score for eq in exam_questions)


def get_incorrect_question_ids(results: List[Dict[str, object]]) -> List[str]:
    """응답했지만 틀린 문항 ID (오답 노트용). 미응답은 제외."""
    return [r["question_id"] for r in results if r["answered"] and not r["is_correct"]]


def calculate_type_scores(results: List[Dict[str, object]]) -> List[Dict[str, object]]:
    """
    유형별 집계.

    Returns:
        [{"type": str, "total": int, "correct": int, "incorrect": int,
          "unanswered": int, "score": int, "max_score": int}, ...]
        유형 순서(single → multiple → fill → subjective) 정렬.
    """
    buckets: Dict[str, Dict[str, int]] = defaultdict(
        lambda: {"total": 0, "correct": 0, "incorrect": 0, "unanswered": 0, "score": 0, "max_score": 0}
    )
    order: Dict[str, int] = {}

    for r in results:
        question = r["question"]
        qtype = question.type.value if question is not None else "unknown"
        order[qtype] = TYPE_ORDER[question.type] if question is not None else len(TYPE_ORDER)
        b = buckets[qtype]
        b["total"] += 1
        b["max_score"] += r["max_score"]
        if not r["answered"]:
            b["unanswered"] += 1
        elif r["is_correct"]:
            b["correct"] += 1
            b["score"] += r["score"]
        else:
            b["incorrect"] += 1

    return [{"type": t, **buckets[t]} for t in sorted(buckets, key=lambda t: order[t])]
