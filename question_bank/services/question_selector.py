"""
services/question_selector.py

출제 계획(ResolvedRules)에 따라 문제은행에서 무작위로 문제를 뽑는다.
"""

import random
from typing import Dict, Iterable, List, Tuple

from question_bank.models.question_model import TYPE_ORDER, Question, QuestionType
from question_bank.services.errors import InsufficientQuestions
from question_bank.services.rule_resolver import ResolvedRules


def eligible_pool(
    questions: Iterable[Question],
    chapter_ids: Iterable[str],
    qtype: QuestionType,
) -> List[Question]:
    chapters = set(chapter_ids)
    return [q for q in questions if q.topic_id in chapters and q.type == qtype]


def count_available(questions: Iterable[Question], resolved: ResolvedRules) -> Dict[QuestionType, int]:
    """유형별 출제 가능 문항 수 (4개 유형 전부)."""
    questions = list(questions)
    return {t: len(eligible_pool(questions, resolved.chapter_ids, t)) for t in TYPE_ORDER}


def select_questions(
    questions: Iterable[Question],
    resolved: ResolvedRules,
    rng: random.Random,
) -> List[Tuple[int, Question, int]]:
    """
    유형별로 count 개씩 비복원 무작위 추출.

    Returns:
        [(order, question, score), ...] — 유형 순서(single → multiple → fill → subjective)로
        묶은 뒤 1..N 으로 번호를 다시 매긴 리스트.

    Raises:
        InsufficientQuestions: 어떤 유형이든 풀이 count 보다 작으면.
        추출 전에 전 유형을 먼저 검사하므로 실패 시 아무것도 뽑지 않는다.
    """
    questions = list(questions)
    plan = sorted(resolved.specs.items(), key=lambda item: TYPE_ORDER[item[0]])

    pools = {}
    for qtype, spec in plan:
        pool = eligible_pool(questions, resolved.chapter_ids, qtype)
        if len(pool) < spec.count:
            raise InsufficientQuestions(qtype.value, spec.count, len(pool))
        pools[qtype] = pool

    picked: List[Tuple[Question, int]] = []
    for qtype, spec in plan:
        for q in rng.sample(pools[qtype], spec.count):
            picked.append((q, spec.score))

    picked.sort(key=lambda item: TYPE_ORDER[item[0].type])
    return [(i, q, score) for i, (q, score) in enumerate(picked, start=1)]
