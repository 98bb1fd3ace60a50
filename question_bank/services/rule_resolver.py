"""
services/rule_resolver.py

시험 규칙 → (출제 대상 챕터 합집합, 유형별 출제 스펙) 변환.
순수 함수로 구성 — 토픽 목록만 입력으로 받는다.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from question_bank.models.exam_model import ExamRule
from question_bank.models.question_model import QuestionType
from question_bank.models.topic_model import Topic

# 소문자/trim 후 비교하는 고정 동의어 표
TYPE_SYNONYMS: Dict[str, QuestionType] = {
    "single": QuestionType.SINGLE,
    "single_choice": QuestionType.SINGLE,
    "scq": QuestionType.SINGLE,
    "单选": QuestionType.SINGLE,
    "单选题": QuestionType.SINGLE,
    "multiple": QuestionType.MULTIPLE,
    "multiple_choice": QuestionType.MULTIPLE,
    "mcq": QuestionType.MULTIPLE,
    "多选": QuestionType.MULTIPLE,
    "多选题": QuestionType.MULTIPLE,
    "fill": QuestionType.FILL,
    "gap": QuestionType.FILL,
    "blank": QuestionType.FILL,
    "填空": QuestionType.FILL,
    "填空题": QuestionType.FILL,
    "subjective": QuestionType.SUBJECTIVE,
    "essay": QuestionType.SUBJECTIVE,
    "主观": QuestionType.SUBJECTIVE,
    "主观题": QuestionType.SUBJECTIVE,
}


def normalize_type(label) -> Optional[QuestionType]:
    """유형 라벨을 표준 유형으로. 모르는 라벨이면 None."""
    if isinstance(label, QuestionType):
        return label
    return TYPE_SYNONYMS.get(str(label or "").strip().lower())


@dataclass
class MergedSpec:
    count: int
    score: int


@dataclass
class ResolvedRules:
    chapter_ids: Set[str] = field(default_factory=set)
    specs: Dict[QuestionType, MergedSpec] = field(default_factory=dict)


def expand_chapters(ids: Iterable[str], topics: Dict[str, Topic]) -> Set[str]:
    """과목 ID 는 하위 챕터 전체로 펼치고, 챕터 ID 는 그대로 둔다."""
    result: Set[str] = set()
    for tid in ids:
        topic = topics.get(tid)
        if topic is not None and topic.is_subject:
            result.update(t.id for t in topics.values() if t.parent_id == tid)
        else:
            result.add(tid)
    return result


def resolve_rules(rules: List[ExamRule], topics: Dict[str, Topic]) -> ResolvedRules:
    """
    여러 규칙을 하나의 출제 계획으로 합친다.

    - 챕터: 모든 규칙의 합집합
    - 유형별 count: 같은 유형이면 최대값 (합산하지 않음)
    - 유형별 score: 마지막으로 나온 규칙의 값
    규칙이 비어 있으면 빈 계획을 반환한다.
    """
    resolved = ResolvedRules()
    for rule in rules or []:
        resolved.chapter_ids |= expand_chapters(rule.chapter_ids, topics)
        resolved.chapter_ids |= expand_chapters(rule.subject_ids, topics)

        for spec in rule.question_types:
            qtype = normalize_type(spec.type)
            if qtype is None:
                continue
            merged = resolved.specs.get(qtype)
            if merged is None:
                resolved.specs[qtype] = MergedSpec(count=spec.count, score=spec.score)
            else:
                merged.count = max(merged.count, spec.count)
                merged.score = spec.score
    return resolved
