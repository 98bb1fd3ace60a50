"""
models/question_model.py

문제은행 문제 모델.
Pydantic v2 적용 — 저장소 스냅샷 직렬화와 API 응답에 그대로 사용.
"""

import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

Answer = Union[str, List[str]]

_ANSWER_SEPARATORS = re.compile(r"[,，;；、\s]+")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def _split_answer(text: str, option_ids: set) -> List[str]:
    """
    "A,C" / "A1；B2" 처럼 구분자로 나눈다.
    구분자 없이 붙여 쓴 "AC" 는 그 자체가 보기 ID 가 아닐 때만 글자 단위로 나눈다.
    """
    parts = [p for p in _ANSWER_SEPARATORS.split(text.strip()) if p]
    if len(parts) == 1:
        token = parts[0].upper()
        if token not in option_ids and all(ch in option_ids for ch in token):
            return list(token)
    return parts


class QuestionType(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    FILL = "fill"
    SUBJECTIVE = "subjective"


# 시험지 배치 순서: 단일선택 → 다중선택 → 빈칸 → 주관식
TYPE_ORDER = {
    QuestionType.SINGLE: 0,
    QuestionType.MULTIPLE: 1,
    QuestionType.FILL: 2,
    QuestionType.SUBJECTIVE: 3,
}

CHOICE_TYPES = (QuestionType.SINGLE, QuestionType.MULTIPLE)


class QuestionOption(BaseModel):
    id: str = Field(..., min_length=1, description="보기 ID (관례상 A~D)")
    content: str = Field(..., description="보기 내용")


class Question(BaseModel):
    """
    챕터 하나에 속한 문제.

    answer 는 단일선택/빈칸/주관식이면 문자열,
    다중선택이면 보기 ID 리스트(중복 제거, 정렬)로 저장한다.
    """
    id: str = Field(default_factory=_new_id, description="문제 ID")
    topic_id: str = Field(..., min_length=1, description="소속 챕터 ID")
    type: QuestionType = Field(..., description="문제 유형")
    content: str = Field(..., min_length=1, description="발문")
    options: Optional[List[QuestionOption]] = Field(None, description="보기 리스트 (선택형만)")
    answer: Answer = Field(..., description="정답 (문자열 또는 보기 ID 리스트)")
    analysis: str = Field("", description="해설")
    difficulty: int = Field(1, ge=1, le=5, description="난이도 1~5")
    score: int = Field(..., ge=0, description="기본 배점")
    tags: List[str] = Field(default_factory=list, description="태그")
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @field_validator("answer")
    @classmethod
    def validate_answer_not_empty(cls, v: Answer) -> Answer:
        if isinstance(v, list):
            cleaned = [str(a).strip() for a in v if str(a).strip()]
            if not cleaned:
                raise ValueError("정답이 비어 있습니다.")
            return cleaned
        if not str(v).strip():
            raise ValueError("정답이 비어 있습니다.")
        return v

    @model_validator(mode="after")
    def validate_choice_answer(self) -> "Question":
        """
        선택형 문제는 보기가 2개 이상이어야 하고,
        정답은 반드시 보기 ID 중에서 골라야 한다.
        """
        if self.type not in CHOICE_TYPES:
            return self

        if not self.options or len(self.options) < 2:
            raise ValueError("선택형 문제는 보기(options)가 최소 2개 필요합니다.")
        option_ids = {o.id for o in self.options}

        if self.type == QuestionType.SINGLE:
            if isinstance(self.answer, list):
                if len(self.answer) != 1:
                    raise ValueError("단일선택 문제의 정답은 하나여야 합니다.")
                self.answer = self.answer[0]
            self.answer = self.answer.strip().upper()
            if self.answer not in option_ids:
                raise ValueError(f"정답('{self.answer}')이 보기 ID({sorted(option_ids)})에 없습니다.")
        else:
            raw = self.answer if isinstance(self.answer, list) else _split_answer(self.answer, option_ids)
            ids = sorted({a.strip().upper() for a in raw if a.strip()})
            missing = [a for a in ids if a not in option_ids]
            if not ids or missing:
                raise ValueError(f"정답({ids})이 보기 ID({sorted(option_ids)})와 맞지 않습니다.")
            self.answer = ids
        return self

    def public_dict(self) -> dict:
        """정답/해설을 뺀 응시자용 dict."""
        return self.model_dump(mode="json", exclude={"answer", "analysis"})
