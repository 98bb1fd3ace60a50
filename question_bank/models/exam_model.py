"""
models/exam_model.py

시험 템플릿 모델. 실제 출제 문제는 응시(Submission)마다
규칙(ExamRule)에 따라 새로 뽑힌다.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from question_bank.models.question_model import _new_id, _now


class ExamStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class TypeSpec(BaseModel):
    """
    한 규칙 안의 유형별 출제 수.
    type 은 원문 라벨 그대로 저장하고 ("单选", "single_choice" 등)
    출제 시점에 정규화한다.
    """
    type: str = Field(..., description="문제 유형 라벨")
    count: int = Field(..., ge=0, description="출제 문항 수")
    score: int = Field(..., ge=0, description="이 시험에서 문항당 배점")


class ExamRule(BaseModel):
    chapter_ids: List[str] = Field(default_factory=list, description="대상 챕터 ID")
    subject_ids: List[str] = Field(default_factory=list, description="대상 과목 ID (하위 챕터 전체로 확장)")
    question_types: List[TypeSpec] = Field(default_factory=list)


class Exam(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = Field(..., min_length=1)
    description: str = ""
    duration: int = Field(..., gt=0, description="제한 시간 (분)")
    status: ExamStatus = ExamStatus.DRAFT
    is_active: bool = True
    rules: List[ExamRule] = Field(default_factory=list)
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
