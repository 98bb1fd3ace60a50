"""
models/session_state.py

응시 진행 상태를 담는 답안지 모델.
- Submission      : 시험 1회 응시 (제한 시간 있음)
- PracticeSession : 연습 세션 (제한 시간 없음, 한 문제씩 제공)
Pydantic BaseModel 기반 — 직렬화/역직렬화 및 타입 안전성 확보.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from question_bank.models.question_model import Answer, _new_id, _now


class SubmissionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class PracticeStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class ExamQuestion(BaseModel):
    """응시별로 고정된 출제 문항 (순번 + 이 시험에서의 배점)."""
    id: str = Field(default_factory=_new_id)
    exam_id: str
    submission_id: str
    question_id: str
    order: int = Field(..., ge=1, description="1부터 시작하는 문항 순번")
    score: int = Field(..., ge=0, description="이 시험에서의 배점")


class ExamAnswer(BaseModel):
    id: str = Field(default_factory=_new_id)
    submission_id: str
    question_id: str
    answer: Answer
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Submission(BaseModel):
    """
    사용자 한 명의 시험 1회 응시.

    Attributes:
        end_time:  start_time + duration. 이후 첫 답안 제출 시 자동 종료.
        questions: 순번 순으로 정렬된 ExamQuestion 리스트.
        answers:   답안지. key: question_id (같은 문항은 덮어쓰기)
        score:     채점 후 획득 점수 (진행 중에는 0)
    """
    id: str = Field(default_factory=_new_id)
    exam_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    status: SubmissionStatus = SubmissionStatus.IN_PROGRESS
    score: int = 0
    questions: List[ExamQuestion] = Field(default_factory=list)
    answers: Dict[str, ExamAnswer] = Field(default_factory=dict)
    completed_at: Optional[datetime] = None

    def summary(self) -> dict:
        """문항/답안 목록을 뺀 응답용 dict."""
        d = self.model_dump(mode="json", exclude={"questions", "answers"})
        d["total_questions"] = len(self.questions)
        d["answered_count"] = len(self.answers)
        return d


class PracticeAnswer(BaseModel):
    id: str = Field(default_factory=_new_id)
    session_id: str
    question_id: str
    user_answer: Answer
    is_correct: bool
    answered_at: datetime = Field(default_factory=_now)


class PracticeSession(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: str
    topic_ids: List[str]
    total_questions: int = Field(..., gt=0)
    correct_count: int = 0
    start_time: datetime = Field(default_factory=_now)
    end_time: Optional[datetime] = None
    status: PracticeStatus = PracticeStatus.IN_PROGRESS
    served_question_ids: List[str] = Field(default_factory=list)
    answers: Dict[str, PracticeAnswer] = Field(default_factory=dict)

    def summary(self) -> dict:
        return self.model_dump(mode="json", exclude={"served_question_ids", "answers"})
