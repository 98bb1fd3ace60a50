from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from question_bank.models.question_model import _new_id, _now


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class User(BaseModel):
    id: str = Field(default_factory=_new_id)
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    role: Role = Role.STUDENT
    password_hash: str = Field(..., description="bcrypt 해시")
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def public_dict(self) -> dict:
        return self.model_dump(mode="json", exclude={"password_hash"})


class CurrentUser(BaseModel):
    """토큰에서 꺼낸 인증 주체. 서비스 계층은 이 값을 그대로 신뢰한다."""
    id: str
    username: str = ""
    email: str = ""
    role: Role = Role.STUDENT


class WrongQuestion(BaseModel):
    """오답 노트 항목 (사용자 × 문제)."""
    id: str = Field(default_factory=_new_id)
    user_id: str
    question_id: str
    wrong_count: int = 1
    last_wrong_at: datetime = Field(default_factory=_now)
    is_mastered: bool = False
    mastered_at: Optional[datetime] = None
