from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from question_bank.models.question_model import _new_id, _now


class Topic(BaseModel):
    """
    과목(parent_id 없음) 또는 챕터(parent_id = 과목 ID).
    2단계 계층만 허용한다.
    """
    id: str = Field(default_factory=_new_id, description="토픽 ID")
    name: str = Field(..., min_length=1, description="과목/챕터 이름")
    parent_id: Optional[str] = Field(None, description="상위 과목 ID (과목이면 None)")
    sort_order: int = Field(0, description="정렬 순서")
    created_at: datetime = Field(default_factory=_now)

    @property
    def is_subject(self) -> bool:
        return self.parent_id is None
