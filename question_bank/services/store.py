"""
services/store.py — 인메모리 저장소 + JSON 스냅샷 영속화

엔티티별로 {id: model} dict 를 들고 있고, 변경 후 save() 를 호출하면
path 가 지정된 경우에만 파일로 기록한다 (path=None 이면 순수 인메모리).
동시 요청은 같은 id 에 대해 마지막 쓰기가 이긴다.
"""

import logging
import os
import threading
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from question_bank.models.exam_model import Exam
from question_bank.models.question_model import Question
from question_bank.models.session_state import PracticeSession, Submission
from question_bank.models.topic_model import Topic
from question_bank.models.user_model import User, WrongQuestion

logger = logging.getLogger(__name__)


class Snapshot(BaseModel):
    """store.json 파일 포맷."""
    users: List[User] = Field(default_factory=list)
    topics: List[Topic] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)
    exams: List[Exam] = Field(default_factory=list)
    submissions: List[Submission] = Field(default_factory=list)
    practice_sessions: List[PracticeSession] = Field(default_factory=list)
    wrong_questions: List[WrongQuestion] = Field(default_factory=list)


_COLLECTIONS = tuple(Snapshot.model_fields)


class Store:
    def __init__(self, path: Optional[str] = None):
        self.path = path
        self.lock = threading.RLock()
        self.users: Dict[str, User] = {}
        self.topics: Dict[str, Topic] = {}
        self.questions: Dict[str, Question] = {}
        self.exams: Dict[str, Exam] = {}
        self.submissions: Dict[str, Submission] = {}
        self.practice_sessions: Dict[str, PracticeSession] = {}
        self.wrong_questions: Dict[str, WrongQuestion] = {}

    # ── 조회 헬퍼 ────────────────────────────────────────────────────────────

    def values(self, name: str) -> list:
        """컬렉션 복사본. 요청 스레드끼리 동시에 쓰고 읽으므로 순회는 이걸로."""
        with self.lock:
            return list(getattr(self, name).values())

    def children_of(self, topic_id: str) -> List[Topic]:
        return [t for t in self.values("topics") if t.parent_id == topic_id]

    def find_user(self, username_or_email: str) -> Optional[User]:
        for u in self.values("users"):
            if u.username == username_or_email or u.email == username_or_email:
                return u
        return None

    # ── 영속화 ───────────────────────────────────────────────────────────────

    def snapshot(self) -> Snapshot:
        with self.lock:
            return Snapshot(**{name: list(getattr(self, name).values()) for name in _COLLECTIONS})

    def restore(self, snap: Snapshot) -> None:
        with self.lock:
            for name in _COLLECTIONS:
                setattr(self, name, {item.id: item for item in getattr(snap, name)})

    def save(self) -> None:
        """스냅샷을 파일에 기록. 실패해도 요청은 계속 처리한다."""
        if not self.path:
            return
        with self.lock:
            payload = self.snapshot().model_dump_json(indent=2)
            tmp_path = f"{self.path}.tmp"
            try:
                os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
                with open(tmp_path, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, self.path)
            except OSError as e:
                logger.warning(f"저장소 파일 기록 실패 ({self.path}): {e}")

    def load(self) -> bool:
        """파일이 있으면 읽어서 복원. 복원했으면 True."""
        if not self.path or not os.path.exists(self.path):
            return False
        try:
            with open(self.path, encoding="utf-8") as f:
                snap = Snapshot.model_validate_json(f.read() or "{}")
        except (OSError, PydanticValidationError) as e:
            logger.warning(f"저장소 파일 읽기 실패, 빈 상태로 시작합니다 ({self.path}): {e}")
            return False
        self.restore(snap)
        logger.info(
            f"저장소 로드 완료: 토픽 {len(self.topics)}개, 문제 {len(self.questions)}개, "
            f"시험 {len(self.exams)}개, 사용자 {len(self.users)}명"
        )
        return True
