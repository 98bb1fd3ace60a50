"""
api/schemas.py — Pydantic 요청 바디

필수 항목 검사는 서비스 계층에서 하므로 (400 + 메시지)
생성/수정용 바디는 대부분 Optional 로 둔다.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from question_bank.models.question_model import Answer, QuestionOption


# ── 인증 / 사용자 ────────────────────────────────────────────────────────────

class RegisterBody(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: str = "student"

class LoginBody(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None

class CreateUserBody(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: str = "student"

class ResetPasswordBody(BaseModel):
    new_password: Optional[str] = None


# ── 토픽 / 문제 ──────────────────────────────────────────────────────────────

class TopicBody(BaseModel):
    name: Optional[str] = None
    parent_id: Optional[str] = None

class QuestionBody(BaseModel):
    topic_id: Optional[str] = None
    chapter_id: Optional[str] = None
    type: Optional[str] = None
    content: Optional[str] = None
    options: Optional[List[QuestionOption]] = None
    answer: Optional[Answer] = None
    analysis: Optional[str] = None
    difficulty: Optional[int] = None
    score: Optional[int] = None
    tags: Optional[List[str]] = None


# ── 시험 ─────────────────────────────────────────────────────────────────────

class ExamBody(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    rules: Optional[List[Dict[str, Any]]] = None
    is_active: Optional[bool] = None
    status: Optional[str] = None

class AnswerBody(BaseModel):
    question_id: Optional[str] = None
    answer: Optional[Answer] = None
    completed: bool = False


# ── 연습 ─────────────────────────────────────────────────────────────────────

class PracticeStartBody(BaseModel):
    topic_ids: Optional[List[str]] = None
    question_count: Optional[int] = None

class PracticeAnswerItem(BaseModel):
    question_id: str
    user_answer: Answer

class PracticeSubmitBody(BaseModel):
    practice_id: str
    answers: List[PracticeAnswerItem] = []
    completed: bool = False
