"""
services/auth_service.py

회원가입/로그인, 비밀번호 해시(bcrypt), 액세스 토큰(JWT) 발급·검증.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import bcrypt
import jwt

import config
from question_bank.models.user_model import CurrentUser, Role, User
from question_bank.services.errors import (
    Conflict, Forbidden, NotFound, Unauthorized, ValidationError,
)
from question_bank.services.store import Store

logger = logging.getLogger(__name__)


# ── 비밀번호 / 토큰 ──────────────────────────────────────────────────────────

def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_token(user: User, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role.value,
        "iat": now,
        "exp": now + timedelta(hours=config.TOKEN_TTL_HOURS),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> CurrentUser:
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("로그인이 만료되었습니다.")
    except jwt.InvalidTokenError:
        raise Unauthorized("유효하지 않은 토큰입니다.")
    return CurrentUser(
        id=payload["sub"],
        username=payload.get("username", ""),
        email=payload.get("email", ""),
        role=payload.get("role", Role.STUDENT.value),
    )


def _auth_response(user: User) -> Dict[str, Any]:
    return {"token": create_token(user), "user": user.public_dict()}


def _fallback_password(password: Optional[str]) -> str:
    if isinstance(password, str) and len(password) >= config.MIN_PASSWORD_LENGTH:
        return password
    return config.DEFAULT_PASSWORD


# ── 계정 ─────────────────────────────────────────────────────────────────────

def _ensure_unique(store: Store, username: str, email: str) -> None:
    if any(u.username == username or u.email == email for u in store.users.values()):
        raise Conflict("이미 사용 중인 사용자명 또는 이메일입니다.")


def register(
    store: Store,
    username: Optional[str],
    email: Optional[str],
    password: Optional[str],
    role: str = Role.STUDENT.value,
) -> Dict[str, Any]:
    """자가 가입은 학생만 가능 (교사/관리자는 관리자가 생성)."""
    if not username or not email or not password:
        raise ValidationError("사용자명, 이메일, 비밀번호는 필수입니다.")
    if (role or Role.STUDENT.value) != Role.STUDENT.value:
        raise Forbidden("교사/관리자 자가 가입은 막혀 있습니다. 관리자에게 계정 생성을 요청하세요.")
    # 해시 계산은 잠금 밖에서
    password_hash = hash_password(password)
    with store.lock:
        _ensure_unique(store, username, email)
        user = User(username=username, email=email, role=Role.STUDENT, password_hash=password_hash)
        store.users[user.id] = user
        store.save()
    logger.info(f"회원가입: {user.username}")
    return _auth_response(user)


def login(store: Store, username: Optional[str], password: Optional[str]) -> Dict[str, Any]:
    """username 자리에 이메일을 넣어도 된다."""
    if not username or not password:
        raise ValidationError("사용자명과 비밀번호는 필수입니다.")
    user = store.find_user(username)
    if user is None or not verify_password(password, user.password_hash):
        raise Unauthorized("사용자명 또는 비밀번호가 올바르지 않습니다.")
    return _auth_response(user)


def list_users(store: Store) -> List[Dict[str, Any]]:
    return [u.public_dict() for u in store.values("users")]


def create_user(
    store: Store,
    username: Optional[str],
    email: Optional[str],
    password: Optional[str],
    role: Optional[str],
) -> User:
    """관리자 전용. 역할은 학생/교사만, 비밀번호가 짧거나 없으면 기본 비밀번호."""
    if not username or not email:
        raise ValidationError("사용자명과 이메일은 필수입니다.")
    final_role = Role.TEACHER if role == Role.TEACHER.value else Role.STUDENT
    password_hash = hash_password(_fallback_password(password))
    with store.lock:
        _ensure_unique(store, username, email)
        user = User(username=username, email=email, role=final_role, password_hash=password_hash)
        store.users[user.id] = user
        store.save()
    logger.info(f"사용자 생성: {user.username} ({user.role.value})")
    return user


def reset_password(store: Store, user_id: str, new_password: Optional[str], now: datetime) -> None:
    if user_id not in store.users:
        raise NotFound("사용자를 찾을 수 없습니다.")
    password_hash = hash_password(_fallback_password(new_password))
    with store.lock:
        user = store.users.get(user_id)
        if user is None:
            raise NotFound("사용자를 찾을 수 없습니다.")
        user.password_hash = password_hash
        user.updated_at = now
        store.save()
