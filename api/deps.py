"""
api/deps.py — 요청별 의존성 (저장소, 현재 시각, 난수, 인증 사용자)

저장소/시계/난수는 create_app() 이 app.state 에 넣어 두고,
테스트에서는 가짜 시계와 시드 고정 난수로 바꿔 끼운다.
"""

import random
from datetime import datetime
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from question_bank.models.user_model import CurrentUser, Role
from question_bank.services import auth_service
from question_bank.services.errors import Forbidden, Unauthorized
from question_bank.services.store import Store

_bearer = HTTPBearer(auto_error=False)


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_now(request: Request) -> datetime:
    return request.app.state.clock()


def get_rng(request: Request) -> random.Random:
    return request.app.state.rng


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("로그인이 필요합니다.")
    return auth_service.decode_token(credentials.credentials)


def require_role(*roles: Role):
    """지정한 역할만 통과시키는 의존성 생성."""
    def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise Forbidden("권한이 없습니다.")
        return user
    return checker


require_staff = require_role(Role.TEACHER, Role.ADMIN)
require_admin = require_role(Role.ADMIN)
