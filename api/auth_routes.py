"""
api/auth_routes.py — 회원가입/로그인/계정 관리 엔드포인트
"""

import asyncio
from datetime import datetime

from fastapi import APIRouter, Depends

from api.deps import get_current_user, get_now, get_store, require_admin
from api.schemas import CreateUserBody, LoginBody, RegisterBody, ResetPasswordBody
from question_bank.models.user_model import CurrentUser
from question_bank.services import auth_service
from question_bank.services.store import Store

router = APIRouter(prefix="/api/auth", tags=["auth"])


# bcrypt 해시는 느리므로 스레드로 넘긴다
@router.post("/register", status_code=201)
async def register(body: RegisterBody, store: Store = Depends(get_store)):
    return await asyncio.to_thread(
        auth_service.register, store, body.username, body.email, body.password, body.role
    )


@router.post("/login")
async def login(body: LoginBody, store: Store = Depends(get_store)):
    return await asyncio.to_thread(auth_service.login, store, body.username, body.password)


@router.get("/me")
async def me(user: CurrentUser = Depends(get_current_user)):
    return {"user": user.model_dump(mode="json")}


@router.get("/users")
async def list_users(store: Store = Depends(get_store), _: CurrentUser = Depends(require_admin)):
    users = auth_service.list_users(store)
    return {"users": users, "total": len(users)}


@router.post("/users", status_code=201)
async def create_user(
    body: CreateUserBody,
    store: Store = Depends(get_store),
    _: CurrentUser = Depends(require_admin),
):
    user = await asyncio.to_thread(
        auth_service.create_user, store, body.username, body.email, body.password, body.role
    )
    return user.public_dict()


@router.post("/users/{user_id}/reset-password")
async def reset_password(
    user_id: str,
    body: ResetPasswordBody,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
    _: CurrentUser = Depends(require_admin),
):
    await asyncio.to_thread(auth_service.reset_password, store, user_id, body.new_password, now)
    return {"ok": True}
