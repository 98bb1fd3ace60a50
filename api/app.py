"""
api/app.py — FastAPI 앱 인스턴스 + 저장소 초기화 + 예외 핸들러 + static 파일 서빙
"""

import os
import random
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

import config
from api import auth_routes, exam_routes, practice_routes, question_routes, user_routes
from api.sample_data import seed_demo_data
from question_bank.services.errors import NotFound, QuestionBankError
from question_bank.services.store import Store


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_app(
    store: Optional[Store] = None,
    clock: Optional[Callable[[], datetime]] = None,
    rng: Optional[random.Random] = None,
    seed_demo: Optional[bool] = None,
) -> FastAPI:
    """
    Args:
        store:     주입할 저장소. 없으면 설정에 따라 파일 영속 저장소를 만들고 로드한다.
        clock:     현재 시각 함수 (테스트에서 시간 경과를 흉내낼 때 교체).
        rng:       출제/보기 섞기에 쓰는 난수 (테스트에서는 시드 고정).
        seed_demo: 데모 데이터 생성 여부. 기본값은 config.SEED_DEMO_DATA.
    """
    app = FastAPI(title="Question Bank API", docs_url="/api/docs", redoc_url=None)

    if store is None:
        store = Store(config.STORE_FILE if config.PERSIST else None)
        store.load()
    if config.SEED_DEMO_DATA if seed_demo is None else seed_demo:
        seed_demo_data(store)

    app.state.store = store
    app.state.clock = clock or _utcnow
    app.state.rng = rng or random.Random()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 서비스 예외 → {"detail": ...} (HTTPException 과 같은 모양)
    @app.exception_handler(QuestionBankError)
    async def handle_service_error(request: Request, exc: QuestionBankError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    app.include_router(auth_routes.router)
    app.include_router(question_routes.router)
    app.include_router(exam_routes.router)
    app.include_router(practice_routes.router)
    app.include_router(user_routes.router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "timestamp": app.state.clock().isoformat()}

    # static 파일 마운트 (프론트엔드 빌드 결과물)
    if os.path.isdir(config.STATIC_DIR):
        app.mount("/static", StaticFiles(directory=config.STATIC_DIR), name="static")

    # 루트 → index.html
    @app.get("/")
    async def serve_index():
        index_path = os.path.join(config.STATIC_DIR, "index.html")
        if os.path.exists(index_path):
            return FileResponse(index_path)
        raise NotFound("index.html 을 찾을 수 없습니다. 프론트엔드를 먼저 빌드하세요.")

    return app
