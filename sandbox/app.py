"""
sandbox/app.py — 개발/테스트용 시험 백엔드 FastAPI 앱

실제 백엔드와 같은 REST 계약(/api/v1)을 인메모리 저장소로 제공한다.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sandbox.routes import router
from sandbox.store import SandboxError, SandboxStore

logger = logging.getLogger(__name__)


def create_app(store: Optional[SandboxStore] = None) -> FastAPI:
    app = FastAPI(title="PPPK Exam Sandbox", docs_url=None, redoc_url=None)
    app.state.store = store or SandboxStore()

    # CORS (로컬 프론트엔드 등 다양한 출처 허용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 저장소 오류 → 실패 봉투
    @app.exception_handler(SandboxError)
    async def sandbox_error_handler(request: Request, exc: SandboxError):
        logger.info(f"{request.method} {request.url.path} 실패: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message},
        )

    # 요청 본문 검증 오류도 같은 봉투로
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid request body", "error": message},
        )

    app.include_router(router)

    @app.get("/health")
    async def health():
        return {"success": True, "message": "ok"}

    return app
