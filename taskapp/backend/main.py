# taskapp/backend/main.py
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import text

from taskapp.backend.core.config import settings
from taskapp.backend.core.errors import (
    TaskAppError,
    request_validation_error_handler,
    task_app_error_handler,
)
from taskapp.backend.core.logging_config import setup_logging
from taskapp.backend.core.tokens import set_session_cookies
from taskapp.backend.db.session import engine

# 모델 모듈 임포트(테이블 등록 보장용)
from taskapp.backend.models import task as _m_task  # noqa: F401

# 라우터
from taskapp.backend.routers import auth, home, task
from taskapp.backend.services import auth_service

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Task Manager",
    version=settings.app_version,
)

app.add_exception_handler(TaskAppError, task_app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def session_refresh_middleware(request: Request, call_next):
    if not auth_service.needs_refresh(request):
        return await call_next(request)

    refreshed = await run_in_threadpool(auth_service.refresh_session, request)
    if refreshed is not None:
        auth_service.replace_request_cookies(request, refreshed)

    response = await call_next(request)
    if refreshed is not None:
        set_session_cookies(
            response, refreshed.access_token, refreshed.refresh_token, refreshed.expires_in
        )
    return response


@app.middleware("http")
async def add_charset_for_json(request: Request, call_next):
    resp = await call_next(request)
    ct = resp.headers.get("content-type", "")
    if ct.startswith("application/json") and "charset" not in ct.lower():
        resp.headers["content-type"] = "application/json; charset=utf-8"
    return resp


# 라우터 등록
app.include_router(home.router)
app.include_router(auth.auth_router)
app.include_router(task.router)


@app.get("/health")
def health_app():
    return {"ok": True}


@app.get("/health/db")
def health_db():
    # 마이그레이션은 배포 단계 책임. 런타임에서는 연결만 확인
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"ok": True}
    except Exception:
        logger.exception("Database connection failed")
        raise HTTPException(status_code=500, detail="Database connection failed")
