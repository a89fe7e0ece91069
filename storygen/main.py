"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 예외 핸들러, 라우터 등록.

FastAPI application entry point — Middleware, exception handler and router registration.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storygen.api.auth import router as auth_router
from storygen.api.health import router as health_router
from storygen.api.illustrations import router as illustrations_router
from storygen.api.stories import router as stories_router
from storygen.config import settings
from storygen.middleware.request_logging import RequestLoggingMiddleware
from storygen.services.storage_service import UPLOADS_DIR, storage_service
from storygen.utils.exceptions import register_exception_handlers

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# 요청 로깅 미들웨어 — CORS보다 먼저 등록하여 모든 요청을 캡처
# (Registered before CORS to capture all requests)
app.add_middleware(RequestLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health_router, tags=["Health"])
app.include_router(auth_router, prefix="/auth", tags=["Auth"])
app.include_router(stories_router, prefix="/stories", tags=["Stories"])
app.include_router(illustrations_router, prefix="/illustrations", tags=["Illustrations"])

# 로컬 모드 업로드 파일 서빙 — Serve locally stored uploads when S3 is not configured
if storage_service.is_local:
    app.mount("/uploads", StaticFiles(directory=UPLOADS_DIR, check_dir=False), name="uploads")
