"""FastAPI 애플리케이션 진입점. 미들웨어, 예외 처리기, API 라우터, 정적 파일 서빙을 등록합니다."""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.database import Base, engine
import app.models  # noqa: F401 - 모델 import로 metadata 등록
from app.middleware.request_logging import RequestLoggingMiddleware
from app.routers import auth, projects, users
from app.utils.errors import ApiError, NotFound, internal_error_response
from app.utils.schema_sync import sync_missing_schema_objects

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(
    title="TIC Projects Platform",
    description="Course project submission, browsing and rating API",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = {"error": str(exc.detail)}
    if isinstance(exc, ApiError):
        content["code"] = exc.code
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"error": message, "code": "VALIDATION_ERROR"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return internal_error_response(exc)


app.include_router(auth.router)
app.include_router(projects.router)
app.include_router(users.router)


@app.on_event("startup")
def ensure_schema():
    # 신규 테이블은 create_all, 기존 테이블의 누락 컬럼은 schema_sync로 보정
    Base.metadata.create_all(bind=engine)
    sync_missing_schema_objects(engine, Base.metadata)


@app.get("/api")
def api_info():
    return {"message": "TIC Projects Platform API is running", "version": API_VERSION}


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "TIC Projects Platform"}


# Static file serving for uploads
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# 클라이언트 셸: API 외 경로는 정적 파일 또는 index.html (클라이언트 라우팅)
API_PREFIXES = ("api", "auth", "projects", "users", "uploads")


@app.get("/{full_path:path}", include_in_schema=False)
def serve_client_shell(full_path: str):
    if full_path.split("/", 1)[0] in API_PREFIXES:
        raise NotFound("Not found")
    root = os.path.realpath(settings.PUBLIC_DIR)
    index_path = os.path.join(root, "index.html")
    if not os.path.isfile(index_path):
        raise NotFound("Not found")
    if full_path:
        candidate = os.path.realpath(os.path.join(root, full_path))
        if os.path.commonpath([root, candidate]) == root and os.path.isfile(candidate):
            return FileResponse(candidate)
    return FileResponse(index_path)
