"""요청 단위 접근 로그 미들웨어입니다.

요청마다 한 줄(method, path, status, 처리 시간)을 남기고
모든 응답에 no-cache 헤더를 붙입니다.
"""

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.utils.errors import internal_error_response

logger = logging.getLogger("app.access")

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}
SKIP_LOG_PATHS = {"/api/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(
                "[%s] %s %s -> unhandled error (%.1fms)",
                request_id, request.method, request.url.path, elapsed_ms,
                exc_info=exc,
            )
            response = internal_error_response(exc)

        elapsed_ms = (time.perf_counter() - started) * 1000
        if request.url.path not in SKIP_LOG_PATHS:
            level = logging.WARNING if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                "[%s] %s %s -> %s (%.1fms)",
                request_id, request.method, request.url.path, response.status_code, elapsed_ms,
            )

        response.headers["X-Request-ID"] = request_id
        for key, value in NO_CACHE_HEADERS.items():
            response.headers[key] = value
        return response
