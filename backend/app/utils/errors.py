"""API 오류 분류 체계입니다.

서비스 레이어는 아래 예외를 raise 하고, main.py의 exception handler가
``{"error": ..., "code": ...}`` 형태의 JSON 응답으로 변환합니다.
"""

from typing import Optional

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from app.config import settings


class ApiError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(status_code=self.status_code, detail=message, headers=headers)
        if code:
            self.code = code

    @property
    def message(self) -> str:
        return str(self.detail)


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


def internal_error_response(exc: Exception) -> JSONResponse:
    content = {"error": "Internal server error"}
    if settings.DEBUG:
        content["message"] = f"{type(exc).__name__}: {exc}"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
