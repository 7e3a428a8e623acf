"""서비스 레이어 패키지 초기화 모듈입니다."""

from app.services import (
    token_service,
    auth_service,
    project_service,
    user_service,
)
