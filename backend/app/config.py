"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./tic_projects.db"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5000"]

    # JWT
    # JWT_SECRET이 비어 있으면 LEGACY_JWT_SECRET으로 서명한다.
    JWT_SECRET: str = ""
    LEGACY_JWT_SECRET: str = "tic-projects-platform-secret-key-2025"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    BCRYPT_ROUNDS: int = 10

    # Projects
    DUPLICATE_SUBMISSION_WINDOW_SECONDS: int = 30

    # Users
    USER_SEARCH_MIN_LENGTH: int = 2
    USER_SEARCH_LIMIT: int = 20

    # File upload
    UPLOAD_DIR: str = "uploads"
    MAX_AVATAR_SIZE: int = 5 * 1024 * 1024  # 5 MB
    AVATAR_EXTENSIONS: List[str] = ["jpg", "jpeg", "png", "gif", "webp"]

    # Client shell (index.html + assets)
    PUBLIC_DIR: str = str(Path(__file__).resolve().parents[1] / "public")

    def jwt_secrets(self) -> List[str]:
        # 현재 시크릿 우선, 레거시 시크릿은 회전 기간 동안 검증용 fallback으로만 사용
        ordered = [str(self.JWT_SECRET or "").strip(), str(self.LEGACY_JWT_SECRET or "").strip()]
        secrets: List[str] = []
        for secret in ordered:
            if secret and secret not in secrets:
                secrets.append(secret)
        return secrets

    class Config:
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
