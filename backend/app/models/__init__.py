"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from app.models.user import User
from app.models.project import Project, Review

__all__ = [
    "User",
    "Project", "Review",
]
