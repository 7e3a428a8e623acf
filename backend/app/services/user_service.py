"""User Service 도메인 서비스 레이어입니다. 프로필 조회/수정과 사용자 검색을 담당합니다."""

import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import User
from app.schemas.user import UserProfileUpdate
from app.services import project_service
from app.services.auth_service import get_user, validate_username
from app.utils.errors import Conflict

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("username", "full_name", "bio", "profile_picture")


def search_users(db: Session, q: Optional[str]) -> List[User]:
    text = (q or "").strip()
    if len(text) < settings.USER_SEARCH_MIN_LENGTH:
        return []
    # LIKE 와일드카드(%, _)는 리터럴로 검색
    escaped = text.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return (
        db.query(User)
        .filter(or_(
            func.lower(User.username).like(pattern, escape="\\"),
            func.lower(User.full_name).like(pattern, escape="\\"),
        ))
        .limit(settings.USER_SEARCH_LIMIT)
        .all()
    )


def update_profile(
    db: Session,
    user_id: int,
    data: UserProfileUpdate,
    avatar_url: Optional[str] = None,
) -> User:
    user = get_user(db, user_id)

    payload = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if key in PROFILE_FIELDS and value is not None and str(value).strip() != ""
    }
    if avatar_url:
        payload["profile_picture"] = avatar_url

    if "username" in payload:
        next_username = validate_username(payload["username"])
        if next_username != user.username:
            taken = db.query(User).filter(User.username == next_username, User.id != user_id).first()
            if taken:
                raise Conflict("Username already taken")
        payload["username"] = next_username

    for key, value in payload.items():
        setattr(user, key, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Username already taken")
    db.refresh(user)
    logger.info("[users] profile updated for user %s (%s)", user_id, ", ".join(sorted(payload)) or "no changes")
    return user


def get_public_profile(db: Session, user_id: int, viewer_id: Optional[int] = None) -> tuple[User, list[dict]]:
    user = get_user(db, user_id)
    projects = project_service.list_projects(db, author_id=user_id, viewer_id=viewer_id)
    return user, projects
