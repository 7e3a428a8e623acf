"""Users 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile
from typing import Optional

from app.config import settings
from app.database import get_db
from app.middleware.auth_middleware import AuthIdentity, get_current_user, get_optional_user
from app.schemas.user import (
    PublicProfileOut,
    UserEnvelope,
    UserProfileUpdate,
    UserSearchOut,
    UserUpdateResponse,
)
from app.services import auth_service, user_service
from app.utils.errors import BadRequest
from app.utils.helpers import save_upload

router = APIRouter(prefix="/users", tags=["users"])

AVATAR_SUBFOLDER = "avatars"


@router.get("/search", response_model=UserSearchOut)
def search_users(q: Optional[str] = None, db: Session = Depends(get_db)):
    return {"users": user_service.search_users(db, q)}


@router.get("/me", response_model=UserEnvelope)
def get_me(db: Session = Depends(get_db), current_user: AuthIdentity = Depends(get_current_user)):
    return {"user": auth_service.get_user(db, current_user.id)}


@router.put("/me", response_model=UserUpdateResponse)
async def update_me(
    request: Request,
    db: Session = Depends(get_db),
    current_user: AuthIdentity = Depends(get_current_user),
):
    # JSON(프로필 이미지 URL) 또는 multipart(프로필 이미지 파일) 모두 허용
    avatar_url = None
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        fields = {key: value for key, value in form.items() if isinstance(value, str)}
        avatar = form.get("profile_picture")
        if isinstance(avatar, UploadFile) and avatar.filename:
            uploaded = await save_upload(
                avatar,
                subfolder=AVATAR_SUBFOLDER,
                allowed_extensions=settings.AVATAR_EXTENSIONS,
                max_size=settings.MAX_AVATAR_SIZE,
            )
            avatar_url = uploaded["url"]
    else:
        try:
            fields = await request.json() if await request.body() else {}
        except ValueError:
            raise BadRequest("Request body must be valid JSON")
        if not isinstance(fields, dict):
            raise BadRequest("Request body must be a JSON object")

    try:
        data = UserProfileUpdate.model_validate(fields)
    except ValidationError as exc:
        first = exc.errors()[0]
        raise BadRequest(f"{'.'.join(str(p) for p in first['loc'])}: {first['msg']}")

    user = user_service.update_profile(db, current_user.id, data, avatar_url=avatar_url)
    return {"message": "Profile updated successfully", "user": user}


@router.get("/{user_id}", response_model=PublicProfileOut)
def get_user_profile(
    user_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[AuthIdentity] = Depends(get_optional_user),
):
    user, projects = user_service.get_public_profile(db, user_id, viewer_id=viewer.id if viewer else None)
    return {"user": user, "projects": projects}
