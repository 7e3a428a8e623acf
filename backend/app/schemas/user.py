"""User / Auth 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from app.schemas.project import ProjectOut


class RegisterRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    # email 필드에는 이메일 또는 사용자명을 모두 받을 수 있다.
    email: Optional[str] = None
    username: Optional[str] = None
    identifier: Optional[str] = None
    password: Optional[str] = None

    @property
    def login_id(self) -> str:
        return (self.identifier or self.email or self.username or "").strip()


class ChangePasswordRequest(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class UserProfileUpdate(BaseModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = None


class IdentityOut(BaseModel):
    id: int
    username: str
    email: str

    model_config = {"from_attributes": True}


class UserPublicOut(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserProfileOut(UserPublicOut):
    email: str


class AuthResponse(BaseModel):
    message: str
    token: str
    user: IdentityOut


class UserEnvelope(BaseModel):
    user: UserProfileOut


class UserUpdateResponse(BaseModel):
    message: str
    user: UserProfileOut


class UserSearchOut(BaseModel):
    users: List[UserPublicOut]


class MessageOut(BaseModel):
    message: str


class PublicProfileOut(BaseModel):
    user: UserPublicOut
    projects: List[ProjectOut]
