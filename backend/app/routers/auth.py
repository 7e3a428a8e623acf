"""Auth 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import AuthIdentity, get_current_user
from app.schemas.user import (
    AuthResponse,
    ChangePasswordRequest,
    IdentityOut,
    LoginRequest,
    MessageOut,
    RegisterRequest,
    UserEnvelope,
)
from app.services import auth_service
from app.services.token_service import TokenService, get_token_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: RegisterRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    user, token = auth_service.register(db, request, tokens)
    return AuthResponse(message="Registration successful", token=token, user=IdentityOut.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    user, token = auth_service.login(db, request, tokens)
    return AuthResponse(message="Login successful", token=token, user=IdentityOut.model_validate(user))


@router.get("/me", response_model=UserEnvelope)
def me(db: Session = Depends(get_db), current_user: AuthIdentity = Depends(get_current_user)):
    return {"user": auth_service.get_user(db, current_user.id)}


@router.post("/change-password", response_model=MessageOut)
def change_password(
    request: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: AuthIdentity = Depends(get_current_user),
):
    auth_service.change_password(db, current_user.id, request)
    return {"message": "Password changed successfully"}
