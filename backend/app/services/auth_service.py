"""Auth Service 도메인 서비스 레이어입니다. 회원가입/로그인/비밀번호 변경 규칙을 캡슐화합니다."""

import logging
import re

import bcrypt
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import User
from app.schemas.user import ChangePasswordRequest, LoginRequest, RegisterRequest
from app.services.token_service import TokenService
from app.utils.errors import BadRequest, Conflict, NotFound, Unauthorized

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
# bcrypt 입력 한도 72 bytes
BCRYPT_MAX_BYTES = 72
INVALID_LOGIN_MESSAGE = "Invalid email/username or password"


def _password_bytes(password: str) -> bytes:
    return (password or "").encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain), (hashed or "").encode("utf-8"))
    except ValueError:
        # 저장된 값이 bcrypt 해시 형식이 아님
        return False


def validate_username(username: str) -> str:
    text = (username or "").strip()
    if len(text) < MIN_USERNAME_LENGTH:
        raise BadRequest(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
    return text


def validate_password(password: str, label: str = "Password") -> str:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise BadRequest(f"{label} must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def identity_claims(user: User) -> dict:
    return {"id": user.id, "username": user.username, "email": user.email}


def register(db: Session, data: RegisterRequest, tokens: TokenService) -> tuple[User, str]:
    if not data.username or not data.email or not data.password:
        raise BadRequest("Username, email, and password are required")

    username = validate_username(data.username)
    validate_password(data.password)
    email = data.email.strip()
    if not EMAIL_PATTERN.match(email):
        raise BadRequest("Invalid email format")

    existing = db.query(User).filter(or_(User.email == email, User.username == username)).first()
    if existing:
        raise Conflict("Username or email already exists")

    user = User(username=username, email=email, password=hash_password(data.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # 동시 가입 요청이 unique 제약에 걸린 경우
        db.rollback()
        logger.warning("[auth] register integrity error for %s: %s", username, exc.orig)
        raise Conflict("Username or email already exists")
    db.refresh(user)

    token = tokens.issue_token(identity_claims(user))
    logger.info("[auth] registered user %s (id=%s)", user.username, user.id)
    return user, token


def login(db: Session, data: LoginRequest, tokens: TokenService) -> tuple[User, str]:
    login_id = data.login_id
    if not login_id or not data.password:
        raise BadRequest("Email and password are required")

    user = db.query(User).filter(or_(User.email == login_id, User.username == login_id)).first()
    if not user or not verify_password(data.password, user.password):
        logger.info("[auth] failed login for %s", login_id)
        raise Unauthorized(INVALID_LOGIN_MESSAGE)

    return user, tokens.issue_token(identity_claims(user))


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def change_password(db: Session, user_id: int, data: ChangePasswordRequest) -> None:
    if not data.currentPassword or not data.newPassword:
        raise BadRequest("Current and new passwords are required")
    validate_password(data.newPassword, label="New password")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not verify_password(data.currentPassword, user.password):
        raise Unauthorized("Current password is incorrect")

    user.password = hash_password(data.newPassword)
    db.commit()
    logger.info("[auth] password changed for user %s", user_id)
