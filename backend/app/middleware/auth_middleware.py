import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.services.token_service import TokenService, VerificationStatus, get_token_service
from app.utils.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

BEARER_HEADERS = {"WWW-Authenticate": "Bearer"}


@dataclass
class AuthIdentity:
    id: int
    username: str
    email: str


def _extract_token(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if credentials is None:
        return ""
    return (credentials.credentials or "").strip()


def authenticate(token: str, tokens: TokenService) -> AuthIdentity:
    if not token:
        logger.debug("[auth] no bearer token in request")
        raise Unauthorized("No token provided", code="MISSING_TOKEN", headers=BEARER_HEADERS)

    result = tokens.verify_token(token)
    if result.status == VerificationStatus.EXPIRED:
        logger.info("[auth] rejected expired token: %s", result.reason)
        raise Unauthorized("Token expired", code="TOKEN_EXPIRED", headers=BEARER_HEADERS)
    if not result.ok:
        logger.warning("[auth] rejected invalid token: %s", result.reason)
        raise Forbidden("Invalid or expired token", code="INVALID_TOKEN")

    claims = result.claims
    try:
        user_id = int(claims["id"])
    except (TypeError, ValueError):
        raise Forbidden("Invalid or expired token", code="INVALID_TOKEN")
    return AuthIdentity(id=user_id, username=claims.get("username") or "", email=claims.get("email") or "")


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> AuthIdentity:
    identity = authenticate(_extract_token(credentials), tokens)
    request.state.user = identity
    return identity


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[AuthIdentity]:
    token = _extract_token(credentials)
    if not token:
        request.state.user = None
        return None
    result = tokens.verify_token(token)
    if not result.ok:
        request.state.user = None
        return None
    try:
        identity = AuthIdentity(
            id=int(result.claims["id"]),
            username=result.claims.get("username") or "",
            email=result.claims.get("email") or "",
        )
    except (TypeError, ValueError):
        identity = None
    request.state.user = identity
    return identity
