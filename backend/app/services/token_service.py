"""Bearer 토큰 발급/검증 서비스입니다.

검증은 설정된 시크릿 목록(현재 시크릿 -> 레거시 시크릿)을 순서대로 시도하므로
시크릿을 교체해도 이전 시크릿으로 발급된 토큰이 만료 전까지 계속 유효합니다.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from app.config import Settings, settings

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(days=7)
IDENTITY_CLAIMS = ("id", "username", "email")


class TokenIssuanceError(Exception):
    pass


class VerificationStatus(str, enum.Enum):
    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"


@dataclass
class VerificationResult:
    status: VerificationStatus
    claims: dict = field(default_factory=dict)
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status == VerificationStatus.VALID


class TokenService:
    def __init__(self, secrets: List[str], algorithm: str = "HS256", ttl: timedelta = DEFAULT_TOKEN_TTL):
        self.secrets = [s for s in secrets if s]
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenService":
        return cls(
            secrets=config.jwt_secrets(),
            algorithm=config.JWT_ALGORITHM,
            ttl=timedelta(days=config.ACCESS_TOKEN_EXPIRE_DAYS),
        )

    @property
    def signing_secret(self) -> Optional[str]:
        return self.secrets[0] if self.secrets else None

    def issue_token(self, identity: dict, ttl: Optional[timedelta] = None) -> str:
        secret = self.signing_secret
        if not secret:
            raise TokenIssuanceError("No signing secret configured")
        missing = [key for key in IDENTITY_CLAIMS if identity.get(key) is None]
        if missing:
            raise TokenIssuanceError(f"Missing identity claims: {', '.join(missing)}")

        expire = datetime.utcnow() + (ttl if ttl is not None else self.ttl)
        payload = {key: identity[key] for key in IDENTITY_CLAIMS}
        # exp는 unix timestamp(int)로 기록
        payload["exp"] = int((expire - datetime(1970, 1, 1)).total_seconds())
        try:
            token = jwt.encode(payload, secret, algorithm=self.algorithm)
        except JWTError as exc:
            logger.error("[auth] token signing failed for user %s: %s", identity.get("id"), exc)
            raise TokenIssuanceError("Token generation failed") from exc
        logger.debug("[auth] issued token for user %s", identity.get("username") or identity.get("id"))
        return token

    def verify_token(self, token: str) -> VerificationResult:
        expired = False
        last_reason = "no signing secret configured"
        for index, secret in enumerate(self.secrets):
            label = "current" if index == 0 else f"fallback#{index}"
            try:
                claims = jwt.decode(token, secret, algorithms=[self.algorithm])
            except ExpiredSignatureError as exc:
                expired = True
                last_reason = str(exc)
                logger.debug("[auth] token expired under %s secret", label)
                continue
            except JWTError as exc:
                last_reason = str(exc)
                logger.debug("[auth] verification with %s secret failed: %s", label, exc)
                continue
            if claims.get("id") is None:
                last_reason = "token payload has no id"
                continue
            if index > 0:
                logger.info("[auth] token for user %s verified with %s secret", claims.get("id"), label)
            return VerificationResult(VerificationStatus.VALID, claims=claims)

        if expired:
            return VerificationResult(VerificationStatus.EXPIRED, reason=last_reason)
        return VerificationResult(VerificationStatus.INVALID, reason=last_reason)


def get_token_service() -> TokenService:
    return TokenService.from_settings(settings)
