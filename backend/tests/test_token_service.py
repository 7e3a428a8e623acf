"""Test Token Service 동작과 시크릿 회전 시나리오를 검증하는 자동화 테스트입니다."""

from datetime import timedelta

import pytest
from jose import jwt

from app.config import Settings
from app.services.token_service import (
    TokenIssuanceError,
    TokenService,
    VerificationStatus,
)

IDENTITY = {"id": 7, "username": "alice", "email": "a@x.com"}


def test_issue_and_verify_roundtrip_keeps_identity():
    service = TokenService(["current", "legacy"])
    token = service.issue_token(IDENTITY)

    result = service.verify_token(token)

    assert result.ok
    assert result.claims["id"] == 7
    assert result.claims["username"] == "alice"
    assert result.claims["email"] == "a@x.com"
    assert "exp" in result.claims


def test_default_ttl_is_seven_days():
    service = TokenService(["current"])
    token = service.issue_token(IDENTITY)
    claims = jwt.get_unverified_claims(token)
    issued_for = claims["exp"] - jwt.get_unverified_claims(service.issue_token(IDENTITY, ttl=timedelta(0)))["exp"]
    assert abs(issued_for - 7 * 24 * 3600) <= 2


def test_token_signed_with_legacy_secret_still_verifies():
    legacy_only = TokenService(["legacy"])
    rotated = TokenService(["current", "legacy"])
    token = legacy_only.issue_token(IDENTITY)

    result = rotated.verify_token(token)

    assert result.status == VerificationStatus.VALID
    assert result.claims["id"] == 7


def test_token_signed_with_unknown_secret_is_invalid():
    token = TokenService(["someone-else"]).issue_token(IDENTITY)
    result = TokenService(["current", "legacy"]).verify_token(token)
    assert result.status == VerificationStatus.INVALID


def test_corrupted_signature_is_invalid():
    service = TokenService(["current", "legacy"])
    token = service.issue_token(IDENTITY)
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, ("A" if signature[0] != "A" else "B") + signature[1:]])

    assert service.verify_token(tampered).status == VerificationStatus.INVALID


def test_garbage_token_is_invalid():
    result = TokenService(["current"]).verify_token("not-a-jwt")
    assert result.status == VerificationStatus.INVALID


def test_expired_token_reports_expired():
    service = TokenService(["current", "legacy"])
    token = service.issue_token(IDENTITY, ttl=timedelta(seconds=-30))
    assert service.verify_token(token).status == VerificationStatus.EXPIRED


def test_expired_legacy_token_reports_expired():
    token = TokenService(["legacy"]).issue_token(IDENTITY, ttl=timedelta(seconds=-30))
    result = TokenService(["current", "legacy"]).verify_token(token)
    assert result.status == VerificationStatus.EXPIRED


def test_issue_without_secret_raises():
    with pytest.raises(TokenIssuanceError):
        TokenService([]).issue_token(IDENTITY)


def test_issue_without_identity_claims_raises():
    with pytest.raises(TokenIssuanceError):
        TokenService(["current"]).issue_token({"id": 1})


def test_settings_secret_order_current_then_legacy():
    config = Settings(JWT_SECRET="new-secret", LEGACY_JWT_SECRET="old-secret")
    assert config.jwt_secrets() == ["new-secret", "old-secret"]

    service = TokenService.from_settings(config)
    assert service.signing_secret == "new-secret"


def test_settings_without_current_secret_signs_with_legacy():
    config = Settings(JWT_SECRET="", LEGACY_JWT_SECRET="old-secret")
    assert config.jwt_secrets() == ["old-secret"]
