from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt
from pydantic import ValidationError

from src.app.services.auth_settings import AuthSettings
from src.app.services.token_issuer import TokenIssuer
from src.domain.entities import AuthErrorCode, TokenKind


@pytest.fixture
def issuer(settings):
    return TokenIssuer(settings)


def test_access_token_carries_profile_claims(issuer, make_identity):
    identity = make_identity()

    result = issuer.verify(issuer.issue_access_token(identity), TokenKind.access)

    assert result.is_ok()
    claims = result.value
    assert claims.identity_id == identity.id
    assert claims.kind == TokenKind.access
    assert claims.username == "alice"
    assert claims.email == "alice@example.com"
    assert claims.full_name == "Alice Liddell"
    assert claims.expires_at - claims.issued_at == timedelta(minutes=15)


def test_refresh_token_carries_identity_only(issuer, make_identity):
    identity = make_identity()

    result = issuer.verify(issuer.issue_refresh_token(identity), TokenKind.refresh)

    assert result.is_ok()
    claims = result.value
    assert claims.identity_id == identity.id
    assert claims.username is None
    assert claims.email is None
    assert claims.expires_at - claims.issued_at == timedelta(days=7)


def test_tokens_issued_back_to_back_differ(issuer, make_identity):
    identity = make_identity()

    first = issuer.issue_pair(identity)
    second = issuer.issue_pair(identity)

    assert first.refresh_token != second.refresh_token
    assert first.access_token != second.access_token


def test_access_token_is_not_a_refresh_token(issuer, make_identity):
    pair = issuer.issue_pair(make_identity())

    assert issuer.verify(pair.access_token, TokenKind.refresh).error.code == AuthErrorCode.INVALID_TOKEN
    assert issuer.verify(pair.refresh_token, TokenKind.access).error.code == AuthErrorCode.INVALID_TOKEN


def test_type_claim_is_checked(settings, issuer, make_identity):
    """Right secret but wrong type claim is still rejected"""
    now = datetime.now(UTC)
    forged = jwt.encode(
        {
            "sub": str(make_identity().id),
            "type": "access",
            "iat": now,
            "exp": now + timedelta(minutes=5),
            "jti": "x",
        },
        settings.refresh_token_secret,
        algorithm="HS256",
    )

    result = issuer.verify(forged, TokenKind.refresh)

    assert result.is_err()
    assert result.error.code == AuthErrorCode.INVALID_TOKEN


def test_expired_token_rejected(make_identity):
    expired_issuer = TokenIssuer(
        AuthSettings(
            access_token_secret="a-secret",
            refresh_token_secret="r-secret",
            refresh_token_ttl=timedelta(seconds=-10),
            bcrypt_rounds=4,
        )
    )

    token = expired_issuer.issue_refresh_token(make_identity())
    result = expired_issuer.verify(token, TokenKind.refresh)

    assert result.is_err()
    assert result.error.code == AuthErrorCode.INVALID_TOKEN
    assert result.error.message == "Invalid or expired token"


def test_tampered_token_rejected(issuer, make_identity):
    token = issuer.issue_refresh_token(make_identity())
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    assert issuer.verify(tampered, TokenKind.refresh).is_err()


def test_token_signed_with_other_secret_rejected(issuer, make_identity):
    foreign = TokenIssuer(
        AuthSettings(
            access_token_secret="other-access",
            refresh_token_secret="other-refresh",
            bcrypt_rounds=4,
        )
    )

    token = foreign.issue_refresh_token(make_identity())

    assert issuer.verify(token, TokenKind.refresh).is_err()


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", None])
def test_malformed_tokens_rejected(issuer, token):
    result = issuer.verify(token, TokenKind.access)

    assert result.is_err()
    assert result.error.code == AuthErrorCode.INVALID_TOKEN


def test_settings_reject_shared_secret():
    with pytest.raises(ValidationError):
        AuthSettings(access_token_secret="same", refresh_token_secret="same")


def test_settings_reject_empty_secret():
    with pytest.raises(ValidationError):
        AuthSettings(access_token_secret="", refresh_token_secret="r-secret")
