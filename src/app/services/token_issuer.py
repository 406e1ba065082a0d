"""
Token Issuer

Signs and verifies access and refresh tokens (JWT, HS256).
Each token kind has its own secret and lifetime.
"""

import logging
import secrets
from datetime import UTC, datetime
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from pydantic import BaseModel

from src.app.services.auth_settings import AuthSettings
from src.domain.entities import AuthErrorCode, Identity, TokenKind
from src.domain.result import Error, Result, Return

logger = logging.getLogger(__name__)


class TokenClaims(BaseModel):
    """Verified claims of a decoded token"""

    identity_id: UUID
    kind: TokenKind
    issued_at: datetime
    expires_at: datetime
    token_id: str
    username: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None


class TokenPair(BaseModel):
    """Access/refresh token pair handed back to the caller"""

    access_token: str
    refresh_token: str


class TokenIssuer:
    """
    Stateless signer/verifier for both token kinds.

    Business Rules:
    - Access token: identity id, username, email, full name (short TTL)
    - Refresh token: identity id only (long TTL)
    - Every token carries a random jti, so two tokens are never equal
    - Verification and decoding are one step; nothing is read from an
      unverified payload
    """

    def __init__(self, settings: AuthSettings):
        self.settings = settings

    def _secret_for(self, kind: TokenKind) -> str:
        if kind == TokenKind.access:
            return self.settings.access_token_secret
        return self.settings.refresh_token_secret

    def _sign(self, claims: dict, kind: TokenKind) -> str:
        now = datetime.now(UTC)
        ttl = (
            self.settings.access_token_ttl
            if kind == TokenKind.access
            else self.settings.refresh_token_ttl
        )
        payload = {
            **claims,
            "type": kind.value,
            "iat": now,
            "exp": now + ttl,
            "jti": secrets.token_urlsafe(16),
        }
        # Signing errors are configuration errors and propagate
        return jwt.encode(payload, self._secret_for(kind), algorithm=self.settings.algorithm)

    def issue_access_token(self, identity: Identity) -> str:
        """
        Generate access token

        Returns:
            JWT string carrying identity id, username, email and full name
        """
        return self._sign(
            {
                "sub": str(identity.id),
                "username": identity.username,
                "email": identity.email,
                "full_name": identity.full_name,
            },
            TokenKind.access,
        )

    def issue_refresh_token(self, identity: Identity) -> str:
        """Generate refresh token (identity id only)"""
        return self._sign({"sub": str(identity.id)}, TokenKind.refresh)

    def issue_pair(self, identity: Identity) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(identity),
            refresh_token=self.issue_refresh_token(identity),
        )

    def verify(self, token: str, kind: TokenKind) -> Result[TokenClaims]:
        """
        Verify and decode a token of the given kind.

        Returns:
            Result with TokenClaims, or INVALID_TOKEN Error on bad signature,
            wrong kind, expiry or malformed claims
        """
        invalid = Return.err(Error(AuthErrorCode.INVALID_TOKEN, "Invalid or expired token"))

        if not isinstance(token, str) or not token:
            return invalid

        try:
            payload = jwt.decode(
                token, self._secret_for(kind), algorithms=[self.settings.algorithm]
            )
        except JWTError as exc:
            logger.info(f"Rejected {kind.value} token: {type(exc).__name__}")
            return invalid

        if payload.get("type") != kind.value:
            logger.info(f"Rejected token with type claim {payload.get('type')!r}, expected {kind.value}")
            return invalid

        try:
            identity_id = UUID(str(payload["sub"]))
            claims = TokenClaims(
                identity_id=identity_id,
                kind=kind,
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
                token_id=payload["jti"],
                username=payload.get("username"),
                email=payload.get("email"),
                full_name=payload.get("full_name"),
            )
        except (KeyError, TypeError, ValueError):
            return invalid

        return Return.ok(claims)
