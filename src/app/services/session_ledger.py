"""
Session Ledger

Owns the single refresh-token slot of each identity: issue, rotate
with reuse detection, revoke.
"""

import logging
import secrets
from typing import Optional
from uuid import UUID

from src.app.services.token_issuer import TokenIssuer, TokenPair
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthErrorCode, Identity, TokenKind
from src.domain.result import Error, Result, Return

logger = logging.getLogger(__name__)


def _same_token(stored: Optional[str], presented: str) -> bool:
    if stored is None:
        return False
    return secrets.compare_digest(stored.encode("utf-8"), presented.encode("utf-8"))


class SessionLedger:
    """
    Single-active-session bookkeeping.

    Business Rules:
    - issue() is the only way a refresh token becomes active
    - Exactly one refresh token is redeemable per identity: the stored one
    - Rotation is a compare-and-swap on the stored token; any token that
      does not match (already rotated, revoked, or lost a concurrent race)
      is reuse, and the session is revoked
    - revoke() is idempotent

    Must be called inside an entered UnitOfWork; each state transition
    is committed here.
    """

    def __init__(self, uow: UnitOfWork, token_issuer: TokenIssuer):
        self.uow = uow
        self.tokens = token_issuer

    async def issue(self, identity: Identity) -> TokenPair:
        """Mint a new pair and make its refresh token the active one"""
        pair = self.tokens.issue_pair(identity)
        await self.uow.identities.update_fields(
            identity.id, {"active_refresh_token": pair.refresh_token}
        )
        await self.uow.commit()
        logger.info(f"Session issued for identity {identity.id}")
        return pair

    async def rotate(self, presented_refresh_token: str) -> Result[TokenPair]:
        """
        Redeem a refresh token for a new pair.

        Returns:
            Result with the new TokenPair, or Error:
            - INVALID_TOKEN: bad signature, expired, or unknown identity
            - REFRESH_TOKEN_REUSE_DETECTED: token is not the active one
        """
        verified = self.tokens.verify(presented_refresh_token, TokenKind.refresh)
        if verified.is_err():
            return Return.err(verified.error)
        claims = verified.value

        identity = await self.uow.identities.get_by_id(claims.identity_id)
        if identity is None:
            return Return.err(Error(AuthErrorCode.INVALID_TOKEN, "Invalid refresh token"))
        # Rollback expires ORM instances; keep the key
        identity_id = identity.id

        if not _same_token(identity.active_refresh_token, presented_refresh_token):
            return await self._reuse_detected(identity_id)

        new_pair = self.tokens.issue_pair(identity)
        swapped = await self.uow.identities.compare_and_update(
            identity_id,
            "active_refresh_token",
            presented_refresh_token,
            new_pair.refresh_token,
        )
        if not swapped:
            # Another rotation committed between our read and our write
            await self.uow.rollback()
            return await self._reuse_detected(identity_id)

        await self.uow.commit()
        logger.info(f"Refresh token rotated for identity {identity_id}")
        return Return.ok(new_pair)

    async def revoke(self, identity_id: UUID) -> None:
        """Clear the active refresh token (no-op if none)"""
        await self.uow.identities.update_fields(identity_id, {"active_refresh_token": None})
        await self.uow.commit()
        logger.info(f"Session revoked for identity {identity_id}")

    async def _reuse_detected(self, identity_id: UUID) -> Result[TokenPair]:
        logger.warning(f"Refresh token reuse detected for identity {identity_id}; revoking session")
        await self.revoke(identity_id)
        return Return.err(
            Error(
                AuthErrorCode.REFRESH_TOKEN_REUSE_DETECTED,
                "Refresh token has already been used. Please sign in again.",
            )
        )
