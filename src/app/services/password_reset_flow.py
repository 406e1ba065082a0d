"""
Password Reset Flow

Issues, stores and consumes one-time password reset codes.

State per identity:
    NoPendingReset -> PendingReset(code, expiry) -> Consumed | Expired -> NoPendingReset
"""

import logging
import re
import secrets
from datetime import UTC, datetime
from typing import Optional

from src.app.services.auth_settings import AuthSettings
from src.app.services.credential_verifier import CredentialVerifier
from src.app.services.email_sender import IEmailSender, redact_email
from src.app.services.email_templates import render_password_reset_email
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthErrorCode
from src.domain.result import Error, Result, Return

logger = logging.getLogger(__name__)

RESET_CODE_PATTERN = re.compile(r"^[0-9]{6}$")
MAX_CODE_ATTEMPTS = 5


def generate_reset_code() -> str:
    """6-digit numeric code from a CSPRNG (100000-999999)"""
    return str(100000 + secrets.randbelow(900000))


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class PasswordResetFlow:
    """
    One-time reset code protocol.

    Business Rules:
    - 6-digit numeric code, valid for AuthSettings.reset_code_ttl (15 min)
    - A new request replaces any pending code (last writer wins)
    - The code is stored and committed before the email is sent; a failed
      send reports DELIVERY_FAILED but the code stays valid
    - Consumption is a compare-and-swap on the stored code, so a code
      can be redeemed once
    - An expired code is cleared on the first attempt to use it
    - A successful reset replaces the password hash and ends the session

    Must be called inside an entered UnitOfWork.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        credentials: CredentialVerifier,
        email_sender: IEmailSender,
        settings: AuthSettings,
    ):
        self.uow = uow
        self.credentials = credentials
        self.email_sender = email_sender
        self.settings = settings

    async def _fresh_code(self) -> str:
        code = generate_reset_code()
        for _ in range(MAX_CODE_ATTEMPTS - 1):
            if await self.uow.identities.get_by_reset_code(code) is None:
                break
            code = generate_reset_code()
        return code

    async def request(self, email: str) -> Result[None]:
        """
        Issue a reset code for the identity owning `email` and email it.

        Returns:
            Result with None, or Error:
            - NOT_FOUND: no identity with that email
            - DELIVERY_FAILED: code stored, but the email was not accepted
        """
        # Generated before the lookup so both outcomes cost the same
        code = await self._fresh_code()

        identity = await self.uow.identities.get_by_email(email)
        if identity is None:
            logger.info(f"Password reset requested for unknown email {redact_email(email)}")
            return Return.err(Error(AuthErrorCode.NOT_FOUND, "User not found"))

        expires_at = datetime.now(UTC) + self.settings.reset_code_ttl
        await self.uow.identities.update_fields(
            identity.id, {"reset_code": code, "reset_code_expires_at": expires_at}
        )
        await self.uow.commit()
        logger.info(f"Password reset code issued for identity {identity.id}")

        html = render_password_reset_email(
            app_name=self.settings.app_name,
            full_name=identity.full_name,
            code=code,
            reset_link=f"{self.settings.frontend_url.rstrip('/')}/reset-password/{code}",
            valid_minutes=int(self.settings.reset_code_ttl.total_seconds() // 60),
        )

        try:
            accepted = await self.email_sender.send(identity.email, "Reset Password", html)
        except Exception:
            logger.exception(f"Email transport raised for identity {identity.id}")
            accepted = False

        if not accepted:
            logger.error(f"Password reset email not delivered for identity {identity.id}")
            return Return.err(
                Error(
                    AuthErrorCode.DELIVERY_FAILED,
                    "Failed to send email. Please try again later.",
                )
            )

        return Return.ok(None)

    async def consume(self, code: str, new_password: str) -> Result[None]:
        """
        Redeem a reset code and set a new password.

        Returns:
            Result with None, or INVALID_OR_EXPIRED_CODE Error
        """
        invalid = Return.err(
            Error(AuthErrorCode.INVALID_OR_EXPIRED_CODE, "Invalid or expired reset code")
        )

        if not isinstance(code, str) or not RESET_CODE_PATTERN.match(code):
            return invalid

        identity = await self.uow.identities.get_by_reset_code(code)
        if identity is None:
            return invalid

        expires_at = _as_utc(identity.reset_code_expires_at)
        if expires_at is None or expires_at <= datetime.now(UTC):
            await self.uow.identities.compare_and_update(
                identity.id, "reset_code", code, None, extra={"reset_code_expires_at": None}
            )
            await self.uow.commit()
            logger.info(f"Expired reset code presented for identity {identity.id}; cleared")
            return invalid

        password_hash = self.credentials.hash(new_password)
        consumed = await self.uow.identities.compare_and_update(
            identity.id,
            "reset_code",
            code,
            None,
            extra={
                "reset_code_expires_at": None,
                "password_hash": password_hash,
                "active_refresh_token": None,
            },
        )
        if not consumed:
            # Redeemed or replaced concurrently
            await self.uow.rollback()
            return invalid

        await self.uow.commit()
        logger.info(f"Password reset completed for identity {identity.id}; session revoked")
        return Return.ok(None)
