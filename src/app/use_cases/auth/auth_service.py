"""
Auth Service

Orchestrates credential verification, token issuance, the session ledger
and the password reset flow into the public authentication use cases.
"""

import functools
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from src.app.services.auth_settings import AuthSettings
from src.app.services.credential_verifier import CredentialVerifier
from src.app.services.email_sender import IEmailSender
from src.app.services.password_reset_flow import PasswordResetFlow
from src.app.services.session_ledger import SessionLedger
from src.app.services.token_issuer import TokenIssuer, TokenPair
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import (
    AuthErrorCode,
    Identity,
    PublicIdentityView,
    TokenKind,
    to_public_view,
)
from src.domain.result import Error, Result, Return
from .dtos import LoginResponse, RegisterCommand

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 64
MIN_FULL_NAME_LENGTH = 3


def guard_internal(operation: str):
    """
    Turn unexpected exceptions (storage, signing, hashing faults) into a
    logged INTERNAL error so callers only ever see Result values.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except Exception:
                logger.exception(f"Internal failure during {operation}")
                return Return.err(Error(AuthErrorCode.INTERNAL, "Internal server error"))

        return wrapper

    return decorator


def validate_profile(username: str, email: str, full_name: str) -> Result[None]:
    """Minimal profile rules the core relies on (lookup by identifier)"""
    if not username or not MIN_USERNAME_LENGTH <= len(username) <= MAX_USERNAME_LENGTH:
        return Return.err(
            Error(
                AuthErrorCode.VALIDATION_FAILED,
                f"Username must be {MIN_USERNAME_LENGTH}-{MAX_USERNAME_LENGTH} characters long",
            )
        )
    if "@" in username or any(ch.isspace() for ch in username):
        return Return.err(
            Error(AuthErrorCode.VALIDATION_FAILED, "Username must not contain '@' or spaces")
        )
    if not email or "@" not in email:
        return Return.err(Error(AuthErrorCode.VALIDATION_FAILED, "Invalid email address"))
    if not full_name or len(full_name) < MIN_FULL_NAME_LENGTH:
        return Return.err(
            Error(
                AuthErrorCode.VALIDATION_FAILED,
                f"Full name must be at least {MIN_FULL_NAME_LENGTH} characters long",
            )
        )
    return Return.ok(None)


class AuthService:
    """
    Authentication use cases: register, login, logout, refresh,
    change password, forgot/reset password, authenticate.

    Business Rules:
    - Single active session per identity (SessionLedger)
    - Login accepts username or email; an identifier with '@' is an email
    - Unknown accounts cost one bcrypt verification, like wrong passwords
    - With conceal_account_existence, unknown accounts look like bad
      credentials on login and like success on forgot-password
    - Password change and reset both end the active session
    - Every method returns a Result; unexpected faults become INTERNAL
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: AuthSettings,
        email_sender: IEmailSender,
        token_issuer: Optional[TokenIssuer] = None,
    ):
        self.uow = uow
        self.settings = settings
        self.credentials = CredentialVerifier(settings.bcrypt_rounds)
        self.tokens = token_issuer or TokenIssuer(settings)
        self.ledger = SessionLedger(uow, self.tokens)
        self.reset_flow = PasswordResetFlow(uow, self.credentials, email_sender, settings)

    async def _find_by_identifier(self, identifier: str) -> Optional[Identity]:
        identifier = identifier.strip().lower()
        if "@" in identifier:
            return await self.uow.identities.get_by_email(identifier)
        return await self.uow.identities.get_by_username(identifier)

    @guard_internal("register")
    async def register(self, command: RegisterCommand) -> Result[PublicIdentityView]:
        """
        Create a new identity.

        Returns:
            Result with PublicIdentityView, or Error:
            - VALIDATION_FAILED: profile or password policy violated
            - ALREADY_EXISTS: username or email taken
        """
        username = command.username.strip().lower()
        email = command.email.strip().lower()
        full_name = command.full_name.strip()

        profile_check = validate_profile(username, email, full_name)
        if profile_check.is_err():
            return Return.err(profile_check.error)

        password_check = self.credentials.validate_password(command.password)
        if password_check.is_err():
            return Return.err(password_check.error)

        async with self.uow:
            if (
                await self.uow.identities.get_by_username(username) is not None
                or await self.uow.identities.get_by_email(email) is not None
            ):
                return Return.err(Error(AuthErrorCode.ALREADY_EXISTS, "User already exists"))

            # Hash only once uniqueness is confirmed
            identity = Identity(
                username=username,
                email=email,
                full_name=full_name,
                avatar=command.avatar,
                cover_image=command.cover_image,
                password_hash=self.credentials.hash(command.password),
            )

            try:
                identity = await self.uow.identities.create(identity)
                await self.uow.commit()
            except IntegrityError:
                # Lost a race against a concurrent registration
                await self.uow.rollback()
                return Return.err(Error(AuthErrorCode.ALREADY_EXISTS, "User already exists"))

            logger.info(f"Identity registered: {identity.id}")
            return Return.ok(to_public_view(identity))

    @guard_internal("login")
    async def login(self, identifier: str, password: str) -> Result[LoginResponse]:
        """
        Verify credentials and open the (single) session.

        Returns:
            Result with LoginResponse, or Error:
            - NOT_FOUND: no such account (only when existence is not concealed)
            - INVALID_CREDENTIALS: wrong password
        """
        async with self.uow:
            identity = await self._find_by_identifier(identifier)

            if identity is None:
                self.credentials.burn_verification()
                if self.settings.conceal_account_existence:
                    return Return.err(
                        Error(AuthErrorCode.INVALID_CREDENTIALS, "Invalid user credentials")
                    )
                return Return.err(Error(AuthErrorCode.NOT_FOUND, "User does not exist"))

            if not self.credentials.verify(password, identity.password_hash):
                logger.info(f"Failed login for identity {identity.id}")
                return Return.err(
                    Error(AuthErrorCode.INVALID_CREDENTIALS, "Invalid user credentials")
                )

            pair = await self.ledger.issue(identity)

            return Return.ok(
                LoginResponse(
                    identity=to_public_view(identity),
                    access_token=pair.access_token,
                    refresh_token=pair.refresh_token,
                )
            )

    @guard_internal("logout")
    async def logout(self, identity_id: UUID) -> Result[None]:
        """End the active session. Idempotent"""
        async with self.uow:
            await self.ledger.revoke(identity_id)
            return Return.ok(None)

    @guard_internal("refresh")
    async def refresh(self, presented_refresh_token: str) -> Result[TokenPair]:
        """Rotate the refresh token (see SessionLedger.rotate)"""
        async with self.uow:
            return await self.ledger.rotate(presented_refresh_token)

    @guard_internal("change_password")
    async def change_password(
        self, identity_id: UUID, old_password: str, new_password: str
    ) -> Result[None]:
        """
        Replace the password after checking the old one; ends the session.

        Returns:
            Result with None, or Error:
            - VALIDATION_FAILED: new password violates the policy
            - NOT_FOUND: identity does not exist
            - INVALID_OLD_PASSWORD: old password does not verify
        """
        password_check = self.credentials.validate_password(new_password)
        if password_check.is_err():
            return Return.err(password_check.error)

        async with self.uow:
            identity = await self.uow.identities.get_by_id(identity_id)
            if identity is None:
                return Return.err(Error(AuthErrorCode.NOT_FOUND, "User not found"))

            if not self.credentials.verify(old_password, identity.password_hash):
                return Return.err(
                    Error(AuthErrorCode.INVALID_OLD_PASSWORD, "Invalid old password")
                )

            await self.uow.identities.update_fields(
                identity_id, {"password_hash": self.credentials.hash(new_password)}
            )
            # Commits the new hash together with the cleared session
            await self.ledger.revoke(identity_id)

            logger.info(f"Password changed for identity {identity_id}")
            return Return.ok(None)

    @guard_internal("forgot_password")
    async def forgot_password(self, email: str) -> Result[None]:
        """
        Issue and email a reset code.

        Returns:
            Result with None, or Error:
            - NOT_FOUND: unknown email (only when existence is not concealed)
            - DELIVERY_FAILED: code stored but email not accepted
        """
        async with self.uow:
            result = await self.reset_flow.request(email.strip().lower())

        if (
            result.is_err()
            and result.error.code == AuthErrorCode.NOT_FOUND
            and self.settings.conceal_account_existence
        ):
            return Return.ok(None)
        return result

    @guard_internal("reset_password")
    async def reset_password(self, code: str, new_password: str) -> Result[None]:
        """
        Redeem a reset code for a new password.

        Returns:
            Result with None, or Error:
            - VALIDATION_FAILED: new password violates the policy
            - INVALID_OR_EXPIRED_CODE: wrong, used or expired code
        """
        password_check = self.credentials.validate_password(new_password)
        if password_check.is_err():
            return Return.err(password_check.error)

        async with self.uow:
            return await self.reset_flow.consume(code, new_password)

    @guard_internal("authenticate")
    async def authenticate(self, access_token: str) -> Result[PublicIdentityView]:
        """
        Resolve an access token to the identity it was issued for.

        Returns:
            Result with PublicIdentityView, or INVALID_TOKEN Error
        """
        verified = self.tokens.verify(access_token, TokenKind.access)
        if verified.is_err():
            return Return.err(verified.error)

        async with self.uow:
            identity = await self.uow.identities.get_by_id(verified.value.identity_id)
            if identity is None:
                return Return.err(Error(AuthErrorCode.INVALID_TOKEN, "Invalid access token"))
            return Return.ok(to_public_view(identity))
