"""
Update Account Use Case

Updates the editable profile fields of an identity.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthErrorCode, PublicIdentityView, to_public_view
from src.domain.result import Error, Result, Return

logger = logging.getLogger(__name__)


class UpdateAccountUseCase:
    """
    Use case for updating account details.

    Business Rules:
    - Only full name and email are editable here
    - Email is stored lowercase and must stay unique
    - Credential fields are never touched
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, identity_id: UUID, full_name: str, email: str
    ) -> Result[PublicIdentityView]:
        """
        Execute update account use case.

        Args:
            identity_id: Identity UUID from the access token
            full_name: New full name
            email: New email address

        Returns:
            Result with updated PublicIdentityView, or Error
        """
        full_name = full_name.strip()
        email = email.strip().lower()

        if len(full_name) < 3:
            return Return.err(
                Error(
                    AuthErrorCode.VALIDATION_FAILED,
                    "Full name must be at least 3 characters long",
                )
            )
        if "@" not in email:
            return Return.err(Error(AuthErrorCode.VALIDATION_FAILED, "Invalid email address"))

        async with self.uow:
            identity = await self.uow.identities.get_by_id(identity_id)
            if identity is None:
                return Return.err(Error(AuthErrorCode.NOT_FOUND, "User not found"))

            owner = await self.uow.identities.get_by_email(email)
            if owner is not None and owner.id != identity_id:
                return Return.err(Error(AuthErrorCode.ALREADY_EXISTS, "Email already exists"))

            try:
                identity = await self.uow.identities.update_fields(
                    identity_id, {"full_name": full_name, "email": email}
                )
                await self.uow.commit()
            except IntegrityError:
                await self.uow.rollback()
                return Return.err(Error(AuthErrorCode.ALREADY_EXISTS, "Email already exists"))

            logger.info(f"Account details updated for identity {identity_id}")
            return Return.ok(to_public_view(identity))
