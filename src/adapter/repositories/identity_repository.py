from datetime import UTC, datetime
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.identity_repository import IIdentityRepository
from src.domain.entities import Identity


class IdentityRepository(IIdentityRepository):
    """Identity repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, identity_id: UUID) -> Optional[Identity]:
        """Get identity by ID"""
        stmt = select(Identity).where(Identity.id == identity_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_username(self, username: str) -> Optional[Identity]:
        """Get identity by (lowercase) username"""
        stmt = select(Identity).where(Identity.username == username.lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[Identity]:
        """Get identity by (lowercase) email address"""
        stmt = select(Identity).where(Identity.email == email.lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_reset_code(self, code: str) -> Optional[Identity]:
        """
        Get the identity holding this pending reset code.

        Codes are regenerated on collision when issued, so more than one
        holder means the record set is inconsistent; nobody gets a match.
        """
        stmt = select(Identity).where(Identity.reset_code == code).limit(2)
        result = await self.session.exec(stmt)
        matches = list(result.all())
        if len(matches) != 1:
            return None
        return matches[0]

    async def create(self, identity: Identity) -> Identity:
        """Create a new identity"""
        self.session.add(identity)
        await self.session.flush()
        await self.session.refresh(identity)
        return identity

    async def update_fields(self, identity_id: UUID, patch: Dict[str, Any]) -> Optional[Identity]:
        """Apply a field patch unconditionally"""
        identity = await self.get_by_id(identity_id)
        if identity is None:
            return None

        for field, value in patch.items():
            setattr(identity, field, value)
        identity.updated_at = datetime.now(UTC)

        self.session.add(identity)
        await self.session.flush()
        await self.session.refresh(identity)
        return identity

    async def compare_and_update(
        self,
        identity_id: UUID,
        field: str,
        expected: Any,
        new_value: Any,
        extra: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Conditional single-statement UPDATE.

        The WHERE clause carries the expected value, so the check and the
        write happen in one statement and two callers racing on the same
        expected value cannot both succeed.
        """
        column = getattr(Identity, field)
        condition = column.is_(None) if expected is None else column == expected

        values = {field: new_value, "updated_at": datetime.now(UTC)}
        if extra:
            values.update(extra)

        stmt = (
            update(Identity)
            .where(Identity.id == identity_id, condition)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1
