from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from uuid import UUID

from src.domain.entities import Identity


class IIdentityRepository(ABC):
    """Identity repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, identity_id: UUID) -> Optional[Identity]:
        """Get identity by ID"""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[Identity]:
        """Get identity by (lowercase) username"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Identity]:
        """Get identity by (lowercase) email address"""
        pass

    @abstractmethod
    async def get_by_reset_code(self, code: str) -> Optional[Identity]:
        """Get the identity holding this pending reset code"""
        pass

    @abstractmethod
    async def create(self, identity: Identity) -> Identity:
        """Create a new identity. Raises IntegrityError on duplicate username/email"""
        pass

    @abstractmethod
    async def update_fields(self, identity_id: UUID, patch: Dict[str, Any]) -> Optional[Identity]:
        """Apply a field patch unconditionally. Returns the updated identity or None"""
        pass

    @abstractmethod
    async def compare_and_update(
        self,
        identity_id: UUID,
        field: str,
        expected: Any,
        new_value: Any,
        extra: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Atomically set `field` to `new_value` (plus any `extra` fields)
        only if its current value equals `expected`.

        Returns True if the row was updated.
        """
        pass
