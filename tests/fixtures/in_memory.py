"""
In-memory IIdentityRepository / UnitOfWork / IEmailSender doubles.

State changes apply immediately; commit/rollback are only counted.
"""

from datetime import UTC, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from src.app.repositories.identity_repository import IIdentityRepository
from src.app.services.email_sender import IEmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Identity


class InMemoryIdentityRepository(IIdentityRepository):
    def __init__(self):
        self.rows: Dict[UUID, Identity] = {}

    async def get_by_id(self, identity_id: UUID) -> Optional[Identity]:
        return self.rows.get(identity_id)

    async def get_by_username(self, username: str) -> Optional[Identity]:
        username = username.lower()
        return next((row for row in self.rows.values() if row.username == username), None)

    async def get_by_email(self, email: str) -> Optional[Identity]:
        email = email.lower()
        return next((row for row in self.rows.values() if row.email == email), None)

    async def get_by_reset_code(self, code: str) -> Optional[Identity]:
        matches: List[Identity] = [row for row in self.rows.values() if row.reset_code == code]
        return matches[0] if len(matches) == 1 else None

    async def create(self, identity: Identity) -> Identity:
        for row in self.rows.values():
            if row.username == identity.username or row.email == identity.email:
                raise IntegrityError("INSERT INTO identities", {}, Exception("UNIQUE constraint failed"))
        self.rows[identity.id] = identity
        return identity

    async def update_fields(self, identity_id: UUID, patch: Dict[str, Any]) -> Optional[Identity]:
        identity = self.rows.get(identity_id)
        if identity is None:
            return None
        for field, value in patch.items():
            setattr(identity, field, value)
        identity.updated_at = datetime.now(UTC)
        return identity

    async def compare_and_update(
        self,
        identity_id: UUID,
        field: str,
        expected: Optional[str],
        new_value: Optional[str],
        extra: Optional[Dict[str, Any]] = None,
    ) -> bool:
        identity = self.rows.get(identity_id)
        if identity is None or getattr(identity, field) != expected:
            return False
        setattr(identity, field, new_value)
        for name, value in (extra or {}).items():
            setattr(identity, name, value)
        identity.updated_at = datetime.now(UTC)
        return True


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, repository: Optional[InMemoryIdentityRepository] = None):
        self.identities = repository or InMemoryIdentityRepository()
        self.commits = 0
        self.rollbacks = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


class RecordingEmailSender(IEmailSender):
    """Collects outgoing messages instead of sending them"""

    def __init__(self, accept: bool = True):
        self.accept = accept
        self.sent: List[Dict[str, str]] = []

    async def send(self, to: str, subject: str, html_body: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "html_body": html_body})
        return self.accept
