import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

from src.app.services.auth_settings import AuthSettings
from src.app.services.credential_verifier import CredentialVerifier
from src.domain.entities import Identity
from tests.fixtures.in_memory import InMemoryUnitOfWork, RecordingEmailSender

TEST_PASSWORD = "secret123"


@pytest.fixture
def settings():
    """Low bcrypt work factor keeps hashing fast in tests"""
    return AuthSettings(
        access_token_secret="test-access-secret",
        refresh_token_secret="test-refresh-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture
def credentials(settings):
    return CredentialVerifier(settings.bcrypt_rounds)


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.identities = MagicMock()
    uow.identities.get_by_id = AsyncMock(return_value=None)
    uow.identities.get_by_username = AsyncMock(return_value=None)
    uow.identities.get_by_email = AsyncMock(return_value=None)
    uow.identities.get_by_reset_code = AsyncMock(return_value=None)
    uow.identities.create = AsyncMock()
    uow.identities.update_fields = AsyncMock()
    uow.identities.compare_and_update = AsyncMock(return_value=True)
    return uow


@pytest.fixture
def memory_uow():
    return InMemoryUnitOfWork()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def make_identity(credentials):
    def _make(username="alice", email="alice@example.com", full_name="Alice Liddell", password=TEST_PASSWORD):
        return Identity(
            username=username,
            email=email,
            full_name=full_name,
            password_hash=credentials.hash(password),
        )

    return _make


@pytest_asyncio.fixture
async def alice(memory_uow, make_identity):
    """Alice stored in the in-memory repository"""
    return await memory_uow.identities.create(make_identity())
