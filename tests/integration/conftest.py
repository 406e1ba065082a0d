import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.app import create_app
from src.app.services.auth_settings import AuthSettings
from src.depends import get_auth_settings, get_email_sender, get_unit_of_work
from src.domain.entities import Identity
from tests.fixtures.in_memory import RecordingEmailSender


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def outbox():
    return RecordingEmailSender()


@pytest.fixture
def auth_settings():
    return AuthSettings(
        access_token_secret="it-access-secret",
        refresh_token_secret="it-refresh-secret",
        bcrypt_rounds=4,
    )


@pytest_asyncio.fixture
async def client(db_session, outbox, auth_settings):
    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_auth_settings] = lambda: auth_settings
    app.dependency_overrides[get_email_sender] = lambda: outbox

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def load_identity(db_session):
    """Fresh read of an identity row, bypassing cached attribute state"""

    async def _load(username: str) -> Identity:
        db_session.expire_all()
        result = await db_session.exec(select(Identity).where(Identity.username == username))
        return result.first()

    return _load


@pytest_asyncio.fixture
async def registered(client):
    """Alice, registered through the API"""
    response = await client.post(
        "/users/register",
        json={
            "username": "alice",
            "email": "alice@example.com",
            "full_name": "Alice Liddell",
            "password": "secret123",
        },
    )
    assert response.status_code == 201
    return response.json()
