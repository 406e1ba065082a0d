from uuid import uuid4

import pytest

from src.adapter.repositories.identity_repository import IdentityRepository
from src.domain.entities import Identity


@pytest.fixture
def repository(db_session):
    return IdentityRepository(db_session)


async def create_alice(repository: IdentityRepository) -> Identity:
    return await repository.create(
        Identity(
            username="alice",
            email="alice@example.com",
            full_name="Alice Liddell",
            password_hash="$2b$04$" + "x" * 53,
        )
    )


@pytest.mark.asyncio
async def test_lookups_are_case_insensitive(repository):
    alice = await create_alice(repository)

    assert (await repository.get_by_username("ALICE")).id == alice.id
    assert (await repository.get_by_email("Alice@Example.com")).id == alice.id
    assert await repository.get_by_username("bob") is None


@pytest.mark.asyncio
async def test_compare_and_update_swaps_on_match(repository):
    alice = await create_alice(repository)
    await repository.update_fields(alice.id, {"active_refresh_token": "token-1"})

    assert await repository.compare_and_update(alice.id, "active_refresh_token", "token-1", "token-2")
    assert (await repository.get_by_id(alice.id)).active_refresh_token == "token-2"


@pytest.mark.asyncio
async def test_compare_and_update_refuses_stale_value(repository):
    alice = await create_alice(repository)
    await repository.update_fields(alice.id, {"active_refresh_token": "token-2"})

    swapped = await repository.compare_and_update(alice.id, "active_refresh_token", "token-1", "token-3")

    assert swapped is False
    assert (await repository.get_by_id(alice.id)).active_refresh_token == "token-2"


@pytest.mark.asyncio
async def test_compare_and_update_against_none(repository):
    alice = await create_alice(repository)

    assert await repository.compare_and_update(alice.id, "reset_code", None, "123456")
    assert not await repository.compare_and_update(alice.id, "reset_code", None, "654321")


@pytest.mark.asyncio
async def test_compare_and_update_with_extra_fields(repository):
    alice = await create_alice(repository)
    await repository.update_fields(
        alice.id, {"reset_code": "123456", "active_refresh_token": "token-1"}
    )

    consumed = await repository.compare_and_update(
        alice.id,
        "reset_code",
        "123456",
        None,
        extra={"active_refresh_token": None, "password_hash": "$2b$04$" + "y" * 53},
    )

    assert consumed
    stored = await repository.get_by_id(alice.id)
    assert stored.reset_code is None
    assert stored.active_refresh_token is None
    assert stored.password_hash.endswith("y" * 53)


@pytest.mark.asyncio
async def test_get_by_reset_code(repository):
    alice = await create_alice(repository)
    await repository.update_fields(alice.id, {"reset_code": "123456"})

    assert (await repository.get_by_reset_code("123456")).id == alice.id
    assert await repository.get_by_reset_code("654321") is None


@pytest.mark.asyncio
async def test_update_fields_unknown_identity(repository):
    assert await repository.update_fields(uuid4(), {"full_name": "Nobody Here"}) is None
