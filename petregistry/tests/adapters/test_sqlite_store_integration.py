"""Integration tests for the SQLite record store."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from petregistry.adapters.store.sqlite import SQLiteRecordStore
from petregistry.core.errors import InvalidPayloadError
from petregistry.core.models import (
    AdoptionPayload,
    AdoptionRecord,
    PetPayload,
    PetStatus,
    ShelterPayload,
    UserPayload,
)
from petregistry.core.registry_service import RegistryService


@pytest.fixture
async def temp_db() -> tuple[SQLiteRecordStore, Path]:
    """Create a temporary SQLite database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        store = SQLiteRecordStore(str(db_path))
        await store._init_schema()
        yield store, db_path
        await store.close()


@pytest.mark.asyncio
async def test_insert_get_and_previous(
    temp_db: tuple[SQLiteRecordStore, Path],
) -> None:
    store, _ = temp_db

    assert await store.insert("pets", "p1", {"id": "p1", "name": "Rex"}) is None
    previous = await store.insert("pets", "p1", {"id": "p1", "name": "Max"})

    assert previous == {"id": "p1", "name": "Rex"}
    assert await store.get("pets", "p1") == {"id": "p1", "name": "Max"}
    assert await store.get("pets", "missing") is None


@pytest.mark.asyncio
async def test_values_in_insertion_order(
    temp_db: tuple[SQLiteRecordStore, Path],
) -> None:
    store, _ = temp_db

    for key in ["c", "a", "b"]:
        await store.insert("pets", key, {"id": key})
    await store.insert("pets", "c", {"id": "c", "updated": True})
    await store.insert("users", "u1", {"id": "u1"})

    assert [r["id"] for r in await store.values("pets")] == ["c", "a", "b"]
    assert [r["id"] for r in await store.values("users")] == ["u1"]


@pytest.mark.asyncio
async def test_apply_batch_writes_all_records(
    temp_db: tuple[SQLiteRecordStore, Path],
) -> None:
    store, _ = temp_db

    await store.apply_batch(
        [
            ("pets", "p1", {"id": "p1"}),
            ("shelters", "s1", {"id": "s1", "pets": ["p1"]}),
        ]
    )

    assert await store.get("shelters", "s1") == {"id": "s1", "pets": ["p1"]}
    assert await store.get("pets", "p1") == {"id": "p1"}


@pytest.mark.asyncio
async def test_apply_batch_rolls_back_on_failure(
    temp_db: tuple[SQLiteRecordStore, Path],
) -> None:
    store, _ = temp_db

    # A set is not JSON serializable, so encoding fails before any write
    with pytest.raises(TypeError):
        await store.apply_batch(
            [
                ("pets", "p1", {"id": "p1"}),
                ("shelters", "s1", {"id": "s1", "pets": {"p1"}}),
            ]
        )

    assert await store.get("pets", "p1") is None
    assert await store.get("shelters", "s1") is None


@pytest.mark.asyncio
async def test_corrupt_body_raises_value_error(
    temp_db: tuple[SQLiteRecordStore, Path],
) -> None:
    """A record body that is not JSON fails loudly on read."""
    store, _ = temp_db

    conn = await store._get_connection()
    try:
        await conn.execute(
            "INSERT INTO records (namespace, key, body) VALUES (?, ?, ?)",
            ("pets", "bad", "{not json"),
        )
        await conn.commit()
    finally:
        await store._return_connection(conn)

    with pytest.raises(ValueError, match="pets/bad is corrupt"):
        await store.get("pets", "bad")


@pytest.mark.asyncio
async def test_non_object_body_raises_value_error(
    temp_db: tuple[SQLiteRecordStore, Path],
) -> None:
    store, _ = temp_db

    conn = await store._get_connection()
    try:
        await conn.execute(
            "INSERT INTO records (namespace, key, body) VALUES (?, ?, ?)",
            ("pets", "list", "[1, 2]"),
        )
        await conn.commit()
    finally:
        await store._return_connection(conn)

    with pytest.raises(ValueError, match="not an object"):
        await store.values("pets")


@pytest.mark.asyncio
async def test_records_survive_reopen(
    temp_db: tuple[SQLiteRecordStore, Path],
) -> None:
    store, db_path = temp_db
    await store.insert("users", "u1", {"id": "u1"})
    await store.close()

    reopened = SQLiteRecordStore(str(db_path))
    try:
        assert await reopened.get("users", "u1") == {"id": "u1"}
    finally:
        await reopened.close()


@pytest.mark.asyncio
async def test_adoption_flow_on_sqlite(
    temp_db: tuple[SQLiteRecordStore, Path],
) -> None:
    """Full registry flow persisted through SQLite."""
    store, _ = temp_db
    service = RegistryService(store=store)

    shelter = await service.create_shelter(
        "shelter-owner",
        ShelterPayload(
            name="Happy Tails",
            location="Springfield",
            phone_number="5550001111",
            email="hello@happytails.org",
        ),
    )
    pet = await service.add_pet(
        PetPayload(
            name="Rex",
            species="Dog",
            breed="Beagle",
            gender="male",
            age="3",
            pet_image="rex.png",
            description="Friendly",
            health_status="vaccinated",
            shelter_id=shelter.id,
        )
    )
    user = await service.add_user(
        "adopter",
        UserPayload(
            name="Ada",
            phone_number="5551234567",
            email="ada@example.com",
            address="12 Analytical Way",
        ),
    )
    adoption = await service.file_for_adoption(
        AdoptionPayload(
            pet_id=pet.id,
            user_id=user.id,
            user_phone_number="5551234567",
            address="12 Analytical Way",
            reason_for_adoption="Garden",
        )
    )
    await service.complete_adoption(adoption.id)

    assert (await service.get_pet(pet.id)).status == PetStatus.ADOPTED
    assert (await service.get_shelter(shelter.id)).pets == [pet.id]
    assert (await service.get_user(user.id)).applications == [adoption.id]


def _shelter_payload() -> ShelterPayload:
    return ShelterPayload(
        name="Happy Tails",
        location="Springfield",
        phone_number="5550001111",
        email="hello@happytails.org",
    )


def _pet_payload(shelter_id: str, name: str = "Rex") -> PetPayload:
    return PetPayload(
        name=name,
        species="Dog",
        breed="Beagle",
        gender="male",
        age="3",
        pet_image="rex.png",
        description="Friendly",
        health_status="vaccinated",
        shelter_id=shelter_id,
    )


@pytest.mark.asyncio
async def test_concurrent_filings_on_sqlite_leave_one_pending(
    temp_db: tuple[SQLiteRecordStore, Path],
) -> None:
    """Concurrent filings for one pet are serialized by the service."""
    store, _ = temp_db
    service = RegistryService(store=store)

    shelter = await service.create_shelter("shelter-owner", _shelter_payload())
    pet = await service.add_pet(_pet_payload(shelter.id))
    users = [
        await service.add_user(
            f"adopter-{n}",
            UserPayload(
                name=f"Adopter {n}",
                phone_number="5551234567",
                email="ada@example.com",
                address="12 Analytical Way",
            ),
        )
        for n in range(5)
    ]

    results = await asyncio.gather(
        *(
            service.file_for_adoption(
                AdoptionPayload(
                    pet_id=pet.id,
                    user_id=user.id,
                    user_phone_number="5551234567",
                    address="12 Analytical Way",
                    reason_for_adoption="Garden",
                )
            )
            for user in users
        ),
        return_exceptions=True,
    )

    assert len([r for r in results if isinstance(r, AdoptionRecord)]) == 1
    assert len([r for r in results if isinstance(r, InvalidPayloadError)]) == 4
    pending = [a for a in await service.get_adoption_records() if a.is_pending]
    assert len(pending) == 1


@pytest.mark.asyncio
async def test_concurrent_add_pet_on_sqlite_keeps_shelter_list(
    temp_db: tuple[SQLiteRecordStore, Path],
) -> None:
    store, _ = temp_db
    service = RegistryService(store=store)
    shelter = await service.create_shelter("shelter-owner", _shelter_payload())

    pets = await asyncio.gather(
        *(service.add_pet(_pet_payload(shelter.id, f"Pet {n}")) for n in range(5))
    )

    stored = await service.get_shelter(shelter.id)
    assert sorted(stored.pets) == sorted(p.id for p in pets)
    assert len(await service.get_pets()) == 5
