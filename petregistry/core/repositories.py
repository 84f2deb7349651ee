"""Typed entity repositories over the record store.

One repository per entity type, each owning a namespace in the
RecordStorePort and the conversion between domain models and stored
records. Multi-record writes go through a WriteBatch so the store can
apply them atomically.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from .models import AdoptionRecord, AdoptionStatus, Pet, PetStatus, Shelter, User
from .ports import RecordStorePort, RecordWrite

EntityT = TypeVar("EntityT", User, Shelter, Pet, AdoptionRecord)


class Repository(ABC, Generic[EntityT]):
    """Base accessor mapping one entity type onto a store namespace."""

    namespace: str

    def __init__(self, store: RecordStorePort):
        self.store = store

    @abstractmethod
    def to_record(self, entity: EntityT) -> dict[str, Any]:
        """Serialize an entity to a stored record."""

    @abstractmethod
    def from_record(self, record: dict[str, Any]) -> EntityT:
        """Deserialize a stored record to an entity."""

    async def get(self, entity_id: str) -> EntityT | None:
        record = await self.store.get(self.namespace, entity_id)
        if record is None:
            return None
        return self.from_record(record)

    async def insert(self, entity: EntityT) -> EntityT | None:
        """Store an entity, returning the version it replaced (if any)."""
        previous = await self.store.insert(
            self.namespace, entity.id, self.to_record(entity)
        )
        if previous is None:
            return None
        return self.from_record(previous)

    async def values(self) -> list[EntityT]:
        records = await self.store.values(self.namespace)
        return [self.from_record(record) for record in records]

    def stage(self, entity: EntityT) -> RecordWrite:
        """Build a write for an entity without applying it."""
        return (self.namespace, entity.id, self.to_record(entity))


class UserRepository(Repository[User]):
    namespace = "users"

    def to_record(self, entity: User) -> dict[str, Any]:
        return {
            "id": entity.id,
            "owner": entity.owner,
            "name": entity.name,
            "phone_number": entity.phone_number,
            "email": entity.email,
            "address": entity.address,
            "applications": list(entity.applications),
        }

    def from_record(self, record: dict[str, Any]) -> User:
        return User(
            id=record["id"],
            owner=record["owner"],
            name=record["name"],
            phone_number=record["phone_number"],
            email=record["email"],
            address=record["address"],
            applications=list(record.get("applications", [])),
        )

    async def find_by_owner(self, owner: str) -> User | None:
        """Return the earliest-created user owned by owner.

        Linear scan; there is no owner index in the store.
        """
        for user in await self.values():
            if user.owner == owner:
                return user
        return None


class ShelterRepository(Repository[Shelter]):
    namespace = "shelters"

    def to_record(self, entity: Shelter) -> dict[str, Any]:
        return {
            "id": entity.id,
            "owner": entity.owner,
            "name": entity.name,
            "location": entity.location,
            "phone_number": entity.phone_number,
            "email": entity.email,
            "pets": list(entity.pets),
        }

    def from_record(self, record: dict[str, Any]) -> Shelter:
        return Shelter(
            id=record["id"],
            owner=record["owner"],
            name=record["name"],
            location=record["location"],
            phone_number=record["phone_number"],
            email=record["email"],
            pets=list(record.get("pets", [])),
        )

    async def find_by_owner(self, owner: str) -> Shelter | None:
        """Return the earliest-created shelter owned by owner.

        Linear scan; there is no owner index in the store.
        """
        for shelter in await self.values():
            if shelter.owner == owner:
                return shelter
        return None


class PetRepository(Repository[Pet]):
    namespace = "pets"

    def to_record(self, entity: Pet) -> dict[str, Any]:
        return {
            "id": entity.id,
            "name": entity.name,
            "species": entity.species,
            "breed": entity.breed,
            "gender": entity.gender,
            "age": entity.age,
            "pet_image": entity.pet_image,
            "description": entity.description,
            "health_status": entity.health_status,
            "shelter_id": entity.shelter_id,
            "status": entity.status.value,
        }

    def from_record(self, record: dict[str, Any]) -> Pet:
        return Pet(
            id=record["id"],
            name=record["name"],
            species=record["species"],
            breed=record["breed"],
            gender=record["gender"],
            age=record["age"],
            pet_image=record["pet_image"],
            description=record["description"],
            health_status=record["health_status"],
            shelter_id=record["shelter_id"],
            status=PetStatus(record["status"]),
        )


class AdoptionRepository(Repository[AdoptionRecord]):
    namespace = "adoptions"

    def to_record(self, entity: AdoptionRecord) -> dict[str, Any]:
        return {
            "id": entity.id,
            "pet_id": entity.pet_id,
            "user_id": entity.user_id,
            "pet_name": entity.pet_name,
            "user_name": entity.user_name,
            "user_phone_number": entity.user_phone_number,
            "address": entity.address,
            "reason_for_adoption": entity.reason_for_adoption,
            "date_of_adoption": entity.date_of_adoption,
            "status": entity.status.value,
        }

    def from_record(self, record: dict[str, Any]) -> AdoptionRecord:
        return AdoptionRecord(
            id=record["id"],
            pet_id=record["pet_id"],
            user_id=record["user_id"],
            pet_name=record["pet_name"],
            user_name=record["user_name"],
            user_phone_number=record["user_phone_number"],
            address=record["address"],
            reason_for_adoption=record["reason_for_adoption"],
            date_of_adoption=record["date_of_adoption"],
            status=AdoptionStatus(record["status"]),
        )

    async def find_pending_for_pet(self, pet_id: str) -> AdoptionRecord | None:
        for adoption in await self.values():
            if adoption.pet_id == pet_id and adoption.is_pending:
                return adoption
        return None


class WriteBatch:
    """Collects entity writes and applies them in one store batch."""

    def __init__(self, store: RecordStorePort):
        self.store = store
        self.writes: list[RecordWrite] = []

    def put(self, repository: Repository[Any], entity: Any) -> None:
        self.writes.append(repository.stage(entity))

    async def commit(self) -> None:
        if not self.writes:
            return
        await self.store.apply_batch(self.writes)
        self.writes = []
