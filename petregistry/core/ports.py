"""Port interfaces for the pet adoption registry.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - RecordStorePort: Ordered key-value persistence for entity records

2. **Driving Ports** (adapters/external systems call into core)
   - RegistryPort: User, shelter, pet and adoption operations
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from .models import (
    AdoptionPayload,
    AdoptionRecord,
    Pet,
    PetImage,
    PetPayload,
    Shelter,
    ShelterPayload,
    UpdateAdoptionPayload,
    UpdatePetPayload,
    UpdateShelterPayload,
    User,
    UserPayload,
)

# A single staged write: (namespace, key, record).
RecordWrite = tuple[str, str, dict[str, Any]]


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class RecordStorePort(ABC):
    """Port for an ordered, durable key-value store of serialized records.

    Records live in independent namespaces (one per entity type) keyed
    by entity id. Records are plain JSON-compatible dicts.

    Implementations must handle:
    - Atomicity of a single insert
    - Atomicity of a batch of inserts (all applied or none)
    - Insertion ordering for values()
    """

    @abstractmethod
    async def get(self, namespace: str, key: str) -> dict[str, Any] | None:
        """Retrieve a record by key.

        Args:
            namespace: Record namespace (e.g. "pets").
            key: Entity id.

        Returns:
            The stored record, or None if absent.

        Raises:
            Exception: If the store is unavailable.
        """

    @abstractmethod
    async def insert(
        self, namespace: str, key: str, record: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Insert or replace a record.

        Args:
            namespace: Record namespace.
            key: Entity id.
            record: Record to store.

        Returns:
            The record previously stored under key, or None.

        Raises:
            Exception: If the store is unavailable.
        """

    @abstractmethod
    async def values(self, namespace: str) -> list[dict[str, Any]]:
        """Return all records in a namespace in insertion order.

        Replacing an existing key keeps its original position.

        Raises:
            Exception: If the store is unavailable.
        """

    @abstractmethod
    async def apply_batch(self, writes: Sequence[RecordWrite]) -> None:
        """Insert several records atomically.

        Either every write is applied or none is.

        Args:
            writes: Sequence of (namespace, key, record) tuples.

        Raises:
            Exception: If the store is unavailable. No write is applied.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the store."""


# ============================================================================
# DRIVING PORTS (Adapters/external systems call into core)
# ============================================================================


class RegistryPort(ABC):
    """Port for registry operations.

    Driving port: the CLI and HTTP server invoke these methods.
    Implementations live in the core (registry_service.py).

    Write operations raise RegistryError subclasses (NotFoundError,
    InvalidPayloadError, RecordValidationError) for caller-caused
    failures. Single-entity lookups return None when the id is unknown.
    """

    # Users

    @abstractmethod
    async def add_user(self, caller: str, payload: UserPayload) -> User:
        """Register a user owned by caller."""

    @abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        """Look up a user by id."""

    @abstractmethod
    async def get_users(self) -> Sequence[User]:
        """List all users."""

    @abstractmethod
    async def get_user_by_owner(self, caller: str) -> User:
        """Find the user owned by caller.

        Raises:
            NotFoundError: If caller owns no user.
        """

    # Shelters

    @abstractmethod
    async def create_shelter(self, caller: str, payload: ShelterPayload) -> Shelter:
        """Register a shelter owned by caller."""

    @abstractmethod
    async def get_shelter(self, shelter_id: str) -> Shelter | None:
        """Look up a shelter by id."""

    @abstractmethod
    async def get_shelters(self) -> Sequence[Shelter]:
        """List all shelters."""

    @abstractmethod
    async def get_shelter_by_owner(self, caller: str) -> Shelter:
        """Find the shelter owned by caller.

        Raises:
            NotFoundError: If caller owns no shelter.
        """

    @abstractmethod
    async def update_shelter_info(self, patch: UpdateShelterPayload) -> Shelter:
        """Update a shelter's phone number and email."""

    # Pets

    @abstractmethod
    async def add_pet(self, payload: PetPayload) -> Pet:
        """List a new pet under an existing shelter."""

    @abstractmethod
    async def add_pet_image(self, image: PetImage) -> PetImage:
        """Replace a pet's image reference."""

    @abstractmethod
    async def get_pet(self, pet_id: str) -> Pet | None:
        """Look up a pet by id."""

    @abstractmethod
    async def get_pets(self) -> Sequence[Pet]:
        """List all pets."""

    @abstractmethod
    async def get_pets_not_adopted(self) -> Sequence[Pet]:
        """List pets still available for adoption."""

    @abstractmethod
    async def update_pet_info(self, patch: UpdatePetPayload) -> Pet:
        """Update a pet's health status and age."""

    @abstractmethod
    async def search_pets_by_species(self, species: str) -> Sequence[Pet]:
        """List pets whose species matches, ignoring case."""

    # Adoptions

    @abstractmethod
    async def file_for_adoption(self, payload: AdoptionPayload) -> AdoptionRecord:
        """File a pending adoption for a user and an available pet."""

    @abstractmethod
    async def get_adoption_record(self, adoption_id: str) -> AdoptionRecord | None:
        """Look up an adoption record by id."""

    @abstractmethod
    async def get_adoption_records(self) -> Sequence[AdoptionRecord]:
        """List all adoption records."""

    @abstractmethod
    async def update_adoption_record(
        self, patch: UpdateAdoptionPayload
    ) -> AdoptionRecord:
        """Replace an adoption record's contact and reason fields."""

    @abstractmethod
    async def complete_adoption(self, adoption_id: str) -> AdoptionRecord:
        """Complete a pending adoption and mark its pet adopted."""

    @abstractmethod
    async def fail_adoption(self, adoption_id: str) -> AdoptionRecord:
        """Fail a pending adoption, leaving its pet available."""
