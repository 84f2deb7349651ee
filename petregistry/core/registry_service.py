"""Registry service: implements RegistryPort for all registry operations.

This is the core service that enforces cross-entity rules: a pet needs
an existing shelter, an adoption needs an existing user and an
available pet, adoption records only move out of PENDING once, and the
shelter→pets and user→applications lists stay in step with the
records they reference.

Every read-modify-write sequence runs under one service-wide lock, and
writes that touch more than one record go to the store as a single
atomic batch.
"""

import asyncio
import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import asdict, replace
from datetime import UTC, datetime

from .errors import InvalidPayloadError, NotFoundError, RecordValidationError
from .models import (
    AdoptionPayload,
    AdoptionRecord,
    AdoptionStatus,
    Pet,
    PetImage,
    PetPayload,
    PetStatus,
    Shelter,
    ShelterPayload,
    UpdateAdoptionPayload,
    UpdatePetPayload,
    UpdateShelterPayload,
    User,
    UserPayload,
)
from .ports import RecordStorePort, RegistryPort
from .repositories import (
    AdoptionRepository,
    PetRepository,
    ShelterRepository,
    UserRepository,
    WriteBatch,
)
from .validation import (
    is_non_empty_text,
    validate_adoption_payload,
    validate_adoption_update,
    validate_pet_payload,
    validate_shelter_payload,
    validate_user_payload,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


def _check_id(entity_id: object, label: str) -> None:
    if not is_non_empty_text(entity_id):
        raise RecordValidationError(f"{label} id must be a non-empty string")


class RegistryService(RegistryPort):
    """Core implementation of RegistryPort.

    Coordinates the user, shelter, pet and adoption repositories.
    All mutations are logged for audit trails.
    """

    def __init__(
        self,
        store: RecordStorePort,
        enforce_unique_owner: bool = False,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        """Initialize the registry service.

        Args:
            store: RecordStorePort implementation for persistence.
            enforce_unique_owner: Reject a second user registration from
                a caller that already owns a user.
            clock: Source of the adoption filing timestamp.
                Defaults to the current UTC time.
            id_factory: Source of new entity ids. Defaults to UUID4 strings.
        """
        self.store = store
        self.users = UserRepository(store)
        self.shelters = ShelterRepository(store)
        self.pets = PetRepository(store)
        self.adoptions = AdoptionRepository(store)
        self.enforce_unique_owner = enforce_unique_owner
        self.clock = clock or _utc_now
        self.id_factory = id_factory or _new_id
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def add_user(self, caller: str, payload: UserPayload) -> User:
        """Register a user owned by caller.

        Raises:
            RecordValidationError: If the payload is malformed.
            InvalidPayloadError: If unique owners are enforced and caller
                already owns a user.
        """
        if not validate_user_payload(asdict(payload)):
            raise RecordValidationError(
                "Invalid user payload. Please check all fields."
            )

        async with self._lock:
            if self.enforce_unique_owner:
                existing = await self.users.find_by_owner(caller)
                if existing is not None:
                    raise InvalidPayloadError(
                        f"User with owner={caller} already exists: {existing.id}"
                    )

            user = User(
                id=self.id_factory(),
                owner=caller,
                name=payload.name,
                phone_number=payload.phone_number,
                email=payload.email,
                address=payload.address,
            )
            await self.users.insert(user)

        logger.info(
            f"User {user.id} added",
            extra={"user_id": user.id, "owner": caller},
        )
        return user

    async def get_user(self, user_id: str) -> User | None:
        return await self.users.get(user_id)

    async def get_users(self) -> Sequence[User]:
        return await self.users.values()

    async def get_user_by_owner(self, caller: str) -> User:
        user = await self.users.find_by_owner(caller)
        if user is None:
            raise NotFoundError(f"User with owner={caller} not found")
        return user

    # ------------------------------------------------------------------
    # Shelters
    # ------------------------------------------------------------------

    async def create_shelter(self, caller: str, payload: ShelterPayload) -> Shelter:
        """Register a shelter owned by caller.

        Raises:
            RecordValidationError: If the payload is malformed.
        """
        if not validate_shelter_payload(asdict(payload)):
            raise RecordValidationError(
                "Invalid shelter payload. Please check all fields."
            )

        shelter = Shelter(
            id=self.id_factory(),
            owner=caller,
            name=payload.name,
            location=payload.location,
            phone_number=payload.phone_number,
            email=payload.email,
        )
        async with self._lock:
            await self.shelters.insert(shelter)

        logger.info(
            f"Shelter {shelter.id} created",
            extra={"shelter_id": shelter.id, "owner": caller},
        )
        return shelter

    async def get_shelter(self, shelter_id: str) -> Shelter | None:
        return await self.shelters.get(shelter_id)

    async def get_shelters(self) -> Sequence[Shelter]:
        return await self.shelters.values()

    async def get_shelter_by_owner(self, caller: str) -> Shelter:
        shelter = await self.shelters.find_by_owner(caller)
        if shelter is None:
            raise NotFoundError(f"Shelter with owner={caller} not found")
        return shelter

    async def update_shelter_info(self, patch: UpdateShelterPayload) -> Shelter:
        """Update a shelter's phone number and email.

        The whole merged record is validated, not just the patch.

        Raises:
            NotFoundError: If the shelter doesn't exist.
            RecordValidationError: If the merged shelter is invalid.
        """
        _check_id(patch.id, "Shelter")
        async with self._lock:
            shelter = await self.shelters.get(patch.id)
            if shelter is None:
                raise NotFoundError(f"Shelter {patch.id} not found")

            updated = replace(
                shelter, phone_number=patch.phone_number, email=patch.email
            )
            if not validate_shelter_payload(asdict(updated)):
                raise RecordValidationError(
                    "Invalid shelter payload. Please check all fields."
                )
            await self.shelters.insert(updated)

        logger.info(
            f"Shelter {updated.id} updated",
            extra={"shelter_id": updated.id},
        )
        return updated

    # ------------------------------------------------------------------
    # Pets
    # ------------------------------------------------------------------

    async def add_pet(self, payload: PetPayload) -> Pet:
        """List a new pet and append it to its shelter's pet list.

        The pet and the shelter are written in one batch.

        Raises:
            RecordValidationError: If the payload is malformed.
            NotFoundError: If the shelter doesn't exist.
        """
        if not validate_pet_payload(asdict(payload)):
            raise RecordValidationError(
                "Invalid pet payload. Please check all fields."
            )

        async with self._lock:
            shelter = await self.shelters.get(payload.shelter_id)
            if shelter is None:
                raise NotFoundError(f"Shelter {payload.shelter_id} not found")

            pet = Pet(
                id=self.id_factory(),
                name=payload.name,
                species=payload.species,
                breed=payload.breed,
                gender=payload.gender,
                age=payload.age,
                pet_image=payload.pet_image,
                description=payload.description,
                health_status=payload.health_status,
                shelter_id=shelter.id,
                status=PetStatus.NOT_ADOPTED,
            )
            shelter.add_pet(pet.id)

            batch = WriteBatch(self.store)
            batch.put(self.pets, pet)
            batch.put(self.shelters, shelter)
            await batch.commit()

        logger.info(
            f"Pet {pet.id} added to shelter {shelter.id}",
            extra={"pet_id": pet.id, "shelter_id": shelter.id},
        )
        return pet

    async def add_pet_image(self, image: PetImage) -> PetImage:
        """Replace a pet's image reference.

        Raises:
            NotFoundError: If the pet doesn't exist.
            RecordValidationError: If the resulting pet is invalid.
        """
        _check_id(image.pet_id, "Pet")
        async with self._lock:
            pet = await self.pets.get(image.pet_id)
            if pet is None:
                raise NotFoundError(f"Pet {image.pet_id} not found")

            updated = replace(pet, pet_image=image.pet_image)
            if not validate_pet_payload(asdict(updated)):
                raise RecordValidationError("Invalid pet image.")
            await self.pets.insert(updated)

        logger.info(f"Image replaced for pet {pet.id}", extra={"pet_id": pet.id})
        return image

    async def get_pet(self, pet_id: str) -> Pet | None:
        return await self.pets.get(pet_id)

    async def get_pets(self) -> Sequence[Pet]:
        return await self.pets.values()

    async def get_pets_not_adopted(self) -> Sequence[Pet]:
        return [pet for pet in await self.pets.values() if pet.is_available]

    async def update_pet_info(self, patch: UpdatePetPayload) -> Pet:
        """Update a pet's health status and age.

        Raises:
            NotFoundError: If the pet doesn't exist.
            RecordValidationError: If the merged pet is invalid.
        """
        _check_id(patch.pet_id, "Pet")
        async with self._lock:
            pet = await self.pets.get(patch.pet_id)
            if pet is None:
                raise NotFoundError(f"Pet {patch.pet_id} not found")

            updated = replace(
                pet, health_status=patch.health_status, age=patch.age
            )
            if not validate_pet_payload(asdict(updated)):
                raise RecordValidationError(
                    "Invalid pet payload. Please check all fields."
                )
            await self.pets.insert(updated)

        logger.info(f"Pet {updated.id} updated", extra={"pet_id": updated.id})
        return updated

    async def search_pets_by_species(self, species: str) -> Sequence[Pet]:
        if not isinstance(species, str):
            return []
        wanted = species.lower()
        return [
            pet for pet in await self.pets.values() if pet.species.lower() == wanted
        ]

    # ------------------------------------------------------------------
    # Adoptions
    # ------------------------------------------------------------------

    async def file_for_adoption(self, payload: AdoptionPayload) -> AdoptionRecord:
        """File a pending adoption for a user and an available pet.

        The pet keeps its NOT_ADOPTED status while the adoption is
        pending. A second filing for the same pet is rejected until the
        pending record is completed or failed.

        Contact fields on the record are copied from the stored user,
        alongside snapshots of the pet and user names.

        Raises:
            RecordValidationError: If the payload is malformed.
            NotFoundError: If the user or pet doesn't exist.
            InvalidPayloadError: If the pet is adopted or already has a
                pending adoption.
        """
        if not validate_adoption_payload(asdict(payload)):
            raise RecordValidationError(
                "Invalid adoption payload. Please check all fields."
            )

        async with self._lock:
            user = await self.users.get(payload.user_id)
            if user is None:
                raise NotFoundError(f"User {payload.user_id} not found")

            pet = await self.pets.get(payload.pet_id)
            if pet is None:
                raise NotFoundError(f"Pet {payload.pet_id} not found")

            if not pet.is_available:
                raise InvalidPayloadError(
                    f"Pet {pet.id} is not available for adoption"
                )

            pending = await self.adoptions.find_pending_for_pet(pet.id)
            if pending is not None:
                raise InvalidPayloadError(
                    f"Pet {pet.id} already has a pending adoption: {pending.id}"
                )

            adoption = AdoptionRecord(
                id=self.id_factory(),
                pet_id=pet.id,
                user_id=user.id,
                pet_name=pet.name,
                user_name=user.name,
                user_phone_number=user.phone_number,
                address=user.address,
                reason_for_adoption=payload.reason_for_adoption,
                date_of_adoption=self.clock().isoformat(),
                status=AdoptionStatus.PENDING,
            )
            user.add_application(adoption.id)

            batch = WriteBatch(self.store)
            batch.put(self.adoptions, adoption)
            batch.put(self.users, user)
            await batch.commit()

        logger.info(
            f"Adoption {adoption.id} filed",
            extra={
                "adoption_id": adoption.id,
                "pet_id": pet.id,
                "user_id": user.id,
            },
        )
        return adoption

    async def get_adoption_record(self, adoption_id: str) -> AdoptionRecord | None:
        return await self.adoptions.get(adoption_id)

    async def get_adoption_records(self) -> Sequence[AdoptionRecord]:
        return await self.adoptions.values()

    async def update_adoption_record(
        self, patch: UpdateAdoptionPayload
    ) -> AdoptionRecord:
        """Replace an adoption record's contact and reason fields.

        Applies to records in any status.

        Raises:
            NotFoundError: If the adoption record doesn't exist.
            RecordValidationError: If any of the four fields is invalid.
        """
        _check_id(patch.adoption_id, "Adoption record")
        async with self._lock:
            adoption = await self.adoptions.get(patch.adoption_id)
            if adoption is None:
                raise NotFoundError(f"Adoption record {patch.adoption_id} not found")

            if not validate_adoption_update(asdict(patch)):
                raise RecordValidationError("Invalid adoption update payload.")

            updated = replace(
                adoption,
                user_name=patch.user_name,
                user_phone_number=patch.user_phone_number,
                address=patch.address,
                reason_for_adoption=patch.reason_for_adoption,
            )
            await self.adoptions.insert(updated)

        logger.info(
            f"Adoption {updated.id} updated",
            extra={"adoption_id": updated.id, "status": updated.status.value},
        )
        return updated

    async def complete_adoption(self, adoption_id: str) -> AdoptionRecord:
        """Complete a pending adoption and mark its pet adopted.

        The adoption record and the pet are written in one batch.

        Raises:
            NotFoundError: If the adoption record or its pet doesn't exist.
            InvalidPayloadError: If the adoption is not pending.
        """
        async with self._lock:
            adoption = await self.adoptions.get(adoption_id)
            if adoption is None:
                raise NotFoundError(f"Adoption record {adoption_id} not found")

            # Update adoption status using domain guard clause
            try:
                adoption.complete()
            except ValueError as e:
                raise InvalidPayloadError(f"Cannot complete adoption: {e}") from e

            pet = await self.pets.get(adoption.pet_id)
            if pet is None:
                raise NotFoundError(f"Associated pet {adoption.pet_id} not found")

            try:
                pet.mark_adopted()
            except ValueError as e:
                raise InvalidPayloadError(f"Cannot complete adoption: {e}") from e

            batch = WriteBatch(self.store)
            batch.put(self.pets, pet)
            batch.put(self.adoptions, adoption)
            await batch.commit()

        logger.info(
            f"Adoption {adoption_id} completed",
            extra={"adoption_id": adoption_id, "pet_id": pet.id},
        )
        return adoption

    async def fail_adoption(self, adoption_id: str) -> AdoptionRecord:
        """Fail a pending adoption. The pet stays available.

        Raises:
            NotFoundError: If the adoption record doesn't exist.
            InvalidPayloadError: If the adoption is not pending.
        """
        async with self._lock:
            adoption = await self.adoptions.get(adoption_id)
            if adoption is None:
                raise NotFoundError(f"Adoption record {adoption_id} not found")

            try:
                adoption.fail()
            except ValueError as e:
                raise InvalidPayloadError(f"Cannot fail adoption: {e}") from e

            await self.adoptions.insert(adoption)

        logger.info(
            f"Adoption {adoption_id} failed",
            extra={"adoption_id": adoption_id, "pet_id": adoption.pet_id},
        )
        return adoption
