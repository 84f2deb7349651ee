"""Domain models for the pet adoption registry.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PetStatus(Enum):
    """Availability of a pet.

    A pet only moves NOT_ADOPTED → ADOPTED, and only when an adoption
    record referencing it is completed.
    """

    NOT_ADOPTED = "notAdopted"
    ADOPTED = "adopted"


class AdoptionStatus(Enum):
    """Lifecycle states for an adoption record.

    State transitions follow a directed workflow:
    - PENDING: Initial state when a user files for adoption
    - COMPLETED: Adoption approved; the pet is now adopted
    - FAILED: Adoption rejected; the pet stays available

    COMPLETED and FAILED are terminal.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class User:
    """A registered adopter.

    `owner` is the caller identity that created the record.
    `applications` lists adoption record ids in filing order.
    """

    id: str
    owner: str
    name: str
    phone_number: str
    email: str
    address: str
    applications: list[str] = field(default_factory=list)

    def add_application(self, adoption_id: str) -> None:
        """Append an adoption record id to this user's applications."""
        if adoption_id in self.applications:
            raise ValueError(f"Application {adoption_id} already recorded")
        self.applications.append(adoption_id)


@dataclass
class Shelter:
    """An animal shelter listing pets for adoption."""

    id: str
    owner: str
    name: str
    location: str
    phone_number: str
    email: str
    pets: list[str] = field(default_factory=list)

    def add_pet(self, pet_id: str) -> None:
        """Append a pet id to this shelter's pet list."""
        if pet_id in self.pets:
            raise ValueError(f"Pet {pet_id} already listed by shelter {self.id}")
        self.pets.append(pet_id)


@dataclass
class Pet:
    """A pet listed by a shelter."""

    id: str
    name: str
    species: str
    breed: str
    gender: str
    age: str
    pet_image: str
    description: str
    health_status: str
    shelter_id: str
    status: PetStatus = PetStatus.NOT_ADOPTED

    @property
    def is_available(self) -> bool:
        return self.status == PetStatus.NOT_ADOPTED

    def mark_adopted(self) -> None:
        """Transition pet to adopted status."""
        if self.status == PetStatus.ADOPTED:
            raise ValueError(f"Pet {self.id} is already adopted")
        self.status = PetStatus.ADOPTED


@dataclass
class AdoptionRecord:
    """A user's application to adopt a pet.

    `pet_name` and `user_name` are snapshots taken at filing time and are
    not kept in sync with later edits to the pet or user.

    State Transitions:
        Valid state transitions are:
        - PENDING → COMPLETED (complete)
        - PENDING → FAILED (fail)

    Note: This dataclass is intentionally mutable to allow updating
    status and contact fields after creation.
    """

    id: str
    pet_id: str
    user_id: str
    pet_name: str
    user_name: str
    user_phone_number: str
    address: str
    reason_for_adoption: str
    date_of_adoption: str  # ISO-8601
    status: AdoptionStatus = AdoptionStatus.PENDING

    @property
    def is_pending(self) -> bool:
        return self.status == AdoptionStatus.PENDING

    def complete(self) -> None:
        """Transition adoption to completed status."""
        if self.status != AdoptionStatus.PENDING:
            raise ValueError(
                f"Only pending adoptions can be completed, current status: "
                f"{self.status.value}"
            )
        self.status = AdoptionStatus.COMPLETED

    def fail(self) -> None:
        """Transition adoption to failed status."""
        if self.status != AdoptionStatus.PENDING:
            raise ValueError(
                f"Only pending adoptions can be failed, current status: "
                f"{self.status.value}"
            )
        self.status = AdoptionStatus.FAILED


# ============================================================================
# Payloads
# ============================================================================
#
# Payloads carry caller input as received. They are not validated on
# construction; the validation layer decides whether they are acceptable.


@dataclass(frozen=True)
class UserPayload:
    name: str
    phone_number: str
    email: str
    address: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UserPayload":
        return cls(
            name=data.get("name"),
            phone_number=data.get("phone_number"),
            email=data.get("email"),
            address=data.get("address"),
        )


@dataclass(frozen=True)
class ShelterPayload:
    name: str
    location: str
    phone_number: str
    email: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ShelterPayload":
        return cls(
            name=data.get("name"),
            location=data.get("location"),
            phone_number=data.get("phone_number"),
            email=data.get("email"),
        )


@dataclass(frozen=True)
class UpdateShelterPayload:
    id: str
    phone_number: str
    email: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UpdateShelterPayload":
        return cls(
            id=data.get("id"),
            phone_number=data.get("phone_number"),
            email=data.get("email"),
        )


@dataclass(frozen=True)
class PetPayload:
    name: str
    species: str
    breed: str
    gender: str
    age: str
    pet_image: str
    description: str
    health_status: str
    shelter_id: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PetPayload":
        return cls(
            name=data.get("name"),
            species=data.get("species"),
            breed=data.get("breed"),
            gender=data.get("gender"),
            age=data.get("age"),
            pet_image=data.get("pet_image"),
            description=data.get("description"),
            health_status=data.get("health_status"),
            shelter_id=data.get("shelter_id"),
        )


@dataclass(frozen=True)
class PetImage:
    pet_id: str
    pet_image: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PetImage":
        return cls(pet_id=data.get("pet_id"), pet_image=data.get("pet_image"))


@dataclass(frozen=True)
class UpdatePetPayload:
    pet_id: str
    health_status: str
    age: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UpdatePetPayload":
        return cls(
            pet_id=data.get("pet_id"),
            health_status=data.get("health_status"),
            age=data.get("age"),
        )


@dataclass(frozen=True)
class AdoptionPayload:
    pet_id: str
    user_id: str
    user_phone_number: str
    address: str
    reason_for_adoption: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AdoptionPayload":
        return cls(
            pet_id=data.get("pet_id"),
            user_id=data.get("user_id"),
            user_phone_number=data.get("user_phone_number"),
            address=data.get("address"),
            reason_for_adoption=data.get("reason_for_adoption"),
        )


@dataclass(frozen=True)
class UpdateAdoptionPayload:
    adoption_id: str
    user_name: str
    user_phone_number: str
    address: str
    reason_for_adoption: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UpdateAdoptionPayload":
        return cls(
            adoption_id=data.get("adoption_id"),
            user_name=data.get("user_name"),
            user_phone_number=data.get("user_phone_number"),
            address=data.get("address"),
            reason_for_adoption=data.get("reason_for_adoption"),
        )
