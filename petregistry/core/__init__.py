"""Core domain logic for the pet adoption registry.

This package contains zero external dependencies and represents
the pure business logic of the application. All adapters and
external integrations are handled by the adapters package.
"""

from .errors import (
    InvalidPayloadError,
    NotFoundError,
    RecordValidationError,
    RegistryError,
)
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

__all__ = [
    "AdoptionPayload",
    "AdoptionRecord",
    "AdoptionStatus",
    "InvalidPayloadError",
    "NotFoundError",
    "Pet",
    "PetImage",
    "PetPayload",
    "PetStatus",
    "RecordValidationError",
    "RegistryError",
    "Shelter",
    "ShelterPayload",
    "UpdateAdoptionPayload",
    "UpdatePetPayload",
    "UpdateShelterPayload",
    "User",
    "UserPayload",
]
