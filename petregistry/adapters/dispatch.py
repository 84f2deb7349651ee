"""Operation dispatch shared by the CLI and HTTP adapters.

Maps operation names and JSON-style argument dicts onto RegistryPort
calls, and converts domain results into JSON-compatible values.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any

from petregistry.core.errors import RecordValidationError
from petregistry.core.models import (
    AdoptionPayload,
    PetImage,
    PetPayload,
    ShelterPayload,
    UpdateAdoptionPayload,
    UpdatePetPayload,
    UpdateShelterPayload,
    UserPayload,
)
from petregistry.core.ports import RegistryPort
from petregistry.core.validation import is_non_empty_text

logger = logging.getLogger(__name__)


class UnknownOperationError(ValueError):
    """Raised when an operation name is not recognized."""


def serialize(value: Any) -> Any:
    """Convert domain objects into JSON-compatible values."""
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    return value


def error_envelope(operation: str, kind: str, detail: str) -> dict[str, Any]:
    """Build the tagged failure body shared by the CLI and HTTP adapters."""
    return {
        "status": "error",
        "operation": operation,
        "error": {"kind": kind, "detail": detail},
    }


def _require(args: dict[str, Any], name: str) -> Any:
    if args.get(name) is None:
        raise RecordValidationError(f"Missing required parameter: {name}")
    return args[name]


def _require_id(args: dict[str, Any], name: str) -> str:
    value = _require(args, name)
    if not is_non_empty_text(value):
        raise RecordValidationError(f"Parameter {name} must be a non-empty string")
    return value


Handler = Callable[[RegistryPort, dict[str, Any], str], Awaitable[Any]]

# Operations whose handler reads the caller identity.
IDENTITY_OPERATIONS = frozenset(
    {"add_user", "get_user_by_owner", "create_shelter", "get_shelter_by_owner"}
)

OPERATIONS: dict[str, Handler] = {
    # Users
    "add_user": lambda r, a, c: r.add_user(c, UserPayload.from_mapping(a)),
    "get_user": lambda r, a, c: r.get_user(_require_id(a, "user_id")),
    "get_users": lambda r, a, c: r.get_users(),
    "get_user_by_owner": lambda r, a, c: r.get_user_by_owner(c),
    # Shelters
    "create_shelter": lambda r, a, c: r.create_shelter(
        c, ShelterPayload.from_mapping(a)
    ),
    "get_shelter": lambda r, a, c: r.get_shelter(_require_id(a, "shelter_id")),
    "get_shelters": lambda r, a, c: r.get_shelters(),
    "get_shelter_by_owner": lambda r, a, c: r.get_shelter_by_owner(c),
    "update_shelter_info": lambda r, a, c: r.update_shelter_info(
        UpdateShelterPayload.from_mapping(a)
    ),
    # Pets
    "add_pet": lambda r, a, c: r.add_pet(PetPayload.from_mapping(a)),
    "add_pet_image": lambda r, a, c: r.add_pet_image(PetImage.from_mapping(a)),
    "get_pet": lambda r, a, c: r.get_pet(_require_id(a, "pet_id")),
    "get_pets": lambda r, a, c: r.get_pets(),
    "get_pets_not_adopted": lambda r, a, c: r.get_pets_not_adopted(),
    "update_pet_info": lambda r, a, c: r.update_pet_info(
        UpdatePetPayload.from_mapping(a)
    ),
    "search_pets_by_species": lambda r, a, c: r.search_pets_by_species(
        _require(a, "species")
    ),
    # Adoptions
    "file_for_adoption": lambda r, a, c: r.file_for_adoption(
        AdoptionPayload.from_mapping(a)
    ),
    "get_adoption_record": lambda r, a, c: r.get_adoption_record(
        _require_id(a, "adoption_id")
    ),
    "get_adoption_records": lambda r, a, c: r.get_adoption_records(),
    "update_adoption_record": lambda r, a, c: r.update_adoption_record(
        UpdateAdoptionPayload.from_mapping(a)
    ),
    "complete_adoption": lambda r, a, c: r.complete_adoption(
        _require_id(a, "adoption_id")
    ),
    "fail_adoption": lambda r, a, c: r.fail_adoption(_require_id(a, "adoption_id")),
}


async def dispatch(
    registry: RegistryPort,
    operation: str,
    args: dict[str, Any],
    caller: str | None = None,
) -> Any:
    """Run one registry operation and return its serialized result.

    Args:
        registry: RegistryPort implementation.
        operation: Operation name (e.g. 'file_for_adoption').
        args: Operation arguments.
        caller: Caller identity, required by identity operations.

    Returns:
        JSON-compatible result (dict, list or None).

    Raises:
        UnknownOperationError: If operation is not recognized.
        ValueError: If an identity operation has no caller.
        RegistryError: If the registry rejects the operation.
    """
    handler = OPERATIONS.get(operation)
    if handler is None:
        raise UnknownOperationError(f"Unknown operation: {operation}")

    if operation in IDENTITY_OPERATIONS and (not caller or not caller.strip()):
        raise ValueError(f"Caller identity is required for {operation}")

    result = await handler(registry, args, caller or "")
    logger.debug(f"Dispatched {operation}", extra={"operation": operation})
    return serialize(result)
