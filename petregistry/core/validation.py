"""Payload validation predicates.

Pure functions with no side effects. Each payload validator takes a
mapping of field name to value (a payload converted with
`dataclasses.asdict`, or an existing record merged with a patch) and
returns True only if every field passes.
"""

import re
from collections.abc import Mapping
from typing import Any

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_NUMBER_PATTERN = re.compile(r"[0-9]{10,15}")


def is_non_empty_text(value: Any) -> bool:
    """Check that value is a string with non-whitespace content."""
    return isinstance(value, str) and len(value.strip()) > 0


def is_valid_email(value: Any) -> bool:
    """Check that value looks like local@domain.tld."""
    return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_phone_number(value: Any) -> bool:
    """Check that value is 10 to 15 ASCII digits with no separators."""
    return (
        isinstance(value, str)
        and PHONE_NUMBER_PATTERN.fullmatch(value) is not None
    )


def _all_text(payload: Mapping[str, Any], *fields: str) -> bool:
    return all(is_non_empty_text(payload.get(name)) for name in fields)


def validate_user_payload(payload: Mapping[str, Any]) -> bool:
    return (
        _all_text(payload, "name", "address")
        and is_valid_phone_number(payload.get("phone_number"))
        and is_valid_email(payload.get("email"))
    )


def validate_shelter_payload(payload: Mapping[str, Any]) -> bool:
    return (
        _all_text(payload, "name", "location")
        and is_valid_phone_number(payload.get("phone_number"))
        and is_valid_email(payload.get("email"))
    )


def validate_pet_payload(payload: Mapping[str, Any]) -> bool:
    return _all_text(
        payload,
        "name",
        "species",
        "breed",
        "gender",
        "age",
        "pet_image",
        "description",
        "health_status",
        "shelter_id",
    )


def validate_adoption_payload(payload: Mapping[str, Any]) -> bool:
    return _all_text(
        payload, "pet_id", "user_id", "address", "reason_for_adoption"
    ) and is_valid_phone_number(payload.get("user_phone_number"))


def validate_adoption_update(payload: Mapping[str, Any]) -> bool:
    """Validate the mutable contact and reason fields of an adoption record."""
    return _all_text(
        payload, "user_name", "address", "reason_for_adoption"
    ) and is_valid_phone_number(payload.get("user_phone_number"))
