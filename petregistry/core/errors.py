"""Error types returned by registry operations.

Every failure a caller can cause is a RegistryError subclass tagged
with a `kind`. Adapters turn these into tagged failure responses via
`to_dict()` instead of letting them escape.
"""

from typing import Any


class RegistryError(Exception):
    """Base class for caller-facing registry failures."""

    kind = "RegistryError"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "detail": self.detail}


class NotFoundError(RegistryError):
    """A referenced entity id does not exist."""

    kind = "NotFound"


class InvalidPayloadError(RegistryError):
    """The request is well-formed but violates a business rule."""

    kind = "InvalidPayload"


class RecordValidationError(RegistryError):
    """The payload failed structural or format validation."""

    kind = "ValidationError"
