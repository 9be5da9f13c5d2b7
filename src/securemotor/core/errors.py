# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Error kinds carried inside ``Err`` results by every lifecycle operation."""

from enum import Enum

from attrs import field, frozen
from beartype import beartype
from pydantic import ValidationError as PydanticValidationError


class ErrorKind(str, Enum):
    """Machine-readable failure categories."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONFLICT = "CONFLICT"


@frozen
class ServiceError:
    """A specific, user-presentable failure of a lifecycle operation."""

    kind: ErrorKind = field()
    message: str = field()
    field_name: str | None = field(default=None)

    def __str__(self) -> str:
        if self.field_name:
            return f"{self.kind.value}: {self.field_name}: {self.message}"
        return f"{self.kind.value}: {self.message}"

    @classmethod
    @beartype
    def validation(cls, message: str, field_name: str | None = None) -> "ServiceError":
        """Malformed or out-of-range input."""
        return cls(ErrorKind.VALIDATION, message, field_name)

    @classmethod
    @beartype
    def not_found(cls, entity: str, entity_id: object) -> "ServiceError":
        """Referenced record does not exist."""
        return cls(ErrorKind.NOT_FOUND, f"{entity} {entity_id} not found")

    @classmethod
    @beartype
    def invalid_state(cls, message: str) -> "ServiceError":
        """Operation is illegal for the record's current status."""
        return cls(ErrorKind.INVALID_STATE, message)

    @classmethod
    @beartype
    def invalid_transition(cls, from_status: str, to_status: str) -> "ServiceError":
        """Status change that is not in the transition table."""
        return cls(
            ErrorKind.INVALID_TRANSITION,
            f"Invalid status transition from {from_status} to {to_status}",
        )

    @classmethod
    @beartype
    def unauthorized(cls, entity: str, entity_id: object) -> "ServiceError":
        """Caller does not own the record."""
        return cls(ErrorKind.UNAUTHORIZED, f"{entity} {entity_id} belongs to another owner")

    @classmethod
    @beartype
    def conflict(cls, message: str) -> "ServiceError":
        """A unique value could not be allocated."""
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    @beartype
    def from_pydantic(cls, exc: PydanticValidationError) -> "ServiceError":
        """Convert the first pydantic error into a VALIDATION error."""
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        return cls(ErrorKind.VALIDATION, first.get("msg", str(exc)), location or None)
