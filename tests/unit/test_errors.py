"""Unit tests for ServiceError construction."""

import pytest
from pydantic import ValidationError

from securemotor.core.errors import ErrorKind, ServiceError
from securemotor.models.quote import VehicleDetails
from tests.fixtures.test_data import VALID_VEHICLE_DATA


class TestServiceError:
    def test_kinds(self) -> None:
        assert ServiceError.validation("x").kind == ErrorKind.VALIDATION
        assert ServiceError.not_found("Quote", 1).kind == ErrorKind.NOT_FOUND
        assert ServiceError.invalid_state("x").kind == ErrorKind.INVALID_STATE
        assert ServiceError.unauthorized("Quote", 1).kind == ErrorKind.UNAUTHORIZED
        assert ServiceError.conflict("x").kind == ErrorKind.CONFLICT

    def test_invalid_transition_message(self) -> None:
        error = ServiceError.invalid_transition("draft", "approved")

        assert error.kind == ErrorKind.INVALID_TRANSITION
        assert error.message == "Invalid status transition from draft to approved"

    def test_str_includes_field(self) -> None:
        error = ServiceError.validation("too new", "vehicle.year")

        assert str(error) == "VALIDATION: vehicle.year: too new"
        assert str(ServiceError.conflict("taken")) == "CONFLICT: taken"

    def test_from_pydantic_uses_error_location(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            VehicleDetails(**{**VALID_VEHICLE_DATA, "year": 1800})

        error = ServiceError.from_pydantic(exc_info.value)

        assert error.kind == ErrorKind.VALIDATION
        assert error.field_name == "year"
