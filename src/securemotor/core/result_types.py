# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Result types for error handling without exceptions."""

from collections.abc import Callable
from typing import Any, Generic, NoReturn, TypeVar, Union

from attrs import field, frozen
from beartype import beartype

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@frozen
class Ok(Generic[T]):
    """Success result wrapper."""

    value: T = field()

    def is_ok(self) -> bool:
        """Check if result is Ok."""
        return True

    def is_err(self) -> bool:
        """Check if result is Error."""
        return False

    def unwrap(self) -> T:
        """Get the success value."""
        return self.value

    def unwrap_or(self, default: Any) -> T:
        """Get the success value."""
        return self.value

    def unwrap_err(self) -> NoReturn:
        """Raise ValueError as this is Ok."""
        raise ValueError("Called unwrap_err on Ok value")

    @beartype
    def map(self, func: Callable[[T], U]) -> "Ok[U]":
        """Transform the success value."""
        return Ok(func(self.value))


@frozen
class Err(Generic[E]):
    """Error result wrapper."""

    error: E = field()

    def is_ok(self) -> bool:
        """Check if result is Ok."""
        return False

    def is_err(self) -> bool:
        """Check if result is Error."""
        return True

    def unwrap(self) -> NoReturn:
        """Raise ValueError as this is Err."""
        raise ValueError(f"Called unwrap on Err value: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Return default value."""
        return default

    def unwrap_err(self) -> E:
        """Get the error value."""
        return self.error

    @beartype
    def map(self, func: Callable[[Any], Any]) -> "Err[E]":
        """No-op for Err values."""
        return self


# Result[T, E] is the union of the two containers, usable in annotations
# and in beartype checks alike.
Result = Union[Ok[T], Err[E]]

