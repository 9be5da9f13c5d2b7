# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Injectable time sources.

Premium age adjustment, quote expiry and policy expiry all depend on "now".
Services take a ``Clock`` instead of reading the wall clock so that every
lifecycle decision is reproducible in tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol, runtime_checkable

from beartype import beartype


@runtime_checkable
class Clock(Protocol):
    """Anything that can tell the current UTC time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time in UTC."""

    @beartype
    def now(self) -> datetime:
        """Return the current timezone-aware UTC time."""
        return datetime.now(timezone.utc)


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, current: datetime) -> None:
        """Start the clock at ``current`` (naive values are taken as UTC)."""
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        self._current = current

    @beartype
    def now(self) -> datetime:
        """Return the frozen time."""
        return self._current

    @beartype
    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward and return the new time."""
        self._current = self._current + delta
        return self._current

    @beartype
    def set(self, current: datetime) -> None:
        """Jump to an absolute time."""
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        self._current = current
