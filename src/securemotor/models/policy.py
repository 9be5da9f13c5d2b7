# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy domain models with strict validation and business rules.

A policy is only ever created by converting a quote, so there is no
public create model: the quote supplies every attribute.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import Field, model_validator

from .base import IdentifiableModel
from .quote import CoverageType

POLICY_NUMBER_PATTERN = r"^[A-Z]{2}-[0-9]{4}-[0-9]{4}$"


class PolicyStatus(str, Enum):
    """Enumeration of policy lifecycle states."""

    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment state recorded at issuance."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


@beartype
class Policy(IdentifiableModel):
    """A bound, paid coverage contract."""

    quote_id: UUID = Field(..., description="Quote this policy was issued from")

    policy_number: str = Field(
        ...,
        pattern=POLICY_NUMBER_PATTERN,
        description="Human-readable number, e.g. SM-2025-0431",
    )

    vehicle_info: str = Field(
        ..., min_length=1, max_length=250, description="Year, make and model"
    )

    coverage_type: CoverageType = Field(..., description="Copied from the quote")

    premium: int = Field(..., gt=0, description="Total premium copied from the quote")

    status: PolicyStatus = Field(..., description="Last explicit status transition")

    payment_status: PaymentStatus = Field(..., description="Payment state")

    start_date: datetime = Field(..., description="When cover begins")

    end_date: datetime = Field(..., description="When cover ends")

    cancelled_at: datetime | None = Field(
        None, description="Timestamp when policy was cancelled"
    )

    @model_validator(mode="after")
    def validate_dates(self) -> "Policy":
        """Ensure end date is after start date."""
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self

    @model_validator(mode="after")
    def validate_cancellation(self) -> "Policy":
        """Ensure cancelled_at is set only when status is CANCELLED."""
        if self.status == PolicyStatus.CANCELLED and not self.cancelled_at:
            raise ValueError("Cancelled policies must have a cancellation timestamp")
        if self.status != PolicyStatus.CANCELLED and self.cancelled_at:
            raise ValueError(
                "Only cancelled policies can have a cancellation timestamp"
            )
        return self
