# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote domain models: vehicle, coverage, premium breakdown and the quote itself."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Literal
from uuid import UUID

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig, IdentifiableModel


class FuelType(str, Enum):
    """Vehicle fuel types."""

    PETROL = "petrol"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


class CoverageType(str, Enum):
    """Coverage tiers, cheapest first."""

    THIRD_PARTY = "third-party"
    FIRE_THEFT = "fire-theft"
    COMPREHENSIVE = "comprehensive"


class QuoteStatus(str, Enum):
    """Stored quote states; ``expired`` is normally derived from ``expires_at``."""

    DRAFT = "draft"
    ACTIVE = "active"
    EXPIRED = "expired"
    CONVERTED = "converted"


@beartype
class VehicleDetails(BaseModelConfig):
    """Vehicle being insured."""

    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1900, description="Year of manufacture")
    registration_number: str = Field(..., min_length=1, max_length=20)
    engine_size: str = Field(..., min_length=1, max_length=20)
    fuel_type: FuelType
    market_value: Decimal = Field(
        ...,
        gt=Decimal("0"),
        max_digits=12,
        decimal_places=2,
        description="Current market value of the vehicle",
    )
    color: str = Field(..., min_length=1, max_length=50)
    chassis_number: str = Field(..., min_length=1, max_length=32, description="VIN")

    @property
    def description(self) -> str:
        """Display form used on policies, e.g. ``2020 Toyota Camry``."""
        return f"{self.year} {self.make} {self.model}"


@beartype
class CoverageDetails(BaseModelConfig):
    """Coverage requested for the vehicle.

    ``duration_months`` and ``voluntary_excess`` are recorded with the quote but
    do not influence the premium.
    """

    coverage_type: CoverageType
    start_date: date
    duration_months: Literal[6, 12] = Field(default=12)
    additional_drivers: int = Field(default=0, ge=0, le=20)
    voluntary_excess: int = Field(default=0, ge=0)


@beartype
class PremiumBreakdown(BaseModelConfig):
    """Itemized premium in whole currency units (K)."""

    base_premium: int = Field(..., ge=0)
    coverage_fee: int = Field(..., ge=0)
    vehicle_age_adjustment: int = Field(..., ge=0)
    additional_drivers_fee: int = Field(..., ge=0)
    subtotal: int = Field(..., ge=0)
    tax: int = Field(..., ge=0)
    total_premium: int = Field(..., ge=0)

    @model_validator(mode="after")
    def validate_totals(self) -> "PremiumBreakdown":
        """Subtotal and total must add up."""
        parts = (
            self.base_premium
            + self.coverage_fee
            + self.vehicle_age_adjustment
            + self.additional_drivers_fee
        )
        if self.subtotal != parts:
            raise ValueError("Subtotal must equal the sum of premium components")
        if self.total_premium != self.subtotal + self.tax:
            raise ValueError("Total premium must equal subtotal plus tax")
        return self


@beartype
class QuoteCreate(BaseModelConfig):
    """Submitted quote form."""

    vehicle: VehicleDetails
    coverage: CoverageDetails


_VEHICLE_FIELDS = frozenset(VehicleDetails.model_fields)
_COVERAGE_FIELDS = frozenset(CoverageDetails.model_fields)


@beartype
class QuoteUpdate(BaseModelConfig):
    """Partial edit of a quote's inputs.

    Premium and status are not accepted here: the premium is always
    recomputed and the status only moves through lifecycle operations.
    """

    make: str | None = Field(None, min_length=1, max_length=100)
    model: str | None = Field(None, min_length=1, max_length=100)
    year: int | None = Field(None, ge=1900)
    registration_number: str | None = Field(None, min_length=1, max_length=20)
    engine_size: str | None = Field(None, min_length=1, max_length=20)
    fuel_type: FuelType | None = None
    market_value: Decimal | None = Field(None, gt=Decimal("0"), max_digits=12)
    color: str | None = Field(None, min_length=1, max_length=50)
    chassis_number: str | None = Field(None, min_length=1, max_length=32)
    coverage_type: CoverageType | None = None
    start_date: date | None = None
    duration_months: Literal[6, 12] | None = None
    additional_drivers: int | None = Field(None, ge=0, le=20)
    voluntary_excess: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "QuoteUpdate":
        """Ensure at least one field is provided for update."""
        supplied = (getattr(self, name) for name in self.model_fields_set)
        if all(value is None for value in supplied):
            raise ValueError("At least one field must be provided for update")
        return self

    def vehicle_changes(self) -> dict[str, Any]:
        """Supplied fields that belong to the vehicle."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name in _VEHICLE_FIELDS and getattr(self, name) is not None
        }

    def coverage_changes(self) -> dict[str, Any]:
        """Supplied fields that belong to the coverage selection."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name in _COVERAGE_FIELDS and getattr(self, name) is not None
        }


@beartype
class Quote(IdentifiableModel):
    """A priced, time-limited offer of cover."""

    vehicle: VehicleDetails
    coverage: CoverageDetails
    premium_breakdown: PremiumBreakdown
    status: QuoteStatus = Field(..., description="Last explicit status transition")
    expires_at: datetime = Field(..., description="End of the purchase window")
    converted_at: datetime | None = Field(
        None, description="When the quote was converted"
    )
    policy_id: UUID | None = Field(
        None, description="Policy issued from this quote"
    )

    @property
    def premium(self) -> int:
        """Total premium payable."""
        return self.premium_breakdown.total_premium

    @model_validator(mode="after")
    def validate_lifecycle_fields(self) -> "Quote":
        """Keep conversion stamps consistent with the stored status."""
        if self.expires_at <= self.created_at:
            raise ValueError("Quote must expire after it is created")
        if self.status == QuoteStatus.CONVERTED and self.converted_at is None:
            raise ValueError("Converted quotes must have a conversion timestamp")
        if self.status != QuoteStatus.CONVERTED and (
            self.converted_at is not None or self.policy_id is not None
        ):
            raise ValueError("Only converted quotes can reference a conversion")
        return self
