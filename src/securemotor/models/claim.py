# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Claim domain models with strict validation.

This module defines the claim intake form, the reviewer's status update,
and the core claim entity itself.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import Field, field_validator, model_validator

from .base import BaseModelConfig, IdentifiableModel

CLAIM_NUMBER_PATTERN = r"^[A-Z]{2}-[0-9]{4}-[0-9]{4}$"
MIN_DESCRIPTION_LENGTH = 20
MAX_EVIDENCE_ITEMS = 20


class IncidentType(str, Enum):
    """Enumeration of incident types."""

    ACCIDENT = "accident"
    THEFT = "theft"
    FIRE = "fire"
    VANDALISM = "vandalism"
    NATURAL_DISASTER = "natural-disaster"
    OTHER = "other"


class ClaimStatus(str, Enum):
    """Enumeration of claim processing states."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under-review"
    APPROVED = "approved"
    REJECTED = "rejected"
    SETTLED = "settled"


# Statuses in which a reviewer may record an approved amount.
AMOUNT_BEARING_STATUSES = frozenset({ClaimStatus.APPROVED, ClaimStatus.SETTLED})


@beartype
class ClaimCreate(BaseModelConfig):
    """Claim intake form."""

    policy_id: UUID = Field(..., description="Policy the claim is made against")

    incident_date: date = Field(..., description="Date when the incident occurred")

    incident_type: IncidentType = Field(..., description="Kind of incident")

    description: str = Field(
        ...,
        min_length=MIN_DESCRIPTION_LENGTH,
        max_length=5000,
        description="Detailed description of the incident",
    )

    estimated_amount: Decimal = Field(
        ...,
        gt=Decimal("0"),
        decimal_places=2,
        max_digits=12,
        description="Claimant's estimate of the damage",
    )

    evidence_urls: list[str] = Field(
        default_factory=list,
        max_length=MAX_EVIDENCE_ITEMS,
        description="URLs of uploaded evidence images",
    )

    @field_validator("evidence_urls")
    @classmethod
    def validate_evidence_urls(cls, v: list[str]) -> list[str]:
        """Evidence is stored by URL only."""
        for url in v:
            if not url.startswith(("http://", "https://", "gs://")):
                raise ValueError(f"Evidence reference is not a URL: {url}")
        return v


@beartype
class ClaimStatusUpdate(BaseModelConfig):
    """Reviewer's status change, optionally recording the approved amount."""

    status: ClaimStatus = Field(..., description="New claim status")

    approved_amount: Decimal | None = Field(
        None,
        ge=Decimal("0"),
        decimal_places=2,
        max_digits=12,
        description="Settlement amount agreed by the reviewer",
    )

    @model_validator(mode="after")
    def validate_amount_status(self) -> "ClaimStatusUpdate":
        """Approved amounts only accompany approval or settlement."""
        if (
            self.approved_amount is not None
            and self.status not in AMOUNT_BEARING_STATUSES
        ):
            raise ValueError(
                "Approved amount can only be recorded when approving or settling"
            )
        return self


@beartype
class Claim(IdentifiableModel):
    """Complete claim entity with all attributes."""

    policy_id: UUID = Field(..., description="Reference to the associated policy")

    claim_number: str = Field(
        ...,
        pattern=CLAIM_NUMBER_PATTERN,
        description="Human-readable number, e.g. CL-2025-0042",
    )

    incident_date: date
    incident_type: IncidentType
    description: str = Field(..., min_length=MIN_DESCRIPTION_LENGTH, max_length=5000)

    estimated_amount: Decimal = Field(..., gt=Decimal("0"), max_digits=12)

    approved_amount: Decimal | None = Field(None, ge=Decimal("0"), max_digits=12)

    evidence_urls: list[str] = Field(default_factory=list, max_length=MAX_EVIDENCE_ITEMS)

    status: ClaimStatus = Field(..., description="Current claim status")

    submitted_at: datetime | None = Field(
        None, description="Timestamp when claim was submitted"
    )

    resolved_at: datetime | None = Field(
        None, description="Timestamp when claim was rejected or settled"
    )

    @model_validator(mode="after")
    def validate_timestamps(self) -> "Claim":
        """Validate timestamp relationships."""
        if self.status == ClaimStatus.DRAFT:
            if self.submitted_at is not None:
                raise ValueError("Draft claims cannot have a submission timestamp")
        elif self.submitted_at is None:
            raise ValueError("Submitted claims must have a submission timestamp")

        if self.submitted_at and self.submitted_at < self.created_at:
            raise ValueError("Submission timestamp cannot be before creation")

        if self.resolved_at and self.submitted_at:
            if self.resolved_at < self.submitted_at:
                raise ValueError("Resolution timestamp cannot be before submission")

        return self
