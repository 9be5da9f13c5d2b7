# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Domain models for the SecureMotor core."""

from .base import BaseModelConfig, IdentifiableModel, TimestampedModel
from .claim import (
    Claim,
    ClaimCreate,
    ClaimStatus,
    ClaimStatusUpdate,
    IncidentType,
)
from .policy import PaymentStatus, Policy, PolicyStatus
from .quote import (
    CoverageDetails,
    CoverageType,
    FuelType,
    PremiumBreakdown,
    Quote,
    QuoteCreate,
    QuoteStatus,
    QuoteUpdate,
    VehicleDetails,
)
from .reports import (
    AdminOverview,
    AnalyticsOverview,
    AnalyticsReport,
    BreakdownLine,
    ClaimStats,
    CustomerTotals,
    Dashboard,
    PolicyStats,
    QuoteStats,
)

__all__ = [
    "AdminOverview",
    "AnalyticsOverview",
    "AnalyticsReport",
    "BaseModelConfig",
    "BreakdownLine",
    "Claim",
    "ClaimCreate",
    "ClaimStats",
    "ClaimStatus",
    "ClaimStatusUpdate",
    "CoverageDetails",
    "CoverageType",
    "CustomerTotals",
    "Dashboard",
    "FuelType",
    "IdentifiableModel",
    "PaymentStatus",
    "Policy",
    "PolicyStats",
    "PolicyStatus",
    "PremiumBreakdown",
    "Quote",
    "QuoteCreate",
    "QuoteStats",
    "QuoteStatus",
    "QuoteUpdate",
    "TimestampedModel",
    "VehicleDetails",
]
