# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Read-only summaries produced by the statistics, dashboard and analytics services.

All monetary totals derived from premiums are whole K units; totals derived
from claim amounts keep their two decimal places, except the administrator
average claim amount which is whole K. Percentages are rounded to one
decimal place.
"""

from datetime import datetime
from decimal import Decimal

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig
from .claim import Claim, ClaimStatus, IncidentType
from .policy import Policy
from .quote import CoverageType, Quote

MONTH_PATTERN = r"^[0-9]{4}-[0-9]{2}$"


@beartype
class BreakdownLine(BaseModelConfig):
    """One itemized row of a premium summary."""

    label: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0)
    formatted: str = Field(..., description="Display form, e.g. K1,648")


@beartype
class QuoteStats(BaseModelConfig):
    """Quote counts by effective status."""

    total: int = Field(default=0, ge=0)
    active: int = Field(default=0, ge=0)
    expired: int = Field(default=0, ge=0)
    converted: int = Field(default=0, ge=0)


@beartype
class PolicyStats(BaseModelConfig):
    """Policy counts by effective status."""

    total: int = Field(default=0, ge=0)
    active: int = Field(default=0, ge=0)
    expired: int = Field(default=0, ge=0)
    cancelled: int = Field(default=0, ge=0)


@beartype
class ClaimStats(BaseModelConfig):
    """Claim counts per status plus the pending total."""

    total: int = Field(default=0, ge=0)
    pending: int = Field(default=0, ge=0)
    draft: int = Field(default=0, ge=0)
    submitted: int = Field(default=0, ge=0)
    under_review: int = Field(default=0, ge=0)
    approved: int = Field(default=0, ge=0)
    rejected: int = Field(default=0, ge=0)
    settled: int = Field(default=0, ge=0)


@beartype
class Dashboard(BaseModelConfig):
    """Customer landing summary."""

    total_coverage: int = Field(
        ..., ge=0, description="Sum of premiums of effectively active policies"
    )
    active_policies: int = Field(..., ge=0)
    pending_claims: int = Field(..., ge=0)
    total_quotes: int = Field(..., ge=0)
    recent_quotes: list[Quote] = Field(default_factory=list)
    recent_policies: list[Policy] = Field(default_factory=list)
    recent_claims: list[Claim] = Field(default_factory=list)


@beartype
class AnalyticsOverview(BaseModelConfig):
    """Headline portfolio figures."""

    total_revenue: int = Field(..., ge=0)
    total_policies: int = Field(..., ge=0)
    total_quotes: int = Field(..., ge=0)
    total_claims: int = Field(..., ge=0)
    total_claim_exposure: Decimal = Field(..., ge=Decimal("0"))
    average_premium: int = Field(..., ge=0)
    claim_ratio: float = Field(..., ge=0, description="Claim exposure over revenue, %")
    conversion_rate: float = Field(..., ge=0, description="Policies over quotes, %")


@beartype
class MonthlyRevenue(BaseModelConfig):
    """Premium income from policies issued in one month."""

    month: str = Field(..., pattern=MONTH_PATTERN)
    revenue: int = Field(..., ge=0)
    policies: int = Field(..., ge=0)


@beartype
class CoverageBreakdown(BaseModelConfig):
    """Policies and revenue for one coverage tier."""

    coverage_type: CoverageType
    policies: int = Field(..., ge=0)
    revenue: int = Field(..., ge=0)


@beartype
class StatusBreakdown(BaseModelConfig):
    """Claims in one status."""

    status: ClaimStatus
    claims: int = Field(..., ge=0)
    estimated_amount: Decimal = Field(..., ge=Decimal("0"))


@beartype
class VehicleRanking(BaseModelConfig):
    """Most frequently insured vehicles."""

    vehicle: str = Field(..., description="Make and model")
    policies: int = Field(..., ge=0)
    revenue: int = Field(..., ge=0)


@beartype
class MonthlyGrowth(BaseModelConfig):
    """New records per month."""

    month: str = Field(..., pattern=MONTH_PATTERN)
    quotes: int = Field(default=0, ge=0)
    policies: int = Field(default=0, ge=0)
    claims: int = Field(default=0, ge=0)


@beartype
class PremiumBand(BaseModelConfig):
    """Policies whose premium falls in ``[lower, upper)``."""

    label: str
    lower: int = Field(..., ge=0)
    upper: int | None = Field(None, description="Exclusive bound; None is open-ended")
    policies: int = Field(..., ge=0)


@beartype
class ClaimFrequency(BaseModelConfig):
    """Claim share for one incident type."""

    incident_type: IncidentType
    claims: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)


@beartype
class AnalyticsReport(BaseModelConfig):
    """Full analytics view for one owner or, with no owner, the whole portfolio."""

    owner_id: str | None = Field(None, description="None for the portfolio view")
    generated_at: datetime
    overview: AnalyticsOverview
    revenue_by_month: list[MonthlyRevenue] = Field(default_factory=list)
    coverage_breakdown: list[CoverageBreakdown] = Field(default_factory=list)
    claims_by_status: list[StatusBreakdown] = Field(default_factory=list)
    top_vehicles: list[VehicleRanking] = Field(default_factory=list)
    monthly_growth: list[MonthlyGrowth] = Field(default_factory=list)
    premium_distribution: list[PremiumBand] = Field(default_factory=list)
    claim_frequency: list[ClaimFrequency] = Field(default_factory=list)


@beartype
class CustomerTotals(BaseModelConfig):
    """Business one customer has placed with the portal."""

    owner_id: str = Field(..., min_length=1)
    policies: int = Field(..., ge=0)
    claims: int = Field(..., ge=0)
    total_spent: int = Field(..., ge=0, description="Sum of the customer's premiums")


@beartype
class AdminOverview(BaseModelConfig):
    """Portfolio-wide operational figures for administrators."""

    total_revenue: int = Field(..., ge=0)
    monthly_revenue: int = Field(
        ..., ge=0, description="Premiums of policies issued in the last 30 days"
    )
    total_policies: int = Field(..., ge=0)
    active_policies: int = Field(..., ge=0)
    total_quotes: int = Field(..., ge=0)
    conversion_rate: float = Field(..., ge=0)
    total_claims: int = Field(..., ge=0)
    pending_claims: int = Field(..., ge=0)
    approved_claims: int = Field(..., ge=0, description="Approved or settled")
    rejected_claims: int = Field(..., ge=0)
    average_premium: int = Field(..., ge=0)
    average_claim_amount: int = Field(..., ge=0, description="Whole K, rounded half-up")
    customers: list[CustomerTotals] = Field(default_factory=list)
    recent_quotes: list[Quote] = Field(default_factory=list)
    recent_policies: list[Policy] = Field(default_factory=list)
    recent_claims: list[Claim] = Field(default_factory=list)
