# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Portfolio analytics.

Every figure here is a read-only fold over quotes, policies and claims.
Ratios guard against empty denominators by reporting 0, and percentages
are rounded half-up to one decimal place.
"""

from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from beartype import beartype

from ..core.clock import Clock
from ..core.errors import ServiceError
from ..core.logging_utils import get_logger
from ..core.performance_monitor import performance_monitor
from ..core.result_types import Ok, Result
from ..models.claim import Claim, ClaimStatus, IncidentType
from ..models.policy import Policy, PolicyStatus
from ..models.quote import CoverageType, Quote
from ..models.reports import (
    AdminOverview,
    AnalyticsOverview,
    AnalyticsReport,
    ClaimFrequency,
    CoverageBreakdown,
    CustomerTotals,
    MonthlyGrowth,
    MonthlyRevenue,
    PremiumBand,
    StatusBreakdown,
    VehicleRanking,
)
from .claim_service import ClaimService
from .lifecycle_rules import is_pending_claim
from .policy_service import PolicyService
from .quote_service import QuoteService

logger = get_logger(__name__)

# (label, lower bound inclusive, upper bound exclusive)
PREMIUM_BANDS: Final[tuple[tuple[str, int, int | None], ...]] = (
    ("K0-2k", 0, 2_000),
    ("K2k-5k", 2_000, 5_000),
    ("K5k-10k", 5_000, 10_000),
    ("K10k-20k", 10_000, 20_000),
    ("K20k+", 20_000, None),
)
TOP_VEHICLES_LIMIT: Final = 5
ADMIN_RECENT_LIMIT: Final = 10
MONTHLY_REVENUE_WINDOW: Final = timedelta(days=30)

_ONE_DECIMAL = Decimal("0.1")


def _round_one(value: Decimal) -> float:
    return float(value.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


@beartype
def percentage(part: int | Decimal, whole: int | Decimal) -> float:
    """``part / whole`` as a percentage, 0 when ``whole`` is 0."""
    if not whole:
        return 0.0
    return _round_one(Decimal(part) * 100 / Decimal(whole))


@beartype
def conversion_rate(policy_count: int, quote_count: int) -> float:
    """Share of quotes that became policies, in percent."""
    return percentage(policy_count, quote_count)


@beartype
def claim_ratio(claim_exposure: Decimal, revenue: int) -> float:
    """Claimed amounts relative to premium income, in percent."""
    return percentage(claim_exposure, revenue)


@beartype
def average_premium(premiums: Sequence[int]) -> int:
    """Mean premium rounded half-up to whole K, 0 when there are none."""
    if not premiums:
        return 0
    mean = Decimal(sum(premiums)) / len(premiums)
    return int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@beartype
def average_amount(amounts: Sequence[Decimal]) -> int:
    """Mean claim amount rounded half-up to whole K, 0 when there are none."""
    if not amounts:
        return 0
    mean = sum(amounts, Decimal("0")) / len(amounts)
    return int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _month(moment: datetime) -> str:
    return moment.strftime("%Y-%m")


def _vehicle_name(vehicle_info: str) -> str:
    """``2020 Toyota Camry`` -> ``Toyota Camry``."""
    year, _, name = vehicle_info.partition(" ")
    return name if year.isdigit() and name else vehicle_info


def revenue_by_month(policies: Iterable[Policy]) -> list[MonthlyRevenue]:
    """Premium income grouped by the month each policy was issued."""
    revenue: defaultdict[str, int] = defaultdict(int)
    counts: Counter[str] = Counter()
    for policy in policies:
        month = _month(policy.created_at)
        revenue[month] += policy.premium
        counts[month] += 1
    return [
        MonthlyRevenue(month=month, revenue=revenue[month], policies=counts[month])
        for month in sorted(revenue)
    ]


def coverage_breakdown(policies: Iterable[Policy]) -> list[CoverageBreakdown]:
    """Policies and revenue per coverage tier, every tier listed."""
    counts: Counter[CoverageType] = Counter()
    revenue: defaultdict[CoverageType, int] = defaultdict(int)
    for policy in policies:
        counts[policy.coverage_type] += 1
        revenue[policy.coverage_type] += policy.premium
    return [
        CoverageBreakdown(
            coverage_type=coverage_type,
            policies=counts[coverage_type],
            revenue=revenue[coverage_type],
        )
        for coverage_type in CoverageType
    ]


def claims_by_status(claims: Iterable[Claim]) -> list[StatusBreakdown]:
    """Claim counts and estimated amounts per status, every status listed."""
    counts: Counter[ClaimStatus] = Counter()
    amounts: defaultdict[ClaimStatus, Decimal] = defaultdict(Decimal)
    for claim in claims:
        counts[claim.status] += 1
        amounts[claim.status] += claim.estimated_amount
    return [
        StatusBreakdown(
            status=status,
            claims=counts[status],
            estimated_amount=amounts[status],
        )
        for status in ClaimStatus
    ]


def top_vehicles(
    policies: Iterable[Policy], limit: int = TOP_VEHICLES_LIMIT
) -> list[VehicleRanking]:
    """Most insured make/model pairs by policy count, then revenue."""
    counts: Counter[str] = Counter()
    revenue: defaultdict[str, int] = defaultdict(int)
    for policy in policies:
        name = _vehicle_name(policy.vehicle_info)
        counts[name] += 1
        revenue[name] += policy.premium
    ranked = sorted(counts, key=lambda name: (-counts[name], -revenue[name], name))
    return [
        VehicleRanking(vehicle=name, policies=counts[name], revenue=revenue[name])
        for name in ranked[:limit]
    ]


def monthly_growth(
    quotes: Iterable[Quote], policies: Iterable[Policy], claims: Iterable[Claim]
) -> list[MonthlyGrowth]:
    """New quotes, policies and claims per calendar month."""
    quote_months = Counter(_month(quote.created_at) for quote in quotes)
    policy_months = Counter(_month(policy.created_at) for policy in policies)
    claim_months = Counter(_month(claim.created_at) for claim in claims)
    months = sorted(set(quote_months) | set(policy_months) | set(claim_months))
    return [
        MonthlyGrowth(
            month=month,
            quotes=quote_months[month],
            policies=policy_months[month],
            claims=claim_months[month],
        )
        for month in months
    ]


def premium_distribution(policies: Iterable[Policy]) -> list[PremiumBand]:
    """Policy counts per premium band."""
    premiums = [policy.premium for policy in policies]
    return [
        PremiumBand(
            label=label,
            lower=lower,
            upper=upper,
            policies=sum(
                1
                for premium in premiums
                if premium >= lower and (upper is None or premium < upper)
            ),
        )
        for label, lower, upper in PREMIUM_BANDS
    ]


def claim_frequency(claims: Sequence[Claim]) -> list[ClaimFrequency]:
    """Share of claims per incident type, every type listed."""
    counts = Counter(claim.incident_type for claim in claims)
    return [
        ClaimFrequency(
            incident_type=incident_type,
            claims=counts[incident_type],
            percentage=percentage(counts[incident_type], len(claims)),
        )
        for incident_type in IncidentType
    ]


def customer_totals(
    quotes: Iterable[Quote], policies: Iterable[Policy], claims: Iterable[Claim]
) -> list[CustomerTotals]:
    """Policies, claims and premium spend per customer, biggest spenders first.

    Customers who only hold quotes are listed with zero totals.
    """
    owners: dict[str, None] = {}
    policy_counts: Counter[str] = Counter()
    claim_counts: Counter[str] = Counter()
    spent: defaultdict[str, int] = defaultdict(int)
    for quote in quotes:
        owners.setdefault(quote.owner_id)
    for policy in policies:
        owners.setdefault(policy.owner_id)
        policy_counts[policy.owner_id] += 1
        spent[policy.owner_id] += policy.premium
    for claim in claims:
        owners.setdefault(claim.owner_id)
        claim_counts[claim.owner_id] += 1
    ranked = sorted(owners, key=lambda owner: (-spent[owner], owner))
    return [
        CustomerTotals(
            owner_id=owner,
            policies=policy_counts[owner],
            claims=claim_counts[owner],
            total_spent=spent[owner],
        )
        for owner in ranked
    ]


class AnalyticsService:
    """Builds analytics for one owner or the whole portfolio."""

    def __init__(
        self,
        quote_service: QuoteService,
        policy_service: PolicyService,
        claim_service: ClaimService,
        clock: Clock,
    ) -> None:
        self._quotes = quote_service
        self._policies = policy_service
        self._claims = claim_service
        self._clock = clock

    async def _load(
        self, owner_id: str | None
    ) -> tuple[list[Quote], list[Policy], list[Claim]]:
        quotes = await self._quotes.records.list_owned(owner_id)
        policies = await self._policies.records.list_owned(owner_id)
        claims = await self._claims.records.list_owned(owner_id)
        return quotes, policies, claims

    @performance_monitor("analytics_report", max_duration_ms=5000)
    @beartype
    async def build_report(
        self, owner_id: str | None = None
    ) -> Result[AnalyticsReport, ServiceError]:
        """Assemble the analytics report.

        Args:
            owner_id: Restrict every figure to one owner; None covers the
                whole portfolio (the administrator view).

        Returns:
            Result containing the report. Empty portfolios produce zeros.
        """
        quotes, policies, claims = await self._load(owner_id)

        revenue = sum(policy.premium for policy in policies)
        exposure = sum((claim.estimated_amount for claim in claims), Decimal("0"))
        overview = AnalyticsOverview(
            total_revenue=revenue,
            total_policies=len(policies),
            total_quotes=len(quotes),
            total_claims=len(claims),
            total_claim_exposure=exposure,
            average_premium=average_premium([policy.premium for policy in policies]),
            claim_ratio=claim_ratio(exposure, revenue),
            conversion_rate=conversion_rate(len(policies), len(quotes)),
        )

        logger.info(
            "Analytics report built for %s: %d quotes, %d policies, %d claims",
            owner_id or "portfolio",
            len(quotes),
            len(policies),
            len(claims),
        )
        return Ok(
            AnalyticsReport(
                owner_id=owner_id,
                generated_at=self._clock.now(),
                overview=overview,
                revenue_by_month=revenue_by_month(policies),
                coverage_breakdown=coverage_breakdown(policies),
                claims_by_status=claims_by_status(claims),
                top_vehicles=top_vehicles(policies),
                monthly_growth=monthly_growth(quotes, policies, claims),
                premium_distribution=premium_distribution(policies),
                claim_frequency=claim_frequency(claims),
            )
        )

    @performance_monitor("admin_overview", max_duration_ms=5000)
    @beartype
    async def admin_overview(self) -> Result[AdminOverview, ServiceError]:
        """Portfolio-wide operational figures.

        Includes per-customer totals and the most recent quotes, policies
        and claims of every customer.
        """
        quotes, policies, claims = await self._load(None)
        now = self._clock.now()
        window_start = now - MONTHLY_REVENUE_WINDOW

        return Ok(
            AdminOverview(
                total_revenue=sum(policy.premium for policy in policies),
                monthly_revenue=sum(
                    policy.premium
                    for policy in policies
                    if policy.created_at >= window_start
                ),
                total_policies=len(policies),
                active_policies=sum(
                    1
                    for policy in policies
                    if self._policies.computed_status(policy, now) == PolicyStatus.ACTIVE
                ),
                total_quotes=len(quotes),
                conversion_rate=conversion_rate(len(policies), len(quotes)),
                total_claims=len(claims),
                pending_claims=sum(1 for claim in claims if is_pending_claim(claim.status)),
                approved_claims=sum(
                    1
                    for claim in claims
                    if claim.status in (ClaimStatus.APPROVED, ClaimStatus.SETTLED)
                ),
                rejected_claims=sum(
                    1 for claim in claims if claim.status == ClaimStatus.REJECTED
                ),
                average_premium=average_premium([policy.premium for policy in policies]),
                average_claim_amount=average_amount(
                    [claim.estimated_amount for claim in claims]
                ),
                customers=customer_totals(quotes, policies, claims),
                recent_quotes=quotes[:ADMIN_RECENT_LIMIT],
                recent_policies=policies[:ADMIN_RECENT_LIMIT],
                recent_claims=claims[:ADMIN_RECENT_LIMIT],
            )
        )
