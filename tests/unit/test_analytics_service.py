"""Unit tests for analytics aggregation."""

from datetime import timedelta
from decimal import Decimal

import pytest

from securemotor.core.clock import FixedClock
from securemotor.models.claim import ClaimStatus, ClaimStatusUpdate, IncidentType
from securemotor.models.quote import CoverageType
from securemotor.services.analytics_service import (
    ADMIN_RECENT_LIMIT,
    AnalyticsService,
    average_amount,
    average_premium,
    claim_ratio,
    conversion_rate,
    customer_totals,
    percentage,
)
from securemotor.services.claim_service import ClaimService
from securemotor.services.policy_service import PolicyService
from securemotor.services.quote_service import QuoteService
from tests.fixtures.test_data import (
    OWNER_A,
    OWNER_B,
    make_claim_create,
    make_coverage,
    make_quote_create,
    make_vehicle,
)


class TestRatioHelpers:
    """Divide-by-zero guards and rounding."""

    def test_conversion_rate_without_quotes(self) -> None:
        assert conversion_rate(0, 0) == 0.0

    @pytest.mark.parametrize(
        ("policies", "quotes", "rate"), [(1, 3, 33.3), (2, 3, 66.7), (1, 1, 100.0), (0, 4, 0.0)]
    )
    def test_conversion_rate(self, policies: int, quotes: int, rate: float) -> None:
        assert conversion_rate(policies, quotes) == rate

    def test_claim_ratio_without_revenue(self) -> None:
        assert claim_ratio(Decimal("500.00"), 0) == 0.0

    def test_claim_ratio(self) -> None:
        assert claim_ratio(Decimal("1648"), 3296) == 50.0

    def test_percentage_rounds_half_up(self) -> None:
        assert percentage(1, 8) == 12.5
        assert percentage(1, 16) == 6.3

    def test_average_premium(self) -> None:
        assert average_premium([]) == 0
        assert average_premium([1648, 3605]) == 2627

    def test_average_amount(self) -> None:
        assert average_amount([]) == 0
        assert average_amount([Decimal("10.00"), Decimal("0.01")]) == 5
        assert average_amount([Decimal("2.50")]) == 3

    def test_customer_totals_without_records(self) -> None:
        assert customer_totals([], [], []) == []


@pytest.fixture
async def portfolio(
    quote_service: QuoteService,
    policy_service: PolicyService,
    claim_service: ClaimService,
    clock: FixedClock,
) -> None:
    """OWNER_A: three quotes, two policies, two claims. OWNER_B: one policy."""
    corolla = (await quote_service.create(make_quote_create(), OWNER_A)).unwrap()
    fit = (
        await quote_service.create(
            make_quote_create(
                vehicle=make_vehicle(make="Honda", model="Fit", year=2010),
                coverage=make_coverage(coverage_type=CoverageType.THIRD_PARTY),
            ),
            OWNER_A,
        )
    ).unwrap()
    corolla_policy = (await policy_service.convert_from_quote(corolla.id, OWNER_A)).unwrap()
    await policy_service.convert_from_quote(fit.id, OWNER_A)

    await claim_service.create(make_claim_create(corolla_policy.id), OWNER_A)
    theft = (
        await claim_service.create(
            make_claim_create(
                corolla_policy.id,
                incident_type=IncidentType.THEFT,
                estimated_amount=Decimal("2000.50"),
            ),
            OWNER_A,
        )
    ).unwrap()
    await claim_service.update_status(theft.id, ClaimStatusUpdate(status=ClaimStatus.REJECTED))

    other = (await quote_service.create(make_quote_create(), OWNER_B)).unwrap()
    await policy_service.convert_from_quote(other.id, OWNER_B)

    clock.advance(timedelta(days=20))
    await quote_service.create(
        make_quote_create(
            coverage=make_coverage(coverage_type=CoverageType.FIRE_THEFT, additional_drivers=1)
        ),
        OWNER_A,
    )


class TestAnalyticsReport:
    """Test the report for one owner and for the portfolio."""

    async def test_empty_report(self, analytics_service: AnalyticsService) -> None:
        report = (await analytics_service.build_report(OWNER_A)).unwrap()

        overview = report.overview
        assert overview.total_revenue == 0
        assert overview.total_claim_exposure == Decimal("0")
        assert overview.average_premium == 0
        assert overview.claim_ratio == 0.0
        assert overview.conversion_rate == 0.0
        assert report.revenue_by_month == []
        assert report.monthly_growth == []
        assert report.top_vehicles == []
        assert [row.policies for row in report.coverage_breakdown] == [0, 0, 0]
        assert all(row.percentage == 0.0 for row in report.claim_frequency)
        assert all(band.policies == 0 for band in report.premium_distribution)

    @pytest.mark.usefixtures("portfolio")
    async def test_owner_overview(self, analytics_service: AnalyticsService) -> None:
        overview = (await analytics_service.build_report(OWNER_A)).unwrap().overview

        assert overview.total_revenue == 3605 + 1648
        assert overview.total_policies == 2
        assert overview.total_quotes == 3
        assert overview.total_claims == 2
        assert overview.total_claim_exposure == Decimal("14500.50")
        assert overview.average_premium == 2627
        assert overview.claim_ratio == 276.0
        assert overview.conversion_rate == 66.7

    @pytest.mark.usefixtures("portfolio")
    async def test_owner_breakdowns(self, analytics_service: AnalyticsService) -> None:
        report = (await analytics_service.build_report(OWNER_A)).unwrap()

        assert [(row.month, row.revenue, row.policies) for row in report.revenue_by_month] == [
            ("2025-06", 5253, 2)
        ]
        coverage = {row.coverage_type: (row.policies, row.revenue) for row in report.coverage_breakdown}
        assert coverage == {
            CoverageType.THIRD_PARTY: (1, 1648),
            CoverageType.FIRE_THEFT: (0, 0),
            CoverageType.COMPREHENSIVE: (1, 3605),
        }
        statuses = {row.status: (row.claims, row.estimated_amount) for row in report.claims_by_status}
        assert statuses[ClaimStatus.SUBMITTED] == (1, Decimal("12500.00"))
        assert statuses[ClaimStatus.REJECTED] == (1, Decimal("2000.50"))
        assert statuses[ClaimStatus.SETTLED] == (0, Decimal("0"))
        assert [(row.vehicle, row.policies) for row in report.top_vehicles] == [
            ("Toyota Corolla", 1),
            ("Honda Fit", 1),
        ]
        assert [(row.month, row.quotes, row.policies, row.claims) for row in report.monthly_growth] == [
            ("2025-06", 2, 2, 2),
            ("2025-07", 1, 0, 0),
        ]
        bands = {band.label: band.policies for band in report.premium_distribution}
        assert bands == {"K0-2k": 1, "K2k-5k": 1, "K5k-10k": 0, "K10k-20k": 0, "K20k+": 0}
        frequency = {row.incident_type: row.percentage for row in report.claim_frequency}
        assert frequency[IncidentType.ACCIDENT] == 50.0
        assert frequency[IncidentType.THEFT] == 50.0
        assert frequency[IncidentType.FIRE] == 0.0

    @pytest.mark.usefixtures("portfolio")
    async def test_owner_report_excludes_other_owners(
        self, analytics_service: AnalyticsService
    ) -> None:
        report = (await analytics_service.build_report(OWNER_B)).unwrap()

        assert report.owner_id == OWNER_B
        assert report.overview.total_policies == 1
        assert report.overview.total_claims == 0
        assert report.overview.conversion_rate == 100.0

    @pytest.mark.usefixtures("portfolio")
    async def test_portfolio_report(self, analytics_service: AnalyticsService) -> None:
        report = (await analytics_service.build_report()).unwrap()

        assert report.owner_id is None
        assert report.overview.total_policies == 3
        assert report.overview.total_quotes == 4
        assert report.overview.total_revenue == 3605 + 1648 + 3605
        assert report.top_vehicles[0].vehicle == "Toyota Corolla"
        assert report.top_vehicles[0].policies == 2


class TestAdminOverview:
    async def test_empty_portfolio(self, analytics_service: AnalyticsService) -> None:
        overview = (await analytics_service.admin_overview()).unwrap()

        assert overview.total_revenue == 0
        assert overview.conversion_rate == 0.0
        assert overview.average_claim_amount == 0
        assert overview.customers == []
        assert overview.recent_quotes == []

    @pytest.mark.usefixtures("portfolio")
    async def test_overview_figures(
        self, analytics_service: AnalyticsService, clock: FixedClock
    ) -> None:
        clock.advance(timedelta(days=15))

        overview = (await analytics_service.admin_overview()).unwrap()

        assert overview.total_revenue == 8858
        assert overview.monthly_revenue == 0
        assert overview.total_policies == 3
        assert overview.active_policies == 3
        assert overview.total_quotes == 4
        assert overview.conversion_rate == 75.0
        assert overview.total_claims == 2
        assert overview.pending_claims == 1
        assert overview.approved_claims == 0
        assert overview.rejected_claims == 1
        assert overview.average_premium == 2953
        assert overview.average_claim_amount == 7250

    @pytest.mark.usefixtures("portfolio")
    async def test_monthly_revenue_window(self, analytics_service: AnalyticsService) -> None:
        overview = (await analytics_service.admin_overview()).unwrap()

        assert overview.monthly_revenue == 8858

    @pytest.mark.usefixtures("portfolio")
    async def test_customer_totals(self, analytics_service: AnalyticsService) -> None:
        overview = (await analytics_service.admin_overview()).unwrap()

        totals = [
            (row.owner_id, row.policies, row.claims, row.total_spent)
            for row in overview.customers
        ]
        assert totals == [(OWNER_A, 2, 2, 5253), (OWNER_B, 1, 0, 3605)]

    @pytest.mark.usefixtures("portfolio")
    async def test_recent_activity_across_owners(
        self, analytics_service: AnalyticsService
    ) -> None:
        overview = (await analytics_service.admin_overview()).unwrap()

        assert len(overview.recent_quotes) == 4
        assert overview.recent_quotes[0].coverage.coverage_type == CoverageType.FIRE_THEFT
        assert {policy.owner_id for policy in overview.recent_policies} == {OWNER_A, OWNER_B}
        assert len(overview.recent_claims) == 2

    async def test_recent_activity_is_capped(
        self,
        analytics_service: AnalyticsService,
        quote_service: QuoteService,
        clock: FixedClock,
    ) -> None:
        for _ in range(ADMIN_RECENT_LIMIT + 2):
            await quote_service.create(make_quote_create(), OWNER_B)
            clock.advance(timedelta(seconds=1))

        overview = (await analytics_service.admin_overview()).unwrap()

        assert len(overview.recent_quotes) == ADMIN_RECENT_LIMIT
        assert overview.customers[0].owner_id == OWNER_B
        assert overview.customers[0].total_spent == 0
