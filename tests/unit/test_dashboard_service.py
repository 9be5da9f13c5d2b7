"""Unit tests for the customer dashboard."""

from datetime import timedelta

from securemotor.core.clock import FixedClock
from securemotor.models.claim import ClaimStatus, ClaimStatusUpdate
from securemotor.models.policy import Policy
from securemotor.services.claim_service import ClaimService
from securemotor.services.dashboard_service import DashboardService
from securemotor.services.policy_service import PolicyService
from securemotor.services.quote_service import QuoteService
from tests.fixtures.test_data import OWNER_A, OWNER_B, make_claim_create, make_quote_create


class TestDashboard:
    async def test_empty_dashboard(self, dashboard_service: DashboardService) -> None:
        dashboard = (await dashboard_service.get_dashboard(OWNER_A)).unwrap()

        assert dashboard.total_coverage == 0
        assert dashboard.active_policies == 0
        assert dashboard.pending_claims == 0
        assert dashboard.total_quotes == 0
        assert dashboard.recent_quotes == []

    async def test_totals(
        self,
        dashboard_service: DashboardService,
        policy_service: PolicyService,
        claim_service: ClaimService,
        active_policy: Policy,
        quote_service: QuoteService,
    ) -> None:
        second_quote = (await quote_service.create(make_quote_create(), OWNER_A)).unwrap()
        cancelled = (await policy_service.convert_from_quote(second_quote.id, OWNER_A)).unwrap()
        await policy_service.cancel(cancelled.id, OWNER_A)
        await claim_service.create(make_claim_create(active_policy.id), OWNER_A)
        rejected = (
            await claim_service.create(make_claim_create(active_policy.id), OWNER_A)
        ).unwrap()
        await claim_service.update_status(
            rejected.id, ClaimStatusUpdate(status=ClaimStatus.REJECTED)
        )

        dashboard = (await dashboard_service.get_dashboard(OWNER_A)).unwrap()

        assert dashboard.total_coverage == active_policy.premium
        assert dashboard.active_policies == 1
        assert dashboard.pending_claims == 1
        assert dashboard.total_quotes == 2
        assert len(dashboard.recent_policies) == 2
        assert len(dashboard.recent_claims) == 2

    async def test_expired_policies_not_counted(
        self,
        dashboard_service: DashboardService,
        active_policy: Policy,
        clock: FixedClock,
    ) -> None:
        clock.set(active_policy.end_date + timedelta(seconds=1))

        dashboard = (await dashboard_service.get_dashboard(OWNER_A)).unwrap()

        assert dashboard.total_coverage == 0
        assert dashboard.active_policies == 0

    async def test_recent_items_newest_first_and_limited(
        self,
        dashboard_service: DashboardService,
        quote_service: QuoteService,
        clock: FixedClock,
    ) -> None:
        created = []
        for _ in range(7):
            created.append((await quote_service.create(make_quote_create(), OWNER_A)).unwrap())
            clock.advance(timedelta(minutes=1))
        await quote_service.create(make_quote_create(), OWNER_B)

        dashboard = (await dashboard_service.get_dashboard(OWNER_A)).unwrap()

        assert dashboard.total_quotes == 7
        assert [quote.id for quote in dashboard.recent_quotes] == [
            quote.id for quote in reversed(created[2:])
        ]
