# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Customer dashboard summary."""

from beartype import beartype

from ..core.clock import Clock
from ..core.config import Settings, get_settings
from ..core.errors import ServiceError
from ..core.performance_monitor import performance_monitor
from ..core.result_types import Ok, Result
from ..models.policy import PolicyStatus
from ..models.reports import Dashboard
from .claim_service import ClaimService
from .lifecycle_rules import is_pending_claim
from .policy_service import PolicyService
from .quote_service import QuoteService


class DashboardService:
    """Landing-page figures for one owner."""

    def __init__(
        self,
        quote_service: QuoteService,
        policy_service: PolicyService,
        claim_service: ClaimService,
        clock: Clock,
        settings: Settings | None = None,
    ) -> None:
        self._quotes = quote_service
        self._policies = policy_service
        self._claims = claim_service
        self._clock = clock
        self._settings = settings or get_settings()

    @performance_monitor("dashboard", max_duration_ms=2000)
    @beartype
    async def get_dashboard(self, owner_id: str) -> Result[Dashboard, ServiceError]:
        """Totals and recent activity for ``owner_id``.

        Total coverage is the sum of premiums of policies that are
        currently active.
        """
        now = self._clock.now()
        limit = self._settings.recent_items_limit

        quotes = await self._quotes.records.list_owned(owner_id)
        policies = await self._policies.records.list_owned(owner_id)
        claims = await self._claims.records.list_owned(owner_id)

        active = [
            policy
            for policy in policies
            if self._policies.computed_status(policy, now) == PolicyStatus.ACTIVE
        ]

        return Ok(
            Dashboard(
                total_coverage=sum(policy.premium for policy in active),
                active_policies=len(active),
                pending_claims=sum(1 for claim in claims if is_pending_claim(claim.status)),
                total_quotes=len(quotes),
                recent_quotes=quotes[:limit],
                recent_policies=policies[:limit],
                recent_claims=claims[:limit],
            )
        )
