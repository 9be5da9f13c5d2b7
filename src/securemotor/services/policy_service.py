# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy business logic service.

Policies are issued only by converting an active quote. The quote's
compare-and-swap to ``converted`` and the policy insert run in one store
transaction, so a quote yields at most one policy even under concurrent
purchase attempts.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from beartype import beartype

from ..core.cache import Cache
from ..core.clock import Clock
from ..core.config import Settings, get_settings
from ..core.document_store import POLICIES, Document, TransactionAborted
from ..core.errors import ServiceError
from ..core.logging_utils import get_logger
from ..core.performance_monitor import performance_monitor
from ..core.result_types import Err, Ok, Result
from ..models.policy import PaymentStatus, Policy, PolicyStatus
from ..models.quote import Quote, QuoteStatus
from ..models.reports import PolicyStats
from .cache_keys import CacheKeys
from .events import DomainEvent, EventBus, EventType
from .lifecycle_rules import effective_policy_status
from .numbering import NumberAllocator, SuffixSource
from .quote_service import QuoteService
from .repository import OwnedRecords

logger = get_logger(__name__)


class PolicyService:
    """Service for policy business logic."""

    def __init__(
        self,
        quote_service: QuoteService,
        clock: Clock,
        settings: Settings | None = None,
        cache: Cache | None = None,
        events: EventBus | None = None,
        suffix_source: SuffixSource | None = None,
    ) -> None:
        """Initialize policy service on the same store as ``quote_service``."""
        self._settings = settings or get_settings()
        self._quotes = quote_service
        self._clock = clock
        self._events = events
        self._store = quote_service.records.store
        self._numbers = NumberAllocator(
            self._settings.policy_number_prefix,
            max_attempts=self._settings.number_allocation_attempts,
            suffix_source=suffix_source,
        )
        self._records: OwnedRecords[Policy] = OwnedRecords(
            self._store,
            POLICIES,
            Policy,
            "Policy",
            CacheKeys.policy_by_id,
            cache=cache,
            cache_ttl=self._settings.cache_ttl_seconds,
        )

    @property
    def records(self) -> OwnedRecords[Policy]:
        return self._records

    def _build_policy(
        self, quote: Quote, policy_id: UUID, now: datetime
    ) -> Callable[[str], Document]:
        """Document factory for the number allocator."""

        def build(policy_number: str) -> Document:
            policy = Policy(
                id=policy_id,
                owner_id=quote.owner_id,
                quote_id=quote.id,
                policy_number=policy_number,
                vehicle_info=quote.vehicle.description,
                coverage_type=quote.coverage.coverage_type,
                premium=quote.premium,
                status=PolicyStatus.ACTIVE,
                payment_status=PaymentStatus.PAID,
                start_date=now,
                end_date=now + timedelta(days=self._settings.policy_term_days),
                created_at=now,
                updated_at=now,
            )
            return policy.to_document()

        return build

    @performance_monitor("policy_issuance", max_duration_ms=3000)
    @beartype
    async def convert_from_quote(
        self, quote_id: UUID, owner_id: str
    ) -> Result[Policy, ServiceError]:
        """Issue a paid, active policy from an active quote.

        Payment is assumed to have succeeded before this is called. Either
        the quote is converted and the policy stored, or neither happens.

        Returns:
            Result containing the new policy, or INVALID_STATE when the quote
            is already converted or has expired.
        """
        now = self._clock.now()
        policy_id = uuid4()

        try:
            async with self._store.transaction():
                quote_result = await self._quotes.records.get_owned(
                    quote_id, owner_id, fresh=True
                )
                if isinstance(quote_result, Err):
                    raise TransactionAborted(quote_result.error)
                quote = quote_result.unwrap()

                if quote.status == QuoteStatus.CONVERTED:
                    raise TransactionAborted(
                        ServiceError.invalid_state(
                            f"Quote {quote_id} has already been converted"
                        )
                    )
                status = self._quotes.computed_status(quote, now)
                if status != QuoteStatus.ACTIVE:
                    raise TransactionAborted(
                        ServiceError.invalid_state(
                            f"Quote {quote_id} is {status.value} and cannot be purchased"
                        )
                    )

                if await self._quotes.mark_converted(quote, policy_id, now) is None:
                    raise TransactionAborted(
                        ServiceError.invalid_state(
                            f"Quote {quote_id} has already been converted"
                        )
                    )

                inserted = await self._numbers.insert_numbered(
                    self._store,
                    POLICIES,
                    "policy_number",
                    now.year,
                    self._build_policy(quote, policy_id, now),
                )
                if isinstance(inserted, Err):
                    raise TransactionAborted(inserted.error)
        except TransactionAborted as exc:
            logger.warning("Policy issuance from quote %s refused: %s", quote_id, exc)
            return Err(exc.reason)
        finally:
            await self._quotes.records.forget(quote_id)

        policy = Policy.model_validate(inserted.unwrap())
        await self._records.remember(policy)

        logger.info(
            "Policy %s issued from quote %s for %s, premium K%d",
            policy.policy_number,
            quote_id,
            owner_id,
            policy.premium,
        )
        await self._publish(EventType.POLICY_ACTIVATED, policy)
        return Ok(policy)

    @performance_monitor("get_policy")
    @beartype
    async def get(self, policy_id: UUID, owner_id: str) -> Result[Policy, ServiceError]:
        """Get one of the owner's policies."""
        return await self._records.get_owned(policy_id, owner_id)

    @beartype
    async def list_policies(self, owner_id: str) -> Result[list[Policy], ServiceError]:
        """All of the owner's policies, newest first."""
        return Ok(await self._records.list_owned(owner_id))

    @beartype
    async def recent(
        self, owner_id: str, limit: int | None = None
    ) -> Result[list[Policy], ServiceError]:
        """The owner's most recent policies."""
        policies = await self._records.list_owned(owner_id)
        if limit is None:
            limit = self._settings.recent_items_limit
        return Ok(policies[:limit])

    @beartype
    def computed_status(
        self, policy: Policy, now: datetime | None = None
    ) -> PolicyStatus:
        """Status for reporting: active policies past their end date read as expired."""
        return effective_policy_status(
            policy.status, policy.end_date, now or self._clock.now()
        )

    @beartype
    async def list_active(self, owner_id: str) -> Result[list[Policy], ServiceError]:
        """Policies the owner can currently claim against, newest first."""
        now = self._clock.now()
        policies = await self._records.list_owned(owner_id)
        return Ok(
            [
                policy
                for policy in policies
                if self.computed_status(policy, now) == PolicyStatus.ACTIVE
            ]
        )

    @beartype
    async def active_count(self, owner_id: str) -> Result[int, ServiceError]:
        """Count policies that are active and not past their end date."""
        active = await self.list_active(owner_id)
        return active.map(len)

    @beartype
    async def stats(self, owner_id: str) -> Result[PolicyStats, ServiceError]:
        """Count the owner's policies by computed status."""
        now = self._clock.now()
        policies = await self._records.list_owned(owner_id)
        statuses = [self.computed_status(policy, now) for policy in policies]
        return Ok(
            PolicyStats(
                total=len(policies),
                active=statuses.count(PolicyStatus.ACTIVE),
                expired=statuses.count(PolicyStatus.EXPIRED),
                cancelled=statuses.count(PolicyStatus.CANCELLED),
            )
        )

    @performance_monitor("policy_cancellation")
    @beartype
    async def cancel(
        self, policy_id: UUID, owner_id: str
    ) -> Result[Policy, ServiceError]:
        """Cancel an active policy.

        Expired and already cancelled policies are rejected with
        INVALID_STATE.
        """
        existing_result = await self._records.get_owned(policy_id, owner_id, fresh=True)
        if isinstance(existing_result, Err):
            return existing_result
        existing = existing_result.unwrap()

        now = self._clock.now()
        status = self.computed_status(existing, now)
        if status != PolicyStatus.ACTIVE:
            return Err(
                ServiceError.invalid_state(
                    f"Policy {existing.policy_number} is {status.value} "
                    "and cannot be cancelled"
                )
            )

        cancelled = Policy.model_validate(
            {
                **existing.model_dump(),
                "status": PolicyStatus.CANCELLED,
                "cancelled_at": now,
                "updated_at": now,
            }
        )
        document = cancelled.to_document()
        stored = await self._store.update(
            POLICIES,
            str(policy_id),
            {key: document[key] for key in ("status", "cancelled_at", "updated_at")},
            expected={"status": PolicyStatus.ACTIVE.value},
        )
        await self._records.forget(policy_id)
        if stored is None:
            return Err(ServiceError.invalid_state("Policy changed while being cancelled"))

        logger.info("Policy %s cancelled by %s", existing.policy_number, owner_id)
        await self._publish(EventType.POLICY_CANCELLED, cancelled)
        return Ok(cancelled)

    async def _publish(self, event_type: EventType, policy: Policy) -> None:
        if self._events is None:
            return
        await self._events.publish(
            DomainEvent(
                event_type=event_type,
                entity_id=policy.id,
                owner_id=policy.owner_id,
                occurred_at=policy.updated_at,
                payload={
                    "policy_number": policy.policy_number,
                    "quote_id": str(policy.quote_id),
                    "premium": policy.premium,
                },
            )
        )
