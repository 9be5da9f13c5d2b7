# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote generation and management service."""

from datetime import datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

from beartype import beartype
from pydantic import ValidationError as PydanticValidationError

from ..core.cache import Cache
from ..core.clock import Clock
from ..core.config import Settings, get_settings
from ..core.document_store import POLICIES, QUOTES, DocumentStore
from ..core.errors import ServiceError
from ..core.logging_utils import get_logger
from ..core.performance_monitor import performance_monitor
from ..core.result_types import Err, Ok, Result
from ..models.policy import Policy
from ..models.quote import (
    CoverageDetails,
    PremiumBreakdown,
    Quote,
    QuoteCreate,
    QuoteStatus,
    QuoteUpdate,
    VehicleDetails,
)
from ..models.reports import QuoteStats
from .cache_keys import CacheKeys
from .events import DomainEvent, EventBus, EventType
from .lifecycle_rules import effective_quote_status
from .premium_calculator import PremiumCalculator
from .repository import OwnedRecords

logger = get_logger(__name__)


class QuoteService:
    """Service for quote generation and management."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock,
        settings: Settings | None = None,
        cache: Cache | None = None,
        events: EventBus | None = None,
    ) -> None:
        """Initialize quote service with its collaborators."""
        self._settings = settings or get_settings()
        self._clock = clock
        self._events = events
        self._records: OwnedRecords[Quote] = OwnedRecords(
            store,
            QUOTES,
            Quote,
            "Quote",
            CacheKeys.quote_by_id,
            cache=cache,
            cache_ttl=self._settings.cache_ttl_seconds,
        )

    @property
    def records(self) -> OwnedRecords[Quote]:
        return self._records

    def _validate_vehicle_year(self, vehicle: VehicleDetails) -> Result[None, ServiceError]:
        """Manufacture year may be at most next calendar year."""
        latest = self._clock.now().year + 1
        if vehicle.year > latest:
            return Err(
                ServiceError.validation(
                    f"Vehicle year must be between 1900 and {latest}", "vehicle.year"
                )
            )
        return Ok(None)

    @beartype
    def preview_premium(
        self, vehicle: VehicleDetails, coverage: CoverageDetails
    ) -> Result[PremiumBreakdown, ServiceError]:
        """Price a quote form without storing anything."""
        year_check = self._validate_vehicle_year(vehicle)
        if isinstance(year_check, Err):
            return year_check

        return Ok(
            PremiumCalculator.calculate(
                vehicle, coverage, current_year=self._clock.now().year
            )
        )

    @performance_monitor("quote_creation", max_duration_ms=2000)
    @beartype
    async def create(
        self, quote_data: QuoteCreate, owner_id: str
    ) -> Result[Quote, ServiceError]:
        """Create an active quote priced from the submitted form.

        The premium is always computed here and the quote stays purchasable
        for the configured validity window.
        """
        pricing = self.preview_premium(quote_data.vehicle, quote_data.coverage)
        if isinstance(pricing, Err):
            return pricing

        now = self._clock.now()
        quote = Quote(
            id=uuid4(),
            owner_id=owner_id,
            vehicle=quote_data.vehicle,
            coverage=quote_data.coverage,
            premium_breakdown=pricing.unwrap(),
            status=QuoteStatus.ACTIVE,
            created_at=now,
            updated_at=now,
            expires_at=now + timedelta(days=self._settings.quote_validity_days),
        )

        await self._records.store.insert(QUOTES, quote.to_document())
        await self._records.remember(quote)

        logger.info(
            "Quote %s created for %s: %s, total K%d",
            quote.id,
            owner_id,
            quote.vehicle.description,
            quote.premium,
        )
        await self._publish(EventType.QUOTE_CREATED, quote, premium=quote.premium)
        return Ok(quote)

    @beartype
    async def create_from_payload(
        self, payload: dict[str, Any], owner_id: str
    ) -> Result[Quote, ServiceError]:
        """Validate a raw form payload and create the quote."""
        try:
            quote_data = QuoteCreate.model_validate(payload)
        except PydanticValidationError as exc:
            return Err(ServiceError.from_pydantic(exc))
        return await self.create(quote_data, owner_id)

    @performance_monitor("get_quote")
    @beartype
    async def get(self, quote_id: UUID, owner_id: str) -> Result[Quote, ServiceError]:
        """Get one of the owner's quotes."""
        return await self._records.get_owned(quote_id, owner_id)

    @beartype
    async def list_quotes(self, owner_id: str) -> Result[list[Quote], ServiceError]:
        """All of the owner's quotes, newest first."""
        return Ok(await self._records.list_owned(owner_id))

    @beartype
    async def recent(
        self, owner_id: str, limit: int | None = None
    ) -> Result[list[Quote], ServiceError]:
        """The owner's most recent quotes."""
        quotes = await self._records.list_owned(owner_id)
        if limit is None:
            limit = self._settings.recent_items_limit
        return Ok(quotes[:limit])

    @beartype
    def computed_status(self, quote: Quote, now: datetime | None = None) -> QuoteStatus:
        """Status as presented to callers: active quotes past expiry read as expired."""
        return effective_quote_status(
            quote.status, quote.expires_at, now or self._clock.now()
        )

    @performance_monitor("update_quote")
    @beartype
    async def update(
        self, quote_id: UUID, owner_id: str, quote_update: QuoteUpdate
    ) -> Result[Quote, ServiceError]:
        """Edit a quote's inputs and re-price it.

        Converted quotes are frozen. The expiry window is not extended.
        """
        existing_result = await self._records.get_owned(quote_id, owner_id, fresh=True)
        if isinstance(existing_result, Err):
            return existing_result
        existing = existing_result.unwrap()

        if existing.status == QuoteStatus.CONVERTED:
            return Err(ServiceError.invalid_state("Converted quotes cannot be modified"))

        try:
            vehicle = VehicleDetails.model_validate(
                {**existing.vehicle.model_dump(), **quote_update.vehicle_changes()}
            )
            coverage = CoverageDetails.model_validate(
                {**existing.coverage.model_dump(), **quote_update.coverage_changes()}
            )
        except PydanticValidationError as exc:
            return Err(ServiceError.from_pydantic(exc))

        pricing = self.preview_premium(vehicle, coverage)
        if isinstance(pricing, Err):
            return pricing

        updated = Quote.model_validate(
            {
                **existing.model_dump(),
                "vehicle": vehicle,
                "coverage": coverage,
                "premium_breakdown": pricing.unwrap(),
                "updated_at": self._clock.now(),
            }
        )
        stored = await self._records.store.update(
            QUOTES,
            str(quote_id),
            updated.to_document(),
            expected={"status": existing.status.value},
        )
        await self._records.forget(quote_id)
        if stored is None:
            return Err(ServiceError.invalid_state("Quote changed while being updated"))

        logger.info("Quote %s updated, total K%d", quote_id, updated.premium)
        return Ok(updated)

    @beartype
    async def delete(self, quote_id: UUID, owner_id: str) -> Result[None, ServiceError]:
        """Delete a quote that has not been converted."""
        existing_result = await self._records.get_owned(quote_id, owner_id, fresh=True)
        if isinstance(existing_result, Err):
            return existing_result
        existing = existing_result.unwrap()

        if existing.status == QuoteStatus.CONVERTED:
            return Err(ServiceError.invalid_state("Converted quotes cannot be deleted"))

        deleted = await self._records.store.delete(
            QUOTES, str(quote_id), expected={"status": existing.status.value}
        )
        await self._records.forget(quote_id)
        if not deleted:
            return Err(ServiceError.invalid_state("Quote changed while being deleted"))

        logger.info("Quote %s deleted", quote_id)
        return Ok(None)

    async def mark_converted(
        self, quote: Quote, policy_id: UUID, now: datetime
    ) -> Quote | None:
        """Compare-and-swap an active quote to converted.

        Returns None when the stored quote is no longer active, which means
        another conversion won the race. Cache invalidation is left to the
        caller so it can happen after the surrounding transaction commits.
        """
        converted = Quote.model_validate(
            {
                **quote.model_dump(),
                "status": QuoteStatus.CONVERTED,
                "converted_at": now,
                "policy_id": policy_id,
                "updated_at": now,
            }
        )
        document = converted.to_document()
        stored = await self._records.store.update(
            QUOTES,
            str(quote.id),
            {
                key: document[key]
                for key in ("status", "converted_at", "policy_id", "updated_at")
            },
            expected={"status": QuoteStatus.ACTIVE.value},
        )
        return converted if stored is not None else None

    @performance_monitor("quote_conversion", max_duration_ms=3000)
    @beartype
    async def convert(
        self, quote_id: UUID, owner_id: str, policy_id: UUID
    ) -> Result[Quote, ServiceError]:
        """Mark a quote as converted into ``policy_id``.

        ``policy_id`` must name a stored policy of the same owner that was
        issued from this quote. Converting an already converted quote is a
        no-op success so that retries are safe. Expired quotes cannot be
        converted.
        """
        existing_result = await self._records.get_owned(quote_id, owner_id, fresh=True)
        if isinstance(existing_result, Err):
            return existing_result
        existing = existing_result.unwrap()

        issued = await self._issued_policy(existing, policy_id)
        if isinstance(issued, Err):
            return issued

        if existing.status == QuoteStatus.CONVERTED:
            logger.info("Quote %s already converted", quote_id)
            return Ok(existing)

        now = self._clock.now()
        if self.computed_status(existing, now) != QuoteStatus.ACTIVE:
            return Err(
                ServiceError.invalid_state(
                    f"Quote {quote_id} is {self.computed_status(existing, now).value} "
                    "and cannot be converted"
                )
            )

        converted = await self.mark_converted(existing, policy_id, now)
        await self._records.forget(quote_id)
        if converted is None:
            reloaded = await self._records.load(quote_id, fresh=True)
            if reloaded is not None and reloaded.status == QuoteStatus.CONVERTED:
                return Ok(reloaded)
            return Err(ServiceError.invalid_state("Quote changed while being converted"))

        logger.info("Quote %s converted into policy %s", quote_id, policy_id)
        return Ok(converted)

    async def _issued_policy(
        self, quote: Quote, policy_id: UUID
    ) -> Result[Policy, ServiceError]:
        """Load the policy a conversion points at and check it came from ``quote``."""
        document = await self._records.store.get(POLICIES, str(policy_id))
        if document is None:
            return Err(ServiceError.not_found("Policy", policy_id))

        policy = Policy.model_validate(document)
        if policy.owner_id != quote.owner_id:
            logger.warning(
                "Quote %s cannot be converted into policy %s of another owner",
                quote.id,
                policy_id,
            )
            return Err(ServiceError.unauthorized("Policy", policy_id))
        if policy.quote_id != quote.id:
            return Err(
                ServiceError.invalid_state(
                    f"Policy {policy.policy_number} was not issued from quote {quote.id}"
                )
            )
        return Ok(policy)

    @beartype
    async def stats(self, owner_id: str) -> Result[QuoteStats, ServiceError]:
        """Count the owner's quotes by computed status."""
        now = self._clock.now()
        quotes = await self._records.list_owned(owner_id)
        statuses = [self.computed_status(quote, now) for quote in quotes]
        return Ok(
            QuoteStats(
                total=len(quotes),
                active=statuses.count(QuoteStatus.ACTIVE),
                expired=statuses.count(QuoteStatus.EXPIRED),
                converted=statuses.count(QuoteStatus.CONVERTED),
            )
        )

    async def _publish(self, event_type: EventType, quote: Quote, **payload: Any) -> None:
        if self._events is None:
            return
        await self._events.publish(
            DomainEvent(
                event_type=event_type,
                entity_id=quote.id,
                owner_id=quote.owner_id,
                occurred_at=quote.updated_at,
                payload=payload,
            )
        )
