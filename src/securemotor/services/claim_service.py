# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Claim business logic service."""

from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from beartype import beartype
from pydantic import ValidationError as PydanticValidationError

from ..core.cache import Cache
from ..core.clock import Clock
from ..core.config import Settings, get_settings
from ..core.document_store import CLAIMS, Document
from ..core.errors import ServiceError
from ..core.logging_utils import get_logger
from ..core.performance_monitor import performance_monitor
from ..core.result_types import Err, Ok, Result
from ..models.claim import Claim, ClaimCreate, ClaimStatus, ClaimStatusUpdate
from ..models.policy import PolicyStatus
from ..models.reports import ClaimStats
from .cache_keys import CacheKeys
from .events import DomainEvent, EventBus, EventType
from .lifecycle_rules import TERMINAL_CLAIM_STATUSES, can_transition, is_pending_claim
from .numbering import NumberAllocator, SuffixSource
from .policy_service import PolicyService
from .repository import OwnedRecords

logger = get_logger(__name__)


class ClaimService:
    """Service for claim business logic."""

    def __init__(
        self,
        policy_service: PolicyService,
        clock: Clock,
        settings: Settings | None = None,
        cache: Cache | None = None,
        events: EventBus | None = None,
        suffix_source: SuffixSource | None = None,
    ) -> None:
        """Initialize claim service on the same store as ``policy_service``."""
        self._settings = settings or get_settings()
        self._policies = policy_service
        self._clock = clock
        self._events = events
        self._store = policy_service.records.store
        self._numbers = NumberAllocator(
            self._settings.claim_number_prefix,
            max_attempts=self._settings.number_allocation_attempts,
            suffix_source=suffix_source,
        )
        self._records: OwnedRecords[Claim] = OwnedRecords(
            self._store,
            CLAIMS,
            Claim,
            "Claim",
            CacheKeys.claim_by_id,
            cache=cache,
            cache_ttl=self._settings.cache_ttl_seconds,
        )

    @property
    def records(self) -> OwnedRecords[Claim]:
        return self._records

    def _build_claim(
        self,
        claim_data: ClaimCreate,
        owner_id: str,
        status: ClaimStatus,
        now: datetime,
    ) -> Callable[[str], Document]:
        claim_id = uuid4()

        def build(claim_number: str) -> Document:
            claim = Claim(
                id=claim_id,
                owner_id=owner_id,
                policy_id=claim_data.policy_id,
                claim_number=claim_number,
                incident_date=claim_data.incident_date,
                incident_type=claim_data.incident_type,
                description=claim_data.description,
                estimated_amount=claim_data.estimated_amount,
                evidence_urls=claim_data.evidence_urls,
                status=status,
                submitted_at=now if status == ClaimStatus.SUBMITTED else None,
                created_at=now,
                updated_at=now,
            )
            return claim.to_document()

        return build

    @performance_monitor("claim_creation", max_duration_ms=2000)
    @beartype
    async def create(
        self, claim_data: ClaimCreate, owner_id: str, *, submit: bool = True
    ) -> Result[Claim, ServiceError]:
        """File a claim against one of the owner's active policies.

        Args:
            claim_data: Validated intake form.
            owner_id: Claimant; must own the referenced policy.
            submit: File immediately as ``submitted``; False keeps a
                deletable ``draft``.

        Returns:
            Result containing the stored claim.
        """
        policy_result = await self._policies.get(claim_data.policy_id, owner_id)
        if isinstance(policy_result, Err):
            return policy_result
        policy = policy_result.unwrap()

        now = self._clock.now()
        if self._policies.computed_status(policy, now) != PolicyStatus.ACTIVE:
            return Err(
                ServiceError.invalid_state(
                    f"Policy {policy.policy_number} is not active; claims cannot be filed"
                )
            )
        if claim_data.incident_date > now.date():
            return Err(
                ServiceError.validation(
                    "Incident date cannot be in the future", "incident_date"
                )
            )

        status = ClaimStatus.SUBMITTED if submit else ClaimStatus.DRAFT
        inserted = await self._numbers.insert_numbered(
            self._store,
            CLAIMS,
            "claim_number",
            now.year,
            self._build_claim(claim_data, owner_id, status, now),
        )
        if isinstance(inserted, Err):
            return inserted

        claim = Claim.model_validate(inserted.unwrap())
        await self._records.remember(claim)

        logger.info(
            "Claim %s filed as %s on policy %s for %s",
            claim.claim_number,
            claim.status.value,
            policy.policy_number,
            owner_id,
        )
        if claim.status == ClaimStatus.SUBMITTED:
            await self._publish(EventType.CLAIM_SUBMITTED, claim)
        return Ok(claim)

    @beartype
    async def create_from_payload(
        self, payload: dict[str, Any], owner_id: str, *, submit: bool = True
    ) -> Result[Claim, ServiceError]:
        """Validate a raw claim form and file it."""
        try:
            claim_data = ClaimCreate.model_validate(payload)
        except PydanticValidationError as exc:
            return Err(ServiceError.from_pydantic(exc))
        return await self.create(claim_data, owner_id, submit=submit)

    @performance_monitor("get_claim")
    @beartype
    async def get(self, claim_id: UUID, owner_id: str) -> Result[Claim, ServiceError]:
        """Get one of the owner's claims."""
        return await self._records.get_owned(claim_id, owner_id)

    @beartype
    async def list_claims(self, owner_id: str) -> Result[list[Claim], ServiceError]:
        """All of the owner's claims, newest first."""
        return Ok(await self._records.list_owned(owner_id))

    @beartype
    async def recent(
        self, owner_id: str, limit: int | None = None
    ) -> Result[list[Claim], ServiceError]:
        """The owner's most recent claims."""
        claims = await self._records.list_owned(owner_id)
        if limit is None:
            limit = self._settings.recent_items_limit
        return Ok(claims[:limit])

    @beartype
    async def submit(self, claim_id: UUID, owner_id: str) -> Result[Claim, ServiceError]:
        """Submit a draft claim for review."""
        return await self._transition(
            claim_id, ClaimStatusUpdate(status=ClaimStatus.SUBMITTED), owner_id
        )

    @performance_monitor("claim_status_update")
    @beartype
    async def update_status(
        self,
        claim_id: UUID,
        status_update: ClaimStatusUpdate,
        owner_id: str | None = None,
    ) -> Result[Claim, ServiceError]:
        """Move a claim forward through review.

        Reviewers act on any claim and pass no ``owner_id``. Transitions
        outside the claim transition table fail with INVALID_TRANSITION.
        """
        return await self._transition(claim_id, status_update, owner_id)

    async def _transition(
        self,
        claim_id: UUID,
        status_update: ClaimStatusUpdate,
        owner_id: str | None,
    ) -> Result[Claim, ServiceError]:
        existing_result = await self._records.get_owned(claim_id, owner_id, fresh=True)
        if isinstance(existing_result, Err):
            return existing_result
        existing = existing_result.unwrap()

        target = status_update.status
        if not can_transition(existing.status, target):
            logger.warning(
                "Rejected claim %s transition %s -> %s",
                existing.claim_number,
                existing.status.value,
                target.value,
            )
            return Err(ServiceError.invalid_transition(existing.status.value, target.value))

        now = self._clock.now()
        changes: dict[str, Any] = {"status": target, "updated_at": now}
        if target == ClaimStatus.SUBMITTED:
            changes["submitted_at"] = now
        if target in TERMINAL_CLAIM_STATUSES:
            changes["resolved_at"] = now
        if status_update.approved_amount is not None:
            changes["approved_amount"] = status_update.approved_amount

        updated = Claim.model_validate({**existing.model_dump(), **changes})
        document = updated.to_document()
        stored = await self._store.update(
            CLAIMS,
            str(claim_id),
            {key: document[key] for key in changes},
            expected={"status": existing.status.value},
        )
        await self._records.forget(claim_id)
        if stored is None:
            return Err(ServiceError.invalid_state("Claim changed while being updated"))

        logger.info(
            "Claim %s moved %s -> %s",
            updated.claim_number,
            existing.status.value,
            target.value,
        )
        if target == ClaimStatus.SUBMITTED:
            await self._publish(EventType.CLAIM_SUBMITTED, updated)
        await self._publish(
            EventType.CLAIM_STATUS_CHANGED, updated, previous_status=existing.status.value
        )
        return Ok(updated)

    @beartype
    async def delete(self, claim_id: UUID, owner_id: str) -> Result[None, ServiceError]:
        """Delete a draft claim."""
        existing_result = await self._records.get_owned(claim_id, owner_id, fresh=True)
        if isinstance(existing_result, Err):
            return existing_result
        existing = existing_result.unwrap()

        if existing.status != ClaimStatus.DRAFT:
            return Err(
                ServiceError.invalid_state(
                    f"Claim {existing.claim_number} is {existing.status.value}; "
                    "only drafts can be deleted"
                )
            )

        deleted = await self._store.delete(
            CLAIMS, str(claim_id), expected={"status": ClaimStatus.DRAFT.value}
        )
        await self._records.forget(claim_id)
        if not deleted:
            return Err(ServiceError.invalid_state("Claim changed while being deleted"))

        logger.info("Draft claim %s deleted", existing.claim_number)
        return Ok(None)

    @beartype
    async def stats(self, owner_id: str) -> Result[ClaimStats, ServiceError]:
        """Count the owner's claims per status."""
        claims = await self._records.list_owned(owner_id)
        statuses = [claim.status for claim in claims]
        return Ok(
            ClaimStats(
                total=len(claims),
                pending=sum(1 for status in statuses if is_pending_claim(status)),
                draft=statuses.count(ClaimStatus.DRAFT),
                submitted=statuses.count(ClaimStatus.SUBMITTED),
                under_review=statuses.count(ClaimStatus.UNDER_REVIEW),
                approved=statuses.count(ClaimStatus.APPROVED),
                rejected=statuses.count(ClaimStatus.REJECTED),
                settled=statuses.count(ClaimStatus.SETTLED),
            )
        )

    @beartype
    async def pending_count(self, owner_id: str) -> Result[int, ServiceError]:
        """Claims still awaiting payout."""
        claims = await self._records.list_owned(owner_id)
        return Ok(sum(1 for claim in claims if is_pending_claim(claim.status)))

    async def _publish(
        self, event_type: EventType, claim: Claim, **extra: Any
    ) -> None:
        if self._events is None:
            return
        await self._events.publish(
            DomainEvent(
                event_type=event_type,
                entity_id=claim.id,
                owner_id=claim.owner_id,
                occurred_at=claim.updated_at,
                payload={
                    "claim_number": claim.claim_number,
                    "policy_id": str(claim.policy_id),
                    "status": claim.status.value,
                    **extra,
                },
            )
        )
