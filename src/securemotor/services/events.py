# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""In-process domain events.

Services publish an event after the write it describes has been stored.
Notification senders subscribe here; a failing subscriber is logged and
does not affect the operation that published the event.
"""

from collections import defaultdict
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from attrs import field, frozen

from ..core.logging_utils import get_logger

logger = get_logger(__name__)


class EventType(str, Enum):
    """Events emitted by the lifecycle services."""

    QUOTE_CREATED = "quote.created"
    POLICY_ACTIVATED = "policy.activated"
    POLICY_CANCELLED = "policy.cancelled"
    CLAIM_SUBMITTED = "claim.submitted"
    CLAIM_STATUS_CHANGED = "claim.status_changed"


@frozen
class DomainEvent:
    """Something that happened to one record."""

    event_type: EventType = field()
    entity_id: UUID = field()
    owner_id: str = field()
    occurred_at: datetime = field()
    payload: dict[str, Any] = field(factory=dict)


EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventBus:
    """Fan-out of domain events to async subscribers."""

    def __init__(self) -> None:
        self._handlers: defaultdict[EventType, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Register ``handler`` for ``event_type``."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: DomainEvent) -> None:
        """Deliver ``event`` to every subscriber in registration order."""
        logger.debug("Publishing %s for %s", event.event_type.value, event.entity_id)
        for handler in list(self._handlers.get(event.event_type, [])):
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    "Subscriber %r failed handling %s for %s",
                    handler,
                    event.event_type.value,
                    event.entity_id,
                )
