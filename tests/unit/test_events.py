"""Unit tests for the domain event bus."""

import logging
from uuid import uuid4

import pytest

from securemotor.services.events import DomainEvent, EventBus, EventType
from tests.fixtures.test_data import NOW, OWNER_A


def _event(event_type: EventType = EventType.QUOTE_CREATED) -> DomainEvent:
    return DomainEvent(
        event_type=event_type, entity_id=uuid4(), owner_id=OWNER_A, occurred_at=NOW
    )


class TestEventBus:
    async def test_delivers_to_matching_subscribers(self) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []

        async def handler(event: DomainEvent) -> None:
            received.append(event)

        bus.subscribe(EventType.QUOTE_CREATED, handler)
        created = _event()
        await bus.publish(created)
        await bus.publish(_event(EventType.CLAIM_SUBMITTED))

        assert received == [created]

    async def test_failing_subscriber_is_logged_and_isolated(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []

        async def broken(event: DomainEvent) -> None:
            raise RuntimeError("mail server down")

        async def working(event: DomainEvent) -> None:
            received.append(event)

        bus.subscribe(EventType.POLICY_ACTIVATED, broken)
        bus.subscribe(EventType.POLICY_ACTIVATED, working)

        with caplog.at_level(logging.ERROR, logger="securemotor.services.events"):
            await bus.publish(_event(EventType.POLICY_ACTIVATED))

        assert len(received) == 1
        assert "failed handling policy.activated" in caplog.text

    async def test_unsubscribe(self) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []

        async def handler(event: DomainEvent) -> None:
            received.append(event)

        bus.subscribe(EventType.QUOTE_CREATED, handler)
        bus.unsubscribe(EventType.QUOTE_CREATED, handler)
        await bus.publish(_event())

        assert received == []
