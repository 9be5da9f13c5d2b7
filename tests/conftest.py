"""Shared pytest fixtures: fixed clock, in-memory store, services and cache."""

from collections.abc import AsyncGenerator

import fakeredis
import pytest
import pytest_asyncio

from securemotor.core.cache import Cache, CacheConfig
from securemotor.core.clock import FixedClock
from securemotor.core.config import Settings, clear_settings_cache
from securemotor.core.document_store import InMemoryDocumentStore
from securemotor.models.policy import Policy
from securemotor.models.quote import Quote
from securemotor.services.analytics_service import AnalyticsService
from securemotor.services.claim_service import ClaimService
from securemotor.services.dashboard_service import DashboardService
from securemotor.services.events import DomainEvent, EventBus, EventType
from securemotor.services.policy_service import PolicyService
from securemotor.services.quote_service import QuoteService
from tests.fixtures.test_data import NOW, OWNER_A, make_quote_create


@pytest.fixture(autouse=True)
def _fresh_settings() -> None:
    """Never leak a cached Settings instance between tests."""
    clear_settings_cache()


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at mid-June 2025."""
    return FixedClock(NOW)


@pytest.fixture
def settings() -> Settings:
    """Default settings on the in-memory store without Redis."""
    return Settings(database_url="memory://", redis_url=None)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def recorded_events(events: EventBus) -> list[DomainEvent]:
    """Every event published on ``events`` during the test."""
    recorded: list[DomainEvent] = []

    async def record(event: DomainEvent) -> None:
        recorded.append(event)

    for event_type in EventType:
        events.subscribe(event_type, record)
    return recorded


@pytest.fixture
def quote_service(
    store: InMemoryDocumentStore, clock: FixedClock, settings: Settings, events: EventBus
) -> QuoteService:
    return QuoteService(store, clock, settings, events=events)


@pytest.fixture
def policy_service(
    quote_service: QuoteService, clock: FixedClock, settings: Settings, events: EventBus
) -> PolicyService:
    return PolicyService(quote_service, clock, settings, events=events)


@pytest.fixture
def claim_service(
    policy_service: PolicyService, clock: FixedClock, settings: Settings, events: EventBus
) -> ClaimService:
    return ClaimService(policy_service, clock, settings, events=events)


@pytest.fixture
def analytics_service(
    quote_service: QuoteService,
    policy_service: PolicyService,
    claim_service: ClaimService,
    clock: FixedClock,
) -> AnalyticsService:
    return AnalyticsService(quote_service, policy_service, claim_service, clock)


@pytest.fixture
def dashboard_service(
    quote_service: QuoteService,
    policy_service: PolicyService,
    claim_service: ClaimService,
    clock: FixedClock,
    settings: Settings,
) -> DashboardService:
    return DashboardService(quote_service, policy_service, claim_service, clock, settings)


@pytest_asyncio.fixture
async def active_quote(quote_service: QuoteService) -> Quote:
    """An active comprehensive quote owned by OWNER_A."""
    result = await quote_service.create(make_quote_create(), OWNER_A)
    return result.unwrap()


@pytest_asyncio.fixture
async def active_policy(policy_service: PolicyService, active_quote: Quote) -> Policy:
    """A policy issued from ``active_quote``."""
    result = await policy_service.convert_from_quote(active_quote.id, OWNER_A)
    return result.unwrap()


@pytest_asyncio.fixture
async def fake_redis() -> AsyncGenerator[fakeredis.FakeAsyncRedis, None]:
    """Isolated in-process Redis double."""
    client = fakeredis.FakeAsyncRedis(
        server=fakeredis.FakeServer(), decode_responses=True
    )
    yield client
    await client.aclose()


@pytest.fixture
def cache(fake_redis: fakeredis.FakeAsyncRedis) -> Cache:
    """Cache wired to the fake Redis client."""
    return Cache(CacheConfig(url="redis://localhost:6379/0"), redis_client=fake_redis)
