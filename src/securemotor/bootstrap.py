# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Service wiring.

``create_portal`` builds every service on one document store, one optional
Redis cache, one clock and one event bus. ``portal_lifespan`` connects and
disconnects the infrastructure around a block of work.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from attrs import define, field
from beartype import beartype

from .core.cache import Cache, CacheConfig
from .core.clock import Clock, SystemClock
from .core.config import Settings, get_settings
from .core.database import PoolConfig, PostgresDocumentStore
from .core.document_store import DocumentStore, InMemoryDocumentStore
from .core.logging_utils import configure_from_settings, get_logger
from .services.analytics_service import AnalyticsService
from .services.claim_service import ClaimService
from .services.dashboard_service import DashboardService
from .services.events import EventBus
from .services.numbering import SuffixSource
from .services.policy_service import PolicyService
from .services.quote_service import QuoteService

logger = get_logger(__name__)


@define
class Portal:
    """Every service of one running portal, sharing its infrastructure."""

    settings: Settings = field()
    store: DocumentStore = field()
    clock: Clock = field()
    events: EventBus = field()
    quotes: QuoteService = field()
    policies: PolicyService = field()
    claims: ClaimService = field()
    analytics: AnalyticsService = field()
    dashboard: DashboardService = field()
    cache: Cache | None = field(default=None)

    async def start(self) -> None:
        """Connect the store and cache where they need it."""
        if isinstance(self.store, PostgresDocumentStore):
            await self.store.connect()
        if self.cache is not None:
            await self.cache.connect()
        logger.info(
            "%s started (%s store, cache %s)",
            self.settings.app_name,
            type(self.store).__name__,
            "enabled" if self.cache is not None else "disabled",
        )

    async def stop(self) -> None:
        """Release connections."""
        if self.cache is not None:
            await self.cache.disconnect()
        if isinstance(self.store, PostgresDocumentStore):
            await self.store.disconnect()
        logger.info("%s stopped", self.settings.app_name)


@beartype
def build_store(settings: Settings) -> DocumentStore:
    """Select the document store named by ``database_url``."""
    if settings.uses_memory_store:
        return InMemoryDocumentStore()
    return PostgresDocumentStore(PoolConfig.from_settings(settings))


@beartype
def build_cache(settings: Settings) -> Cache | None:
    """Redis cache, or None when no ``redis_url`` is configured."""
    if settings.redis_url is None:
        return None
    return Cache(CacheConfig(url=settings.redis_url, default_ttl=settings.cache_ttl_seconds))


def create_portal(
    settings: Settings | None = None,
    *,
    store: DocumentStore | None = None,
    cache: Cache | None = None,
    clock: Clock | None = None,
    events: EventBus | None = None,
    suffix_source: SuffixSource | None = None,
) -> Portal:
    """Wire the services from settings; explicit arguments take precedence."""
    settings = settings or get_settings()
    configure_from_settings(settings)

    store = store if store is not None else build_store(settings)
    cache = cache if cache is not None else build_cache(settings)
    clock = clock or SystemClock()
    events = events or EventBus()

    quotes = QuoteService(store, clock, settings, cache=cache, events=events)
    policies = PolicyService(
        quotes, clock, settings, cache=cache, events=events, suffix_source=suffix_source
    )
    claims = ClaimService(
        policies, clock, settings, cache=cache, events=events, suffix_source=suffix_source
    )

    return Portal(
        settings=settings,
        store=store,
        clock=clock,
        events=events,
        quotes=quotes,
        policies=policies,
        claims=claims,
        analytics=AnalyticsService(quotes, policies, claims, clock),
        dashboard=DashboardService(quotes, policies, claims, clock, settings),
        cache=cache,
    )


@asynccontextmanager
async def portal_lifespan(
    settings: Settings | None = None, **overrides: object
) -> AsyncIterator[Portal]:
    """Start a portal, yield it, and stop it on exit."""
    portal = create_portal(settings, **overrides)  # type: ignore[arg-type]
    await portal.start()
    try:
        yield portal
    finally:
        await portal.stop()
