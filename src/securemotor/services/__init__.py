# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Business logic services for the SecureMotor core."""

from .analytics_service import AnalyticsService
from .cache_keys import CacheKeys
from .claim_service import ClaimService
from .dashboard_service import DashboardService
from .events import DomainEvent, EventBus, EventType
from .policy_service import PolicyService
from .premium_calculator import PremiumCalculator
from .quote_service import QuoteService

__all__ = [
    "AnalyticsService",
    "CacheKeys",
    "ClaimService",
    "DashboardService",
    "DomainEvent",
    "EventBus",
    "EventType",
    "PolicyService",
    "PremiumCalculator",
    "QuoteService",
]
