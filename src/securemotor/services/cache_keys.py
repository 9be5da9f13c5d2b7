# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Centralized cache key management for consistency and type safety.

This module provides a single source of truth for cache key patterns
across all services, ensuring consistency and preventing key collisions.
"""

from uuid import UUID

from beartype import beartype


class CacheKeys:
    """Centralized cache key management."""

    # Cache key prefixes
    QUOTE_PREFIX = "quote"
    POLICY_PREFIX = "policy"
    CLAIM_PREFIX = "claim"

    @staticmethod
    @beartype
    def quote_by_id(quote_id: UUID) -> str:
        """Cache key for quote by ID."""
        return f"{CacheKeys.QUOTE_PREFIX}:id:{quote_id}"

    @staticmethod
    @beartype
    def policy_by_id(policy_id: UUID) -> str:
        """Cache key for policy by ID."""
        return f"{CacheKeys.POLICY_PREFIX}:id:{policy_id}"

    @staticmethod
    @beartype
    def claim_by_id(claim_id: UUID) -> str:
        """Cache key for claim by ID."""
        return f"{CacheKeys.CLAIM_PREFIX}:id:{claim_id}"
