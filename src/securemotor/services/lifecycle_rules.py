# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Status rules shared by the lifecycle services and the reports.

Stored statuses record the last explicit transition. Expiry is never
written back: callers derive the effective status with the functions here.
"""

from datetime import datetime
from typing import Final

from beartype import beartype

from ..models.claim import ClaimStatus
from ..models.policy import PolicyStatus
from ..models.quote import QuoteStatus

CLAIM_TRANSITIONS: Final[dict[ClaimStatus, frozenset[ClaimStatus]]] = {
    ClaimStatus.DRAFT: frozenset({ClaimStatus.SUBMITTED}),
    ClaimStatus.SUBMITTED: frozenset({ClaimStatus.UNDER_REVIEW, ClaimStatus.REJECTED}),
    ClaimStatus.UNDER_REVIEW: frozenset({ClaimStatus.APPROVED, ClaimStatus.REJECTED}),
    ClaimStatus.APPROVED: frozenset({ClaimStatus.SETTLED}),
    ClaimStatus.REJECTED: frozenset(),
    ClaimStatus.SETTLED: frozenset(),
}

PENDING_CLAIM_STATUSES: Final = frozenset(
    {ClaimStatus.SUBMITTED, ClaimStatus.UNDER_REVIEW, ClaimStatus.APPROVED}
)

# Statuses that close a claim and stamp ``resolved_at``.
TERMINAL_CLAIM_STATUSES: Final = frozenset({ClaimStatus.REJECTED, ClaimStatus.SETTLED})


@beartype
def effective_quote_status(
    status: QuoteStatus, expires_at: datetime, now: datetime
) -> QuoteStatus:
    """Report an active quote past its expiry as expired."""
    if status == QuoteStatus.ACTIVE and expires_at < now:
        return QuoteStatus.EXPIRED
    return status


@beartype
def effective_policy_status(
    status: PolicyStatus, end_date: datetime, now: datetime
) -> PolicyStatus:
    """Cancelled stays cancelled; active needs a future end date; the rest is expired."""
    if status == PolicyStatus.CANCELLED:
        return PolicyStatus.CANCELLED
    if status == PolicyStatus.ACTIVE and end_date > now:
        return PolicyStatus.ACTIVE
    return PolicyStatus.EXPIRED


@beartype
def can_transition(current: ClaimStatus, target: ClaimStatus) -> bool:
    """Whether a claim may move from ``current`` to ``target``."""
    return target in CLAIM_TRANSITIONS[current]


@beartype
def is_pending_claim(status: ClaimStatus) -> bool:
    """Claims still awaiting payout, used by every pending count."""
    return status in PENDING_CLAIM_STATUSES
