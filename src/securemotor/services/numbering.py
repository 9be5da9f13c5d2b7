# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Human-readable policy and claim numbers.

Numbers take the form ``PREFIX-YYYY-NNNN`` with a random four digit suffix.
Uniqueness is enforced by the store: an insert that collides on the number
is retried with a fresh suffix up to a fixed number of attempts.
"""

import secrets
from collections.abc import Callable

from beartype import beartype

from ..core.document_store import Document, DocumentStore, DuplicateKeyError
from ..core.errors import ServiceError
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result

logger = get_logger(__name__)

SUFFIX_SPACE = 10_000

SuffixSource = Callable[[], int]


def random_suffix() -> int:
    """Draw a suffix uniformly from 0000-9999."""
    return secrets.randbelow(SUFFIX_SPACE)


@beartype
def format_number(prefix: str, year: int, suffix: int) -> str:
    """Render ``SM``, 2025, 431 as ``SM-2025-0431``."""
    return f"{prefix}-{year:04d}-{suffix % SUFFIX_SPACE:04d}"


class NumberAllocator:
    """Inserts documents under a freshly drawn unique number."""

    def __init__(
        self,
        prefix: str,
        *,
        max_attempts: int,
        suffix_source: SuffixSource | None = None,
    ) -> None:
        """Create an allocator for one number prefix."""
        self._prefix = prefix
        self._max_attempts = max_attempts
        self._suffix_source = suffix_source or random_suffix

    @property
    def prefix(self) -> str:
        return self._prefix

    def draw(self, year: int) -> str:
        """Draw a candidate number without checking uniqueness."""
        return format_number(self._prefix, year, self._suffix_source())

    async def insert_numbered(
        self,
        store: DocumentStore,
        collection: str,
        field_name: str,
        year: int,
        build: Callable[[str], Document],
    ) -> Result[Document, ServiceError]:
        """Insert ``build(number)``, redrawing the number on collisions.

        Args:
            store: Store to insert into.
            collection: Target collection.
            field_name: Document field that holds the number.
            year: Year rendered into the number.
            build: Produces the full document for a candidate number.

        Returns:
            Result containing the stored document, or a CONFLICT error once
            every attempt has collided.
        """
        for attempt in range(1, self._max_attempts + 1):
            document = build(self.draw(year))
            try:
                await store.insert(collection, document)
            except DuplicateKeyError as exc:
                if exc.field_name != field_name:
                    raise
                logger.warning(
                    "Number collision on %s %s (attempt %d/%d)",
                    collection,
                    exc.value,
                    attempt,
                    self._max_attempts,
                )
                continue
            return Ok(document)

        return Err(
            ServiceError.conflict(
                f"Could not allocate a unique {field_name} after "
                f"{self._max_attempts} attempts"
            )
        )
