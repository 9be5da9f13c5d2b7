# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Owner-scoped access to one collection of domain records.

Every read goes through the owning user's id: lists are filtered in the
store and single-record reads are checked after loading, whether the
record came from Redis or from the store.
"""

from collections.abc import Callable
from typing import Generic, TypeVar
from uuid import UUID

from ..core.cache import Cache
from ..core.document_store import DocumentStore
from ..core.errors import ServiceError
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.base import IdentifiableModel

logger = get_logger(__name__)

M = TypeVar("M", bound=IdentifiableModel)


class OwnedRecords(Generic[M]):
    """Load, list and cache records of one model type."""

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        model: type[M],
        entity: str,
        cache_key: Callable[[UUID], str],
        cache: Cache | None = None,
        cache_ttl: int = 3600,
    ) -> None:
        self._store = store
        self._collection = collection
        self._model = model
        self._entity = entity
        self._cache_key = cache_key
        self._cache = cache
        self._cache_ttl = cache_ttl

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def collection(self) -> str:
        return self._collection

    async def load(self, record_id: UUID, *, fresh: bool = False) -> M | None:
        """Load one record.

        ``fresh`` bypasses the cache in both directions; use it inside
        transactions so uncommitted state is never cached.
        """
        key = self._cache_key(record_id)
        if self._cache is not None and not fresh:
            cached = await self._cache.get(key)
            if cached:
                return self._model.model_validate(cached)

        document = await self._store.get(self._collection, str(record_id))
        if document is None:
            return None

        record = self._model.model_validate(document)
        if not fresh:
            await self.remember(record)
        return record

    async def get_owned(
        self, record_id: UUID, owner_id: str | None, *, fresh: bool = False
    ) -> Result[M, ServiceError]:
        """Load a record and check it belongs to ``owner_id``.

        ``owner_id=None`` skips the ownership check and is reserved for
        staff operations such as claim review.
        """
        record = await self.load(record_id, fresh=fresh)
        if record is None:
            return Err(ServiceError.not_found(self._entity, record_id))
        if owner_id is not None and record.owner_id != owner_id:
            logger.warning(
                "Owner %s denied access to %s %s", owner_id, self._entity, record_id
            )
            return Err(ServiceError.unauthorized(self._entity, record_id))
        return Ok(record)

    async def list_owned(self, owner_id: str | None) -> list[M]:
        """All records of ``owner_id`` (every owner when None), newest first.

        Records created at the same instant keep their insertion order.
        """
        if owner_id is None:
            documents = await self._store.find(self._collection)
        else:
            documents = await self._store.find(self._collection, owner_id=owner_id)
        records = [self._model.model_validate(document) for document in documents]
        return sorted(records, key=lambda record: record.created_at, reverse=True)

    async def remember(self, record: M) -> None:
        """Write a record through to the cache."""
        if self._cache is None:
            return
        await self._cache.set(
            self._cache_key(record.id), record.to_document(), self._cache_ttl
        )

    async def forget(self, record_id: UUID) -> None:
        """Drop a record from the cache after it changed."""
        if self._cache is None:
            return
        await self._cache.delete(self._cache_key(record_id))
