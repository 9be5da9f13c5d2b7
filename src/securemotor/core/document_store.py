# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Document store contract and the in-memory implementation.

Records are stored as JSON documents keyed by ``(collection, id)``. Every
write is atomic per document; multi-document units of work go through
``transaction()``, which rolls back when its body raises.
"""

from __future__ import annotations

import asyncio
import contextlib
import copy
from collections.abc import AsyncIterator, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from beartype import beartype

__all__ = [
    "CLAIMS",
    "DEFAULT_UNIQUE_FIELDS",
    "Document",
    "DocumentStore",
    "DuplicateKeyError",
    "InMemoryDocumentStore",
    "POLICIES",
    "QUOTES",
    "TransactionAborted",
]

Document = dict[str, Any]

QUOTES = "quotes"
POLICIES = "policies"
CLAIMS = "claims"

# Human-readable numbers must never be issued twice.
DEFAULT_UNIQUE_FIELDS: Mapping[str, tuple[str, ...]] = {
    POLICIES: ("policy_number",),
    CLAIMS: ("claim_number",),
}


class DuplicateKeyError(Exception):
    """A write would violate a unique constraint."""

    def __init__(self, collection: str, field_name: str, value: Any) -> None:
        super().__init__(f"Duplicate {field_name}={value!r} in {collection}")
        self.collection = collection
        self.field_name = field_name
        self.value = value


class TransactionAborted(Exception):
    """Raised inside ``transaction()`` to roll back and hand a reason to the caller."""

    def __init__(self, reason: Any) -> None:
        super().__init__(str(reason))
        self.reason = reason


@runtime_checkable
class DocumentStore(Protocol):
    """Minimal async document storage used by the lifecycle services."""

    async def insert(self, collection: str, document: Document) -> None: ...

    async def get(self, collection: str, document_id: str) -> Document | None: ...

    async def find(self, collection: str, **equals: Any) -> list[Document]: ...

    async def update(
        self,
        collection: str,
        document_id: str,
        changes: Document,
        *,
        expected: Document | None = None,
    ) -> Document | None: ...

    async def delete(
        self,
        collection: str,
        document_id: str,
        *,
        expected: Document | None = None,
    ) -> bool: ...

    def transaction(self) -> contextlib.AbstractAsyncContextManager[None]: ...


def _matches(document: Document, criteria: Mapping[str, Any] | None) -> bool:
    if not criteria:
        return True
    return all(document.get(key) == value for key, value in criteria.items())


class InMemoryDocumentStore:
    """Dict-backed store for tests and single-process deployments.

    ``find`` returns documents in insertion order. Transactions are
    serialized through one lock and are not reentrant.
    """

    def __init__(
        self, unique_fields: Mapping[str, Sequence[str]] | None = None
    ) -> None:
        """Create an empty store enforcing ``unique_fields`` per collection."""
        fields = DEFAULT_UNIQUE_FIELDS if unique_fields is None else unique_fields
        self._unique = {name: tuple(keys) for name, keys in fields.items()}
        self._collections: dict[str, dict[str, Document]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    def _check_unique(
        self, collection: str, candidate: Document, skip_id: str | None = None
    ) -> None:
        for key in self._unique.get(collection, ()):
            value = candidate.get(key)
            if value is None:
                continue
            for doc_id, existing in self._collection(collection).items():
                if doc_id != skip_id and existing.get(key) == value:
                    raise DuplicateKeyError(collection, key, value)

    @beartype
    async def insert(self, collection: str, document: Document) -> None:
        """Store a new document; its ``id`` must be unused."""
        document_id = str(document["id"])
        records = self._collection(collection)
        if document_id in records:
            raise DuplicateKeyError(collection, "id", document_id)
        self._check_unique(collection, document)
        records[document_id] = copy.deepcopy(document)

    @beartype
    async def get(self, collection: str, document_id: str) -> Document | None:
        """Fetch one document by id."""
        document = self._collection(collection).get(document_id)
        return copy.deepcopy(document) if document is not None else None

    @beartype
    async def find(self, collection: str, **equals: Any) -> list[Document]:
        """Return every document whose top-level fields equal ``equals``."""
        return [
            copy.deepcopy(document)
            for document in self._collection(collection).values()
            if _matches(document, equals)
        ]

    @beartype
    async def update(
        self,
        collection: str,
        document_id: str,
        changes: Document,
        *,
        expected: Document | None = None,
    ) -> Document | None:
        """Merge ``changes`` if the document exists and matches ``expected``."""
        records = self._collection(collection)
        current = records.get(document_id)
        if current is None or not _matches(current, expected):
            return None

        merged = {**current, **copy.deepcopy(changes)}
        self._check_unique(collection, merged, skip_id=document_id)
        records[document_id] = merged
        return copy.deepcopy(merged)

    @beartype
    async def delete(
        self,
        collection: str,
        document_id: str,
        *,
        expected: Document | None = None,
    ) -> bool:
        """Remove a document if it exists and matches ``expected``."""
        records = self._collection(collection)
        current = records.get(document_id)
        if current is None or not _matches(current, expected):
            return False
        del records[document_id]
        return True

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run a unit of work; any exception restores the prior contents."""
        async with self._lock:
            snapshot = copy.deepcopy(self._collections)
            try:
                yield
            except BaseException:
                self._collections = snapshot
                raise
