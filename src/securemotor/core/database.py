# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""PostgreSQL document store with asyncpg connection pooling.

All collections share one ``documents`` table holding JSONB payloads.
Equality filters use JSONB containment, and compare-and-swap updates add the
expected fields to the ``WHERE`` clause so the check and the write happen in
one statement.
"""

import contextlib
import json
from collections.abc import AsyncIterator
from contextvars import ContextVar
from typing import Any

import asyncpg
from attrs import field, frozen
from beartype import beartype

from .config import Settings, get_settings
from .document_store import Document, DuplicateKeyError
from .logging_utils import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    seq BIGSERIAL NOT NULL,
    collection TEXT NOT NULL,
    id TEXT NOT NULL,
    owner_id TEXT,
    data JSONB NOT NULL,
    PRIMARY KEY (collection, id)
);
CREATE INDEX IF NOT EXISTS documents_owner_idx
    ON documents (collection, owner_id);
CREATE UNIQUE INDEX IF NOT EXISTS documents_policy_number_key
    ON documents ((data->>'policy_number')) WHERE collection = 'policies';
CREATE UNIQUE INDEX IF NOT EXISTS documents_claim_number_key
    ON documents ((data->>'claim_number')) WHERE collection = 'claims';
"""

# Unique index name -> document field it protects.
_UNIQUE_INDEX_FIELDS = {
    "documents_pkey": "id",
    "documents_policy_number_key": "policy_number",
    "documents_claim_number_key": "claim_number",
}


@frozen
class PoolConfig:
    """Immutable pool configuration."""

    dsn: str = field()
    min_connections: int = field(default=2)
    max_connections: int = field(default=10)
    command_timeout: float = field(default=30.0)

    @classmethod
    @beartype
    def from_settings(cls, settings: Settings) -> "PoolConfig":
        """Build the pool configuration from application settings."""
        return cls(
            dsn=settings.database_url,
            min_connections=settings.database_pool_min,
            max_connections=settings.database_pool_max,
            command_timeout=settings.database_command_timeout,
        )


class PostgresDocumentStore:
    """Document store backed by a single JSONB table."""

    def __init__(
        self,
        config: PoolConfig | None = None,
        pool: Any | None = None,
    ) -> None:
        """Create the store; pass ``pool`` to reuse an existing asyncpg pool."""
        self._config = config or PoolConfig.from_settings(get_settings())
        self._pool = pool
        self._tx_connection: ContextVar[Any | None] = ContextVar(
            f"securemotor_tx_{id(self)}", default=None
        )

    @staticmethod
    async def _init_connection(conn: asyncpg.Connection) -> None:
        """Encode and decode JSONB as Python objects."""
        await conn.set_type_codec(
            "jsonb",
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )

    @beartype
    async def connect(self) -> None:
        """Create the connection pool and make sure the schema exists."""
        if self._pool is not None:
            return

        self._pool = await asyncpg.create_pool(
            self._config.dsn,
            min_size=self._config.min_connections,
            max_size=self._config.max_connections,
            command_timeout=self._config.command_timeout,
            init=self._init_connection,
        )
        await self.ensure_schema()
        logger.info(
            "Document store connected (pool %d-%d)",
            self._config.min_connections,
            self._config.max_connections,
        )

    @beartype
    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    @property
    def is_connected(self) -> bool:
        """Check if the pool has been created."""
        return self._pool is not None

    @beartype
    async def ensure_schema(self) -> None:
        """Create the documents table and its indexes if missing."""
        async with self._acquire() as conn:
            await conn.execute(SCHEMA_SQL)

    @contextlib.asynccontextmanager
    async def _acquire(self) -> AsyncIterator[Any]:
        """Yield the task's transaction connection, or a pooled one."""
        bound = self._tx_connection.get()
        if bound is not None:
            yield bound
            return

        if self._pool is None:
            raise RuntimeError("Database not connected")
        async with self._pool.acquire() as conn:
            yield conn

    @staticmethod
    def _duplicate(
        collection: str, document: Document, exc: asyncpg.UniqueViolationError
    ) -> DuplicateKeyError:
        constraint = getattr(exc, "constraint_name", None) or "documents_pkey"
        field_name = _UNIQUE_INDEX_FIELDS.get(constraint, constraint)
        return DuplicateKeyError(collection, field_name, document.get(field_name))

    @beartype
    async def insert(self, collection: str, document: Document) -> None:
        """Insert a new document.

        The insert runs in its own savepoint so a unique violation inside an
        enclosing transaction leaves that transaction usable.
        """
        async with self._acquire() as conn:
            try:
                async with conn.transaction():
                    await conn.execute(
                        "INSERT INTO documents (collection, id, owner_id, data) "
                        "VALUES ($1, $2, $3, $4)",
                        collection,
                        str(document["id"]),
                        document.get("owner_id"),
                        document,
                    )
            except asyncpg.UniqueViolationError as exc:
                raise self._duplicate(collection, document, exc) from exc

    @beartype
    async def get(self, collection: str, document_id: str) -> Document | None:
        """Fetch one document by id."""
        async with self._acquire() as conn:
            data = await conn.fetchval(
                "SELECT data FROM documents WHERE collection = $1 AND id = $2",
                collection,
                document_id,
            )
        return data

    @beartype
    async def find(self, collection: str, **equals: Any) -> list[Document]:
        """Return documents containing ``equals``, oldest insert first."""
        async with self._acquire() as conn:
            rows = await conn.fetch(
                "SELECT data FROM documents "
                "WHERE collection = $1 AND data @> $2 ORDER BY seq",
                collection,
                equals,
            )
        return [row["data"] for row in rows]

    @beartype
    async def update(
        self,
        collection: str,
        document_id: str,
        changes: Document,
        *,
        expected: Document | None = None,
    ) -> Document | None:
        """Merge ``changes`` when the stored document contains ``expected``."""
        async with self._acquire() as conn:
            try:
                return await conn.fetchval(
                    "UPDATE documents SET data = data || $3 "
                    "WHERE collection = $1 AND id = $2 AND data @> $4 "
                    "RETURNING data",
                    collection,
                    document_id,
                    changes,
                    expected or {},
                )
            except asyncpg.UniqueViolationError as exc:
                raise self._duplicate(collection, changes, exc) from exc

    @beartype
    async def delete(
        self,
        collection: str,
        document_id: str,
        *,
        expected: Document | None = None,
    ) -> bool:
        """Delete a document when it contains ``expected``."""
        async with self._acquire() as conn:
            status = await conn.execute(
                "DELETE FROM documents "
                "WHERE collection = $1 AND id = $2 AND data @> $3",
                collection,
                document_id,
                expected or {},
            )
        return status.split()[-1] != "0"

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Bind one connection to the current task for the duration of a transaction."""
        if self._tx_connection.get() is not None:
            raise RuntimeError("Nested transactions are not supported")
        if self._pool is None:
            raise RuntimeError("Database not connected")

        async with self._pool.acquire() as conn:
            async with conn.transaction():
                token = self._tx_connection.set(conn)
                try:
                    yield
                finally:
                    self._tx_connection.reset(token)
