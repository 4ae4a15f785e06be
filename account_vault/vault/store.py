"""
Credential Store — Persistence of the single vault credential holder.

The gate depends only on :class:`CredentialStore`. Implementations must
make ``create_if_absent`` atomic: whatever storage backs the store is
the arbiter of whether a credential already exists.

- :class:`MemoryCredentialStore` — in-process store, one asyncio lock.
- :class:`PoolCredentialStore` — asyncpg-compatible pool; a unique
  singleton column guarantees at most one row.

Security Note:
    Never log password digests. Only log credential ids.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("vault")


@dataclass(frozen=True)
class MasterCredential:
    """The operator's login credential. Exactly one may exist."""

    id: int
    password_hash: str = field(repr=False)
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class CredentialStore(ABC):
    """Repository of the master credential."""

    @abstractmethod
    async def exists(self) -> bool:
        """True once a credential holder has been created."""

    @abstractmethod
    async def create_if_absent(self, password_hash: str) -> MasterCredential | None:
        """Atomically create the credential holder.

        Returns:
            The new credential, or None if one already existed.
        """

    @abstractmethod
    async def find_by_id(self, credential_id: int) -> MasterCredential | None:
        ...

    @abstractmethod
    async def first(self) -> MasterCredential | None:
        """Return the credential holder, if any."""


class MemoryCredentialStore(CredentialStore):
    """In-process credential store.

    The lock covers the check-and-insert so concurrent setup attempts in
    one process produce a single credential.
    """

    def __init__(self):
        self._credential: MasterCredential | None = None
        self._lock = asyncio.Lock()
        self._next_id = 1

    async def exists(self) -> bool:
        return self._credential is not None

    async def create_if_absent(self, password_hash: str) -> MasterCredential | None:
        async with self._lock:
            if self._credential is not None:
                return None
            self._credential = MasterCredential(
                id=self._next_id, password_hash=password_hash,
            )
            self._next_id += 1
        logger.info("Vault credential created: id=%s", self._credential.id)
        return self._credential

    async def find_by_id(self, credential_id: int) -> MasterCredential | None:
        credential = self._credential
        if credential is not None and credential.id == credential_id:
            return credential
        return None

    async def first(self) -> MasterCredential | None:
        return self._credential

    def reset(self) -> None:
        """Drop the credential (full account reset)."""
        self._credential = None


# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_CREDENTIAL = """
INSERT INTO vault.master_credential (password_hash)
VALUES ($1)
ON CONFLICT (singleton) DO NOTHING
RETURNING id, password_hash, created_at
"""

_SELECT_EXISTS = """
SELECT EXISTS (SELECT 1 FROM vault.master_credential)
"""

_SELECT_BY_ID = """
SELECT id, password_hash, created_at
FROM vault.master_credential
WHERE id = $1
"""

_SELECT_FIRST = """
SELECT id, password_hash, created_at
FROM vault.master_credential
ORDER BY id
LIMIT 1
"""


class PoolCredentialStore(CredentialStore):
    """Credential store over an asyncpg-compatible connection pool.

    Expects the table::

        CREATE TABLE vault.master_credential (
            id SERIAL PRIMARY KEY,
            singleton BOOLEAN NOT NULL DEFAULT TRUE UNIQUE CHECK (singleton),
            password_hash TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

    The ``singleton`` column can only ever be TRUE and is unique, so the
    database rejects a second row no matter how many requests race.
    """

    def __init__(self, db_pool: Any):
        self._db = db_pool

    @staticmethod
    def _row_to_credential(row: Any) -> MasterCredential:
        return MasterCredential(
            id=row["id"],
            password_hash=row["password_hash"],
            created_at=row["created_at"],
        )

    async def exists(self) -> bool:
        async with self._db.acquire() as conn:
            return bool(await conn.fetchval(_SELECT_EXISTS))

    async def create_if_absent(self, password_hash: str) -> MasterCredential | None:
        async with self._db.acquire() as conn:
            row = await conn.fetchrow(_INSERT_CREDENTIAL, password_hash)
        if row is None:
            logger.info("Vault credential already exists, creation skipped")
            return None
        credential = self._row_to_credential(row)
        logger.info("Vault credential created: id=%s", credential.id)
        return credential

    async def find_by_id(self, credential_id: int) -> MasterCredential | None:
        async with self._db.acquire() as conn:
            row = await conn.fetchrow(_SELECT_BY_ID, credential_id)
        return self._row_to_credential(row) if row else None

    async def first(self) -> MasterCredential | None:
        async with self._db.acquire() as conn:
            row = await conn.fetchrow(_SELECT_FIRST)
        return self._row_to_credential(row) if row else None
