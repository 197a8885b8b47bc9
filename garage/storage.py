"""
Key-value store adapters.

Every backend satisfies the same small async contract (get, set, delete,
keys) so the entity manager can run against an in-memory dict in tests and
against a SQL table in production.
"""
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from garage.database import create_sessionmaker
from garage.exceptions import StorageError, StorageUnavailableError
from garage.models.entry import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Async key-value backend holding JSON-compatible values."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key`` or None."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``; deleting a missing key is a no-op."""

    @abstractmethod
    async def keys(self, prefix: str = "") -> List[str]:
        """List stored keys, optionally restricted to a prefix."""

    async def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Fetch several keys at once. Missing keys are left out."""
        found = {}
        for key in keys:
            value = await self.get(key)
            if value is not None:
                found[key] = value
        return found

    async def is_ready(self) -> bool:
        return True


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store.

    Values are serialized to JSON on the way in and parsed on the way out,
    so what callers get back behaves like what a real backend would return
    and never aliases the stored state.
    """

    def __init__(self, ready: bool = True):
        self._data: Dict[str, str] = {}
        self._ready = ready

    def mark_ready(self) -> None:
        self._ready = True

    async def is_ready(self) -> bool:
        return self._ready

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Value for {key} is not JSON serializable: {exc}") from exc

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self, prefix: str = "") -> List[str]:
        return [key for key in self._data if key.startswith(prefix)]


class SqlKeyValueStore(KeyValueStore):
    """Store backed by the ``key_value`` table through SQLAlchemy async."""

    def __init__(self, engine: AsyncEngine, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self.engine = engine
        self.session_factory = session_factory or create_sessionmaker(engine)

    async def is_ready(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.debug("Storage not ready: %s", exc)
            return False
        return True

    async def get(self, key: str) -> Optional[Any]:
        try:
            async with self.session_factory() as session:
                entry = await session.get(KeyValueEntry, key)
                return None if entry is None else entry.value
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to read {key}: {exc}") from exc

    async def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        keys = list(keys)
        if not keys:
            return {}
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(KeyValueEntry).where(KeyValueEntry.key.in_(keys)))
                return {entry.key: entry.value for entry in result.scalars()}
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to read {len(keys)} keys: {exc}") from exc

    async def set(self, key: str, value: Any) -> None:
        try:
            async with self.session_factory() as session:
                await session.merge(KeyValueEntry(key=key, value=value))
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to write {key}: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to delete {key}: {exc}") from exc

    async def keys(self, prefix: str = "") -> List[str]:
        query = select(KeyValueEntry.key).order_by(KeyValueEntry.key)
        if prefix:
            query = query.where(KeyValueEntry.key.startswith(prefix, autoescape=True))
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars())
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to list keys: {exc}") from exc


async def wait_until_ready(store: KeyValueStore, timeout: float = 2.0, interval: float = 0.1) -> None:
    """
    Poll the store until it reports ready.

    Raises StorageUnavailableError once ``timeout`` seconds have elapsed
    without the store becoming available.
    """
    attempts = max(1, int(round(timeout / interval)))
    for attempt in range(1, attempts + 1):
        if await store.is_ready():
            if attempt > 1:
                logger.info("Storage ready after %d attempts", attempt)
            return
        if attempt < attempts:
            await asyncio.sleep(interval)
    raise StorageUnavailableError(f"Storage not available after waiting {timeout:g} seconds")
