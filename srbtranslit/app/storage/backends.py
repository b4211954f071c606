"""
Key-value backends for persisted extension state.

Every value is a whole JSON document that callers read, modify in memory
and write back. There is no locking: two writers racing on the same key
lose one of the updates, last write wins.
"""

import copy
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from .db import close_database, create_tables, get_session, init_database
from .models import StorageEntry
from ..exceptions import StorageError
from ..utils.logger import get_logger

logger = get_logger("storage.backends")


class KeyValueStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the stored document, or None when the key was never written."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        ...


class MemoryStore(KeyValueStore):
    """In-process store with JSON value semantics, used by tests and one-off CLI runs."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    async def get(self, key: str) -> Optional[Any]:
        if self.fail_reads:
            raise StorageError(f"Read of {key!r} failed", code="storage_read")
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        if self.fail_writes:
            raise StorageError(f"Write of {key!r} failed", code="storage_write")
        self._data[key] = json.dumps(value)
        self.writes += 1

    def snapshot(self) -> Dict[str, Any]:
        return {key: json.loads(raw) for key, raw in self._data.items()}


class DatabaseStore(KeyValueStore):
    """Store backed by the storage_entries table through SQLAlchemy's async engine."""

    def __init__(self, dsn: Optional[str] = None):
        self.dsn = dsn
        self._ready = False

    async def open(self) -> None:
        if self._ready:
            return
        try:
            await init_database(self.dsn)
            await create_tables()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not open storage: {e}", code="storage_open") from e
        self._ready = True

    async def close(self) -> None:
        await close_database()
        self._ready = False

    async def get(self, key: str) -> Optional[Any]:
        await self.open()
        try:
            async with get_session() as session:
                entry = await session.get(StorageEntry, key)
                return None if entry is None else copy.deepcopy(entry.value)
        except SQLAlchemyError as e:
            logger.error(f"Failed to read {key}: {e}")
            raise StorageError(f"Read of {key!r} failed", code="storage_read") from e

    async def set(self, key: str, value: Any) -> None:
        await self.open()
        try:
            async with get_session() as session:
                entry = await session.get(StorageEntry, key)
                if entry is None:
                    session.add(StorageEntry(key=key, value=value))
                else:
                    entry.value = copy.deepcopy(value)
        except SQLAlchemyError as e:
            logger.error(f"Failed to write {key}: {e}")
            raise StorageError(f"Write of {key!r} failed", code="storage_write") from e
