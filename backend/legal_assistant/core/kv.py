"""Async key-value capability the stores are written against.

Values are JSON-compatible blobs. Backends are interchangeable: the SQLite one keeps
shared data across processes, the in-memory one serves tests and single-process demos.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from legal_assistant.core.errors import PersistenceError
from legal_assistant.models.kv import KVRecord

logger = logging.getLogger(__name__)


class BaseKVStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the decoded value stored under key, or None when absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value."""
        ...


class MemoryKVStore(BaseKVStore):
    def __init__(self) -> None:
        # Encoded on write so callers never share mutable state with the store
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def raw(self, key: str) -> str | None:
        """Encoded blob for key, as persisted."""
        return self._data.get(key)


class SQLiteKVStore(BaseKVStore):
    def __init__(self, engine: Engine):
        self.engine = engine

    async def get(self, key: str) -> Any | None:
        try:
            with Session(self.engine) as session:
                record = session.get(KVRecord, key)
                if record is None:
                    return None
                return json.loads(record.value)
        except (SQLAlchemyError, json.JSONDecodeError) as e:
            logger.debug(f"KV read failed for '{key}': {e}")
            raise PersistenceError(f"Failed to read '{key}': {e}") from e

    async def set(self, key: str, value: Any) -> None:
        try:
            encoded = json.dumps(value)
            with Session(self.engine) as session:
                record = session.get(KVRecord, key)
                if record is None:
                    record = KVRecord(key=key, value=encoded)
                else:
                    record.value = encoded
                    record.updated_at = datetime.now(timezone.utc)
                session.add(record)
                session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.debug(f"KV write failed for '{key}': {e}")
            raise PersistenceError(f"Failed to write '{key}': {e}") from e
