"""
Record Store for pathshala.

Durable key -> JSON value storage of typed record collections plus a few
singleton objects (profile, settings, onboarding flag).

- Collections are JSON arrays, appended by read-modify-write
- Writes to one key are serialised with an asyncio.Lock
- A write that times out keeps its key locked until the backend settles it
- Every backend call is bounded by a timeout
- Corrupt values raise CorruptRecordError instead of reading as empty

Backends implement four raw operations; MemoryRecordStore lives here,
SqlRecordStore in sql_store.py.
"""

from __future__ import annotations

import asyncio
import functools
import json
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Iterable
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, TypeAdapter, ValidationError

from pathshala.core.models import (
    AppSettings,
    FavoriteStoryRecord,
    LetterProgressRecord,
    PracticeResultRecord,
    StoredRecord,
    UserProfile,
)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 5.0

# Pending-write slot used by clear()
ALL_KEYS = "*"


class Collection(str, Enum):
    """Append-oriented record collections."""

    MATH_SCORES = "math_scores"
    LEARNING_PROGRESS = "learning_progress"
    FAVORITE_STORIES = "favorite_stories"


class SingletonKey(str, Enum):
    """Keys holding a single serialised value."""

    USER_PROFILE = "user_profile"
    SETTINGS = "settings"
    ONBOARDING_COMPLETED = "onboarding_completed"


COLLECTION_MODELS: dict[Collection, type[StoredRecord]] = {
    Collection.MATH_SCORES: PracticeResultRecord,
    Collection.LEARNING_PROGRESS: LetterProgressRecord,
    Collection.FAVORITE_STORIES: FavoriteStoryRecord,
}

SINGLETON_TYPES: dict[SingletonKey, Any] = {
    SingletonKey.USER_PROFILE: UserProfile,
    SingletonKey.SETTINGS: AppSettings,
    SingletonKey.ONBOARDING_COMPLETED: bool,
}

_COLLECTION_ADAPTERS = {
    collection: TypeAdapter(list[model]) for collection, model in COLLECTION_MODELS.items()
}
_SINGLETON_ADAPTERS = {key: TypeAdapter(type_) for key, type_ in SINGLETON_TYPES.items()}


# =============================================================================
# Errors
# =============================================================================


class RecordStoreError(Exception):
    """Base class for record store failures."""


class CorruptRecordError(RecordStoreError):
    """Raised when a stored value cannot be parsed or validated."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Stored value for '{key}' is corrupt: {reason}")


class StoreTimeoutError(RecordStoreError):
    """Raised when the backing storage does not answer in time."""


# =============================================================================
# Read outcome
# =============================================================================


class ReadStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    CORRUPT = "corrupt"


@dataclass
class ReadOutcome:
    """Result of reading a collection, distinguishing absent from corrupt."""

    status: ReadStatus
    records: list[Any] = field(default_factory=list)
    error: CorruptRecordError | None = None

    @property
    def ok(self) -> bool:
        return self.status is not ReadStatus.CORRUPT

    def unwrap(self) -> list[Any]:
        """Return the records, raising the stored error for corrupt data."""
        if self.error is not None:
            raise self.error
        return self.records


# =============================================================================
# Store
# =============================================================================


class RecordStore(ABC):
    """
    Async record store over named collections and singleton keys.

    Subclasses supply the raw key/value operations; serialisation,
    validation, per-key write serialisation and timeouts live here.
    """

    def __init__(self, timeout: float | None = DEFAULT_TIMEOUT_SECONDS):
        """
        Args:
            timeout: Seconds allowed per backend call (None disables the bound)
        """
        self.timeout = timeout
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending: dict[str, asyncio.Future] = {}

    # ----- raw backend operations -------------------------------------------

    @abstractmethod
    async def _read_raw(self, key: str) -> str | None:
        """Return the serialised value for ``key`` or None if absent."""

    @abstractmethod
    async def _write_raw(self, key: str, value: str) -> None:
        """Replace the serialised value for ``key``."""

    @abstractmethod
    async def _delete_raw(self, key: str) -> None:
        """Remove ``key`` if present."""

    @abstractmethod
    async def _clear_raw(self) -> None:
        """Remove every key."""

    # ----- lifecycle ----------------------------------------------------------

    async def init(self) -> None:
        """Open or attach the backing storage."""

    async def close(self) -> None:
        """Release the backing storage."""

    async def __aenter__(self) -> RecordStore:
        await self.init()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ----- helpers ------------------------------------------------------------

    def _lock(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def _writing(self, key: str) -> AsyncIterator[None]:
        """
        Hold the write lock for ``key``.

        A mutation that timed out earlier may still be running in the
        backend; it has to settle before anyone else reads or writes the key.
        """
        async with self._lock(key):
            for name in (key, ALL_KEYS):
                pending = self._pending.get(name)
                if pending is None:
                    continue
                done, _ = await asyncio.wait({pending}, timeout=self.timeout)
                if not done:
                    raise StoreTimeoutError(f"An earlier write to '{name}' is still running")
            yield

    async def _io(self, operation: Awaitable[T], key: str) -> T:
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise StoreTimeoutError(
                f"Storage did not respond within {self.timeout}s for '{key}'"
            ) from e

    async def _mutate(self, operation: Awaitable[None], key: str) -> None:
        """
        Run a backend write bounded by the timeout, without abandoning it.

        On timeout the write keeps running and is tracked in ``_pending`` so
        the next writer of ``key`` waits for it instead of racing it.
        """
        task = asyncio.ensure_future(operation)
        done, _ = await asyncio.wait({task}, timeout=self.timeout)
        if done:
            return task.result()

        self._pending[key] = task
        task.add_done_callback(functools.partial(self._settled, key))
        raise StoreTimeoutError(f"Storage did not respond within {self.timeout}s for '{key}'")

    def _settled(self, key: str, task: asyncio.Future) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        if task.cancelled():
            return
        if task.exception() is not None:
            logger.error(f"Timed-out write to '{key}' failed: {task.exception()}")
        else:
            logger.warning(f"Timed-out write to '{key}' completed late")

    @staticmethod
    def _collection(collection: Collection | str) -> Collection:
        return Collection(collection)

    @staticmethod
    def _coerce(collection: Collection, record: Any) -> StoredRecord:
        model = COLLECTION_MODELS[collection]
        if isinstance(record, model):
            return record
        if isinstance(record, dict):
            return model.model_validate(record)
        raise TypeError(
            f"Collection '{collection.value}' holds {model.__name__}, "
            f"got {type(record).__name__}"
        )

    @staticmethod
    def _dump(records: Iterable[StoredRecord]) -> str:
        return json.dumps(
            [record.model_dump(mode="json") for record in records], ensure_ascii=False
        )

    def _parse(self, collection: Collection, raw: str) -> list[StoredRecord]:
        try:
            return _COLLECTION_ADAPTERS[collection].validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Corrupt collection '{collection.value}': {e.error_count()} error(s)")
            raise CorruptRecordError(collection.value, str(e)) from e

    async def _read_records(self, collection: Collection) -> list[StoredRecord]:
        raw = await self._io(self._read_raw(collection.value), collection.value)
        if raw is None:
            return []
        return self._parse(collection, raw)

    async def _write_records(self, collection: Collection, records: list[StoredRecord]) -> None:
        await self._mutate(self._write_raw(collection.value, self._dump(records)), collection.value)

    # ----- collections ----------------------------------------------------------

    async def load(self, collection: Collection | str) -> ReadOutcome:
        """
        Read a collection without raising on corruption.

        Returns:
            ReadOutcome with status present, absent or corrupt
        """
        collection = self._collection(collection)
        raw = await self._io(self._read_raw(collection.value), collection.value)
        if raw is None:
            return ReadOutcome(ReadStatus.ABSENT)
        try:
            return ReadOutcome(ReadStatus.PRESENT, self._parse(collection, raw))
        except CorruptRecordError as e:
            return ReadOutcome(ReadStatus.CORRUPT, error=e)

    async def read_all(self, collection: Collection | str) -> list[Any]:
        """
        Read every record of a collection in insertion order.

        Returns:
            List of records (empty if the collection was never written)

        Raises:
            CorruptRecordError: If the stored value cannot be parsed
        """
        return await self._read_records(self._collection(collection))

    async def append(self, collection: Collection | str, record: Any) -> None:
        """Append one record to the end of a collection."""
        collection = self._collection(collection)
        record = self._coerce(collection, record)
        async with self._writing(collection.value):
            existing = await self._read_records(collection)
            existing.append(record)
            await self._write_records(collection, existing)
        logger.debug(f"Appended to '{collection.value}' ({len(existing)} records)")

    async def overwrite(self, collection: Collection | str, records: Iterable[Any]) -> None:
        """Replace a collection with ``records``."""
        collection = self._collection(collection)
        records = [self._coerce(collection, record) for record in records]
        async with self._writing(collection.value):
            await self._write_records(collection, records)
        logger.debug(f"Overwrote '{collection.value}' with {len(records)} records")

    async def delete_at(self, collection: Collection | str, index: int) -> Any:
        """
        Delete the record at ``index`` and return it.

        Raises:
            IndexError: If index is negative or past the end
        """
        collection = self._collection(collection)
        async with self._writing(collection.value):
            existing = await self._read_records(collection)
            if index < 0 or index >= len(existing):
                raise IndexError(
                    f"No record at index {index} in '{collection.value}' "
                    f"({len(existing)} records)"
                )
            removed = existing.pop(index)
            await self._write_records(collection, existing)
        logger.debug(f"Deleted record {index} from '{collection.value}'")
        return removed

    # ----- singletons -------------------------------------------------------------

    async def get(self, key: SingletonKey | str) -> Any:
        """Return the singleton value for ``key`` or None if never set."""
        key = SingletonKey(key)
        raw = await self._io(self._read_raw(key.value), key.value)
        if raw is None:
            return None
        try:
            return _SINGLETON_ADAPTERS[key].validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Corrupt singleton '{key.value}'")
            raise CorruptRecordError(key.value, str(e)) from e

    async def load_value(self, key: SingletonKey | str) -> ReadOutcome:
        """Read a singleton without raising on corruption; records holds the value."""
        try:
            value = await self.get(key)
        except CorruptRecordError as e:
            return ReadOutcome(ReadStatus.CORRUPT, error=e)
        if value is None:
            return ReadOutcome(ReadStatus.ABSENT)
        return ReadOutcome(ReadStatus.PRESENT, [value])

    async def set(self, key: SingletonKey | str, value: Any) -> None:
        """Store the singleton value for ``key``."""
        key = SingletonKey(key)
        value = _SINGLETON_ADAPTERS[key].validate_python(value)
        if isinstance(value, BaseModel):
            raw = value.model_dump_json()
        else:
            raw = json.dumps(value)
        async with self._writing(key.value):
            await self._mutate(self._write_raw(key.value, raw), key.value)

    # ----- reset --------------------------------------------------------------------

    async def reset(self, key: Collection | SingletonKey | str) -> None:
        """Drop one collection or singleton (recovery path for corrupt data)."""
        name = key.value if isinstance(key, Enum) else str(key)
        async with self._writing(name):
            await self._mutate(self._delete_raw(name), name)
        logger.warning(f"Reset stored value '{name}'")

    async def clear(self) -> None:
        """Remove everything held by the store, after in-flight writes finish."""
        names = {key.value for key in (*Collection, *SingletonKey)} | set(self._locks)
        names.discard(ALL_KEYS)
        async with AsyncExitStack() as stack:
            # Fixed order so two concurrent clears cannot deadlock
            for name in sorted(names):
                await stack.enter_async_context(self._writing(name))
            async with self._writing(ALL_KEYS):
                await self._mutate(self._clear_raw(), ALL_KEYS)
        logger.warning("Record store cleared")


class MemoryRecordStore(RecordStore):
    """
    In-process store keeping serialised values in a dict.

    Values go through the same JSON round trip as the persistent backend, so
    corruption and defaulting behave identically.
    """

    def __init__(
        self,
        initial: dict[str, str] | None = None,
        timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(timeout=timeout)
        self.data: dict[str, str] = dict(initial or {})

    async def _read_raw(self, key: str) -> str | None:
        return self.data.get(key)

    async def _write_raw(self, key: str, value: str) -> None:
        self.data[key] = value

    async def _delete_raw(self, key: str) -> None:
        self.data.pop(key, None)

    async def _clear_raw(self) -> None:
        self.data.clear()
