"""
Storage Module - persistent record store and typed repository.
"""

from pathshala.storage.record_store import (
    COLLECTION_MODELS,
    Collection,
    CorruptRecordError,
    MemoryRecordStore,
    ReadOutcome,
    ReadStatus,
    RecordStore,
    RecordStoreError,
    SingletonKey,
    StoreTimeoutError,
)
from pathshala.storage.repository import RecordRepository, default_settings
from pathshala.storage.sql_store import SqlRecordStore

__all__ = [
    "COLLECTION_MODELS",
    "Collection",
    "CorruptRecordError",
    "MemoryRecordStore",
    "ReadOutcome",
    "ReadStatus",
    "RecordRepository",
    "RecordStore",
    "RecordStoreError",
    "SingletonKey",
    "SqlRecordStore",
    "StoreTimeoutError",
    "default_settings",
]
