"""Persisted key-value state and its single writer thread."""

from __future__ import annotations

from .key_value import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from .writer import WriterThread

__all__ = [
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "WriterThread",
]
