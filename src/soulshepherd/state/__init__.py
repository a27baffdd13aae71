"""Canonical game state: schema repair, persistence backends and the store."""

from .backends import JsonFileBackend, KeyValueBackend, MemoryBackend
from .fields import Field, Record
from .retry import RetryPolicy, retry_async
from .schema import (
    CURRENT_STATE_VERSION,
    SECTIONS,
    StateSchema,
    build_root_schema,
    create_default_state,
    validate_and_repair,
)
from .store import STORAGE_KEY, StateStore

__all__ = [
    "CURRENT_STATE_VERSION",
    "Field",
    "JsonFileBackend",
    "KeyValueBackend",
    "MemoryBackend",
    "Record",
    "RetryPolicy",
    "SECTIONS",
    "STORAGE_KEY",
    "StateSchema",
    "StateStore",
    "build_root_schema",
    "create_default_state",
    "retry_async",
    "validate_and_repair",
]
