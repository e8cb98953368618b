"""Key-value persistence backing every collection and the current session."""

from src.store.kv_store import (
    ALL_KEYS,
    APPLICATIONS_KEY,
    CURRENT_USER_KEY,
    DATA_INITIALIZED_KEY,
    DEFAULT_STORE_DIR,
    SCHOLARSHIPS_KEY,
    USERS_KEY,
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    OverlayStore,
    read_json,
    write_json,
)

__all__ = [
    "ALL_KEYS",
    "APPLICATIONS_KEY",
    "CURRENT_USER_KEY",
    "DATA_INITIALIZED_KEY",
    "DEFAULT_STORE_DIR",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "OverlayStore",
    "SCHOLARSHIPS_KEY",
    "USERS_KEY",
    "read_json",
    "write_json",
]
