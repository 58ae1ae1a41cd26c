"""Durable per-path update records."""

from ensure_update.store.lock import PathLock
from ensure_update.store.timestamps import TimestampStore, normalize_path

__all__ = [
    "PathLock",
    "TimestampStore",
    "normalize_path",
]
