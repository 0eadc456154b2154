"""SQLite-backed durable storage for scan history."""

from .schema import ensure_schema
from .storage import LocalStorage

__all__ = [
    "LocalStorage",
    "ensure_schema",
]
