"""Document store adapters."""

from .base import Document, DocumentStore, StoreError, Where, utcnow_iso
from .memory import MemoryStore

__all__ = ["Document", "DocumentStore", "MemoryStore", "StoreError", "Where", "utcnow_iso"]
