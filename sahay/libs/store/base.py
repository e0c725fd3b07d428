"""Document store interface shared by the Firestore and in-memory backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

Where = tuple[str, str, Any]

SUPPORTED_OPERATORS = ("==", "!=", "<", "<=", ">", ">=", "in", "array-contains")


class StoreError(RuntimeError):
    """Raised when the document store cannot complete an operation."""


@dataclass(slots=True)
class Document:
    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, **self.data}


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DocumentStore(ABC):
    """Schema-less collections addressed by slash-separated paths.

    ``path`` always names a collection (``journals``, ``users/u1/memory``);
    documents are addressed by ``(path, doc_id)``.
    """

    @abstractmethod
    async def get(self, path: str, doc_id: str) -> Document | None:
        """Return the document or ``None`` when it does not exist."""

    @abstractmethod
    async def set(
        self, path: str, doc_id: str, data: Mapping[str, Any], *, merge: bool = False
    ) -> None:
        """Write a document, replacing it unless ``merge`` is set."""

    @abstractmethod
    async def add(self, path: str, data: Mapping[str, Any]) -> str:
        """Insert a document under a generated id and return the id."""

    @abstractmethod
    async def delete(self, path: str, doc_id: str) -> None:
        """Remove a document; missing documents are ignored."""

    @abstractmethod
    async def query(
        self,
        path: str,
        *,
        where: Sequence[Where] = (),
        order_by: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Document]:
        """Filter, order and limit a collection."""

    @abstractmethod
    async def list_ids(self, path: str) -> list[str]:
        """Return every document id in a collection."""

    async def close(self) -> None:  # pragma: no cover - optional hook
        return None


def check_operator(op: str) -> None:
    if op not in SUPPORTED_OPERATORS:
        raise StoreError(f"Unsupported query operator '{op}'")


__all__ = [
    "Document",
    "DocumentStore",
    "SUPPORTED_OPERATORS",
    "StoreError",
    "Where",
    "check_operator",
    "utcnow_iso",
]
