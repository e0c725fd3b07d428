"""Process-local document store used for development and tests."""

from __future__ import annotations

import copy
import uuid
from typing import Any, Mapping, Sequence

from .base import Document, DocumentStore, Where, check_operator


def _matches(data: Mapping[str, Any], clause: Where) -> bool:
    field_name, op, expected = clause
    if field_name not in data:
        return False
    actual = data[field_name]
    try:
        if op == "==":
            return actual == expected
        if op == "!=":
            return actual != expected
        if op == "<":
            return actual < expected
        if op == "<=":
            return actual <= expected
        if op == ">":
            return actual > expected
        if op == ">=":
            return actual >= expected
        if op == "in":
            return actual in expected
        if op == "array-contains":
            return isinstance(actual, list) and expected in actual
    except TypeError:
        return False
    return False


def _merge(target: dict[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in patch.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target


class MemoryStore(DocumentStore):
    """Dict-backed store with the same semantics as the Firestore backend."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _collection(self, path: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(path.strip("/"), {})

    async def get(self, path: str, doc_id: str) -> Document | None:
        data = self._collection(path).get(doc_id)
        if data is None:
            return None
        return Document(id=doc_id, data=copy.deepcopy(data))

    async def set(
        self, path: str, doc_id: str, data: Mapping[str, Any], *, merge: bool = False
    ) -> None:
        collection = self._collection(path)
        if merge and doc_id in collection:
            _merge(collection[doc_id], data)
        else:
            collection[doc_id] = copy.deepcopy(dict(data))

    async def add(self, path: str, data: Mapping[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._collection(path)[doc_id] = copy.deepcopy(dict(data))
        return doc_id

    async def delete(self, path: str, doc_id: str) -> None:
        self._collection(path).pop(doc_id, None)

    async def query(
        self,
        path: str,
        *,
        where: Sequence[Where] = (),
        order_by: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Document]:
        for _, op, _ in where:
            check_operator(op)
        rows = [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collection(path).items()
            if all(_matches(data, clause) for clause in where)
        ]
        if order_by:
            # Firestore drops documents missing the ordered field.
            rows = [row for row in rows if row.data.get(order_by) is not None]
            rows.sort(key=lambda row: row.data[order_by], reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def list_ids(self, path: str) -> list[str]:
        return list(self._collection(path).keys())


__all__ = ["MemoryStore"]
