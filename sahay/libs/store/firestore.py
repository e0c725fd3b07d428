"""Firestore-backed document store using the firebase-admin async client."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import firebase_admin
from firebase_admin import firestore_async
from google.cloud.firestore_v1.base_query import FieldFilter

from sahay.libs.json_utils import json_safe

from .base import Document, DocumentStore, StoreError, Where, check_operator

LOGGER = logging.getLogger(__name__)


class FirestoreStore(DocumentStore):
    """Thin adapter translating store calls into Firestore client calls."""

    def __init__(self, app: firebase_admin.App | None = None) -> None:
        self._db = firestore_async.client(app)

    def _collection(self, path: str):
        return self._db.collection(path.strip("/"))

    async def get(self, path: str, doc_id: str) -> Document | None:
        try:
            snapshot = await self._collection(path).document(doc_id).get()
        except Exception as exc:
            raise StoreError(f"get {path}/{doc_id} failed: {exc}") from exc
        if not snapshot.exists:
            return None
        return Document(id=snapshot.id, data=json_safe(snapshot.to_dict() or {}))

    async def set(
        self, path: str, doc_id: str, data: Mapping[str, Any], *, merge: bool = False
    ) -> None:
        try:
            await self._collection(path).document(doc_id).set(dict(data), merge=merge)
        except Exception as exc:
            raise StoreError(f"set {path}/{doc_id} failed: {exc}") from exc

    async def add(self, path: str, data: Mapping[str, Any]) -> str:
        try:
            _, ref = await self._collection(path).add(dict(data))
        except Exception as exc:
            raise StoreError(f"add {path} failed: {exc}") from exc
        return ref.id

    async def delete(self, path: str, doc_id: str) -> None:
        try:
            await self._collection(path).document(doc_id).delete()
        except Exception as exc:
            raise StoreError(f"delete {path}/{doc_id} failed: {exc}") from exc

    async def query(
        self,
        path: str,
        *,
        where: Sequence[Where] = (),
        order_by: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Document]:
        query = self._collection(path)
        for field_name, op, value in where:
            check_operator(op)
            query = query.where(filter=FieldFilter(field_name, op, value))
        if order_by:
            query = query.order_by(order_by, direction="DESCENDING" if descending else "ASCENDING")
        if limit is not None:
            query = query.limit(limit)

        rows: list[Document] = []
        try:
            async for snapshot in query.stream():
                rows.append(Document(id=snapshot.id, data=json_safe(snapshot.to_dict() or {})))
        except Exception as exc:
            raise StoreError(f"query {path} failed: {exc}") from exc
        LOGGER.debug("[store] query %s returned %d docs", path, len(rows))
        return rows

    async def list_ids(self, path: str) -> list[str]:
        ids: list[str] = []
        try:
            async for ref in self._collection(path).list_documents():
                ids.append(ref.id)
        except Exception as exc:
            raise StoreError(f"list {path} failed: {exc}") from exc
        return ids


__all__ = ["FirestoreStore"]
