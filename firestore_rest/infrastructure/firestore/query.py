"""Structured-query builder; runs via :runQuery (filter/order/cursors on server)."""

from __future__ import annotations

import copy
import logging
from collections.abc import AsyncIterator, Iterable
from typing import TYPE_CHECKING, Any

from firestore_rest.infrastructure.firestore._rest_encoding import encode_value
from firestore_rest.infrastructure.firestore.paths import last_segment, parent_path
from firestore_rest.infrastructure.firestore.snapshots import DocumentSnapshot
from firestore_rest.shared.telemetry.tracing import add_span_attributes, traced

if TYPE_CHECKING:
    from firestore_rest.infrastructure.firestore._rest_client import (
        FirestoreRESTClient,
    )

logger = logging.getLogger(__name__)

_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "not_in": "NOT_IN",
    "array_contains": "ARRAY_CONTAINS",
    "array-contains": "ARRAY_CONTAINS",
    "array_contains_any": "ARRAY_CONTAINS_ANY",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}


class Query:
    """Fluent query builder for one collection.

    The parent of a top-level collection is the documents root; for a
    subcollection it is the owning document.
    """

    def __init__(self, client: "FirestoreRESTClient", collection_path: str):
        self._client = client
        self._parent = parent_path(collection_path)
        self._query: dict[str, Any] = {
            "from": [{"collectionId": last_segment(collection_path)}],
        }

    @property
    def parent(self) -> str:
        return self._parent

    def where(self, field_path: str, op: str, value: Any) -> "Query":
        """Add a field filter; filters are ANDed.

        Raises:
            ValueError: if op is not a supported operator.
        """
        if op not in _OP_MAP:
            raise ValueError(f"Operator {op!r} is not supported")
        where = self._query.setdefault(
            "where", {"compositeFilter": {"op": "AND", "filters": []}}
        )
        where["compositeFilter"]["filters"].append(
            {
                "fieldFilter": {
                    "field": {"fieldPath": field_path},
                    "op": _OP_MAP[op],
                    "value": encode_value(value),
                }
            }
        )
        return self

    def order_by(self, field_path: str, direction: str = "asc") -> "Query":
        self._query.setdefault("orderBy", []).append(
            {
                "field": {"fieldPath": field_path},
                "direction": "DESCENDING"
                if direction.upper() in ("DESC", "DESCENDING")
                else "ASCENDING",
            }
        )
        return self

    def limit(self, n: int) -> "Query":
        self._query["limit"] = n
        return self

    def offset(self, n: int) -> "Query":
        self._query["offset"] = n
        return self

    def start_at(self, values: Iterable[Any], before: bool = True) -> "Query":
        """Start cursor: startAt (before=True) or startAfter (before=False)."""
        self._query.pop("startAt", None)
        self._query.pop("startAfter", None)
        key = "startAt" if before else "startAfter"
        self._query[key] = {"values": [encode_value(v) for v in values]}
        return self

    def end_at(self, values: Iterable[Any], before: bool = False) -> "Query":
        """End cursor: endAt (before=False) or endBefore (before=True)."""
        self._query.pop("endAt", None)
        self._query.pop("endBefore", None)
        key = "endBefore" if before else "endAt"
        self._query[key] = {"values": [encode_value(v) for v in values]}
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return a copy of the structuredQuery body."""
        return copy.deepcopy(self._query)

    @traced("firestore.query.run")
    async def get(self) -> list[DocumentSnapshot]:
        """Execute the query and return document snapshots in server order."""
        resp = await self._client.post(
            f"{self._parent}:runQuery", {"structuredQuery": self._query}
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        snapshots = [
            DocumentSnapshot.from_document(item["document"])
            for item in items
            if "document" in item
        ]
        add_span_attributes(result_count=len(snapshots))
        logger.debug("runQuery on %s returned %d documents", self._parent, len(snapshots))
        return snapshots

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        for snapshot in await self.get():
            yield snapshot
