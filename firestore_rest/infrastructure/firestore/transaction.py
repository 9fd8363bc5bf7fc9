"""Optimistic transactions: server-issued id, consistent reads, buffered writes.

Conflict detection happens on the server; this class only tracks the
lifecycle ACTIVE -> COMMITTED | ROLLED_BACK and tags every request with the
transaction id.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from firestore_rest.domain.enums import TransactionState
from firestore_rest.domain.exceptions import ApiError, TransactionError
from firestore_rest.domain.value_objects import Operation
from firestore_rest.infrastructure.firestore.documents import (
    DocumentReference,
    as_document_reference,
)
from firestore_rest.infrastructure.firestore.snapshots import DocumentSnapshot
from firestore_rest.infrastructure.firestore.writes import compose_writes
from firestore_rest.shared.telemetry.tracing import add_span_attributes, traced

if TYPE_CHECKING:
    from firestore_rest.infrastructure.firestore._rest_client import (
        FirestoreRESTClient,
    )

logger = logging.getLogger(__name__)


class Transaction:
    """A begun transaction. Use Transaction.begin() (or client.begin_transaction())."""

    def __init__(self, client: "FirestoreRESTClient", transaction_id: str) -> None:
        if not transaction_id:
            raise TransactionError.failed_to_start()
        self._client = client
        self._id = transaction_id
        self._operations: list[Operation] = []
        self._state = TransactionState.ACTIVE

    @classmethod
    @traced("firestore.transaction.begin")
    async def begin(
        cls, client: "FirestoreRESTClient", *, read_only: bool = False
    ) -> "Transaction":
        """Request a transaction id from the server.

        Raises:
            TransactionError: if the response carries no transaction id.
            ApiError: if the request fails.
        """
        body: dict[str, Any] = {"database": client.database_path}
        if read_only:
            body["options"] = {"readOnly": {}}
        response = await client.post(
            f"{client.database_path}/documents:beginTransaction", body
        )
        transaction_id = (response or {}).get("transaction")
        if not transaction_id:
            raise TransactionError.failed_to_start()
        logger.debug("Began transaction %s", transaction_id)
        return cls(client, transaction_id)

    @property
    def id(self) -> str:
        return self._id

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is TransactionState.ACTIVE

    @property
    def is_committed(self) -> bool:
        return self._state is TransactionState.COMMITTED

    @property
    def is_rolled_back(self) -> bool:
        return self._state is TransactionState.ROLLED_BACK

    @property
    def operations(self) -> tuple[Operation, ...]:
        return tuple(self._operations)

    @property
    def operation_count(self) -> int:
        return len(self._operations)

    def _ensure_active(self) -> None:
        if self._state.is_final:
            raise TransactionError.already_finalized()

    def _ensure_can_finish(self) -> None:
        if self._state is TransactionState.COMMITTED:
            raise TransactionError.already_committed()
        if self._state is TransactionState.ROLLED_BACK:
            raise TransactionError.already_rolled_back()

    @traced("firestore.transaction.get")
    async def get(self, document: DocumentReference | str) -> DocumentSnapshot:
        """Read a document as of this transaction (not buffered as a write).

        Raises:
            TransactionError: if finalized, or the document does not exist.
            ApiError: on any other request failure.
        """
        self._ensure_active()
        ref = as_document_reference(self._client, document)
        try:
            response = await self._client.get(ref.path, params={"transaction": self._id})
        except ApiError as e:
            if e.is_not_found:
                raise TransactionError.document_not_found(ref.id) from e
            raise
        if not response:
            raise TransactionError.document_not_found(ref.id)
        return DocumentSnapshot.from_document(response)

    def create(
        self, document: DocumentReference | str, data: Mapping[str, Any]
    ) -> "Transaction":
        self._ensure_active()
        ref = as_document_reference(self._client, document)
        self._operations.append(Operation.create(ref.path, dict(data)))
        return self

    def update(
        self,
        document: DocumentReference | str,
        data: Mapping[str, Any],
        merge: bool = True,
    ) -> "Transaction":
        """Buffer an update; merge=True restricts it to the top-level keys of data."""
        self._ensure_active()
        ref = as_document_reference(self._client, document)
        self._operations.append(Operation.update(ref.path, dict(data), merge))
        return self

    def delete(self, document: DocumentReference | str) -> "Transaction":
        self._ensure_active()
        ref = as_document_reference(self._client, document)
        self._operations.append(Operation.delete(ref.path))
        return self

    @traced("firestore.transaction.commit")
    async def commit(self) -> dict:
        """Commit buffered writes tagged with the transaction id.

        Raises:
            TransactionError: if already committed or rolled back.
            ApiError: if the request fails (transaction stays ACTIVE).
        """
        self._ensure_can_finish()
        writes = compose_writes(self._operations)
        add_span_attributes(write_count=len(writes))
        response = await self._client.post(
            f"{self._client.database_path}/documents:commit",
            {
                "database": self._client.database_path,
                "writes": writes,
                "transaction": self._id,
            },
        )
        self._state = TransactionState.COMMITTED
        logger.debug("Committed transaction %s with %d writes", self._id, len(writes))
        return response

    @traced("firestore.transaction.rollback")
    async def rollback(self) -> dict:
        """Abandon the transaction and drop buffered writes.

        Raises:
            TransactionError: if already committed or rolled back.
            ApiError: if the request fails (transaction stays ACTIVE).
        """
        self._ensure_can_finish()
        response = await self._client.post(
            f"{self._client.database_path}/documents:rollback",
            {"database": self._client.database_path, "transaction": self._id},
        )
        self._operations.clear()
        self._state = TransactionState.ROLLED_BACK
        logger.debug("Rolled back transaction %s", self._id)
        return response
