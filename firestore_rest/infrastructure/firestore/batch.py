"""Atomic write batch: queue writes against many documents, commit once."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from firestore_rest.core.constants import MAX_BATCH_OPERATIONS
from firestore_rest.domain.enums import BatchState
from firestore_rest.domain.exceptions import BatchError
from firestore_rest.domain.value_objects import Operation
from firestore_rest.infrastructure.firestore.documents import (
    DocumentReference,
    as_document_reference,
)
from firestore_rest.infrastructure.firestore.writes import compose_writes
from firestore_rest.shared.telemetry.tracing import add_span_attributes, traced

if TYPE_CHECKING:
    from firestore_rest.infrastructure.firestore._rest_client import (
        FirestoreRESTClient,
    )

logger = logging.getLogger(__name__)


class WriteBatch:
    """Ordered create/update/delete operations committed as one request.

    OPEN until the first successful commit(), then COMMITTED for good. A
    failed commit leaves the batch OPEN so the caller can retry or inspect
    it. Instances are single-owner; share them across tasks only with
    external locking.
    """

    def __init__(
        self,
        client: "FirestoreRESTClient",
        *,
        max_operations: int = MAX_BATCH_OPERATIONS,
    ) -> None:
        self._client = client
        self._max_operations = max_operations
        self._operations: list[Operation] = []
        self._state = BatchState.OPEN

    @property
    def state(self) -> BatchState:
        return self._state

    @property
    def is_committed(self) -> bool:
        return self._state is BatchState.COMMITTED

    @property
    def operations(self) -> tuple[Operation, ...]:
        return tuple(self._operations)

    @property
    def operation_count(self) -> int:
        return len(self._operations)

    def _enqueue(self, operation: Operation) -> "WriteBatch":
        if len(self._operations) >= self._max_operations:
            raise BatchError.too_many_operations(
                len(self._operations) + 1, self._max_operations
            )
        self._operations.append(operation)
        return self

    def _path(self, document: DocumentReference | str) -> str:
        return as_document_reference(self._client, document).path

    def create(
        self, document: DocumentReference | str, data: Mapping[str, Any]
    ) -> "WriteBatch":
        """Queue a full write of data at document."""
        if self.is_committed:
            raise BatchError.already_committed()
        return self._enqueue(Operation.create(self._path(document), dict(data)))

    def update(
        self,
        document: DocumentReference | str,
        data: Mapping[str, Any],
        merge: bool = True,
    ) -> "WriteBatch":
        """Queue an update; merge=True restricts it to the top-level keys of data."""
        if self.is_committed:
            raise BatchError.already_committed()
        return self._enqueue(Operation.update(self._path(document), dict(data), merge))

    def delete(self, document: DocumentReference | str) -> "WriteBatch":
        if self.is_committed:
            raise BatchError.already_committed()
        return self._enqueue(Operation.delete(self._path(document)))

    @traced("firestore.batch.commit")
    async def commit(self) -> dict:
        """Send every queued write in one commit request.

        An empty batch is valid and sends an empty writes list.

        Raises:
            BatchError: if the batch was already committed.
            EncodingError: if queued data cannot be encoded (batch stays OPEN).
            ApiError: if the request fails (batch stays OPEN).
        """
        if self.is_committed:
            raise BatchError.already_committed()

        writes = compose_writes(self._operations)
        add_span_attributes(write_count=len(writes))
        response = await self._client.post(
            f"{self._client.database_path}/documents:commit",
            {"database": self._client.database_path, "writes": writes},
        )
        self._state = BatchState.COMMITTED
        logger.debug("Committed batch with %d writes", len(writes))
        return response

    def __len__(self) -> int:
        return len(self._operations)
