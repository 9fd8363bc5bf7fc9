"""Domain layer: enums, exceptions, and value objects.

No dependencies on the HTTP transport. Used by the infrastructure layer.
"""

from firestore_rest.domain.enums import (
    BatchErrorKind,
    BatchState,
    EncodingErrorKind,
    OperationType,
    TransactionErrorKind,
    TransactionState,
)
from firestore_rest.domain.exceptions import (
    ApiError,
    AuthenticationError,
    BatchError,
    DocumentNotFoundError,
    EncodingError,
    FirestoreException,
    TransactionError,
)
from firestore_rest.domain.value_objects import Operation, Reference

__all__ = [
    "ApiError",
    "AuthenticationError",
    "BatchError",
    "BatchErrorKind",
    "BatchState",
    "DocumentNotFoundError",
    "EncodingError",
    "EncodingErrorKind",
    "FirestoreException",
    "Operation",
    "OperationType",
    "Reference",
    "TransactionError",
    "TransactionErrorKind",
    "TransactionState",
]
