"""Async client for the Firestore REST API.

Maps Python values to Firestore's tagged wire format, composes
create/update/delete writes (with field masks for merges), and commits them
through atomic batches or optimistic transactions.
"""

from firestore_rest.core.config import Settings, get_settings
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
from firestore_rest.infrastructure.firestore import (
    CollectionReference,
    DocumentReference,
    DocumentSnapshot,
    FirestoreRESTClient,
    FirestoreSerializable,
    Query,
    Transaction,
    WriteBatch,
    close_firestore,
    decode_value,
    encode_value,
    get_firestore_client,
    init_firestore,
)

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "AuthenticationError",
    "BatchError",
    "CollectionReference",
    "DocumentNotFoundError",
    "DocumentReference",
    "DocumentSnapshot",
    "EncodingError",
    "FirestoreException",
    "FirestoreRESTClient",
    "FirestoreSerializable",
    "Operation",
    "Query",
    "Reference",
    "Settings",
    "Transaction",
    "TransactionError",
    "WriteBatch",
    "close_firestore",
    "decode_value",
    "encode_value",
    "get_firestore_client",
    "init_firestore",
    "get_settings",
]
