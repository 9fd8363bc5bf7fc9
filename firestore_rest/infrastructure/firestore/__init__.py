"""Firestore REST integration: codec, references, batches, transactions."""

from firestore_rest.infrastructure.firestore._rest_client import FirestoreRESTClient
from firestore_rest.infrastructure.firestore._rest_encoding import (
    FirestoreSerializable,
    decode_document,
    decode_value,
    encode_document,
    encode_value,
)
from firestore_rest.infrastructure.firestore.batch import WriteBatch
from firestore_rest.infrastructure.firestore.client import (
    close_firestore,
    get_firestore_client,
    init_firestore,
)
from firestore_rest.infrastructure.firestore.documents import (
    CollectionReference,
    DocumentPage,
    DocumentReference,
)
from firestore_rest.infrastructure.firestore.field_mask import build_field_mask
from firestore_rest.infrastructure.firestore.paths import (
    resolve_collection_path,
    resolve_document_path,
)
from firestore_rest.infrastructure.firestore.query import Query
from firestore_rest.infrastructure.firestore.snapshots import DocumentSnapshot
from firestore_rest.infrastructure.firestore.transaction import Transaction
from firestore_rest.infrastructure.firestore.writes import compose_write

__all__ = [
    "CollectionReference",
    "DocumentPage",
    "DocumentReference",
    "DocumentSnapshot",
    "FirestoreRESTClient",
    "FirestoreSerializable",
    "Query",
    "Transaction",
    "WriteBatch",
    "build_field_mask",
    "close_firestore",
    "compose_write",
    "decode_document",
    "decode_value",
    "encode_document",
    "encode_value",
    "get_firestore_client",
    "init_firestore",
    "resolve_collection_path",
    "resolve_document_path",
]
