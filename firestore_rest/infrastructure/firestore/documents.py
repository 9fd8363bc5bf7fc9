"""Document and collection references; match the firestore SDK style."""

from __future__ import annotations

import secrets
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from firestore_rest.core.constants import (
    DEFAULT_PAGE_SIZE,
    DOCUMENT_ID_ALPHABET,
    DOCUMENT_ID_LENGTH,
)
from firestore_rest.domain.exceptions import ApiError, DocumentNotFoundError
from firestore_rest.domain.value_objects import Reference
from firestore_rest.infrastructure.firestore._rest_encoding import encode_document
from firestore_rest.infrastructure.firestore.field_mask import build_field_mask
from firestore_rest.infrastructure.firestore.paths import (
    last_segment,
    relative_path,
    resolve_collection_path,
    resolve_document_path,
)
from firestore_rest.infrastructure.firestore.query import Query
from firestore_rest.infrastructure.firestore.snapshots import DocumentSnapshot

if TYPE_CHECKING:
    from firestore_rest.infrastructure.firestore._rest_client import (
        FirestoreRESTClient,
    )


def generate_document_id() -> str:
    """Random 20-char alphanumeric id, as assigned by Collection.add()."""
    return "".join(
        secrets.choice(DOCUMENT_ID_ALPHABET) for _ in range(DOCUMENT_ID_LENGTH)
    )


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", collection: str, document_id: str):
        if not document_id or "/" in document_id:
            raise ValueError(f"Invalid document id: {document_id!r}")
        self._client = client
        self._collection = relative_path(client.base_path, collection)
        self._id = document_id
        self._path = resolve_document_path(client.base_path, collection, document_id)

    @property
    def id(self) -> str:
        return self._id

    @property
    def path(self) -> str:
        """Absolute document path (projects/.../documents/{collection}/{id})."""
        return self._path

    @property
    def collection_name(self) -> str:
        """Collection path relative to the documents root."""
        return self._collection

    def to_firestore(self) -> Reference:
        """Store references to this document as referenceValue."""
        return Reference(self._path)

    async def get(self) -> DocumentSnapshot:
        """Fetch the document.

        Raises:
            DocumentNotFoundError: if the document does not exist.
        """
        try:
            out = await self._client.get(self._path)
        except ApiError as e:
            if e.is_not_found:
                raise DocumentNotFoundError(self._collection, self._id) from e
            raise
        return DocumentSnapshot.from_document(out)

    async def exists(self) -> bool:
        try:
            await self.get()
        except DocumentNotFoundError:
            return False
        return True

    async def create(self, data: Mapping[str, Any]) -> DocumentSnapshot:
        """Create the document; ApiError(409) if the ID already exists."""
        collection_path = resolve_collection_path(self._client.base_path, self._collection)
        out = await self._client.post(
            collection_path, encode_document(data), params={"documentId": self._id}
        )
        return DocumentSnapshot.from_document(out)

    async def set(self, data: Mapping[str, Any], *, merge: bool = False) -> DocumentSnapshot:
        """Create or overwrite the document.

        With merge=True only the top-level keys of data are written; other
        fields are left untouched. An empty merge writes nothing, since a PATCH
        without a mask would replace the whole document.
        """
        params = None
        if merge:
            mask = build_field_mask(data)
            if not mask:
                return await self.get()
            params = [("updateMask.fieldPaths", p) for p in mask]
        out = await self._client.patch(self._path, encode_document(data), params=params)
        return DocumentSnapshot.from_document(out)

    async def update(self, data: Mapping[str, Any]) -> DocumentSnapshot:
        """Update only the given fields of an existing document (404 if missing).

        Empty data sends no write but still requires the document to exist.
        """
        mask = build_field_mask(data)
        if not mask:
            return await self.get()
        params = [("updateMask.fieldPaths", p) for p in mask]
        params.append(("currentDocument.exists", "true"))
        try:
            out = await self._client.patch(self._path, encode_document(data), params=params)
        except ApiError as e:
            if e.is_not_found:
                raise DocumentNotFoundError(self._collection, self._id) from e
            raise
        return DocumentSnapshot.from_document(out)

    async def delete(self) -> None:
        """Delete the document. Idempotent server-side if it is already missing."""
        await self._client.delete(self._path)

    def collection(self, collection_id: str) -> "CollectionReference":
        """Reference to a subcollection under this document."""
        return CollectionReference(self._client, f"{self._collection}/{self._id}/{collection_id}")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DocumentReference) and other._path == self._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"DocumentReference({self._path!r})"


@dataclass
class DocumentPage:
    """One page of Collection.list_documents()."""

    documents: list[DocumentSnapshot] = field(default_factory=list)
    next_page_token: str | None = None

    @property
    def has_next_page(self) -> bool:
        return bool(self.next_page_token)


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = resolve_collection_path(client.base_path, path)

    @property
    def id(self) -> str:
        return last_segment(self._path)

    @property
    def path(self) -> str:
        """Absolute collection path."""
        return self._path

    def document(self, document_id: str | None = None) -> DocumentReference:
        """Reference to a document in this collection (random ID when omitted)."""
        return DocumentReference(
            self._client,
            relative_path(self._client.base_path, self._path),
            document_id or generate_document_id(),
        )

    async def add(
        self, data: Mapping[str, Any], document_id: str | None = None
    ) -> DocumentReference:
        """Create a document (auto-generated ID unless given) and return its reference."""
        doc = self.document(document_id)
        await doc.create(data)
        return doc

    async def list_documents(
        self, page_size: int = DEFAULT_PAGE_SIZE, page_token: str | None = None
    ) -> DocumentPage:
        """List one page of documents in the collection (shallow)."""
        params: dict[str, Any] = {"pageSize": page_size}
        if page_token:
            params["pageToken"] = page_token
        out = await self._client.get(self._path, params=params)
        documents = [
            DocumentSnapshot.from_document(doc)
            for doc in out.get("documents") or []
            if doc.get("name")
        ]
        return DocumentPage(documents, out.get("nextPageToken"))

    def query(self) -> Query:
        return Query(self._client, self._path)

    def where(self, field_path: str, op: str, value: Any) -> Query:
        """Start a query with a filter. Chain .order_by(), .limit(), then .get()."""
        return self.query().where(field_path, op, value)

    def __repr__(self) -> str:
        return f"CollectionReference({self._path!r})"


def as_document_reference(
    client: "FirestoreRESTClient", document: "DocumentReference | str"
) -> DocumentReference:
    """Accept a DocumentReference or a "{collection}/{id}" path (relative or absolute)."""
    if isinstance(document, DocumentReference):
        return document
    rel = relative_path(client.base_path, document)
    segments = rel.split("/")
    if len(segments) < 2 or len(segments) % 2 != 0 or not all(segments):
        raise ValueError(f"Document path must have an even number of segments: {document}")
    collection, document_id = rel.rsplit("/", 1)
    return DocumentReference(client, collection, document_id)
