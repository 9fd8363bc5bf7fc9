"""Resource path composition for Firestore REST.

Paths are built from a fixed base prefix
(projects/{project}/databases/{database}/documents) plus a relative suffix.
Prefixing is idempotent: a segment that already starts with the base is
treated as absolute and never prefixed twice.
"""

from firestore_rest.core.constants import DEFAULT_DATABASE_ID


def database_path(project_id: str, database_id: str = DEFAULT_DATABASE_ID) -> str:
    """Return projects/{project}/databases/{database}."""
    return f"projects/{project_id}/databases/{database_id}"


def documents_root(project_id: str, database_id: str = DEFAULT_DATABASE_ID) -> str:
    """Return projects/{project}/databases/{database}/documents."""
    return f"{database_path(project_id, database_id)}/documents"


def _is_absolute(base_path: str, segment: str) -> bool:
    return segment == base_path or segment.startswith(f"{base_path}/")


def resolve_collection_path(base_path: str, collection: str) -> str:
    """Return the absolute collection path for a relative or absolute segment."""
    collection = collection.strip("/")
    if _is_absolute(base_path, collection):
        return collection
    return f"{base_path}/{collection}"


def resolve_document_path(base_path: str, collection: str, document_id: str) -> str:
    """Return the absolute document path {collection}/{document_id}."""
    return f"{resolve_collection_path(base_path, collection)}/{document_id}"


def relative_path(base_path: str, path: str) -> str:
    """Strip the base prefix from an absolute path (no-op for relative paths)."""
    path = path.strip("/")
    if _is_absolute(base_path, path):
        return path[len(base_path) + 1:]
    return path


def parent_path(path: str) -> str:
    """Return path without its last segment."""
    return path.rstrip("/").rsplit("/", 1)[0]


def last_segment(path: str) -> str:
    """Return the last segment of a path (document or collection id)."""
    return path.rstrip("/").rsplit("/", 1)[-1]
