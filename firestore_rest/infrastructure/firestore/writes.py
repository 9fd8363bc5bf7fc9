"""Compose queued operations into Firestore REST Write instructions.

Pure transformation shared by WriteBatch and Transaction commits:

- create / update(merge=False): {"update": {"name", "fields"}} (full replace)
- update(merge=True): same, plus updateMask.fieldPaths of the top-level keys
- delete: {"delete": path}
"""

from collections.abc import Iterable
from typing import Any

from firestore_rest.domain.enums import OperationType
from firestore_rest.domain.value_objects import Operation
from firestore_rest.infrastructure.firestore._rest_encoding import encode_fields
from firestore_rest.infrastructure.firestore.field_mask import build_field_mask


def compose_write(operation: Operation) -> dict[str, Any]:
    """Return the wire Write for one operation.

    Raises:
        EncodingError: if the data or a merge field path cannot be encoded.
    """
    if operation.type is OperationType.DELETE:
        return {"delete": operation.path}

    write: dict[str, Any] = {
        "update": {
            "name": operation.path,
            "fields": encode_fields(operation.data or {}),
        }
    }
    if operation.type is OperationType.UPDATE and operation.merge:
        write["updateMask"] = {"fieldPaths": build_field_mask(operation.data or {})}
    return write


def compose_writes(operations: Iterable[Operation]) -> list[dict[str, Any]]:
    """Compose operations in queue order."""
    return [compose_write(op) for op in operations]
