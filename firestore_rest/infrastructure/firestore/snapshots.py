"""Read-side view of a Firestore document."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from firestore_rest.infrastructure.firestore._rest_encoding import decode_document
from firestore_rest.infrastructure.firestore.paths import last_segment
from firestore_rest.shared.utils.datetime import parse_rfc3339


def _optional_timestamp(raw: str | None) -> datetime | None:
    return parse_rfc3339(raw) if raw else None


class DocumentSnapshot:
    """Snapshot of a document (id + decoded data + server timestamps)."""

    def __init__(
        self,
        id_: str,
        data: dict,
        *,
        path: str = "",
        create_time: datetime | None = None,
        update_time: datetime | None = None,
    ):
        self.id = id_
        self.path = path
        self.create_time = create_time
        self.update_time = update_time
        self._data = data

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "DocumentSnapshot":
        """Build from a REST Document resource ({"name", "fields", ...})."""
        name = document.get("name", "")
        return cls(
            last_segment(name) if name else "",
            decode_document(document),
            path=name,
            create_time=_optional_timestamp(document.get("createTime")),
            update_time=_optional_timestamp(document.get("updateTime")),
        )

    @property
    def exists(self) -> bool:
        return bool(self.path)

    def to_dict(self) -> dict:
        return self._data

    def get(self, field_path: str, default: Any = None) -> Any:
        """Return a (dotted) field value, or default when any segment is missing."""
        value: Any = self._data
        for part in field_path.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def __repr__(self) -> str:
        return f"DocumentSnapshot(id={self.id!r}, path={self.path!r})"
