"""Domain value objects for the Firestore client.

Value objects are immutable: an Operation is created when queued on a batch
or transaction and consumed once at commit time.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from firestore_rest.domain.enums import OperationType


@dataclass(frozen=True)
class Operation:
    """A queued write against one document path.

    data is required for CREATE/UPDATE and must be None for DELETE; merge is
    only meaningful for UPDATE.
    """

    type: OperationType
    path: str
    data: Mapping[str, Any] | None = field(default=None)
    merge: bool = False

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("Operation path must be a non-empty string")
        if self.type is OperationType.DELETE:
            if self.data is not None:
                raise ValueError("Delete operations carry no data")
        elif self.data is None:
            raise ValueError(f"{self.type.value} operations require data")

    @classmethod
    def create(cls, path: str, data: Mapping[str, Any]) -> "Operation":
        return cls(OperationType.CREATE, path, data)

    @classmethod
    def update(cls, path: str, data: Mapping[str, Any], merge: bool = True) -> "Operation":
        return cls(OperationType.UPDATE, path, data, merge)

    @classmethod
    def delete(cls, path: str) -> "Operation":
        return cls(OperationType.DELETE, path)


@dataclass(frozen=True)
class Reference:
    """A document path to be stored as a referenceValue."""

    path: str

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("Reference path must be a non-empty string")
