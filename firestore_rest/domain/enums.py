"""Domain enumerations for the Firestore client.

Enums represent fixed sets of values: write operation kinds, lifecycle
states of batches and transactions, and the error kinds they raise.
"""

from enum import Enum


class OperationType(str, Enum):
    """Kind of a queued write operation."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class BatchState(str, Enum):
    """Write batch lifecycle. COMMITTED is terminal."""

    OPEN = "open"
    COMMITTED = "committed"


class TransactionState(str, Enum):
    """Transaction lifecycle.

    A transaction is ACTIVE once the server has issued an id; COMMITTED and
    ROLLED_BACK are terminal and mutually exclusive.
    """

    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"

    @property
    def is_final(self) -> bool:
        return self is not TransactionState.ACTIVE


class EncodingErrorKind(str, Enum):
    INVALID_VALUE = "invalid_value"
    INVALID_FIELD_PATH = "invalid_field_path"
    MALFORMED_TIMESTAMP = "malformed_timestamp"


class BatchErrorKind(str, Enum):
    ALREADY_COMMITTED = "already_committed"
    TOO_MANY_OPERATIONS = "too_many_operations"


class TransactionErrorKind(str, Enum):
    FAILED_TO_START = "failed_to_start"
    DOCUMENT_NOT_FOUND = "document_not_found"
    ALREADY_COMMITTED = "already_committed"
    ALREADY_ROLLED_BACK = "already_rolled_back"
    ALREADY_FINALIZED = "already_finalized"

    @classmethod
    def values(cls) -> list[str]:
        """Return all kind values as strings."""
        return [kind.value for kind in cls]
