"""Exceptions raised by the Firestore client.

Every error carries a human-readable message, a machine-readable
error_code and a details dict with the context needed to debug it. None of
them is retried by the client: encoding and lifecycle errors are
programmer errors, API errors are surfaced to the caller as-is.
"""

from typing import Any

from firestore_rest.domain.enums import (
    BatchErrorKind,
    EncodingErrorKind,
    TransactionErrorKind,
)


class FirestoreException(Exception):
    """Base exception for all Firestore client errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field_path, request_path).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class EncodingError(FirestoreException):
    """Raised when a value, field path, or timestamp cannot be (de)serialized."""

    def __init__(
        self,
        kind: EncodingErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        super().__init__(message, "ENCODING_ERROR", {"kind": kind.value, **(details or {})})

    @classmethod
    def invalid_value(cls, value: Any, field_path: str | None = None) -> "EncodingError":
        value_type = type(value).__name__
        message = f'Cannot encode value of type "{value_type}" for Firestore'
        if field_path:
            message += f' at path "{field_path}"'
        return cls(
            EncodingErrorKind.INVALID_VALUE,
            message,
            {"value_type": value_type, "field_path": field_path},
        )

    @classmethod
    def invalid_field_path(cls, field_path: str, reason: str) -> "EncodingError":
        return cls(
            EncodingErrorKind.INVALID_FIELD_PATH,
            f'Invalid field path "{field_path}": {reason}',
            {"field_path": field_path},
        )

    @classmethod
    def malformed_wire_value(cls, tag: str, raw: Any) -> "EncodingError":
        return cls(
            EncodingErrorKind.INVALID_VALUE,
            f"Cannot decode {tag} value {raw!r}",
            {"tag": tag, "raw": str(raw)},
        )

    @classmethod
    def malformed_timestamp(cls, raw: Any) -> "EncodingError":
        return cls(
            EncodingErrorKind.MALFORMED_TIMESTAMP,
            f"Cannot parse timestamp value {raw!r}",
            {"raw": str(raw)},
        )


class ApiError(FirestoreException):
    """Raised on a non-2xx response or a transport failure (status_code 0)."""

    def __init__(
        self,
        status_code: int,
        response_body: Any,
        request_path: str,
        reason: str | None = None,
    ) -> None:
        """Initialize with the HTTP exchange that failed.

        Args:
            status_code: HTTP status, or 0 when no response was received.
            response_body: Parsed JSON body, {"raw": text}, or None.
            request_path: Path (or URL) of the failed request.
            reason: Optional transport error text.
        """
        self.status_code = status_code
        self.response_body = response_body
        self.request_path = request_path
        if status_code:
            message = f"Firestore API error: HTTP {status_code} for path {request_path}"
        else:
            message = f"Firestore API error: {reason or 'transport failure'} for path {request_path}"
        super().__init__(
            message,
            "API_ERROR",
            {
                "status_code": status_code,
                "response_body": response_body,
                "request_path": request_path,
            },
        )

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class BatchError(FirestoreException):
    """Raised when a write batch is used outside its lifecycle contract."""

    def __init__(
        self,
        kind: BatchErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        super().__init__(message, "BATCH_ERROR", {"kind": kind.value, **(details or {})})

    @classmethod
    def already_committed(cls) -> "BatchError":
        return cls(BatchErrorKind.ALREADY_COMMITTED, "Batch has already been committed")

    @classmethod
    def too_many_operations(cls, count: int, limit: int) -> "BatchError":
        return cls(
            BatchErrorKind.TOO_MANY_OPERATIONS,
            f"Batch contains too many operations ({count}). Maximum allowed is {limit}",
            {"operation_count": count, "operation_limit": limit},
        )


class TransactionError(FirestoreException):
    """Raised when a transaction fails to start, misses a read, or is reused."""

    def __init__(
        self,
        kind: TransactionErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        super().__init__(
            message, "TRANSACTION_ERROR", {"kind": kind.value, **(details or {})}
        )

    @classmethod
    def failed_to_start(cls) -> "TransactionError":
        return cls(TransactionErrorKind.FAILED_TO_START, "Failed to start transaction")

    @classmethod
    def document_not_found(cls, document_id: str) -> "TransactionError":
        return cls(
            TransactionErrorKind.DOCUMENT_NOT_FOUND,
            f'Document "{document_id}" not found in transaction',
            {"document_id": document_id},
        )

    @classmethod
    def already_committed(cls) -> "TransactionError":
        return cls(
            TransactionErrorKind.ALREADY_COMMITTED,
            "Transaction has already been committed",
        )

    @classmethod
    def already_rolled_back(cls) -> "TransactionError":
        return cls(
            TransactionErrorKind.ALREADY_ROLLED_BACK,
            "Transaction has already been rolled back",
        )

    @classmethod
    def already_finalized(cls) -> "TransactionError":
        return cls(
            TransactionErrorKind.ALREADY_FINALIZED,
            "Transaction has already been committed or rolled back",
        )


class DocumentNotFoundError(FirestoreException):
    """Raised when a document read returns 404."""

    def __init__(self, collection: str, document_id: str) -> None:
        self.collection = collection
        self.document_id = document_id
        super().__init__(
            f'Document "{document_id}" not found in collection "{collection}"',
            "DOCUMENT_NOT_FOUND",
            {"collection": collection, "document_id": document_id},
        )


class AuthenticationError(FirestoreException):
    """Raised when no usable Google credentials can be loaded."""

    def __init__(self, message: str = "Invalid Google credentials.") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")

    @classmethod
    def credentials_not_found(cls) -> "AuthenticationError":
        return cls(
            "No valid Google credentials found. Set FIRESTORE_SERVICE_ACCOUNT_KEY, "
            "FIRESTORE_KEY_FILE_PATH or GOOGLE_APPLICATION_CREDENTIALS."
        )
