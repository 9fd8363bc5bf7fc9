"""Tests for domain exceptions (error_code, message, details, kind)."""

from firestore_rest.domain.enums import (
    BatchErrorKind,
    EncodingErrorKind,
    TransactionErrorKind,
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


def test_firestore_exception_default_error_code() -> None:
    """Base FirestoreException uses class name as error_code when not provided."""
    exc = FirestoreException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "FirestoreException"
    assert exc.details == {}
    assert str(exc) == "Something failed"


def test_firestore_exception_custom_error_code_and_details() -> None:
    exc = FirestoreException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.error_code == "CUSTOM"
    assert exc.details == {"key": "value"}


def test_encoding_error_invalid_value() -> None:
    exc = EncodingError.invalid_value(object(), "a.b")
    assert exc.kind is EncodingErrorKind.INVALID_VALUE
    assert exc.error_code == "ENCODING_ERROR"
    assert exc.details == {"kind": "invalid_value", "value_type": "object", "field_path": "a.b"}
    assert 'at path "a.b"' in exc.message


def test_encoding_error_invalid_field_path() -> None:
    exc = EncodingError.invalid_field_path("a..b", "empty segment")
    assert exc.kind is EncodingErrorKind.INVALID_FIELD_PATH
    assert exc.details["field_path"] == "a..b"
    assert "empty segment" in exc.message


def test_api_error_http_status() -> None:
    exc = ApiError(409, {"error": {"status": "ALREADY_EXISTS"}}, "p/documents/a/b")
    assert exc.error_code == "API_ERROR"
    assert exc.details["status_code"] == 409
    assert "HTTP 409" in exc.message
    assert not exc.is_not_found
    assert ApiError(404, None, "x").is_not_found


def test_api_error_transport_failure() -> None:
    exc = ApiError(0, None, "p/documents/a/b", reason="timed out")
    assert exc.status_code == 0
    assert "timed out" in exc.message


def test_batch_error_too_many_operations() -> None:
    exc = BatchError.too_many_operations(501, 500)
    assert exc.kind is BatchErrorKind.TOO_MANY_OPERATIONS
    assert exc.error_code == "BATCH_ERROR"
    assert exc.details == {"kind": "too_many_operations", "operation_count": 501, "operation_limit": 500}
    assert "Maximum allowed is 500" in exc.message


def test_batch_error_already_committed() -> None:
    exc = BatchError.already_committed()
    assert exc.kind is BatchErrorKind.ALREADY_COMMITTED
    assert exc.details == {"kind": "already_committed"}


def test_transaction_error_kinds() -> None:
    assert TransactionError.failed_to_start().kind is TransactionErrorKind.FAILED_TO_START
    assert TransactionError.already_committed().kind is TransactionErrorKind.ALREADY_COMMITTED
    assert TransactionError.already_rolled_back().kind is TransactionErrorKind.ALREADY_ROLLED_BACK
    assert TransactionError.already_finalized().kind is TransactionErrorKind.ALREADY_FINALIZED


def test_transaction_error_document_not_found() -> None:
    exc = TransactionError.document_not_found("users/alice")
    assert exc.error_code == "TRANSACTION_ERROR"
    assert exc.details["document_id"] == "users/alice"
    assert '"users/alice"' in exc.message


def test_document_not_found_error() -> None:
    exc = DocumentNotFoundError("users", "ghost")
    assert exc.error_code == "DOCUMENT_NOT_FOUND"
    assert exc.collection == "users"
    assert exc.document_id == "ghost"


def test_authentication_error() -> None:
    assert AuthenticationError().error_code == "AUTHENTICATION_ERROR"
    assert "GOOGLE_APPLICATION_CREDENTIALS" in AuthenticationError.credentials_not_found().message


def test_all_errors_share_the_base_class() -> None:
    for exc in (
        EncodingError.invalid_value(1),
        ApiError(500, None, "x"),
        BatchError.already_committed(),
        TransactionError.failed_to_start(),
        DocumentNotFoundError("c", "d"),
        AuthenticationError(),
    ):
        assert isinstance(exc, FirestoreException)
