"""Tests for Transaction (begin, transactional read, commit/rollback lifecycle)."""

import pytest

from firestore_rest.domain.enums import TransactionErrorKind, TransactionState
from firestore_rest.domain.exceptions import ApiError, TransactionError
from firestore_rest.infrastructure.firestore.transaction import Transaction
from tests.conftest import BASE_PATH, DATABASE_PATH

TXN_ID = "dHhuLTE="


@pytest.fixture
async def txn(client, backend) -> Transaction:
    backend.respond("POST", ":beginTransaction", 200, {"transaction": TXN_ID})
    return await client.begin_transaction()


@pytest.mark.asyncio
async def test_begin_requests_transaction_id(txn, backend) -> None:
    assert txn.id == TXN_ID
    assert txn.state is TransactionState.ACTIVE
    request = backend.last_request
    assert request.url.path.endswith(f"{DATABASE_PATH}/documents:beginTransaction")
    assert backend.body() == {"database": DATABASE_PATH}


@pytest.mark.asyncio
async def test_begin_read_only_sets_options(client, backend) -> None:
    backend.respond("POST", ":beginTransaction", 200, {"transaction": TXN_ID})
    await Transaction.begin(client, read_only=True)
    assert backend.body() == {"database": DATABASE_PATH, "options": {"readOnly": {}}}


@pytest.mark.asyncio
async def test_begin_without_id_fails_to_start(client, backend) -> None:
    backend.respond("POST", ":beginTransaction", 200, {})
    with pytest.raises(TransactionError) as exc_info:
        await client.begin_transaction()
    assert exc_info.value.kind is TransactionErrorKind.FAILED_TO_START


@pytest.mark.asyncio
async def test_get_reads_with_transaction_id(txn, backend) -> None:
    backend.respond(
        "GET",
        "/users/alice",
        200,
        {"name": f"{BASE_PATH}/users/alice", "fields": {"balance": {"integerValue": "10"}}},
    )
    snapshot = await txn.get("users/alice")

    assert snapshot.to_dict() == {"balance": 10}
    request = backend.last_request
    assert request.method == "GET"
    assert request.url.params["transaction"] == TXN_ID
    assert txn.operation_count == 0


@pytest.mark.asyncio
async def test_get_missing_document_raises_document_not_found(txn, backend) -> None:
    backend.respond("GET", "/users/ghost", 404, {"error": {"code": 404}})
    with pytest.raises(TransactionError) as exc_info:
        await txn.get("users/ghost")
    assert exc_info.value.kind is TransactionErrorKind.DOCUMENT_NOT_FOUND
    assert exc_info.value.details["document_id"] == "ghost"


@pytest.mark.asyncio
async def test_get_other_api_errors_propagate(txn, backend) -> None:
    backend.respond("GET", "/users/alice", 409, {"error": {"status": "ABORTED"}})
    with pytest.raises(ApiError):
        await txn.get("users/alice")


@pytest.mark.asyncio
async def test_commit_merge_update_with_transaction_id(txn, backend) -> None:
    txn.update("users/alice", {"a": 1, "b": 2}, merge=True)
    await txn.commit()

    body = backend.body()
    assert backend.last_request.url.path.endswith(f"{DATABASE_PATH}/documents:commit")
    assert body["database"] == DATABASE_PATH
    assert body["transaction"] == TXN_ID
    assert body["writes"] == [
        {
            "update": {
                "name": f"{BASE_PATH}/users/alice",
                "fields": {"a": {"integerValue": "1"}, "b": {"integerValue": "2"}},
            },
            "updateMask": {"fieldPaths": ["a", "b"]},
        }
    ]
    assert txn.is_committed


@pytest.mark.asyncio
async def test_rollback_posts_transaction_and_clears_operations(txn, backend) -> None:
    txn.create("users/bob", {"x": 1}).delete("users/carol")
    await txn.rollback()

    assert backend.last_request.url.path.endswith(f"{DATABASE_PATH}/documents:rollback")
    assert backend.body() == {"database": DATABASE_PATH, "transaction": TXN_ID}
    assert txn.operation_count == 0
    assert txn.is_rolled_back


@pytest.mark.asyncio
async def test_rollback_after_commit_fails(txn) -> None:
    await txn.commit()
    with pytest.raises(TransactionError) as exc_info:
        await txn.rollback()
    assert exc_info.value.kind is TransactionErrorKind.ALREADY_COMMITTED


@pytest.mark.asyncio
async def test_commit_after_rollback_fails(txn) -> None:
    await txn.rollback()
    with pytest.raises(TransactionError) as exc_info:
        await txn.commit()
    assert exc_info.value.kind is TransactionErrorKind.ALREADY_ROLLED_BACK


@pytest.mark.asyncio
async def test_finish_is_single_shot(txn) -> None:
    await txn.commit()
    with pytest.raises(TransactionError) as exc_info:
        await txn.commit()
    assert exc_info.value.kind is TransactionErrorKind.ALREADY_COMMITTED


@pytest.mark.asyncio
async def test_mutations_and_reads_after_finish_are_finalized(txn) -> None:
    await txn.rollback()
    with pytest.raises(TransactionError) as exc_info:
        txn.create("users/bob", {"x": 1})
    assert exc_info.value.kind is TransactionErrorKind.ALREADY_FINALIZED
    with pytest.raises(TransactionError) as exc_info:
        await txn.get("users/bob")
    assert exc_info.value.kind is TransactionErrorKind.ALREADY_FINALIZED


@pytest.mark.asyncio
async def test_failed_commit_keeps_transaction_active(txn, backend) -> None:
    backend.respond("POST", ":commit", 409, {"error": {"status": "ABORTED"}})
    txn.delete("users/bob")
    with pytest.raises(ApiError):
        await txn.commit()
    assert txn.is_active
    assert txn.operation_count == 1


@pytest.mark.asyncio
async def test_transaction_requires_id(client) -> None:
    with pytest.raises(TransactionError) as exc_info:
        Transaction(client, "")
    assert exc_info.value.kind is TransactionErrorKind.FAILED_TO_START
