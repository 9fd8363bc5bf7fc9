"""Tests for the structured-query builder."""

import pytest

from firestore_rest.infrastructure.firestore.query import Query
from tests.conftest import BASE_PATH


@pytest.mark.asyncio
async def test_where_filters_are_anded_with_encoded_values(client) -> None:
    query = client.collection("users").where("age", ">=", 18).where("tags", "array-contains", "x")
    assert query.to_dict()["where"] == {
        "compositeFilter": {
            "op": "AND",
            "filters": [
                {
                    "fieldFilter": {
                        "field": {"fieldPath": "age"},
                        "op": "GREATER_THAN_OR_EQUAL",
                        "value": {"integerValue": "18"},
                    }
                },
                {
                    "fieldFilter": {
                        "field": {"fieldPath": "tags"},
                        "op": "ARRAY_CONTAINS",
                        "value": {"stringValue": "x"},
                    }
                },
            ],
        }
    }


@pytest.mark.asyncio
async def test_unknown_operator_raises(client) -> None:
    with pytest.raises(ValueError):
        client.collection("users").where("age", "~=", 1)


@pytest.mark.asyncio
async def test_order_limit_offset_and_cursors(client) -> None:
    query = (
        client.collection("users")
        .query()
        .order_by("age", "desc")
        .order_by("name")
        .limit(10)
        .offset(5)
        .start_at([18], before=False)
        .end_at([65], before=True)
    )
    body = query.to_dict()
    assert body["from"] == [{"collectionId": "users"}]
    assert body["orderBy"] == [
        {"field": {"fieldPath": "age"}, "direction": "DESCENDING"},
        {"field": {"fieldPath": "name"}, "direction": "ASCENDING"},
    ]
    assert body["limit"] == 10
    assert body["offset"] == 5
    assert body["startAfter"] == {"values": [{"integerValue": "18"}]}
    assert body["endBefore"] == {"values": [{"integerValue": "65"}]}
    assert "startAt" not in body and "endAt" not in body


@pytest.mark.asyncio
async def test_get_runs_query_against_documents_root(client, backend) -> None:
    backend.respond(
        "POST",
        ":runQuery",
        200,
        [
            {"readTime": "2024-01-01T00:00:00Z"},
            {
                "document": {
                    "name": f"{BASE_PATH}/users/alice",
                    "fields": {"age": {"integerValue": "30"}},
                }
            },
        ],
    )
    results = await client.collection("users").where("age", "==", 30).get()

    assert backend.last_request.url.path.endswith(f"{BASE_PATH}:runQuery")
    assert backend.body()["structuredQuery"]["from"] == [{"collectionId": "users"}]
    assert [(s.id, s.to_dict()) for s in results] == [("alice", {"age": 30})]


@pytest.mark.asyncio
async def test_subcollection_query_parent_is_owning_document(client) -> None:
    query = client.document("users", "alice").collection("orders").query()
    assert isinstance(query, Query)
    assert query.parent == f"{BASE_PATH}/users/alice"


@pytest.mark.asyncio
async def test_stream_yields_snapshots(client, backend) -> None:
    backend.respond(
        "POST",
        ":runQuery",
        200,
        [{"document": {"name": f"{BASE_PATH}/users/bob", "fields": {}}}],
    )
    ids = [s.id async for s in client.collection("users").query().stream()]
    assert ids == ["bob"]
