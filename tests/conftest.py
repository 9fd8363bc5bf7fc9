"""Pytest configuration and fixtures for firestore_rest.

The REST backend is faked with httpx.MockTransport: FakeFirestore records
every request and answers from a small route table (default 200 {}).
"""

import json
from typing import Any

import httpx
import pytest

from firestore_rest.infrastructure.firestore import FirestoreRESTClient

PROJECT_ID = "demo-project"
DATABASE_PATH = f"projects/{PROJECT_ID}/databases/(default)"
BASE_PATH = f"{DATABASE_PATH}/documents"
BASE_URL = "http://firestore.test/v1"


class FakeFirestore:
    """Records requests; routes match on method + URL path suffix (latest wins)."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: list[tuple[str, str, int, Any, str | None]] = []

    def respond(
        self,
        method: str,
        path_suffix: str,
        status_code: int = 200,
        json_body: Any = None,
        *,
        text: str | None = None,
    ) -> None:
        self._routes.append((method, path_suffix, status_code, json_body, text))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, suffix, status, body, text in reversed(self._routes):
            if request.method == method and request.url.path.endswith(suffix):
                if text is not None:
                    return httpx.Response(status, text=text)
                return httpx.Response(status, json=body if body is not None else {})
        return httpx.Response(200, json={})

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, request: httpx.Request | None = None) -> Any:
        """Parsed JSON body of request (default: the last one)."""
        request = request or self.last_request
        return json.loads(request.content) if request.content else None


@pytest.fixture
def backend() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
async def client(backend: FakeFirestore) -> FirestoreRESTClient:
    """FirestoreRESTClient wired to the fake backend (emulator-style auth)."""
    http = httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))
    db = FirestoreRESTClient(PROJECT_ID, None, base_url=BASE_URL, http_client=http)
    yield db
    await http.aclose()
