"""Thin Firestore REST API client (no firebase-admin / grpc).

Uses google-auth for OAuth tokens and Firestore REST v1 over
httpx.AsyncClient so calls do not block the event loop. Every non-2xx
response or transport failure surfaces as ApiError; nothing is retried.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import httpx

from firestore_rest.core.config import Settings
from firestore_rest.core.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_DATABASE_ID,
    EMULATOR_BEARER_TOKEN,
    FIRESTORE_SCOPES,
    MAX_BATCH_OPERATIONS,
)
from firestore_rest.domain.exceptions import ApiError, AuthenticationError
from firestore_rest.infrastructure.firestore.batch import WriteBatch
from firestore_rest.infrastructure.firestore.documents import (
    CollectionReference,
    DocumentReference,
)
from firestore_rest.infrastructure.firestore.paths import database_path, documents_root
from firestore_rest.infrastructure.firestore.transaction import Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")

Params = dict[str, Any] | list[tuple[str, Any]] | None


def _resolve_key_file(path: str | None) -> Path | None:
    """Return the key file as an absolute path, or None if unset/missing."""
    if not path:
        return None
    resolved = Path(path).expanduser()
    if not resolved.is_absolute():
        resolved = Path.cwd() / resolved
    if not resolved.is_file():
        logger.warning(
            "FIRESTORE_KEY_FILE_PATH set but file not found: %s (resolved: %s)",
            path,
            resolved,
        )
        return None
    return resolved


def _get_credentials(settings: Settings):
    """Return google-auth credentials for Firestore, or None for the emulator.

    Order: service account JSON (env), key file, Application Default Credentials.

    Raises:
        AuthenticationError: if no credentials can be loaded.
    """
    if settings.emulator_enabled:
        return None

    from google.oauth2 import service_account

    key_json = (
        settings.service_account_key.get_secret_value()
        if settings.service_account_key
        else None
    )
    if key_json:
        try:
            key_dict = json.loads(key_json)
        except json.JSONDecodeError as e:
            raise AuthenticationError(
                "FIRESTORE_SERVICE_ACCOUNT_KEY is not valid JSON"
            ) from e
        try:
            return service_account.Credentials.from_service_account_info(
                key_dict, scopes=list(FIRESTORE_SCOPES)
            )
        except ValueError as e:
            raise AuthenticationError(f"Invalid Google credentials. {e}") from e

    key_file = _resolve_key_file(settings.key_file_path)
    if key_file is not None:
        try:
            return service_account.Credentials.from_service_account_file(
                str(key_file), scopes=list(FIRESTORE_SCOPES)
            )
        except ValueError as e:
            raise AuthenticationError(f"Invalid Google credentials. {e}") from e

    import google.auth
    from google.auth.exceptions import DefaultCredentialsError

    try:
        credentials, _ = google.auth.default(scopes=list(FIRESTORE_SCOPES))
    except DefaultCredentialsError as e:
        raise AuthenticationError.credentials_not_found() from e
    return credentials


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


def _parse_error_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return {"raw": resp.text}


class FirestoreRESTClient:
    """Lightweight Firestore client using the REST API.

    Exposes raw get/post/patch/delete against the v1 API plus reference,
    batch and transaction factories. Relative paths resolve against
    base_url; credentials=None sends the emulator's fixed bearer token.
    """

    def __init__(
        self,
        project_id: str,
        credentials=None,
        *,
        database_id: str = DEFAULT_DATABASE_ID,
        base_url: str = DEFAULT_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        max_batch_operations: int = MAX_BATCH_OPERATIONS,
        timeout: httpx.Timeout | float = 30.0,
    ) -> None:
        if not project_id:
            raise ValueError("project_id must be a non-empty string")
        self._project_id = project_id
        self._database_id = database_id
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self._database_path = database_path(project_id, database_id)
        self._base_path = documents_root(project_id, database_id)
        self._max_batch_operations = max_batch_operations
        self._http = (
            http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        )
        self._owns_http = http_client is None

    @classmethod
    def from_settings(
        cls, settings: Settings, *, http_client: httpx.AsyncClient | None = None
    ) -> "FirestoreRESTClient":
        """Build a client (credentials, URLs, timeouts) from Settings."""
        return cls(
            settings.project_id,
            _get_credentials(settings),
            database_id=settings.database_id,
            base_url=settings.api_base_url,
            http_client=http_client,
            max_batch_operations=settings.max_batch_operations,
            timeout=httpx.Timeout(
                settings.timeout_seconds, connect=settings.connect_timeout_seconds
            ),
        )

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def database_id(self) -> str:
        return self._database_id

    @property
    def database_path(self) -> str:
        """projects/{project}/databases/{database}"""
        return self._database_path

    @property
    def base_path(self) -> str:
        """projects/{project}/databases/{database}/documents"""
        return self._base_path

    @property
    def max_batch_operations(self) -> int:
        return self._max_batch_operations

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "FirestoreRESTClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        if self._credentials is None:
            return EMULATOR_BEARER_TOKEN
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Params = None,
        body: dict | None = None,
    ) -> Any:
        """Perform one REST exchange and return the parsed JSON ({} when empty).

        Raises:
            ApiError: on status >= 400, a transport failure, or a non-JSON body.
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {await self.get_token()}",
        }
        try:
            resp = await self._http.request(
                method, self._url(path), headers=headers, params=params, json=body
            )
        except httpx.HTTPError as e:
            logger.warning("Firestore %s %s failed: %s", method, path, e)
            raise ApiError(0, None, path, reason=str(e)) from e
        if resp.status_code >= 400:
            logger.debug("Firestore %s %s -> HTTP %s", method, path, resp.status_code)
            raise ApiError(resp.status_code, _parse_error_body(resp), path)
        raw = resp.content
        if not raw:
            return {}
        try:
            return json.loads(raw.decode())
        except ValueError as e:
            logger.warning("Firestore %s %s returned a non-JSON body", method, path)
            raise ApiError(resp.status_code, {"raw": resp.text}, path) from e

    async def get(self, path: str, *, params: Params = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, body: dict, *, params: Params = None) -> Any:
        return await self._request("POST", path, params=params, body=body)

    async def patch(self, path: str, body: dict, *, params: Params = None) -> Any:
        return await self._request("PATCH", path, params=params, body=body)

    async def delete(self, path: str, *, params: Params = None) -> Any:
        return await self._request("DELETE", path, params=params)

    def collection(self, path: str) -> CollectionReference:
        """Return a reference to a (sub)collection, relative or absolute."""
        return CollectionReference(self, path)

    def document(self, collection: str, document_id: str) -> DocumentReference:
        return DocumentReference(self, collection, document_id)

    def batch(self) -> WriteBatch:
        """Start an atomic write batch (committed with one commit request)."""
        return WriteBatch(self, max_operations=self._max_batch_operations)

    async def begin_transaction(self, *, read_only: bool = False) -> Transaction:
        """Ask the server for a transaction id and return an active Transaction."""
        return await Transaction.begin(self, read_only=read_only)

    async def run_transaction(
        self, callback: Callable[[Transaction], Awaitable[T] | T]
    ) -> T:
        """Run callback inside a transaction.

        Commits if the transaction is still active when the callback returns;
        rolls back and re-raises if the callback (or the commit) raises.
        """
        transaction = await self.begin_transaction()
        try:
            result = callback(transaction)
            if inspect.isawaitable(result):
                result = await result
            if transaction.is_active:
                await transaction.commit()
            return result
        except Exception:
            if transaction.is_active:
                logger.info("Rolling back transaction %s after error", transaction.id)
                await transaction.rollback()
            raise
