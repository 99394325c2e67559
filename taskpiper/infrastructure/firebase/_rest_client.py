"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1, or the
Firestore emulator when FIRESTORE_EMULATOR_HOST is set. All HTTP calls use
httpx.AsyncClient so they do not block the event loop.

Every write here touches exactly one document; array edits go through
``documents:commit`` field transforms so they are atomic server-side.
HTTP and transport failures surface as StorageException.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import quote, urlencode

import httpx
from google.auth.exceptions import GoogleAuthError

from taskpiper.domain.value_objects.query import Filter, SortKey
from taskpiper.infrastructure.exceptions import StorageException
from taskpiper.infrastructure.firebase._rest_encoding import (
    decode_document,
    encode_document,
    encode_value,
)
from taskpiper.infrastructure.firebase.query_encoding import (
    compile_filter,
    compile_order,
)

logger = logging.getLogger(__name__)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"
# The emulator accepts this token as an admin bypass of security rules.
EMULATOR_TOKEN = "owner"


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


class DocumentExistsError(StorageException):
    """Raised when createDocument returns 409 (document ID already exists)."""

    def __init__(self, url: str) -> None:
        super().__init__(f"POST {url}", "Document already exists", status_code=409)


def _error_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method not in ("GET", "PATCH", "POST", "DELETE"):
        raise ValueError(f"Unsupported method: {method!r}")
    try:
        resp = await client.request(method, url, headers=headers, json=body)
    except httpx.HTTPError as e:
        logger.error("Firestore %s %s failed: %s", method, url, e)
        raise StorageException(f"{method} {url}", str(e)) from e
    if resp.status_code == 404:
        return None
    if resp.status_code == 409:
        raise DocumentExistsError(url)
    if resp.status_code not in (200, 204):
        logger.error("Firestore %s %s returned %s", method, url, resp.status_code)
        raise StorageException(
            f"{method} {url}",
            resp.reason_phrase or "Firestore request failed",
            status_code=resp.status_code,
            body=_error_body(resp),
        )
    if method == "DELETE":
        return {}
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return self._path.split("/")[-1]

    async def update(self, data: dict[str, Any]) -> bool:
        """Overwrite only the given fields of an existing document.

        Returns:
            False if the document does not exist (nothing is written).
        """
        params = [("updateMask.fieldPaths", k) for k in data]
        params.append(("currentDocument.exists", "true"))
        url = f"{self._client.base_url}/{self._path}?{urlencode(params)}"
        out = await self._client._call(url, "PATCH", encode_document(data))
        return out is not None

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        out = await self._client._call(f"{self._client.base_url}/{self._path}")
        if not out:
            return None
        return DocumentSnapshot(self.id, decode_document(out.get("fields")))

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        await self._client._call(f"{self._client.base_url}/{self._path}", "DELETE")

    async def array_union(self, field: str, values: list[Any]) -> bool:
        """Append values missing from an array field (atomic). False if document missing."""
        return await self._transform(field, "appendMissingElements", values)

    async def array_remove(self, field: str, values: list[Any]) -> bool:
        """Remove every occurrence of values from an array field (atomic). False if missing."""
        return await self._transform(field, "removeAllFromArray", values)

    async def _transform(self, field: str, kind: str, values: list[Any]) -> bool:
        write = {
            "transform": {
                "document": self._path,
                "fieldTransforms": [
                    {
                        "fieldPath": field,
                        kind: {"values": [encode_value(v) for v in values]},
                    }
                ],
            },
            "currentDocument": {"exists": True},
        }
        out = await self._client._call(
            f"{self._client.base_url}/{self._client.prefix}:commit",
            "POST",
            {"writes": [write]},
        )
        return out is not None


class DocumentSnapshot:
    """Snapshot of a document (id + data)."""

    def __init__(self, id_: str, data: dict):
        self.id = id_
        self._data = data

    def to_dict(self) -> dict:
        return self._data


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array-contains": "ARRAY_CONTAINS",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}


class _Query:
    """Fluent query builder for a collection; runs via runQuery on the server."""

    def __init__(
        self,
        client: "FirestoreRESTClient",
        parent: str,
        collection_id: str,
        *,
        where: dict[str, Any] | None = None,
    ):
        self._client = client
        self._parent = parent
        self._collection_id = collection_id
        self._where = where
        self._order_by: list[dict[str, Any]] = []
        self._offset: int = 0
        self._limit: int | None = None

    def order_by(self, keys: tuple[SortKey, ...]) -> "_Query":
        self._order_by = compile_order(keys)
        return self

    def offset(self, n: int | None) -> "_Query":
        self._offset = n or 0
        return self

    def limit(self, n: int | None) -> "_Query":
        self._limit = n
        return self

    def _structured(self, paged: bool = True) -> dict[str, Any]:
        structured: dict[str, Any] = {
            "from": [{"collectionId": self._collection_id}],
        }
        if self._where is not None:
            structured["where"] = self._where
        if self._order_by:
            structured["orderBy"] = self._order_by
        if paged and self._offset:
            structured["offset"] = self._offset
        if paged and self._limit is not None:
            structured["limit"] = self._limit
        return structured

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        url = f"{self._client.base_url}/{self._parent}:runQuery"
        resp = await self._client._call(url, "POST", {"structuredQuery": self._structured()})
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            if "document" not in item:
                continue
            doc = item["document"]
            name = doc.get("name", "")
            doc_id = name.split("/")[-1] if name else ""
            yield DocumentSnapshot(doc_id, decode_document(doc.get("fields")))

    async def count(self) -> int:
        """Return the number of matching documents (server-side aggregation)."""
        url = f"{self._client.base_url}/{self._parent}:runAggregationQuery"
        body = {
            "structuredAggregationQuery": {
                "structuredQuery": self._structured(paged=False),
                "aggregations": [{"alias": "total", "count": {}}],
            }
        }
        resp = await self._client._call(url, "POST", body)
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            fields = item.get("result", {}).get("aggregateFields", {})
            if "total" in fields:
                return int(fields["total"].get("integerValue", 0))
        return 0


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path.rstrip("/")

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        """Create a document with the given ID (fail with DocumentExistsError if it exists)."""
        url = f"{self._client.base_url}/{self._path}?documentId={quote(document_id, safe='')}"
        await self._client._call(url, "POST", encode_document(data))

    def _query(self, where: dict[str, Any] | None) -> _Query:
        parent = self._path.rsplit("/", 1)[0]
        collection_id = self._path.split("/")[-1]
        return _Query(self._client, parent, collection_id, where=where)

    def where(self, field: str, op: str, value: Any) -> _Query:
        """Start a query with one field filter. Use .order_by(), .offset(), .limit(), then .stream()."""
        return self._query(
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": _OP_MAP.get(op, op),
                    "value": encode_value(value),
                }
            }
        )

    def query(self, filter_: Filter | None) -> _Query:
        """Start a query from a parsed filter tree (None = whole collection)."""
        where = compile_filter(filter_, self._path) if filter_ is not None else None
        return self._query(where)


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials=None,
        *,
        base_url: str = _BASE,
        static_token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._static_token = static_token
        self.base_url = base_url.rstrip("/")
        self.prefix = f"projects/{project_id}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str | None:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        if self._credentials is None:
            return self._static_token
        try:
            return await asyncio.to_thread(_get_access_token, self._credentials)
        except GoogleAuthError as e:
            logger.exception("Firestore token refresh failed")
            raise StorageException("token refresh", str(e)) from e

    async def _call(self, url: str, method: str = "GET", body: dict | None = None) -> Any:
        return await _request_async(
            self._http, url, method=method, body=body, access_token=await self.get_token()
        )

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self.prefix}/{collection_id}")
