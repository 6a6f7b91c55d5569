"""
Async content-store client (Directus REST over httpx).

This module owns the shared HTTP client. FastAPI opens it on startup and
closes it on shutdown (see `api/main.py`).

Used endpoints:
- GET/POST/PATCH/DELETE /items/{collection}[/{id}]
- GET/PATCH/DELETE /users[/{id}]        (collection `directus_users`)
- GET/DELETE /files[/{id}]              (collection `directus_files`)

Errors:
- every failure is a `DirectusError`
- "collection absent", "field not writable" and "forbidden" are
  `DirectusSoftError` subclasses so callers can treat them as gaps
"""

from __future__ import annotations

import json
import os
from typing import Any

import httpx

SYSTEM_ROUTES = {
    "directus_users": "/users",
    "directus_files": "/files",
}

_client: DirectusClient | None = None


class DirectusError(RuntimeError):
    def __init__(self, message: str, *, status: int | None = None, codes: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.status = status
        self.codes = codes


class DirectusSoftError(DirectusError):
    """
    The deployment lacks something (collection, field, permission).
    """


class CollectionNotFoundError(DirectusSoftError):
    pass


class FieldNotWritableError(DirectusSoftError):
    pass


class DirectusForbiddenError(DirectusSoftError):
    pass


def directus_url() -> str:
    return os.environ.get("DIRECTUS_URL", "http://directus:8055").strip() or "http://directus:8055"


def directus_static_token() -> str:
    return os.environ.get("DIRECTUS_STATIC_TOKEN", "").strip()


def directus_timeout_s() -> float:
    raw = os.environ.get("DIRECTUS_TIMEOUT_S", "").strip()
    if not raw:
        return 15.0
    try:
        return float(raw)
    except ValueError:
        return 15.0


def _error_codes(payload: Any) -> tuple[str, ...]:
    if not isinstance(payload, dict):
        return ()
    errors = payload.get("errors")
    if not isinstance(errors, list):
        return ()
    codes: list[str] = []
    for entry in errors:
        if not isinstance(entry, dict):
            continue
        code = (entry.get("extensions") or {}).get("code")
        if isinstance(code, str) and code:
            codes.append(code)
    return tuple(codes)


def _raise_for_response(action: str, resp: httpx.Response) -> None:
    if resp.is_success:
        return

    try:
        payload = resp.json()
    except ValueError:
        payload = None
    codes = _error_codes(payload)
    # Avoid dumping huge bodies; include a small snippet.
    message = f"Directus {action} failed: {resp.status_code} codes={','.join(codes) or '-'} {resp.text[:300]}"

    status = resp.status_code
    if status == 404 or {"ROUTE_NOT_FOUND", "COLLECTION_NOT_FOUND", "ITEM_NOT_FOUND"} & set(codes):
        raise CollectionNotFoundError(message, status=status, codes=codes)
    if status == 403 or "FORBIDDEN" in codes:
        # Directus answers 403 for collections that do not exist as well.
        raise DirectusForbiddenError(message, status=status, codes=codes)
    if "INVALID_PAYLOAD" in codes or "FIELD_NOT_WRITABLE" in codes:
        raise FieldNotWritableError(message, status=status, codes=codes)
    raise DirectusError(message, status=status, codes=codes)


def _query_params(
    *,
    filter: dict[str, Any] | None = None,
    fields: list[str] | None = None,
    sort: list[str] | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if filter:
        params["filter"] = json.dumps(filter, ensure_ascii=True)
    if fields:
        params["fields"] = ",".join(fields)
    if sort:
        params["sort"] = ",".join(sort)
    if limit is not None:
        params["limit"] = int(limit)
    if offset:
        params["offset"] = int(offset)
    return params


def _collection_path(collection: str) -> str:
    return SYSTEM_ROUTES.get(collection, f"/items/{collection}")


class DirectusClient:
    """
    Thin async wrapper over the Directus REST API.

    Responses are unwrapped from `{"data": ...}`; rows are plain dicts.
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def _request(self, action: str, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise DirectusError(f"Directus {action} request failed: {exc}") from exc

        _raise_for_response(action, resp)
        if resp.status_code == 204 or not resp.content:
            return None
        data = resp.json()
        return data.get("data") if isinstance(data, dict) else None

    async def read_many(
        self,
        collection: str,
        *,
        filter: dict[str, Any] | None = None,
        fields: list[str] | None = None,
        sort: list[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        rows = await self._request(
            f"read {collection}",
            "GET",
            _collection_path(collection),
            params=_query_params(filter=filter, fields=fields, sort=sort, limit=limit, offset=offset),
        )
        if not isinstance(rows, list):
            return []
        return [row for row in rows if isinstance(row, dict)]

    async def read_one(
        self,
        collection: str,
        item_id: str,
        *,
        fields: list[str] | None = None,
    ) -> dict[str, Any] | None:
        try:
            row = await self._request(
                f"read {collection}/{item_id}",
                "GET",
                f"{_collection_path(collection)}/{item_id}",
                params=_query_params(fields=fields),
            )
        except CollectionNotFoundError:
            return None
        return row if isinstance(row, dict) else None

    async def create_one(self, collection: str, payload: dict[str, Any]) -> dict[str, Any]:
        row = await self._request(f"create {collection}", "POST", _collection_path(collection), json=payload)
        if not isinstance(row, dict):
            raise DirectusError(f"Directus create {collection} returned no item.")
        return row

    async def update_one(self, collection: str, item_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        row = await self._request(
            f"update {collection}/{item_id}",
            "PATCH",
            f"{_collection_path(collection)}/{item_id}",
            json=payload,
        )
        return row if isinstance(row, dict) else {}

    async def update_many(
        self,
        collection: str,
        *,
        filter: dict[str, Any],
        data: dict[str, Any],
    ) -> None:
        await self._request(
            f"update {collection} by query",
            "PATCH",
            _collection_path(collection),
            json={"query": {"filter": filter, "limit": -1}, "data": data},
        )

    async def delete_one(self, collection: str, item_id: str) -> None:
        await self._request(
            f"delete {collection}/{item_id}",
            "DELETE",
            f"{_collection_path(collection)}/{item_id}",
        )

    async def delete_many(self, collection: str, *, filter: dict[str, Any]) -> None:
        await self._request(
            f"delete {collection} by query",
            "DELETE",
            _collection_path(collection),
            json={"query": {"filter": filter, "limit": -1}},
        )

    async def delete_file(self, file_id: str) -> None:
        """
        Delete one stored file. Deleting an absent id is not an error.
        """
        try:
            await self.delete_one("directus_files", file_id)
        except CollectionNotFoundError:
            return None

    async def list_files_uploaded_by(self, owner_id: str, *, limit: int = 5000) -> list[dict[str, Any]]:
        return await self.read_many(
            "directus_files",
            filter={"uploaded_by": {"_eq": owner_id}},
            fields=["id"],
            limit=limit,
        )


async def init_client() -> None:
    global _client
    if _client is not None:
        return None

    headers = {"Accept": "application/json"}
    token = directus_static_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"
    http = httpx.AsyncClient(
        base_url=directus_url().rstrip("/"),
        headers=headers,
        timeout=directus_timeout_s(),
    )
    _client = DirectusClient(http)


async def close_client() -> None:
    global _client
    if _client is None:
        return None
    await _client._http.aclose()
    _client = None


def use_client(instance: Any) -> None:
    """
    Install a prepared client (or a test double with the same methods).
    """
    global _client
    _client = instance


def client() -> DirectusClient:
    if _client is None:
        raise RuntimeError("Directus client is not initialized. Call init_client() on startup.")
    return _client
