import asyncio
import json

import httpx
import pytest

from core.directus import (
    CollectionNotFoundError,
    DirectusClient,
    DirectusError,
    DirectusForbiddenError,
    DirectusSoftError,
    FieldNotWritableError,
)


def _errors(*codes: str) -> dict:
    return {"errors": [{"message": "x", "extensions": {"code": code}} for code in codes]}


def _run(handler, call):
    async def main():
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://directus.test")
        try:
            return await call(DirectusClient(http))
        finally:
            await http.aclose()

    return asyncio.run(main())


def test_read_many_sends_query_params():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": [{"file_id": "a"}, "junk"]})

    rows = _run(
        handler,
        lambda c: c.read_many(
            "app_album_photos",
            filter={"file_id": {"_in": ["a", "b"]}},
            fields=["file_id"],
            limit=200,
            offset=400,
        ),
    )

    assert rows == [{"file_id": "a"}]
    request = seen[0]
    assert request.url.path == "/items/app_album_photos"
    assert json.loads(request.url.params["filter"]) == {"file_id": {"_in": ["a", "b"]}}
    assert request.url.params["fields"] == "file_id"
    assert request.url.params["limit"] == "200"
    assert request.url.params["offset"] == "400"


def test_system_collections_use_their_own_routes():
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={"data": []})

    _run(handler, lambda c: c.read_many("directus_users"))
    _run(handler, lambda c: c.list_files_uploaded_by("u1"))

    assert paths == ["/users", "/files"]


def test_update_many_sends_query_body():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(204)

    _run(
        handler,
        lambda c: c.update_many("app_notifications", filter={"sender_id": {"_eq": "u1"}}, data={"sender_id": None}),
    )

    assert bodies == [{"query": {"filter": {"sender_id": {"_eq": "u1"}}, "limit": -1}, "data": {"sender_id": None}}]


@pytest.mark.parametrize(
    ("status", "codes", "error_type"),
    [
        (404, ("ROUTE_NOT_FOUND",), CollectionNotFoundError),
        (400, ("COLLECTION_NOT_FOUND",), CollectionNotFoundError),
        (403, ("FORBIDDEN",), DirectusForbiddenError),
        (400, ("INVALID_PAYLOAD",), FieldNotWritableError),
    ],
)
def test_deployment_gaps_are_soft_errors(status, codes, error_type):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=_errors(*codes))

    with pytest.raises(error_type) as exc_info:
        _run(handler, lambda c: c.read_many("app_missing"))

    assert isinstance(exc_info.value, DirectusSoftError)
    assert exc_info.value.codes == codes


def test_server_error_is_hard():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(DirectusError) as exc_info:
        _run(handler, lambda c: c.read_many("app_articles"))

    assert not isinstance(exc_info.value, DirectusSoftError)
    assert exc_info.value.status == 500


def test_transport_error_is_hard():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(DirectusError) as exc_info:
        _run(handler, lambda c: c.read_many("app_articles"))

    assert exc_info.value.status is None


def test_read_one_missing_item_is_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json=_errors("ITEM_NOT_FOUND"))

    assert _run(handler, lambda c: c.read_one("app_articles", "x")) is None


def test_delete_file_is_idempotent():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        assert request.url.path == "/files/f1"
        return httpx.Response(404, json=_errors("ROUTE_NOT_FOUND"))

    assert _run(handler, lambda c: c.delete_file("f1")) is None
