import json

import httpx
import pytest

from conftest import make_postgrest
from staylink.services.postgrest_client import PostgrestError


async def test_select_sends_key_and_order():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["apikey"] = request.headers["apikey"]
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json=[{"id": 1}])

    client = make_postgrest(handler, key="secret")
    rows = await client.select("rooms", order="created_at.desc")

    assert rows == [{"id": 1}]
    assert seen["url"].path == "/rest/v1/rooms"
    assert seen["url"].params["select"] == "*"
    assert seen["url"].params["order"] == "created_at.desc"
    assert seen["apikey"] == "secret"
    assert seen["auth"] == "Bearer secret"


async def test_insert_asks_for_representation():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["prefer"] = request.headers["prefer"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=[{"id": 5, "room-number": 101}])

    client = make_postgrest(handler)
    rows = await client.insert("rooms", {"room-number": 101})

    assert rows == [{"id": 5, "room-number": 101}]
    assert seen["prefer"] == "return=representation"
    assert seen["body"] == {"room-number": 101}


async def test_insert_wraps_single_object_response():
    client = make_postgrest(lambda request: httpx.Response(201, json={"id": 9}))
    assert await client.insert("rooms", {"x": 1}) == [{"id": 9}]


async def test_rpc_posts_to_function_path():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        return httpx.Response(200, json=[{"id": 3}])

    client = make_postgrest(handler)
    assert await client.rpc("insert_room", {"p_floor": 1}) == [{"id": 3}]
    assert seen["path"] == "/rest/v1/rpc/insert_room"


async def test_error_body_is_parsed():
    body = {"code": "PGRST204", "message": "Could not find column", "details": None, "hint": "reload"}
    client = make_postgrest(lambda request: httpx.Response(400, json=body))

    with pytest.raises(PostgrestError) as exc_info:
        await client.insert("rooms", {"x": 1})

    err = exc_info.value
    assert err.code == "PGRST204"
    assert err.message == "Could not find column"
    assert err.hint == "reload"
    assert err.status_code == 400


async def test_non_json_error_uses_status_code():
    client = make_postgrest(lambda request: httpx.Response(502, text="Bad gateway"))

    with pytest.raises(PostgrestError) as exc_info:
        await client.select("rooms")

    assert exc_info.value.code == "502"
    assert exc_info.value.message == "Bad gateway"


async def test_transport_failure_raises_postgrest_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_postgrest(handler)
    with pytest.raises(PostgrestError, match="unreachable"):
        await client.select("rooms")
