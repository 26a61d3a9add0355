import httpx
import pytest

from storefront.errors import NotReadyError, RemoteError, ValidationError
from storefront.infra.api_client import build_client, request_json, unwrap
from storefront.registry import SessionRegistry
from storefront.session import SessionContext

API_URL = "http://marketplace.test/api/v1"


def _client(handler, token="tok"):
    return build_client(token, base_url=API_URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_request_json_sends_bearer_and_unwraps_envelope():
    seen = {}

    def handler(request: httpx.Request):
        seen["auth"] = request.headers.get("Authorization")
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"data": {"items": []}})

    async with _client(handler) as client:
        assert await request_json(client, "GET", "/cart") == {"items": []}
    assert seen == {"auth": "Bearer tok", "url": "http://marketplace.test/api/v1/cart"}


@pytest.mark.asyncio
async def test_request_json_error_message_and_status():
    def handler(request):
        return httpx.Response(422, json={"error": "qty inválida"})

    async with _client(handler) as client:
        with pytest.raises(RemoteError) as exc:
            await request_json(client, "POST", "/cart", json={"qty": 0})
    assert exc.value.status_code == 422
    assert exc.value.message == "qty inválida"
    assert "status=422" in str(exc.value)


@pytest.mark.asyncio
async def test_request_json_transport_error_has_no_status():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(RemoteError) as exc:
            await request_json(client, "GET", "/orders")
    assert exc.value.status_code is None


@pytest.mark.asyncio
async def test_request_json_empty_and_invalid_bodies():
    responses = iter([httpx.Response(204), httpx.Response(200, text="<html>")])

    def handler(request):
        return next(responses)

    async with _client(handler) as client:
        assert await request_json(client, "DELETE", "/cart") == {}
        with pytest.raises(RemoteError):
            await request_json(client, "GET", "/cart")


def test_unwrap_keeps_plain_bodies():
    assert unwrap({"status": "paid"}) == {"status": "paid"}
    assert unwrap({"data": [1, 2]}) == [1, 2]
    assert unwrap({"data": None, "x": 1}) == {"data": None, "x": 1}


@pytest.mark.asyncio
async def test_session_context_lifecycle():
    with pytest.raises(ValidationError):
        SessionContext("  ")

    ctx = SessionContext("tok", user={"id": "u1"}, base_url=API_URL, transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    with pytest.raises(NotReadyError):
        ctx.client
    async with ctx:
        assert ctx.is_open
        assert ctx.user_id == "u1"
        assert ctx.client.headers["Authorization"] == "Bearer tok"
    assert not ctx.is_open


@pytest.mark.asyncio
async def test_registry_open_is_idempotent_and_close_forgets():
    registry = SessionRegistry(base_url=API_URL, transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    first = await registry.open("tok", user={"id": "u1"})
    assert await registry.open("tok") is first
    assert registry.get("tok") is first
    assert len(registry) == 1

    assert await registry.close("tok") is True
    assert await registry.close("tok") is False
    assert not first.session.is_open
    with pytest.raises(NotReadyError):
        registry.get("tok")

    await registry.open("a")
    await registry.open("b")
    await registry.close_all()
    assert len(registry) == 0
