"""
Unit tests for the remote functions client (httpx.MockTransport).
"""
import json

import httpx
import pytest

from domain.errors import RemoteFunctionError
from services.functions_client import RemoteFunctionsClient

pytestmark = pytest.mark.unit

BASE = "http://functions.test/functions/v1"


def _handler(request: httpx.Request) -> httpx.Response:
    name = request.url.path.rsplit("/", 1)[-1]
    if name == "check-domain":
        body = json.loads(request.content)
        return httpx.Response(200, json={"availability": "true", "echo": body, "auth": request.headers.get("authorization")})
    if name == "create-invoice":
        return httpx.Response(403, json={"error": "REQUEST_FORBIDDEN_ERROR"})
    if name == "plain-error":
        return httpx.Response(500, text="upstream exploded")
    if name == "not-json":
        return httpx.Response(200, text="<html>")
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
async def client():
    c = RemoteFunctionsClient(base_url=BASE + "/", api_key="anon-key", transport=httpx.MockTransport(_handler))
    yield c
    await c.aclose()


@pytest.mark.asyncio
async def test_invoke_posts_json_with_key(client):
    data = await client.invoke("check-domain", {"domain": "foo.com"})

    assert data["availability"] == "true"
    assert data["echo"] == {"domain": "foo.com"}
    assert data["auth"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_error_status_uses_body_message(client):
    with pytest.raises(RemoteFunctionError) as exc:
        await client.invoke("create-invoice", {})
    assert exc.value.status_code == 403
    assert exc.value.message == "REQUEST_FORBIDDEN_ERROR"
    assert exc.value.function == "create-invoice"


@pytest.mark.asyncio
async def test_error_status_falls_back_to_text(client):
    with pytest.raises(RemoteFunctionError) as exc:
        await client.invoke("plain-error")
    assert exc.value.message == "upstream exploded"


@pytest.mark.asyncio
async def test_non_json_body_is_an_error(client):
    with pytest.raises(RemoteFunctionError):
        await client.invoke("not-json")


@pytest.mark.asyncio
async def test_transport_failure_is_wrapped(client):
    with pytest.raises(RemoteFunctionError) as exc:
        await client.invoke("unreachable")
    assert "connection refused" in exc.value.message
    assert exc.value.status_code is None


@pytest.mark.asyncio
async def test_no_key_sends_no_auth_headers():
    seen = {}

    def handler(request):
        seen.update(request.headers)
        return httpx.Response(200, json={})

    c = RemoteFunctionsClient(base_url=BASE, api_key="", transport=httpx.MockTransport(handler))
    await c.invoke("paypal-settings")
    await c.aclose()

    assert "authorization" not in seen
    assert "apikey" not in seen
