import asyncio

import aiohttp
import pytest

from call_transport.core.capability import HttpCapabilityLookup, StaticCapabilityLookup
from call_transport.core.errors import CapabilityLookupError


class _FakeResponse:
    def __init__(self, status: int, payload=None, text: str = ""):
        self.status = status
        self._payload = payload
        self._text = text

    async def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakeSession:
    closed = False

    def __init__(self, responses):
        self._responses = list(responses)
        self.requests = []

    def get(self, url, headers=None, timeout=None):
        self.requests.append({"url": url, "headers": headers})
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


def _lookup(responses, **kwargs):
    session = _FakeSession(responses)
    kwargs.setdefault("api_token", "")
    return HttpCapabilityLookup("http://directory.local/", session=session, **kwargs), session


@pytest.mark.asyncio
async def test_supported_recipient_returns_true():
    lookup, session = _lookup([_FakeResponse(200, {"supports_modern_transport": True})])

    assert await lookup.lookup("+15550100") is True
    assert session.requests[0]["url"] == "http://directory.local/v1/directory/%2B15550100"
    assert "Authorization" not in session.requests[0]["headers"]


@pytest.mark.asyncio
async def test_unsupported_recipient_returns_false():
    lookup, _ = _lookup([_FakeResponse(200, {"supports_modern_transport": False})])
    assert await lookup.lookup("+15550100") is False


@pytest.mark.asyncio
async def test_bearer_token_sent_when_configured():
    lookup, session = _lookup([_FakeResponse(200, {"supports_modern_transport": True})], api_token="tok-123")
    await lookup.lookup("+15550100")
    assert session.requests[0]["headers"]["Authorization"] == "Bearer tok-123"


@pytest.mark.asyncio
async def test_not_found_is_a_failure_and_not_retried():
    lookup, session = _lookup([_FakeResponse(404, text="unknown")], max_attempts=3)

    with pytest.raises(CapabilityLookupError) as excinfo:
        await lookup.lookup("+15550100")

    assert excinfo.value.not_found is True
    assert len(session.requests) == 1


@pytest.mark.asyncio
async def test_client_error_status_is_a_failure():
    lookup, _ = _lookup([_FakeResponse(403, text="forbidden")])

    with pytest.raises(CapabilityLookupError) as excinfo:
        await lookup.lookup("+15550100")
    assert excinfo.value.status == 403


@pytest.mark.asyncio
async def test_transient_connection_error_is_retried():
    lookup, session = _lookup(
        [aiohttp.ClientConnectionError("refused"), _FakeResponse(200, {"supports_modern_transport": True})],
        max_attempts=2,
    )

    assert await lookup.lookup("+15550100") is True
    assert len(session.requests) == 2


@pytest.mark.asyncio
async def test_timeouts_exhaust_attempts_and_raise():
    lookup, session = _lookup([asyncio.TimeoutError(), asyncio.TimeoutError()], max_attempts=2)

    with pytest.raises(CapabilityLookupError) as excinfo:
        await lookup.lookup("+15550100")

    assert "timed out" in excinfo.value.reason
    assert len(session.requests) == 2


@pytest.mark.asyncio
async def test_server_error_is_retried_then_fails():
    lookup, session = _lookup([_FakeResponse(503, text="busy")], max_attempts=1)

    with pytest.raises(CapabilityLookupError):
        await lookup.lookup("+15550100")
    assert len(session.requests) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"supports_modern_transport": "yes"}, ["unexpected"], ValueError("bad json")])
async def test_malformed_payload_is_a_failure(payload):
    lookup, _ = _lookup([_FakeResponse(200, payload)])

    with pytest.raises(CapabilityLookupError):
        await lookup.lookup("+15550100")


@pytest.mark.asyncio
async def test_close_leaves_injected_session_alone():
    lookup, session = _lookup([])
    await lookup.close()
    assert session.closed is False


@pytest.mark.asyncio
async def test_static_lookup():
    lookup = StaticCapabilityLookup({"+15550100": True, "+15550101": False})

    assert await lookup.lookup("+15550100") is True
    assert await lookup.lookup("+15550101") is False
    with pytest.raises(CapabilityLookupError) as excinfo:
        await lookup.lookup("+15550199")
    assert excinfo.value.not_found
