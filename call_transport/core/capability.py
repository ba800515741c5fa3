"""
Remote capability lookup.

Asks the account directory whether a recipient's client supports the modern
(WebRTC) transport. Each lookup is a fresh network request; results are never
cached because recipients toggle the setting and stale data misroutes calls.
"""

import asyncio
import os
from typing import Dict, Optional, Protocol
from urllib.parse import quote

import aiohttp
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .errors import CapabilityLookupError

logger = structlog.get_logger(__name__)


class CapabilityLookup(Protocol):
    async def lookup(self, identifier: str) -> bool:
        """Return whether the recipient supports the modern transport; raise CapabilityLookupError on failure."""
        ...


class _TransientLookupError(Exception):
    """Retryable failure (connection refused, timeout, 5xx)."""


class HttpCapabilityLookup:
    """
    Directory client: ``GET {base_url}/v1/directory/{identifier}``.

    Expects ``{"supports_modern_transport": true|false}``. A 404 means the
    recipient is not registered, which is a lookup failure rather than
    "unsupported": we do not place calls when capability is unknown.
    """

    CAPABILITY_FIELD = "supports_modern_transport"

    def __init__(
        self,
        base_url: str,
        timeout_sec: float = 5.0,
        max_attempts: int = 2,
        api_token: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_sec)
        self.max_attempts = max(1, int(max_attempts))
        self.api_token = api_token if api_token is not None else os.getenv("CAPABILITY_API_TOKEN")
        self._session = session
        self._owns_session = session is None

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def lookup(self, identifier: str) -> bool:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
                retry=retry_if_exception_type(_TransientLookupError),
                reraise=True,
            ):
                with attempt:
                    supported = await self._fetch(identifier)
        except _TransientLookupError as exc:
            raise CapabilityLookupError(identifier, str(exc)) from exc

        logger.debug("Capability lookup complete", recipient_id=identifier, supports_modern=supported)
        return supported

    async def _fetch(self, identifier: str) -> bool:
        url = f"{self.base_url}/v1/directory/{quote(identifier)}"
        session = self._get_session()
        try:
            async with session.get(url, headers=self._headers(), timeout=self.timeout) as response:
                if response.status == 404:
                    raise CapabilityLookupError(identifier, "recipient not registered", status=404)
                if response.status >= 500:
                    reason = await response.text()
                    logger.warning("Directory server error", url=url, status=response.status, reason=reason)
                    raise _TransientLookupError(f"directory returned {response.status}")
                if response.status >= 400:
                    reason = await response.text()
                    raise CapabilityLookupError(identifier, f"directory returned {response.status}: {reason}", status=response.status)
                payload = await response.json()
        except asyncio.TimeoutError as exc:
            logger.warning("Capability lookup timed out", url=url)
            raise _TransientLookupError("timed out") from exc
        except aiohttp.ClientConnectionError as exc:
            logger.warning("Capability lookup connection error", url=url, error=str(exc))
            raise _TransientLookupError(f"connection error: {exc}") from exc
        except (aiohttp.ContentTypeError, ValueError) as exc:
            raise CapabilityLookupError(identifier, f"malformed directory response: {exc}") from exc

        if not isinstance(payload, dict) or not isinstance(payload.get(self.CAPABILITY_FIELD), bool):
            raise CapabilityLookupError(identifier, f"directory response missing '{self.CAPABILITY_FIELD}'")
        return payload[self.CAPABILITY_FIELD]


class StaticCapabilityLookup:
    """
    Capabilities from a fixed table, for local development without a directory.

    Unknown identifiers fail like a 404 from the directory would.
    """

    def __init__(self, capabilities: Optional[Dict[str, bool]] = None):
        self.capabilities = dict(capabilities or {})

    async def lookup(self, identifier: str) -> bool:
        if identifier not in self.capabilities:
            raise CapabilityLookupError(identifier, "recipient not registered", status=404)
        return self.capabilities[identifier]
