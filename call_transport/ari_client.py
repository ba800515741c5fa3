"""
Asterisk REST Interface (ARI) client for placing outbound calls.

Only the HTTP side of ARI is used: both transports originate a channel
through Asterisk and the call itself is then owned by Asterisk and the
Stasis application.
"""

import uuid
from typing import Any, Dict, Optional

import aiohttp
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from .logging_config import get_logger

logger = get_logger(__name__)


class ARIClient:
    """A client for interacting with the Asterisk REST Interface (ARI)."""

    def __init__(self, username: str, password: str, base_url: str, app_name: str):
        self.username = username
        self.password = password
        self.app_name = app_name
        self.http_url = base_url.rstrip("/")
        self.http_session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_config(cls, asterisk_config) -> "ARIClient":
        base_url = f"http://{asterisk_config.host}:{asterisk_config.port}/ari"
        return cls(
            username=asterisk_config.username,
            password=asterisk_config.password,
            base_url=base_url,
            app_name=asterisk_config.app_name,
        )

    @retry(
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((aiohttp.ClientError, ConnectionError)),
    )
    async def connect(self):
        """Open the HTTP session and check that ARI answers."""
        logger.info("Connecting to ARI...", url=self.http_url)
        self.http_session = aiohttp.ClientSession(auth=aiohttp.BasicAuth(self.username, self.password))
        try:
            async with self.http_session.get(f"{self.http_url}/asterisk/info") as response:
                if response.status != 200:
                    raise ConnectionError(f"Failed to connect to ARI HTTP endpoint. Status: {response.status}")
            logger.info("Successfully connected to ARI HTTP endpoint.")
        except Exception:
            logger.error("Failed to connect to ARI, will retry...", exc_info=True)
            await self.http_session.close()
            raise

    async def disconnect(self):
        """Close the HTTP session."""
        if self.http_session and not self.http_session.closed:
            await self.http_session.close()
        self.http_session = None

    async def send_command(
        self,
        method: str,
        resource: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send a command to the ARI HTTP endpoint.

        Errors are returned as ``{"status": <code>, "reason": <text>}`` so
        callers can branch on status instead of catching.
        """
        if self.http_session is None:
            raise RuntimeError("ARI client is not connected")

        url = f"{self.http_url}/{resource}"

        # channelVars go in the JSON body, not query params
        if params and "channelVars" in params:
            params = dict(params)
            channel_vars = params.pop("channelVars")
            data = dict(data or {})
            data["channelVars"] = channel_vars

        try:
            async with self.http_session.request(method, url, json=data, params=params) as response:
                if response.status >= 400:
                    reason = await response.text()
                    logger.error("ARI command failed", method=method, url=url, status=response.status, reason=reason)
                    return {"status": response.status, "reason": reason}
                return await response.json()
        except aiohttp.ClientError as e:
            logger.error("ARI HTTP request failed", method=method, url=url, exc_info=True)
            return {"status": 500, "reason": str(e)}

    async def originate(
        self,
        endpoint: str,
        caller_id: Optional[str] = None,
        timeout_sec: int = 30,
        channel_vars: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Originate a channel to ``endpoint`` into our Stasis application."""
        channel_id = f"out-{uuid.uuid4()}"
        params: Dict[str, Any] = {
            "endpoint": endpoint,
            "app": self.app_name,
            "channelId": channel_id,
            "timeout": int(timeout_sec),
        }
        if caller_id:
            params["callerId"] = caller_id
        if channel_vars:
            params["channelVars"] = channel_vars

        logger.info("Originating channel", endpoint=endpoint, channel_id=channel_id)
        return await self.send_command("POST", "channels", params=params)
