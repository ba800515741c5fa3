"""
Modern transport launcher: hands the call to WebRTC session setup.
"""

from typing import Any, Dict, Protocol

import structlog

from ..core.models import CanonicalIdentifier, LaunchResult, TransportDecision
from .base import TransportLauncher

logger = structlog.get_logger(__name__)


class ModernSessionStarter(Protocol):
    async def start_session(self, identifier: CanonicalIdentifier) -> Dict[str, Any]:
        ...


class AriWebRtcSessionStarter:
    """Originates to a WebRTC-enabled PJSIP endpoint registered per recipient."""

    def __init__(self, ari_client, technology: str = "PJSIP", endpoint_prefix: str = "webrtc_", originate_timeout_sec: int = 30):
        self.ari_client = ari_client
        self.technology = technology
        self.endpoint_prefix = endpoint_prefix
        self.originate_timeout_sec = originate_timeout_sec

    def endpoint_for(self, identifier: CanonicalIdentifier) -> str:
        # Endpoint names cannot contain '+'
        return f"{self.technology}/{self.endpoint_prefix}{identifier.digits}"

    async def start_session(self, identifier: CanonicalIdentifier) -> Dict[str, Any]:
        return await self.ari_client.originate(
            endpoint=self.endpoint_for(identifier),
            timeout_sec=self.originate_timeout_sec,
            channel_vars={"CALL_TRANSPORT": TransportDecision.MODERN.value},
        )


class ModernCallLauncher(TransportLauncher):
    """Our responsibility ends once the session starter has been invoked."""

    transport = TransportDecision.MODERN

    def __init__(self, session_starter: ModernSessionStarter):
        self.session_starter = session_starter

    async def launch(self, identifier: CanonicalIdentifier) -> LaunchResult:
        logger.info("Placing modern call", recipient_id=identifier)
        response = await self.session_starter.start_session(identifier)
        return self._result_from_response(identifier, response)
