"""
Base class for transport launchers.

A launcher takes a canonical identifier and starts one outbound call over
its transport. Launchers report their own success or failure; the
negotiator only dispatches one of them.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import structlog

from ..core.metrics import LAUNCHES
from ..core.models import CanonicalIdentifier, LaunchResult, TransportDecision

logger = structlog.get_logger(__name__)


class TransportLauncher(ABC):
    """Starts an outbound call over one transport."""

    transport: TransportDecision

    @abstractmethod
    async def launch(self, identifier: CanonicalIdentifier) -> LaunchResult:
        """Attempt to place the call. Returns the launch result."""
        pass

    def _result_from_response(self, identifier: str, response: Optional[Dict[str, Any]]) -> LaunchResult:
        """Map an ARI originate response to a LaunchResult."""
        channel_id = (response or {}).get("id")
        if channel_id:
            LAUNCHES.labels(transport=self.transport.value, result="success").inc()
            logger.info(
                "Outbound call dispatched",
                transport=self.transport.value,
                recipient_id=identifier,
                channel_id=channel_id,
            )
            return LaunchResult(transport=self.transport, identifier=identifier, success=True, channel_id=channel_id)

        status = (response or {}).get("status")
        reason = (response or {}).get("reason") or "no channel returned"
        LAUNCHES.labels(transport=self.transport.value, result="failure").inc()
        logger.warning(
            "Outbound call launch failed",
            transport=self.transport.value,
            recipient_id=identifier,
            status=status,
            reason=reason,
        )
        return LaunchResult(
            transport=self.transport,
            identifier=identifier,
            success=False,
            error=f"{status}: {reason}" if status else reason,
        )
