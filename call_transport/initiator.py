"""
Creates outbound calls via the legacy or modern transport depending on
participant preferences.
"""

import structlog

from .core.errors import InvalidIdentifier
from .core.models import CallInitiation, InitiationStatus
from .core.negotiator import TransportNegotiator

logger = structlog.get_logger(__name__)


class OutboundCallInitiator:
    """
    Entry point for the call-placing layer.

    Returns as soon as the call is dispatched or rejected. Whether the call
    actually connects is reported later by the launchers, and lookup failures
    go to the negotiator's failure reporter.
    """

    def __init__(self, negotiator: TransportNegotiator):
        self.negotiator = negotiator

    def initiate_call(self, handle: str) -> CallInitiation:
        """``handle`` is a user formatted phone number, e.g. from a contacts entry."""
        logger.info("Initiating outbound call", handle=handle)
        try:
            negotiation = self.negotiator.negotiate(handle)
        except InvalidIdentifier as exc:
            return CallInitiation(status=InitiationStatus.REJECTED, raw=handle, error=exc)
        return CallInitiation(
            status=InitiationStatus.DISPATCHED,
            raw=handle,
            identifier=negotiation.identifier,
            negotiation=negotiation,
        )

    def initiate_call_to_recipient(self, recipient_id: str) -> CallInitiation:
        """``recipient_id`` is an E.164 formatted phone number."""
        logger.info("Initiating outbound call", recipient_id=recipient_id)
        try:
            negotiation = self.negotiator.negotiate_canonical(recipient_id)
        except InvalidIdentifier as exc:
            return CallInitiation(status=InitiationStatus.REJECTED, raw=recipient_id, error=exc)
        return CallInitiation(
            status=InitiationStatus.DISPATCHED,
            raw=recipient_id,
            identifier=negotiation.identifier,
            negotiation=negotiation,
        )
