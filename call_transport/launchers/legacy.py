"""
Legacy transport launcher: point-to-point SIP call originated through Asterisk.
"""

from typing import Optional

import structlog

from ..core.contacts import ContactDirectory
from ..core.errors import MissingContactRecord
from ..core.metrics import LAUNCHES
from ..core.models import CanonicalIdentifier, Contact, LaunchResult, TransportDecision
from .base import TransportLauncher

logger = structlog.get_logger(__name__)


class LegacyCallLauncher(TransportLauncher):
    """
    Places a SIP call to the recipient's number.

    The identifier always comes from data that has a contact behind it, so a
    missing contact is an internal error: it is raised as MissingContactRecord
    before any signaling starts.
    """

    transport = TransportDecision.LEGACY

    def __init__(
        self,
        ari_client,
        contacts: ContactDirectory,
        technology: str = "PJSIP",
        trunk: Optional[str] = None,
        caller_id: Optional[str] = None,
        originate_timeout_sec: int = 30,
    ):
        self.ari_client = ari_client
        self.contacts = contacts
        self.technology = technology
        self.trunk = trunk
        self.caller_id = caller_id
        self.originate_timeout_sec = originate_timeout_sec

    def resolve_endpoint(self, identifier: CanonicalIdentifier, contact: Contact) -> str:
        """Contact dial string wins, then trunk routing, then technology/number."""
        if contact.endpoint:
            return contact.endpoint
        if self.trunk:
            return f"{self.technology}/{identifier}@{self.trunk}"
        return f"{self.technology}/{identifier}"

    async def launch(self, identifier: CanonicalIdentifier) -> LaunchResult:
        logger.info("Placing legacy call", recipient_id=identifier)

        contact = self.contacts.latest_contact_for(identifier)
        if contact is None:
            LAUNCHES.labels(transport=self.transport.value, result="error").inc()
            logger.error("Legacy call requested without contact record", recipient_id=identifier)
            raise MissingContactRecord(identifier)

        endpoint = self.resolve_endpoint(identifier, contact)
        response = await self.ari_client.originate(
            endpoint=endpoint,
            caller_id=self.caller_id,
            timeout_sec=self.originate_timeout_sec,
            channel_vars={
                "CALL_TRANSPORT": self.transport.value,
                "CALLEE_NAME": contact.display_name,
            },
        )
        return self._result_from_response(identifier, response)
