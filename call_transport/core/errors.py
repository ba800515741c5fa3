"""
Error taxonomy for outbound call transport negotiation.

InvalidIdentifier is raised synchronously before anything else happens.
CapabilityLookupFailed is delivered asynchronously through the negotiation
handle. MissingContactRecord marks a broken invariant in the legacy path.
"""

from typing import Optional


class CallTransportError(Exception):
    """Base class for negotiation errors."""


class InvalidIdentifier(CallTransportError):
    """User text could not be normalized into a canonical identifier."""

    def __init__(self, raw: str, reason: str = "unparseable phone number"):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Invalid identifier {raw!r}: {reason}")


class CapabilityLookupError(CallTransportError):
    """Raised by capability lookup services (network, timeout, not found)."""

    def __init__(self, identifier: str, reason: str, status: Optional[int] = None):
        self.identifier = identifier
        self.reason = reason
        self.status = status
        super().__init__(f"Capability lookup for {identifier} failed: {reason}")

    @property
    def not_found(self) -> bool:
        return self.status == 404


class CapabilityLookupFailed(CallTransportError):
    """Negotiation ended without a transport because capability is unknown."""

    def __init__(self, identifier: str, cause: Optional[BaseException] = None):
        self.identifier = identifier
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Unable to determine calling capability for {identifier}{detail}")


class MissingContactRecord(CallTransportError):
    """Legacy transport selected for an identifier with no contact record."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"No contact record for {identifier}; legacy call cannot be placed")
