"""
Core negotiation logic: identifiers, preferences, capability lookup and
the transport selector.
"""

from call_transport.core.errors import (
    CallTransportError,
    CapabilityLookupError,
    CapabilityLookupFailed,
    InvalidIdentifier,
    MissingContactRecord,
)
from call_transport.core.models import (
    CallInitiation,
    CanonicalIdentifier,
    Contact,
    InitiationStatus,
    LaunchResult,
    Negotiation,
    TransportDecision,
)
from call_transport.core.negotiator import TransportNegotiator

__all__ = [
    "CallTransportError",
    "CapabilityLookupError",
    "CapabilityLookupFailed",
    "InvalidIdentifier",
    "MissingContactRecord",
    "CallInitiation",
    "CanonicalIdentifier",
    "Contact",
    "InitiationStatus",
    "LaunchResult",
    "Negotiation",
    "TransportDecision",
    "TransportNegotiator",
]
