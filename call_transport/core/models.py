"""
Core data models for outbound call transport negotiation.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import time


class CanonicalIdentifier(str):
    """Validated E.164 callee identifier. Only the resolver should construct these."""

    __slots__ = ()

    @property
    def digits(self) -> str:
        return self[1:]

    def __repr__(self) -> str:
        return f"CanonicalIdentifier({str.__repr__(self)})"


class TransportDecision(Enum):
    """Which transport carries the outbound call."""
    LEGACY = "legacy"  # point-to-point SIP via Asterisk
    MODERN = "modern"  # WebRTC peer connection


class InitiationStatus(Enum):
    DISPATCHED = "dispatched"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Contact:
    """Contact/display record required to place a legacy call."""
    identifier: str
    display_name: str
    endpoint: Optional[str] = None  # explicit dial string, overrides trunk routing


@dataclass
class LaunchResult:
    """Outcome reported by a transport launcher."""
    transport: TransportDecision
    identifier: str
    success: bool
    channel_id: Optional[str] = None
    error: Optional[str] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class Negotiation:
    """
    Handle for one in-flight negotiation.

    ``decision`` resolves to a TransportDecision, or raises
    CapabilityLookupFailed when the remote capability could not be fetched.
    ``lookup`` is the capability lookup task (modern preference only) and
    ``launch`` is the dispatched launcher task once a decision exists.
    """
    identifier: CanonicalIdentifier
    decision: "asyncio.Future[TransportDecision]"
    correlation_id: Optional[str] = None
    lookup: Optional["asyncio.Task[None]"] = None
    launch: Optional["asyncio.Task[LaunchResult]"] = None

    def done(self) -> bool:
        return self.decision.done()

    async def wait(self) -> TransportDecision:
        """Wait for the decision; raises CapabilityLookupFailed on lookup failure."""
        return await self.decision


@dataclass
class CallInitiation:
    """Immediate result of an inbound call request."""
    status: InitiationStatus
    raw: str
    identifier: Optional[CanonicalIdentifier] = None
    negotiation: Optional[Negotiation] = None
    error: Optional[Exception] = None

    @property
    def dispatched(self) -> bool:
        return self.status is InitiationStatus.DISPATCHED
