"""
End-to-end call initiation through the wired service, with ARI and the
capability directory faked.
"""

import pytest

from call_transport.config import AppConfig
from call_transport.core.capability import StaticCapabilityLookup
from call_transport.core.errors import CapabilityLookupError, CapabilityLookupFailed, InvalidIdentifier
from call_transport.core.models import InitiationStatus, TransportDecision
from call_transport.core.preferences import StaticPreferenceSource
from call_transport.core.reporting import CollectingFailureReporter
from call_transport.service import CallTransportService, place_calls


class _FakeAriClient:
    def __init__(self):
        self.calls = []
        self.connected = False

    async def connect(self):
        self.connected = True

    async def disconnect(self):
        self.connected = False

    async def originate(self, **kwargs):
        self.calls.append(kwargs)
        return {"id": f"chan-{len(self.calls)}"}


class _FailingLookup:
    def __init__(self):
        self.calls = []

    async def lookup(self, identifier):
        self.calls.append(identifier)
        raise CapabilityLookupError(identifier, "timed out")


class _CountingPreferences(StaticPreferenceSource):
    def __init__(self, value):
        super().__init__(value)
        self.reads = 0

    def read_modern_transport_preference(self):
        self.reads += 1
        return super().read_modern_transport_preference()


def _service(preference: bool, lookup=None):
    config = AppConfig(
        contacts=[{"identifier": "+15550100", "display_name": "Front Desk"}],
        legacy={"trunk": "carrier"},
    )
    ari = _FakeAriClient()
    prefs = _CountingPreferences(preference)
    reporter = CollectingFailureReporter()
    lookup = lookup if lookup is not None else StaticCapabilityLookup({"+15550100": True})
    service = CallTransportService(
        config,
        ari_client=ari,
        preferences=prefs,
        capability_lookup=lookup,
        failure_reporter=reporter,
    )
    return service, ari, prefs, reporter


@pytest.mark.asyncio
async def test_handle_with_preference_off_places_legacy_call_without_lookup():
    lookup = StaticCapabilityLookup({})
    service, ari, _, _ = _service(False, lookup)

    initiation = service.initiate_call("+1 555-0100")

    assert initiation.status is InitiationStatus.DISPATCHED
    assert initiation.identifier == "+15550100"
    assert initiation.negotiation.decision.result() is TransportDecision.LEGACY
    result = await initiation.negotiation.launch
    assert result.success is True
    assert ari.calls[0]["endpoint"] == "PJSIP/+15550100@carrier"


@pytest.mark.asyncio
async def test_modern_capable_recipient_gets_modern_call():
    service, ari, _, _ = _service(True, StaticCapabilityLookup({"+15550100": True}))

    initiation = service.initiate_call("+15550100")

    assert await initiation.negotiation.wait() is TransportDecision.MODERN
    await initiation.negotiation.launch
    assert ari.calls[0]["endpoint"] == "PJSIP/webrtc_15550100"


@pytest.mark.asyncio
async def test_recipient_without_modern_support_gets_legacy_call():
    service, ari, _, _ = _service(True, StaticCapabilityLookup({"+15550100": False}))

    initiation = service.initiate_call("+15550100")

    assert await initiation.negotiation.wait() is TransportDecision.LEGACY
    await initiation.negotiation.launch
    assert ari.calls[0]["endpoint"] == "PJSIP/+15550100@carrier"


@pytest.mark.asyncio
async def test_lookup_timeout_reports_failure_and_places_nothing():
    lookup = _FailingLookup()
    service, ari, _, reporter = _service(True, lookup)

    initiation = service.initiate_call("+15550100")

    # Dispatch is not completion
    assert initiation.status is InitiationStatus.DISPATCHED
    with pytest.raises(CapabilityLookupFailed):
        await initiation.negotiation.wait()
    assert lookup.calls == ["+15550100"]
    assert ari.calls == []
    assert [identifier for identifier, _ in reporter.failures] == ["+15550100"]


@pytest.mark.asyncio
async def test_unparseable_handle_rejected_synchronously():
    service, ari, prefs, _ = _service(True)

    initiation = service.initiate_call("not-a-number")

    assert initiation.status is InitiationStatus.REJECTED
    assert initiation.dispatched is False
    assert isinstance(initiation.error, InvalidIdentifier)
    assert initiation.negotiation is None
    assert prefs.reads == 0
    assert ari.calls == []


@pytest.mark.asyncio
async def test_initiate_call_to_recipient_requires_canonical_id():
    service, _, _, _ = _service(False)

    rejected = service.initiate_call_to_recipient("555-0100")
    accepted = service.initiate_call_to_recipient("+15550100")

    assert rejected.status is InitiationStatus.REJECTED
    assert accepted.status is InitiationStatus.DISPATCHED
    await accepted.negotiation.launch


@pytest.mark.asyncio
async def test_place_calls_counts_failures():
    service, ari, _, _ = _service(True, StaticCapabilityLookup({"+15550100": True}))

    await service.start()
    failures = await place_calls(service, ["+1 555-0100", "not-a-number", "+15550199"])
    await service.stop()

    # One modern call placed; one rejected; one unknown to the directory
    assert failures == 2
    assert len(ari.calls) == 1
    assert ari.connected is False
