"""
Call transport service: wires config, ARI, the capability directory and
both launchers into an OutboundCallInitiator.

Run directly to place calls from the command line:

    python -m call_transport.service "+1 555-0100" "+44 20 7946 0000"
"""

import asyncio
import sys
from typing import List, Optional

from .ari_client import ARIClient
from .config import AppConfig, load_config, validate_production_config
from .core.capability import CapabilityLookup, HttpCapabilityLookup
from .core.contacts import ContactDirectory, InMemoryContactDirectory
from .core.errors import CapabilityLookupFailed
from .core.identifiers import PhoneNumberResolver
from .core.models import CallInitiation
from .core.negotiator import TransportNegotiator
from .core.preferences import EnvPreferenceSource, PreferenceSource
from .core.reporting import FailureReporter
from .initiator import OutboundCallInitiator
from .launchers.legacy import LegacyCallLauncher
from .launchers.modern import AriWebRtcSessionStarter, ModernCallLauncher
from .logging_config import configure_logging, get_logger

logger = get_logger(__name__)


class CallTransportService:
    """Owns the network resources behind outbound call negotiation."""

    def __init__(
        self,
        config: AppConfig,
        ari_client: Optional[ARIClient] = None,
        preferences: Optional[PreferenceSource] = None,
        capability_lookup: Optional[CapabilityLookup] = None,
        contacts: Optional[ContactDirectory] = None,
        failure_reporter: Optional[FailureReporter] = None,
    ):
        self.config = config
        self.ari_client = ari_client or ARIClient.from_config(config.asterisk)
        self.resolver = PhoneNumberResolver(config.identifiers.default_country_code)
        # Env var wins at call time; YAML value is the fallback
        self.preferences = preferences or EnvPreferenceSource(default=config.preferences.modern_transport_enabled)
        self.capability_lookup = capability_lookup or HttpCapabilityLookup(
            base_url=config.capability_lookup.base_url,
            timeout_sec=config.capability_lookup.timeout_sec,
            max_attempts=config.capability_lookup.max_attempts,
            api_token=config.capability_lookup.api_token,
        )
        self.contacts = contacts or InMemoryContactDirectory.from_config(config.contacts, resolver=self.resolver)

        legacy = LegacyCallLauncher(
            self.ari_client,
            self.contacts,
            technology=config.legacy.technology,
            trunk=config.legacy.trunk,
            caller_id=config.legacy.caller_id,
            originate_timeout_sec=config.legacy.originate_timeout_sec,
        )
        modern = ModernCallLauncher(
            AriWebRtcSessionStarter(
                self.ari_client,
                technology=config.modern.technology,
                endpoint_prefix=config.modern.endpoint_prefix,
                originate_timeout_sec=config.modern.originate_timeout_sec,
            )
        )
        self.negotiator = TransportNegotiator(
            resolver=self.resolver,
            preferences=self.preferences,
            capability_lookup=self.capability_lookup,
            legacy_launcher=legacy,
            modern_launcher=modern,
            failure_reporter=failure_reporter,
        )
        self.initiator = OutboundCallInitiator(self.negotiator)

    async def start(self) -> None:
        await self.ari_client.connect()
        logger.info("Call transport service started", contacts=len(self.config.contacts))

    async def stop(self) -> None:
        close = getattr(self.capability_lookup, "close", None)
        if close is not None:
            await close()
        await self.ari_client.disconnect()
        logger.info("Call transport service stopped")

    def initiate_call(self, handle: str) -> CallInitiation:
        return self.initiator.initiate_call(handle)

    def initiate_call_to_recipient(self, recipient_id: str) -> CallInitiation:
        return self.initiator.initiate_call_to_recipient(recipient_id)


async def place_calls(service: CallTransportService, handles: List[str]) -> int:
    """Initiate one call per handle and wait for every launch. Returns the failure count."""
    failures = 0
    initiations = [service.initiate_call(handle) for handle in handles]
    for initiation in initiations:
        if not initiation.dispatched:
            logger.error("Call rejected", handle=initiation.raw, error=str(initiation.error))
            failures += 1
            continue
        negotiation = initiation.negotiation
        try:
            decision = await negotiation.wait()
        except CapabilityLookupFailed:
            failures += 1
            continue
        result = await negotiation.launch
        logger.info(
            "Call placed" if result.success else "Call failed",
            recipient_id=initiation.identifier,
            transport=decision.value,
            channel_id=result.channel_id,
            error=result.error,
        )
        if not result.success:
            failures += 1
    return failures


async def main(argv: Optional[List[str]] = None) -> int:
    handles = list(sys.argv[1:] if argv is None else argv)
    config = load_config()
    level_name = str(config.logging.level).upper()
    configure_logging(log_level=level_name)

    errors, warnings = validate_production_config(config)
    if errors:
        logger.error("Configuration validation FAILED", errors=errors, warnings=warnings)
        raise RuntimeError(f"Configuration errors: {errors}")
    if warnings:
        logger.warning("Configuration warnings", warnings=warnings)

    if not handles:
        logger.error("No phone numbers given")
        return 2

    service = CallTransportService(config)
    await service.start()
    try:
        failures = await place_calls(service, handles)
    finally:
        await service.stop()
    return 1 if failures else 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass
