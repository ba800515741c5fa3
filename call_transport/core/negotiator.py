"""
Transport Negotiator - Legacy vs Modern Transport Selection

Decides, per outbound call, whether the call goes over the legacy SIP
transport or the modern WebRTC transport:

1. Resolve the handle to a canonical identifier (failure: InvalidIdentifier, sync)
2. Read the local preference (false: legacy, no network call)
3. Fetch the remote capability (true: modern, false: legacy)
4. Lookup failure: no call is placed, CapabilityLookupFailed is reported

The decision is delivered through the returned Negotiation handle, never
through a synchronous return value, because the lookup branch has nothing
meaningful to return until the directory answers.
"""

import asyncio
import contextvars
import time
from typing import Optional

import structlog

from ..logging_config import set_correlation_id
from .capability import CapabilityLookup
from .errors import CapabilityLookupError, CapabilityLookupFailed, InvalidIdentifier
from .identifiers import IdentifierResolver
from .metrics import CAPABILITY_LOOKUP_SECONDS, NEGOTIATIONS
from .models import CanonicalIdentifier, LaunchResult, Negotiation, TransportDecision
from .preferences import PreferenceSource
from .reporting import FailureReporter, LoggingFailureReporter

logger = structlog.get_logger(__name__)


def _mark_retrieved(future: asyncio.Future) -> None:
    # Lookup failures are already logged and sent to the failure reporter;
    # fire-and-forget callers may never await the handle.
    if not future.cancelled():
        future.exception()


class TransportNegotiator:
    """
    Selects exactly one transport per negotiation and dispatches its launcher.

    Holds only read-only collaborators; every negotiate() call owns its own
    identifier, capability and decision, so concurrent negotiations need no
    coordination.
    """

    def __init__(
        self,
        resolver: IdentifierResolver,
        preferences: PreferenceSource,
        capability_lookup: CapabilityLookup,
        legacy_launcher,
        modern_launcher,
        failure_reporter: Optional[FailureReporter] = None,
    ):
        self.resolver = resolver
        self.preferences = preferences
        self.capability_lookup = capability_lookup
        self.legacy_launcher = legacy_launcher
        self.modern_launcher = modern_launcher
        self.failure_reporter = failure_reporter or LoggingFailureReporter()

    def negotiate(self, raw_handle: str) -> Negotiation:
        """
        Start negotiating a transport for a user formatted handle.

        Must be called from a running event loop.

        Raises:
            InvalidIdentifier: if the handle cannot be normalized. Nothing
                else happens in that case (no preference read, no lookup).
        """
        try:
            identifier = self.resolver.resolve(raw_handle)
        except InvalidIdentifier as exc:
            NEGOTIATIONS.labels(decision="invalid_identifier").inc()
            logger.warning("Rejecting call to unparseable handle", handle=raw_handle, reason=exc.reason)
            raise
        return self._start(identifier)

    def negotiate_canonical(self, recipient_id: str) -> Negotiation:
        """Start negotiating for an identifier that is already E.164."""
        if not self.resolver.is_canonical(recipient_id):
            NEGOTIATIONS.labels(decision="invalid_identifier").inc()
            logger.warning("Rejecting call to non-canonical recipient id", recipient_id=recipient_id)
            raise InvalidIdentifier(recipient_id, "not a canonical E.164 identifier")
        return self._start(CanonicalIdentifier(recipient_id))

    def _start(self, identifier: CanonicalIdentifier) -> Negotiation:
        loop = asyncio.get_running_loop()

        # Tasks spawned for this negotiation carry its correlation ID
        ctx = contextvars.copy_context()
        correlation_id = ctx.run(set_correlation_id)
        log = logger.bind(recipient_id=identifier, correlation_id=correlation_id)

        negotiation = Negotiation(
            identifier=identifier,
            decision=loop.create_future(),
            correlation_id=correlation_id,
        )
        negotiation.decision.add_done_callback(_mark_retrieved)

        local_wants_modern = self.preferences.read_modern_transport_preference()
        if not local_wants_modern:
            log.info("Modern transport disabled locally; selecting legacy transport")
            self._select(negotiation, TransportDecision.LEGACY, ctx, log)
            return negotiation

        # Remote capability can go stale between calls, so it is fetched
        # fresh for every negotiation.
        log.debug("Local user prefers modern transport; looking up remote capability")
        negotiation.lookup = loop.create_task(self._resolve_capability(negotiation, ctx, log), context=ctx)
        return negotiation

    async def _resolve_capability(self, negotiation: Negotiation, ctx: contextvars.Context, log) -> None:
        identifier = negotiation.identifier
        started = time.monotonic()
        try:
            remote_supports_modern = await self.capability_lookup.lookup(identifier)
        except Exception as exc:
            CAPABILITY_LOOKUP_SECONDS.observe(time.monotonic() - started)
            NEGOTIATIONS.labels(decision="lookup_failed").inc()
            if isinstance(exc, CapabilityLookupError) and exc.not_found:
                log.warning("Recipient not registered in directory; not placing call", error=str(exc))
            else:
                log.warning("Capability lookup failed; not placing call", error=str(exc), error_type=type(exc).__name__)
            failure = CapabilityLookupFailed(identifier, exc)
            negotiation.decision.set_exception(failure)
            self._report_failure(identifier, failure, log)
            return
        CAPABILITY_LOOKUP_SECONDS.observe(time.monotonic() - started)

        log.debug("Capability lookup complete", local_wants_modern=True, remote_supports_modern=remote_supports_modern)
        if remote_supports_modern:
            self._select(negotiation, TransportDecision.MODERN, ctx, log)
        else:
            log.info("Recipient does not support modern transport; falling back to legacy")
            self._select(negotiation, TransportDecision.LEGACY, ctx, log)

    def _select(self, negotiation: Negotiation, decision: TransportDecision, ctx: contextvars.Context, log) -> None:
        if negotiation.decision.done():
            raise RuntimeError(f"Transport already decided for {negotiation.identifier}")

        launcher = self.modern_launcher if decision is TransportDecision.MODERN else self.legacy_launcher
        NEGOTIATIONS.labels(decision=decision.value).inc()
        log.info("Transport selected", transport=decision.value)

        loop = asyncio.get_running_loop()
        negotiation.launch = loop.create_task(self._launch(launcher, negotiation.identifier, log), context=ctx)
        negotiation.decision.set_result(decision)

    async def _launch(self, launcher, identifier: CanonicalIdentifier, log) -> LaunchResult:
        try:
            return await launcher.launch(identifier)
        except Exception as exc:
            log.error("Transport launcher raised", transport=launcher.transport.value, error=str(exc), exc_info=True)
            self._report_failure(identifier, exc, log)
            return LaunchResult(
                transport=launcher.transport,
                identifier=identifier,
                success=False,
                error=f"{type(exc).__name__}: {exc}",
            )

    def _report_failure(self, identifier: CanonicalIdentifier, error: Exception, log) -> None:
        # Reporter errors are logged, never propagated out of negotiation tasks
        try:
            self.failure_reporter.report_call_failure(identifier, error)
        except Exception:
            log.error("Failure reporter raised", error_type=type(error).__name__, exc_info=True)
