"""
Caller-facing failure channel.

Failures that happen after initiate_call() has already returned (lookup
errors, missing contacts, launcher errors) are pushed here so the calling
layer can tell the user, e.g. "can't reach this number".
"""

from typing import List, Protocol, Tuple
import structlog

logger = structlog.get_logger(__name__)


class FailureReporter(Protocol):
    def report_call_failure(self, identifier: str, error: Exception) -> None:
        ...


class LoggingFailureReporter:
    """Default reporter: logs the failure."""

    def report_call_failure(self, identifier: str, error: Exception) -> None:
        logger.warning(
            "Outbound call could not be placed",
            recipient_id=identifier,
            error_type=type(error).__name__,
            error=str(error),
        )


class CollectingFailureReporter(LoggingFailureReporter):
    """Keeps reported failures in memory, for UIs that poll."""

    def __init__(self):
        self.failures: List[Tuple[str, Exception]] = []

    def report_call_failure(self, identifier: str, error: Exception) -> None:
        super().report_call_failure(identifier, error)
        self.failures.append((identifier, error))
