"""
Local transport preference sources.

The negotiator reads the preference once per negotiation and never caches it,
since users toggle the setting between calls.
"""

import os
from typing import Protocol

TRUTHY = ("1", "true", "yes", "on")


class PreferenceSource(Protocol):
    def read_modern_transport_preference(self) -> bool:
        ...


class StaticPreferenceSource:
    """Fixed preference value; the value may be reassigned at runtime."""

    def __init__(self, modern_transport_enabled: bool):
        self.modern_transport_enabled = modern_transport_enabled

    def read_modern_transport_preference(self) -> bool:
        return bool(self.modern_transport_enabled)


class EnvPreferenceSource:
    """Reads the preference from an environment variable on every call."""

    def __init__(self, var_name: str = "MODERN_TRANSPORT_ENABLED", default: bool = False):
        self.var_name = var_name
        self.default = default

    def read_modern_transport_preference(self) -> bool:
        raw = os.getenv(self.var_name)
        if raw is None or not raw.strip():
            return self.default
        return raw.strip().lower() in TRUTHY
