"""
Configuration package for the call transport service.

This package contains:
- loaders: YAML file loading and parsing
- security: Credential injection from the environment
- defaults: Default value application and env overrides
- settings: Pydantic models, load_config and validation
"""

from .settings import (
    AppConfig,
    AsteriskConfig,
    CapabilityLookupConfig,
    ContactEntry,
    IdentifierConfig,
    LegacyTransportConfig,
    LoggingConfig,
    ModernTransportConfig,
    PreferenceConfig,
    load_config,
    validate_production_config,
)

__all__ = [
    'AppConfig',
    'AsteriskConfig',
    'CapabilityLookupConfig',
    'ContactEntry',
    'IdentifierConfig',
    'LegacyTransportConfig',
    'LoggingConfig',
    'ModernTransportConfig',
    'PreferenceConfig',
    'load_config',
    'validate_production_config',
]
