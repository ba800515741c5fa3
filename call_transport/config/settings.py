"""
Configuration models for the call transport service.

Uses Pydantic v2 for validation; loading is split into phases (YAML, secret
injection, env defaults, validation) the same way for every deployment.
"""

import os
from typing import List, Optional

from pydantic import BaseModel, Field
import structlog

from .loaders import resolve_config_path, load_yaml_with_env_expansion
from .security import inject_asterisk_credentials, inject_capability_token
from .defaults import apply_preference_defaults, apply_capability_lookup_defaults, apply_legacy_defaults

logger = structlog.get_logger(__name__)


class AsteriskConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8088)
    username: Optional[str] = None
    password: Optional[str] = None
    app_name: str = Field(default="call-transport")


class PreferenceConfig(BaseModel):
    modern_transport_enabled: bool = Field(default=False)


class CapabilityLookupConfig(BaseModel):
    base_url: str = Field(default="http://127.0.0.1:8080")
    timeout_sec: float = Field(default=5.0)
    max_attempts: int = Field(default=2)
    api_token: Optional[str] = None


class IdentifierConfig(BaseModel):
    default_country_code: Optional[str] = None  # e.g. "1"; None requires a leading '+'


class LegacyTransportConfig(BaseModel):
    technology: str = Field(default="PJSIP")
    trunk: Optional[str] = None
    caller_id: Optional[str] = None
    originate_timeout_sec: int = Field(default=30)


class ModernTransportConfig(BaseModel):
    technology: str = Field(default="PJSIP")
    endpoint_prefix: str = Field(default="webrtc_")
    originate_timeout_sec: int = Field(default=30)


class ContactEntry(BaseModel):
    identifier: str
    display_name: Optional[str] = None
    endpoint: Optional[str] = None


class LoggingConfig(BaseModel):
    level: str = Field(default="info")  # debug|info|warning|error|critical


class AppConfig(BaseModel):
    asterisk: AsteriskConfig = Field(default_factory=AsteriskConfig)
    preferences: PreferenceConfig = Field(default_factory=PreferenceConfig)
    capability_lookup: CapabilityLookupConfig = Field(default_factory=CapabilityLookupConfig)
    identifiers: IdentifierConfig = Field(default_factory=IdentifierConfig)
    legacy: LegacyTransportConfig = Field(default_factory=LegacyTransportConfig)
    modern: ModernTransportConfig = Field(default_factory=ModernTransportConfig)
    contacts: List[ContactEntry] = Field(default_factory=list)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Load and validate configuration from YAML file.

    Args:
        path: YAML file (absolute or relative to project root); None uses
            CALL_TRANSPORT_CONFIG, then config/call-transport.yaml

    Raises:
        FileNotFoundError: If configuration file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If values have the wrong shape
    """
    # Phase 1: YAML with env expansion
    path = resolve_config_path(path)
    config_data = load_yaml_with_env_expansion(path)

    # Phase 2: Secrets from environment only
    inject_asterisk_credentials(config_data)
    inject_capability_token(config_data)

    # Phase 3: Defaults and env overrides
    apply_preference_defaults(config_data)
    apply_capability_lookup_defaults(config_data)
    apply_legacy_defaults(config_data)

    # Phase 4: Validate
    return AppConfig(**config_data)


def validate_production_config(config: AppConfig) -> tuple[list[str], list[str]]:
    """Check configuration for deployment problems.

    Returns:
        (errors, warnings): errors block startup, warnings are logged
    """
    errors = []
    warnings = []

    if not config.asterisk.username or not config.asterisk.password:
        errors.append("ARI credentials missing (set ASTERISK_ARI_USERNAME and ASTERISK_ARI_PASSWORD)")

    if not (1 <= config.asterisk.port <= 65535):
        errors.append(f"ARI port {config.asterisk.port} out of valid range (1-65535)")

    if config.capability_lookup.timeout_sec <= 0:
        errors.append(f"capability_lookup.timeout_sec must be positive, got {config.capability_lookup.timeout_sec}")
    elif config.capability_lookup.timeout_sec > 30:
        warnings.append(
            f"Capability lookup timeout is {config.capability_lookup.timeout_sec}s; callers wait this long before a failure is reported"
        )

    if config.capability_lookup.max_attempts < 1:
        errors.append("capability_lookup.max_attempts must be at least 1")

    if config.capability_lookup.base_url.startswith("http://") and config.capability_lookup.api_token:
        warnings.append("Directory API token is sent over plain HTTP")

    code = config.identifiers.default_country_code
    if code and not code.lstrip("+").isdigit():
        errors.append(f"identifiers.default_country_code must be numeric, got {code!r}")

    if not config.contacts:
        warnings.append("No contacts configured; every legacy call will fail with MissingContactRecord")

    if os.getenv('LOG_LEVEL', 'info').lower() == 'debug':
        warnings.append("Debug logging enabled (logs include recipient numbers)")

    return errors, warnings
