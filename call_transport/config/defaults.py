"""
Default value application for configuration.

Environment variables override YAML for the settings operators flip most:
the local transport preference, the directory URL and timeout, and the
legacy SIP trunk.
"""

import os
from typing import Any, Dict

from ..core.preferences import TRUTHY


def apply_preference_defaults(config_data: Dict[str, Any]) -> None:
    """
    Environment variables:
    - MODERN_TRANSPORT_ENABLED: 1|0 (default: YAML value, then false)
    """
    prefs = config_data.get('preferences') or {}
    env_value = os.getenv('MODERN_TRANSPORT_ENABLED')
    if env_value is not None and env_value.strip():
        prefs['modern_transport_enabled'] = env_value.strip().lower() in TRUTHY
    prefs.setdefault('modern_transport_enabled', False)
    config_data['preferences'] = prefs


def apply_capability_lookup_defaults(config_data: Dict[str, Any]) -> None:
    """
    Environment variables:
    - CAPABILITY_BASE_URL: directory service base URL
    - CAPABILITY_TIMEOUT_SEC: per-request timeout (default: 5.0)
    """
    lookup_cfg = config_data.get('capability_lookup') or {}
    base_url = os.getenv('CAPABILITY_BASE_URL', '').strip()
    if base_url:
        lookup_cfg['base_url'] = base_url
    lookup_cfg.setdefault('base_url', 'http://127.0.0.1:8080')

    timeout = os.getenv('CAPABILITY_TIMEOUT_SEC')
    if timeout:
        try:
            lookup_cfg['timeout_sec'] = float(timeout)
        except ValueError:
            lookup_cfg['timeout_sec'] = 5.0
    lookup_cfg.setdefault('timeout_sec', 5.0)
    config_data['capability_lookup'] = lookup_cfg


def apply_legacy_defaults(config_data: Dict[str, Any]) -> None:
    """
    Environment variables:
    - LEGACY_SIP_TRUNK: trunk name appended to legacy dial strings
    - LEGACY_CALLER_ID: caller ID presented on legacy calls
    """
    legacy_cfg = config_data.get('legacy') or {}
    trunk = os.getenv('LEGACY_SIP_TRUNK', '').strip()
    if trunk:
        legacy_cfg['trunk'] = trunk
    caller_id = os.getenv('LEGACY_CALLER_ID', '').strip()
    if caller_id:
        legacy_cfg['caller_id'] = caller_id
    legacy_cfg.setdefault('technology', 'PJSIP')
    config_data['legacy'] = legacy_cfg
