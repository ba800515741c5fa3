"""
Security-critical configuration injection.

SECURITY POLICY:
- ARI passwords and the directory API token MUST NEVER be in YAML files
- Credentials come from environment variables only; YAML values are overwritten
"""

import os
from typing import Any, Dict


def _is_nonempty_string(val: Any) -> bool:
    return isinstance(val, str) and val.strip() != ""


def inject_asterisk_credentials(config_data: Dict[str, Any]) -> None:
    """
    Inject Asterisk ARI credentials from environment variables ONLY.

    Environment variables:
    - ASTERISK_HOST (default: YAML value, then 127.0.0.1)
    - ASTERISK_ARI_PORT (default: YAML value, then 8088)
    - ASTERISK_ARI_USERNAME or ARI_USERNAME
    - ASTERISK_ARI_PASSWORD or ARI_PASSWORD
    """
    asterisk_yaml = config_data.get('asterisk') if isinstance(config_data.get('asterisk'), dict) else {}

    port = os.getenv("ASTERISK_ARI_PORT") or asterisk_yaml.get("port", 8088)
    try:
        port = int(port)
    except (TypeError, ValueError):
        port = 8088

    config_data['asterisk'] = {
        "host": os.getenv("ASTERISK_HOST") or asterisk_yaml.get("host", "127.0.0.1"),
        "port": port,
        "username": os.getenv("ASTERISK_ARI_USERNAME") or os.getenv("ARI_USERNAME"),
        "password": os.getenv("ASTERISK_ARI_PASSWORD") or os.getenv("ARI_PASSWORD"),
        "app_name": asterisk_yaml.get("app_name", "call-transport"),
    }


def inject_capability_token(config_data: Dict[str, Any]) -> None:
    """
    Inject the capability directory bearer token from CAPABILITY_API_TOKEN.

    Any token present in YAML is discarded.
    """
    lookup_cfg = config_data.get('capability_lookup') or {}
    token = os.getenv("CAPABILITY_API_TOKEN")
    lookup_cfg['api_token'] = token if _is_nonempty_string(token) else None
    config_data['capability_lookup'] = lookup_cfg
