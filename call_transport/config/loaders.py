"""
Locating and reading the call transport YAML file.

The file path comes from the caller, or from CALL_TRANSPORT_CONFIG when the
caller uses the default. ${VAR} references are expanded before parsing.
"""

import os
from pathlib import Path
from typing import Any, Dict, Union

import yaml

CONFIG_PATH_ENV = "CALL_TRANSPORT_CONFIG"
DEFAULT_CONFIG_PATH = "config/call-transport.yaml"

# Repository root (parent of call_transport/)
_PROJ_DIR = Path(__file__).resolve().parent.parent.parent


def resolve_config_path(path: Union[str, Path, None] = None) -> str:
    """
    Return an absolute path for the config file.

    ``None`` means CALL_TRANSPORT_CONFIG, falling back to the bundled
    config. Relative paths are anchored at the repository root, not the cwd.
    """
    if path is None:
        path = os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = _PROJ_DIR / candidate
    return str(candidate)


def load_yaml_with_env_expansion(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read ``path``, expand environment references and parse it as YAML.

    An empty file yields ``{}``. Unset variables stay as literal text.

    Raises:
        FileNotFoundError: the file does not exist
        yaml.YAMLError: the file is not YAML, or its top level is not a mapping
    """
    config_file = Path(path)
    try:
        raw = config_file.read_text()
    except FileNotFoundError as e:
        raise FileNotFoundError(f"Configuration file not found at: {config_file}") from e

    try:
        config_data = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Error parsing YAML configuration in {config_file}: {e}") from e

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise yaml.YAMLError(f"Configuration in {config_file} must be a mapping, got {type(config_data).__name__}")
    return config_data
