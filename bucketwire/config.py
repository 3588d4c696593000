"""Configuration loading for bucketwire.

Supports two configuration sources:
1. Environment variables (for CI/CD) - takes priority
2. config.json file (for local development)

Environment Variables:
    BUCKETWIRE_ENDPOINT=s3.amazonaws.com      (required)
    BUCKETWIRE_ACCESS_KEY=xxx
    BUCKETWIRE_SECRET_KEY=xxx
    BUCKETWIRE_SESSION_TOKEN=xxx
    BUCKETWIRE_USE_SSL=true
    BUCKETWIRE_PORT=9000
    BUCKETWIRE_REGION=us-east-1
    BUCKETWIRE_VENDOR=standard|oss
    BUCKETWIRE_ADDRESSING_STYLE=auto|virtual|path
    BUCKETWIRE_TRACE=false
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from bucketwire.models import ADDRESSING_STYLES, AddressingVendor, ClientConfig

ENV_PREFIX = "BUCKETWIRE_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for '{name}': {value!r}")


def _parse_port(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        port = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid port: {value!r}") from e
    if not 0 < port < 65536:
        raise ConfigError(f"Port out of range: {port}")
    return port


def _parse_vendor(value: Any) -> AddressingVendor:
    try:
        return AddressingVendor(str(value).strip().lower())
    except ValueError as e:
        choices = ", ".join(v.value for v in AddressingVendor)
        raise ConfigError(f"Invalid vendor {value!r}. Expected one of: {choices}") from e


def build_config(data: dict[str, Any]) -> ClientConfig:
    """Build a ClientConfig from a plain dictionary.

    Raises:
        ConfigError: If the endpoint is missing or a value is malformed.
    """
    endpoint = (data.get("endpoint") or "").strip()
    if not endpoint:
        raise ConfigError("Missing required field 'endpoint'")

    style = data.get("addressing_style") or "auto"
    if style not in ADDRESSING_STYLES:
        raise ConfigError(
            f"Invalid addressing_style {style!r}. Expected one of: {', '.join(ADDRESSING_STYLES)}"
        )

    return ClientConfig(
        endpoint=endpoint,
        access_key=(data.get("access_key") or "").strip(),
        secret_key=(data.get("secret_key") or "").strip(),
        session_token=data.get("session_token") or None,
        use_ssl=_parse_bool("use_ssl", data.get("use_ssl", True)),
        port=_parse_port(data.get("port")),
        region=data.get("region") or None,
        vendor=_parse_vendor(data.get("vendor") or AddressingVendor.STANDARD.value),
        addressing_style=style,
        enable_trace=_parse_bool("enable_trace", data.get("enable_trace", False)),
    )


def load_from_json(config_path: str) -> ClientConfig:
    """Load the client configuration from a JSON file.

    Args:
        config_path: Path to the config.json file.

    Returns:
        The parsed ClientConfig.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON,
                    or is missing required fields.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object")

    return build_config(data)


def load_from_env() -> ClientConfig:
    """Load the client configuration from BUCKETWIRE_* environment variables.

    Raises:
        ConfigError: If BUCKETWIRE_ENDPOINT is missing or a value is malformed.
    """
    data = {
        "endpoint": os.environ.get(f"{ENV_PREFIX}ENDPOINT"),
        "access_key": os.environ.get(f"{ENV_PREFIX}ACCESS_KEY"),
        "secret_key": os.environ.get(f"{ENV_PREFIX}SECRET_KEY"),
        "session_token": os.environ.get(f"{ENV_PREFIX}SESSION_TOKEN"),
        "use_ssl": os.environ.get(f"{ENV_PREFIX}USE_SSL", "true"),
        "port": os.environ.get(f"{ENV_PREFIX}PORT"),
        "region": os.environ.get(f"{ENV_PREFIX}REGION"),
        "vendor": os.environ.get(f"{ENV_PREFIX}VENDOR"),
        "addressing_style": os.environ.get(f"{ENV_PREFIX}ADDRESSING_STYLE"),
        "enable_trace": os.environ.get(f"{ENV_PREFIX}TRACE", "false"),
    }
    return build_config(data)


def has_env_config() -> bool:
    """Check if BUCKETWIRE_ENDPOINT is set."""
    return bool(os.environ.get(f"{ENV_PREFIX}ENDPOINT"))


def load_config(config_path: str = "config.json") -> ClientConfig:
    """Load the client configuration with environment priority.

    Priority order:
    1. Environment variables (if BUCKETWIRE_ENDPOINT is set)
    2. config.json file

    Raises:
        ConfigError: If neither source provides a configuration.
    """
    if has_env_config():
        return load_from_env()
    if Path(config_path).exists():
        return load_from_json(config_path)

    raise ConfigError(
        "No configuration found. Set BUCKETWIRE_* environment variables "
        "or create a config.json file."
    )
