"""Configuration file loading and validation."""

import logging
import os
from typing import Any, Dict, List

import yaml

from constants import (
    DEFAULT_CONFIG_EXAMPLE_FILE,
    DEFAULT_LISTEN_HOST,
    IPMI_COMMAND_TIMEOUT,
    IPMI_INTERFACE,
    IPMITOOL_BINARY,
)
from models import Config, Endpoint, Group

logger = logging.getLogger(__name__)


def _require_str(section: Dict[str, Any], key: str, where: str) -> str:
    if key not in section:
        raise ValueError(f"Missing '{where}.{key}' in configuration")
    value = section[key]
    # unquoted numbers such as `password: 12345678` are plain scalars too
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValueError(f"'{where}.{key}' must be a string")
    return str(value)


def _parse_endpoint(raw: Any, where: str) -> Endpoint:
    if not isinstance(raw, dict):
        raise ValueError(f"'{where}' must be a mapping")
    return Endpoint(
        name=_require_str(raw, "name", where),
        address=_require_str(raw, "ipmi_address", where),
        username=_require_str(raw, "username", where),
        secret=_require_str(raw, "password", where),
    )


def _parse_group(raw: Any, where: str) -> Group:
    if not isinstance(raw, dict):
        raise ValueError(f"'{where}' must be a mapping")
    name = _require_str(raw, "name", where)
    token = _require_str(raw, "token", where)
    if not token:
        raise ValueError(f"'{where}.token' must not be empty")

    raw_endpoints = raw.get("endpoints") or []
    if not isinstance(raw_endpoints, list):
        raise ValueError(f"'{where}.endpoints' must be a list")

    endpoints: List[Endpoint] = []
    seen = set()
    for i, raw_ep in enumerate(raw_endpoints):
        ep = _parse_endpoint(raw_ep, f"{where}.endpoints[{i}]")
        if ep.name in seen:
            raise ValueError(f"Duplicate endpoint name '{ep.name}' in group '{name}'")
        seen.add(ep.name)
        endpoints.append(ep)

    return Group(name=name, token=token, endpoints=tuple(endpoints))


def parse_config(raw: Any) -> Config:
    """Build a Config from an already-parsed YAML document."""
    if not raw:
        raise ValueError("Configuration is empty")
    if not isinstance(raw, dict):
        raise ValueError("Configuration must be a mapping")

    if "listen_port" not in raw:
        raise ValueError("Missing 'listen_port' in configuration")
    port = raw["listen_port"]
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ValueError(f"'listen_port' must be an integer between 1 and 65535, got {port!r}")

    if "groups" not in raw:
        raise ValueError("Missing 'groups' section in configuration")
    raw_groups = raw["groups"] or []
    if not isinstance(raw_groups, list):
        raise ValueError("'groups' must be a list")
    groups = tuple(_parse_group(g, f"groups[{i}]") for i, g in enumerate(raw_groups))

    tokens = [g.token for g in groups]
    if len(set(tokens)) != len(tokens):
        # first matching group wins at resolution time
        logger.warning("Several groups share a token; only the first one will be used")

    timeout = raw.get("command_timeout", IPMI_COMMAND_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"'command_timeout' must be a positive number, got {timeout!r}")

    serialize = raw.get("serialize_endpoint_commands", False)
    if not isinstance(serialize, bool):
        raise ValueError("'serialize_endpoint_commands' must be a boolean")

    return Config(
        listen_port=port,
        groups=groups,
        listen_host=str(raw.get("listen_host", DEFAULT_LISTEN_HOST)),
        ipmitool_path=str(raw.get("ipmitool_path", IPMITOOL_BINARY)),
        ipmi_interface=str(raw.get("ipmi_interface", IPMI_INTERFACE)),
        command_timeout=float(timeout),
        serialize_endpoint_commands=serialize,
    )


def load_config(path: str) -> Config:
    """Load and validate configuration file."""
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Configuration file '{path}' not found. "
            f"Please copy '{DEFAULT_CONFIG_EXAMPLE_FILE}' to '{path}' "
            f"and update with your settings."
        )

    try:
        with open(path, 'r') as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in '{path}': {e}")

    config = parse_config(raw)
    endpoint_count = sum(len(g.endpoints) for g in config.groups)
    logger.info(f"Loaded {len(config.groups)} groups with {endpoint_count} endpoints from {path}")
    return config
