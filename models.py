"""Data models and dataclasses."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from constants import (
    DEFAULT_LISTEN_HOST,
    IPMI_COMMAND_TIMEOUT,
    IPMI_INTERFACE,
    IPMITOOL_BINARY,
)


@dataclass(frozen=True)
class Endpoint:
    """One management controller reachable over IPMI."""
    name: str
    address: str
    username: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class Group:
    """A tenant: one bearer token and the endpoints it may control."""
    name: str
    token: str = field(repr=False)
    endpoints: Tuple[Endpoint, ...] = ()

    def get_endpoint(self, name: str) -> Optional[Endpoint]:
        for endpoint in self.endpoints:
            if endpoint.name == name:
                return endpoint
        return None


@dataclass(frozen=True)
class Config:
    """Gateway configuration, loaded once at startup."""
    listen_port: int
    groups: Tuple[Group, ...] = ()
    listen_host: str = DEFAULT_LISTEN_HOST
    ipmitool_path: str = IPMITOOL_BINARY
    ipmi_interface: str = IPMI_INTERFACE
    command_timeout: float = IPMI_COMMAND_TIMEOUT
    serialize_endpoint_commands: bool = False


@dataclass(frozen=True)
class CommandResult:
    """Raw outcome of one ipmitool run."""
    exit_succeeded: bool
    stdout: str
    stderr: str
    returncode: Optional[int] = None


class PowerAction(Enum):
    """Keyword passed to `ipmitool power`."""
    ON = "on"
    OFF = "off"
    RESET = "reset"
    CYCLE = "cycle"
    STATUS = "status"


class PowerStatus(Enum):
    """Classified chassis power state."""
    ON = "on"
    OFF = "off"
    RESET = "reset"
    CYCLE = "cycle"


class PowerError(Enum):
    """Classified failure of an ipmitool run; the value is the caller-facing message."""
    COMMAND_NOT_SUPPORTED = "Command not supported in present state"
    INVALID_STATE = "Invalid system state for this command"
    AUTHENTICATION_FAILED = "Authentication failed"
    CONNECTION_FAILED = "Unable to connect to IPMI endpoint"
    UNEXPECTED_OUTPUT = "Unexpected response from IPMI endpoint"
    UNKNOWN_ERROR = "An unknown error occurred"

    @property
    def message(self) -> str:
        return self.value
