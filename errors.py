"""Exceptions raised by the gateway core."""

from models import PowerError


class GatewayError(Exception):
    """Base class for request failures."""


class Unauthorized(GatewayError):
    """Bearer token matches no group."""


class EndpointNotFound(GatewayError):
    """Endpoint name is not part of the caller's group."""

    def __init__(self, endpoint_name: str):
        super().__init__(f"Endpoint '{endpoint_name}' not found")
        self.endpoint_name = endpoint_name


class InvalidActionError(GatewayError):
    """Control action outside the accepted set."""

    def __init__(self, action):
        super().__init__(f"Invalid action: {action!r}")
        self.action = action


class PowerCommandError(GatewayError):
    """ipmitool ran (or tried to) but produced a classified failure."""

    def __init__(self, error: PowerError, detail: str = ""):
        super().__init__(detail or error.message)
        self.error = error
        self.detail = detail


class CommandError(Exception):
    """The ipmitool process could not produce a result."""


class CommandLaunchError(CommandError):
    """The process could not be started at all."""


class CommandTimeoutError(CommandError):
    """The process did not finish within the configured timeout."""
