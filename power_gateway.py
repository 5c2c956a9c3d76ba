"""Power control gateway: resolve, invoke, classify."""

import asyncio
import logging
from typing import Dict, Optional

from constants import CONTROL_ACTIONS
from errors import CommandLaunchError, CommandTimeoutError, InvalidActionError, PowerCommandError
from ipmi_commander import IpmiCommander
from ipmi_helpers import classify_result
from models import CommandResult, Config, Endpoint, PowerAction, PowerError, PowerStatus
from power_auth import resolve

logger = logging.getLogger(__name__)


def parse_control_action(action) -> PowerAction:
    """Validate a control action from a request body (case-sensitive)."""
    if not isinstance(action, str) or action not in CONTROL_ACTIONS:
        raise InvalidActionError(action)
    return PowerAction(action)


class PowerGateway:
    """Handle one power request at a time; holds no per-request state."""

    def __init__(self, config: Config, commander: Optional[IpmiCommander] = None):
        self.config = config
        self.commander = commander or IpmiCommander.from_config(config)
        self._locks: Dict[str, asyncio.Lock] = {}

    async def get_status(self, token: str, endpoint_name: str) -> PowerStatus:
        """Query the chassis power state of an endpoint."""
        endpoint = resolve(self.config, token, endpoint_name)
        status = await self._run(endpoint, PowerAction.STATUS)
        logger.info(f"Returning status for {endpoint_name}: {status.value}")
        return status

    async def control(self, token: str, endpoint_name: str, action) -> PowerStatus:
        """
        Send on/off/reset/cycle to an endpoint. The acknowledgement only means
        the controller accepted the command; callers wanting the resulting
        state must query it afterwards.
        """
        endpoint = resolve(self.config, token, endpoint_name)
        power_action = parse_control_action(action)
        status = await self._run(endpoint, power_action)
        logger.info(f"Power {power_action.value} on {endpoint_name} acknowledged: {status.value}")
        return status

    async def _run(self, endpoint: Endpoint, action: PowerAction) -> PowerStatus:
        result = await self._invoke(endpoint, action)
        return classify_result(result, action)

    async def _invoke(self, endpoint: Endpoint, action: PowerAction) -> CommandResult:
        try:
            if self.config.serialize_endpoint_commands:
                async with self._lock_for(endpoint):
                    return await self.commander.invoke(endpoint, action)
            return await self.commander.invoke(endpoint, action)
        except CommandTimeoutError as e:
            raise PowerCommandError(PowerError.CONNECTION_FAILED, detail=str(e)) from e
        except CommandLaunchError as e:
            raise PowerCommandError(PowerError.UNKNOWN_ERROR, detail=str(e)) from e

    def _lock_for(self, endpoint: Endpoint) -> asyncio.Lock:
        # keyed by address so aliases of one controller share a lock
        lock = self._locks.get(endpoint.address)
        if lock is None:
            lock = self._locks[endpoint.address] = asyncio.Lock()
        return lock
