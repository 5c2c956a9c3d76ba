"""ipmitool command runner."""

import asyncio
import logging
import os
from typing import Dict, List, Optional

from constants import IPMI_COMMAND_TIMEOUT, IPMI_INTERFACE, IPMI_PASSWORD_ENV, IPMITOOL_BINARY
from errors import CommandLaunchError, CommandTimeoutError
from models import CommandResult, Config, Endpoint, PowerAction

logger = logging.getLogger(__name__)


class IpmiCommander:
    """Run `ipmitool ... power <action>` against one endpoint at a time."""

    def __init__(
        self,
        ipmitool_path: str = IPMITOOL_BINARY,
        interface: str = IPMI_INTERFACE,
        timeout: float = IPMI_COMMAND_TIMEOUT,
    ):
        self.ipmitool_path = ipmitool_path
        self.interface = interface
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Config) -> "IpmiCommander":
        return cls(
            ipmitool_path=config.ipmitool_path,
            interface=config.ipmi_interface,
            timeout=config.command_timeout,
        )

    def build_args(self, endpoint: Endpoint, action: PowerAction) -> List[str]:
        """
        Argument vector for one invocation. The password is not part of it:
        `-E` makes ipmitool read it from the environment.
        """
        return [
            self.ipmitool_path,
            "-I", self.interface,
            "-H", endpoint.address,
            "-U", endpoint.username,
            "-E",
            "power", action.value,
        ]

    def build_env(self, endpoint: Endpoint) -> Dict[str, str]:
        env = dict(os.environ)
        env[IPMI_PASSWORD_ENV] = endpoint.secret
        return env

    async def invoke(self, endpoint: Endpoint, action: PowerAction, timeout: Optional[float] = None) -> CommandResult:
        """Run ipmitool and return its raw exit status and output."""
        timeout = self.timeout if timeout is None else timeout
        args = self.build_args(endpoint, action)
        logger.debug(f"Running ipmitool power {action.value} against {endpoint.name} ({endpoint.address})")

        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.build_env(endpoint),
            )
        except OSError as e:
            logger.error(f"Failed to launch {self.ipmitool_path}: {e}")
            raise CommandLaunchError(f"Failed to launch {self.ipmitool_path}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            await self._kill(proc)
            logger.error(f"ipmitool power {action.value} against {endpoint.name} timed out after {timeout}s")
            raise CommandTimeoutError(f"ipmitool timed out after {timeout}s")
        except asyncio.CancelledError:
            # caller went away
            await self._kill(proc)
            raise

        return CommandResult(
            exit_succeeded=proc.returncode == 0,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            returncode=proc.returncode,
        )

    async def _kill(self, proc: asyncio.subprocess.Process):
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        await proc.wait()
