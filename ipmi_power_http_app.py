"""Main IPMI power HTTP gateway application."""

import asyncio
import logging
from typing import Optional

from aiohttp import web

from ipmi_config import load_config
from models import Config
from power_api import create_app
from power_gateway import PowerGateway

logger = logging.getLogger(__name__)


class IpmiPowerHttp:
    """Serve the power gateway over HTTP until stopped."""

    def __init__(self, config: Config):
        self.config = config
        self.gateway = PowerGateway(config)
        self.app = create_app(self.gateway)
        self.runner: Optional[web.AppRunner] = None
        self.running = False

    @classmethod
    def from_config_file(cls, path: str) -> "IpmiPowerHttp":
        return cls(load_config(path))

    async def start(self):
        """Start listening and block until cancelled."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.config.listen_host, self.config.listen_port)
        await site.start()
        self.running = True
        logger.info(f"Server started on {self.config.listen_host}:{self.config.listen_port}")

        # Wait until cancelled
        await asyncio.Event().wait()

    async def stop(self):
        """Stop the server."""
        if self.runner is None:
            return
        runner, self.runner = self.runner, None
        self.running = False
        await runner.cleanup()
        logger.info("Server stopped")
