"""
Unlock-prompt listener backed by an aiohttp ``AppRunner``/``TCPSite`` pair.
"""
import logging
from typing import Optional

from aiohttp import web

from ..exceptions import ListenerCloseFailure

logger = logging.getLogger("navigator.launcher")

# Time granted to a connection's running handler when it is force-closed.
FORCE_CLOSE_TIMEOUT = 0.5


class AiohttpListener:
    """Serve an aiohttp application until the sequencer closes it."""

    def __init__(self, app: web.Application, host: str, port: int):
        self._app = app
        self._host = host
        self._port = port
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()
        logger.debug("Listening on %s:%s", self._host, self._port)

    async def close_all_connections(self) -> None:
        """Stop accepting and sever open connections."""
        if self._runner is None:
            return
        try:
            if self._site is not None:
                await self._site.stop()
                self._site = None
            server = self._runner.server
            if server is not None:
                await server.shutdown(FORCE_CLOSE_TIMEOUT)
        except (OSError, RuntimeError) as err:
            raise ListenerCloseFailure(str(err)) from err

    async def close(self) -> None:
        if self._runner is None:
            return
        try:
            await self._runner.cleanup()
        except (OSError, RuntimeError) as err:
            raise ListenerCloseFailure(str(err)) from err
        self._runner = None
