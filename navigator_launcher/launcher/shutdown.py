"""
ShutdownSequencer — Drain and close the unlock-prompt listener.

After a grace window, open connections are severed and the listener is
closed. A failed close is retried after a fixed backoff until it succeeds,
or until ``max_attempts`` is reached when a cap is configured.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

from ..conf import CLOSE_RETRY_SECONDS
from ..exceptions import ListenerCloseFailure
from ..utils import log_message

logger = logging.getLogger("navigator.launcher")

MessageSink = Callable[..., Any]
Sleeper = Callable[[float], Awaitable[Any]]


class Listener(Protocol):
    """What the sequencer needs from a listener."""

    async def close_all_connections(self) -> None:
        ...

    async def close(self) -> None:
        """Close the listener, raising ListenerCloseFailure on error."""
        ...


class ShutdownSequencer:
    """Retire a listener without cutting off in-flight responses.

    Args:
        on_message: Operator message sink ``(is_error, *parts)``.
        retry_seconds: Backoff between failed close attempts.
        sleep: Coroutine used for every wait; replace it to fake the clock.
        max_attempts: Give up after this many close attempts. ``None``
            retries forever.
    """

    def __init__(
        self,
        on_message: Optional[MessageSink] = None,
        retry_seconds: float = CLOSE_RETRY_SECONDS,
        sleep: Sleeper = asyncio.sleep,
        max_attempts: Optional[int] = None,
    ):
        self._on_message = on_message or log_message
        self._retry_seconds = retry_seconds
        self._sleep = sleep
        self._max_attempts = max_attempts

    async def drain(self, listener: Listener, grace_seconds: float = 0) -> int:
        """Wait ``grace_seconds``, then close the listener.

        Returns:
            Number of close attempts it took.

        Raises:
            ListenerCloseFailure: Only when ``max_attempts`` is exhausted.
        """
        if grace_seconds > 0:
            self._on_message(
                False, "Stopping Webserver in", grace_seconds, "seconds"
            )
            await self._sleep(grace_seconds)
        attempts = 0
        while True:
            attempts += 1
            self._on_message(False, "Stopping Webserver")
            try:
                await listener.close_all_connections()
                await listener.close()
            except ListenerCloseFailure as err:
                self._on_message(True, "Error stopping Webserver:", err)
                if self._max_attempts is not None and attempts >= self._max_attempts:
                    logger.error(
                        "Giving up closing listener after %d attempt(s)", attempts
                    )
                    raise
                logger.debug(
                    "Close attempt %d failed, retrying in %ss",
                    attempts, self._retry_seconds,
                )
                await self._sleep(self._retry_seconds)
                continue
            self._on_message(False, "Stopped Webserver")
            return attempts
