"""
Launcher — Wires the vault, the state machine and the unlock listener.

Usage:
    launcher = await create_launcher(
        [SecretDefinition(key="DATABASE_KEY", generator=generate_token)],
        "database-secrets.txt",
        3000,
        announce_password(generate_password),
        on_complete=run_service,
    )
    secrets = await launcher.wait_closed()
"""
import asyncio
import logging
import os
from typing import Any, Callable, Iterable, Optional, Union

from ..conf import (
    CLOSE_RETRY_SECONDS,
    DEFAULT_HOST,
    DRAIN_GRACE_SECONDS,
    LauncherConfig,
)
from ..data import SecretDefinition, SecretSet
from ..utils import log_message
from ..vault.store import SecretsStore
from .handlers import create_app
from .listener import AiohttpListener
from .shutdown import ShutdownSequencer
from .state import LauncherState, LauncherStateMachine, SecretsCallback

logger = logging.getLogger("navigator.launcher")


class Launcher:
    """Keeps a service locked until its vault is unlocked over HTTP.

    Args:
        definitions: Secrets the protected service requires.
        vault_path: Encrypted vault file.
        port: Port of the unlock prompt.
        generate_password: Mints the first-run password when no vault exists.
            Wrap it with ``announce_password`` so the operator gets to see it.
        on_complete: Called with the secrets after the prompt is closed.
        on_unlock: Called with the secrets while the prompt is still draining.
        on_message: Operator message sink ``(is_error, *parts)``.
        health_check_url: Shown on the "starting" page.
        host: Bind address of the unlock prompt.
        grace_seconds: Drain window before connections are severed.
        retry_seconds: Backoff between failed close attempts.
        max_close_attempts: Cap on close attempts, ``None`` for no cap.
    """

    def __init__(
        self,
        definitions: Iterable[SecretDefinition],
        vault_path: Union[str, os.PathLike],
        port: int,
        generate_password: Callable[[], str],
        on_complete: Optional[SecretsCallback] = None,
        on_unlock: Optional[SecretsCallback] = None,
        on_message: Optional[Callable[..., Any]] = None,
        health_check_url: Any = "",
        host: str = DEFAULT_HOST,
        grace_seconds: float = DRAIN_GRACE_SECONDS,
        retry_seconds: float = CLOSE_RETRY_SECONDS,
        max_close_attempts: Optional[int] = None,
    ):
        self._on_message = on_message or log_message
        self._generate_password = generate_password
        self.store = SecretsStore(vault_path)
        sequencer = ShutdownSequencer(
            on_message=self._on_message,
            retry_seconds=retry_seconds,
            max_attempts=max_close_attempts,
        )
        self.machine = LauncherStateMachine(
            self.store,
            definitions,
            on_unlock=on_unlock,
            on_complete=on_complete,
            on_message=self._on_message,
            sequencer=sequencer,
            grace_seconds=grace_seconds,
        )
        self.app = create_app(self.machine, str(health_check_url or ""))
        self.listener = AiohttpListener(self.app, host, port)
        self.machine.listener = self.listener

    @classmethod
    def from_config(
        cls,
        config: LauncherConfig,
        definitions: Iterable[SecretDefinition],
        generate_password: Callable[[], str],
        **kwargs,
    ) -> "Launcher":
        return cls(
            definitions,
            config.vault_path,
            config.port,
            generate_password,
            health_check_url=config.health_check_url,
            host=config.host,
            grace_seconds=config.grace_seconds,
            retry_seconds=config.retry_seconds,
            max_close_attempts=config.max_close_attempts,
            **kwargs,
        )

    @property
    def state(self) -> LauncherState:
        return self.machine.state

    async def start(self) -> None:
        """Create the vault on first run, then open the unlock prompt."""
        created = await asyncio.to_thread(
            self.store.ensure_exists, self._generate_password
        )
        if created:
            logger.info("Vault initialized at %s", self.store.path)
        await self.listener.start()
        self._on_message(False, "Started Webserver")

    async def wait_closed(self) -> SecretSet:
        """Return the secrets once the handoff has completed."""
        return await self.machine.wait_closed()


async def create_launcher(
    definitions: Iterable[SecretDefinition],
    vault_path: Union[str, os.PathLike],
    port: int,
    generate_password: Callable[[], str],
    on_complete: Optional[SecretsCallback] = None,
    on_unlock: Optional[SecretsCallback] = None,
    on_message: Optional[Callable[..., Any]] = None,
    health_check_url: Any = "",
    **kwargs,
) -> Launcher:
    """Build a Launcher and start its unlock prompt."""
    launcher = Launcher(
        definitions,
        vault_path,
        port,
        generate_password,
        on_complete=on_complete,
        on_unlock=on_unlock,
        on_message=on_message,
        health_check_url=health_check_url,
        **kwargs,
    )
    await launcher.start()
    return launcher
