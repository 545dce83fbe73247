"""
LauncherStateMachine — Lock state and the unlock → handoff sequence.

States: LOCKED → UNLOCKING → UNLOCKED → DRAINING → CLOSED.

Leaving LOCKED is an exclusive compare-and-set, so of two simultaneous
password submissions only one runs the vault reconciliation; the other
gets the "starting" outcome. A failed attempt returns to LOCKED with
nothing persisted. A successful attempt fires the unlock callback, drains
the listener, then fires the completion callback, each exactly once.

Security Note:
    Passwords are handed to the store and dropped; they are never logged.
"""
import asyncio
import inspect
import logging
import threading
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from ..conf import DRAIN_GRACE_SECONDS
from ..data import SecretDefinition, SecretSet, validate_definitions
from ..exceptions import BadPasswordOrCorruptData
from ..utils import log_message
from ..vault.store import SecretsStore
from .shutdown import Listener, ShutdownSequencer

logger = logging.getLogger("navigator.launcher")

SecretsCallback = Callable[[SecretSet], Any]


class LauncherState(str, Enum):
    LOCKED = "locked"
    UNLOCKING = "unlocking"
    UNLOCKED = "unlocked"
    DRAINING = "draining"
    CLOSED = "closed"


class UnlockOutcome(str, Enum):
    """Result of a password submission, as shown to the operator."""
    LOCKED = "locked"  # nothing submitted; prompt again
    WRONG_PASSWORD = "wrong_password"
    STARTING = "starting"
    ERROR = "error"


async def _invoke(callback: Optional[Callable], *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class LauncherStateMachine:
    """Owns the launcher state and drives unlock attempts.

    Args:
        store: Vault the secrets are loaded from.
        definitions: Secrets the protected service requires.
        on_unlock: Called with the SecretSet as soon as the vault is unlocked.
            A coroutine callback runs as its own task, beside the drain.
        on_complete: Called with the SecretSet once the listener is closed.
        on_message: Operator message sink ``(is_error, *parts)``.
        sequencer: Drains the listener; built from on_message if omitted.
        listener: Unlock-prompt listener; may be attached later.
        grace_seconds: Drain window before connections are severed.
    """

    def __init__(
        self,
        store: SecretsStore,
        definitions: Iterable[SecretDefinition],
        on_unlock: Optional[SecretsCallback] = None,
        on_complete: Optional[SecretsCallback] = None,
        on_message: Optional[Callable[..., Any]] = None,
        sequencer: Optional[ShutdownSequencer] = None,
        listener: Optional[Listener] = None,
        grace_seconds: float = DRAIN_GRACE_SECONDS,
    ):
        self._store = store
        self._definitions = validate_definitions(definitions)
        self._on_unlock = on_unlock
        self._on_complete = on_complete
        self._on_message = on_message or log_message
        self._sequencer = sequencer or ShutdownSequencer(on_message=self._on_message)
        self.listener = listener
        self._grace_seconds = grace_seconds
        self._state = LauncherState.LOCKED
        self._guard = threading.Lock()
        self._secrets: Optional[SecretSet] = None
        self._handoff: Optional[asyncio.Task] = None
        self._unlock_task: Optional[asyncio.Task] = None
        self._closed = asyncio.Event()
        self._error: Optional[BaseException] = None

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    @property
    def state(self) -> LauncherState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._state is LauncherState.LOCKED

    @property
    def is_unlocked(self) -> bool:
        """True once the vault was unlocked, for the rest of the process."""
        return self._state in (
            LauncherState.UNLOCKED,
            LauncherState.DRAINING,
            LauncherState.CLOSED,
        )

    @property
    def unlock_task(self) -> Optional[asyncio.Task]:
        """Task running a coroutine unlock callback, if there is one."""
        return self._unlock_task

    @property
    def secrets(self) -> Optional[SecretSet]:
        return self._secrets

    def _transition(self, expected: LauncherState, new: LauncherState) -> bool:
        """Move from expected to new atomically; False if state differs."""
        with self._guard:
            if self._state is not expected:
                return False
            logger.debug("Launcher state %s -> %s", expected.value, new.value)
            self._state = new
            return True

    def _force(self, new: LauncherState) -> None:
        with self._guard:
            logger.debug("Launcher state %s -> %s", self._state.value, new.value)
            self._state = new

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def attempt_unlock(self, password: Optional[str]) -> UnlockOutcome:
        """Try to unlock the vault with password.

        Reconciliation runs in a worker thread, so the key derivation does
        not block the event loop.

        Returns:
            The outcome to present to the operator.
        """
        if not self.is_locked:
            return UnlockOutcome.STARTING
        if not password:
            return UnlockOutcome.LOCKED
        if not self._transition(LauncherState.LOCKED, LauncherState.UNLOCKING):
            return UnlockOutcome.STARTING

        self._on_message(False, "Password received from Frontend")
        try:
            secrets = await asyncio.to_thread(
                self._store.load_and_reconcile, password, self._definitions
            )
        except BadPasswordOrCorruptData:
            self._force(LauncherState.LOCKED)
            self._on_message(False, "Unlock failed. Bad Password.")
            return UnlockOutcome.WRONG_PASSWORD
        except Exception as err:
            self._force(LauncherState.LOCKED)
            logger.exception("Unlock attempt failed")
            self._on_message(True, "An unexpected Error occurred:", err)
            return UnlockOutcome.ERROR

        self._secrets = secrets
        self._force(LauncherState.UNLOCKED)
        self._on_message(False, "Unlock successful")
        self._start_unlock_callback(secrets)
        self._force(LauncherState.DRAINING)
        self._handoff = asyncio.ensure_future(self._drain(secrets))
        return UnlockOutcome.STARTING

    def _start_unlock_callback(self, secrets: SecretSet) -> None:
        """Fire the unlock callback without waiting for it.

        A coroutine callback keeps running as its own task, beside the drain.
        """
        if self._on_unlock is None:
            return
        try:
            result = self._on_unlock(secrets)
        except Exception as err:
            logger.exception("Unlock callback failed")
            self._on_message(True, "An unexpected Error occurred:", err)
            return
        if inspect.isawaitable(result):
            self._unlock_task = asyncio.ensure_future(result)
            self._unlock_task.add_done_callback(self._unlock_callback_done)

    def _unlock_callback_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        err = task.exception()
        if err is not None:
            logger.error("Unlock callback failed: %s", err, exc_info=err)
            self._on_message(True, "An unexpected Error occurred:", err)

    async def _drain(self, secrets: SecretSet) -> None:
        try:
            if self.listener is None:
                raise RuntimeError("No listener attached to the launcher")
            await self._sequencer.drain(self.listener, self._grace_seconds)
            self._force(LauncherState.CLOSED)
            self._on_message(False, "Successfully completed")
            await _invoke(self._on_complete, secrets)
        except Exception as err:
            logger.exception("Launcher handoff failed")
            self._error = err
        finally:
            self._closed.set()

    async def wait_closed(self) -> SecretSet:
        """Wait until the handoff finished and return the secrets.

        Raises:
            Exception: Whatever stopped the handoff (closing the listener
                or the completion callback).
        """
        await self._closed.wait()
        if self._error is not None:
            raise self._error
        return self._secrets
