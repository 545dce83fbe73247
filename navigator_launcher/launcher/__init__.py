"""Launcher — lock state, unlock prompt and the handoff to the protected service."""

from .app import Launcher, create_launcher
from .listener import AiohttpListener
from .shutdown import Listener, ShutdownSequencer
from .state import LauncherState, LauncherStateMachine, UnlockOutcome

__all__ = [
    "Launcher",
    "create_launcher",
    "AiohttpListener",
    "Listener",
    "ShutdownSequencer",
    "LauncherState",
    "LauncherStateMachine",
    "UnlockOutcome",
]
