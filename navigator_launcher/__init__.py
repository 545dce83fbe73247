"""Navigator Launcher.

Keeps a service locked behind a single password until its encrypted
secrets are unlocked.
"""
from .version import __version__
from .data import SecretDefinition, SecretSet
from .exceptions import (
    LauncherError,
    VaultError,
    MalformedBlob,
    BadPasswordOrCorruptData,
    StorageFailure,
    ListenerCloseFailure,
)
from .conf import LauncherConfig
from .utils import (
    generate_token,
    generate_password,
    announce_password,
    log_message,
)
from .vault import SecretsStore
from .launcher import (
    Launcher,
    create_launcher,
    LauncherState,
    LauncherStateMachine,
    ShutdownSequencer,
    UnlockOutcome,
)

__all__ = [
    "__version__",
    "SecretDefinition",
    "SecretSet",
    "LauncherError",
    "VaultError",
    "MalformedBlob",
    "BadPasswordOrCorruptData",
    "StorageFailure",
    "ListenerCloseFailure",
    "LauncherConfig",
    "generate_token",
    "generate_password",
    "announce_password",
    "log_message",
    "SecretsStore",
    "Launcher",
    "create_launcher",
    "LauncherState",
    "LauncherStateMachine",
    "ShutdownSequencer",
    "UnlockOutcome",
]
