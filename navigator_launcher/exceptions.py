"""
Launcher Exceptions — typed error kinds for the vault and the launcher.

The codec raises the error kind itself, so callers never inspect messages
to tell a wrong password apart from a damaged vault file.
"""


class LauncherError(Exception):
    """Base class for all launcher errors."""


class VaultError(LauncherError):
    """Base class for vault codec and storage errors."""


class MalformedBlob(VaultError, ValueError):
    """The vault blob is structurally invalid (not hex, truncated, misaligned)."""


class BadPasswordOrCorruptData(VaultError):
    """Decryption failed its integrity check.

    By policy this is reported to the operator as a wrong password.
    """


class StorageFailure(VaultError):
    """Reading or writing the vault file failed."""


class ListenerCloseFailure(LauncherError):
    """The unlock listener could not be closed; the sequencer retries it."""
