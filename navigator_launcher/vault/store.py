"""
SecretsStore — The encrypted secret set on disk.

Provides the vault file operations used by the launcher:
- ``ensure_exists(provider)`` — first run: encrypt an empty set under a new password
- ``load(password)`` — read and decrypt the secret set
- ``save(password, secrets)`` — re-encrypt and atomically replace the file
- ``load_and_reconcile(password, definitions)`` — load, fill missing keys, persist

Security Note:
    Never log passwords or secret values. Only log key names and counts.
    Writes go to a temporary file in the same directory followed by
    ``os.replace``, so readers see either the old or the new vault.
"""
import os
import logging
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Callable, Iterable, Union

from ..data import SecretDefinition, SecretSet, validate_definitions
from ..exceptions import StorageFailure
from .crypto import encrypt, decrypt

logger = logging.getLogger("navigator.launcher")

_FILE_MODE = 0o600


class SecretsStore:
    """Encrypted secret set persisted in a single hex-encoded vault file."""

    def __init__(self, path: Union[str, os.PathLike]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _read(self) -> str:
        try:
            return self._path.read_text(encoding="ascii")
        except (OSError, UnicodeDecodeError) as err:
            raise StorageFailure(
                f"Unable to read vault file {self._path}: {err}"
            ) from err

    def _write_atomic(self, content: str) -> None:
        """Write content to a temp file beside the vault, then rename it over."""
        directory = self._path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="ascii") as fp:
                fp.write(content)
                fp.flush()
                os.fsync(fp.fileno())
            os.chmod(tmp_name, _FILE_MODE)
            os.replace(tmp_name, self._path)
        except OSError as err:
            if tmp_name is not None:
                with suppress(OSError):
                    os.unlink(tmp_name)
            raise StorageFailure(
                f"Unable to write vault file {self._path}: {err}"
            ) from err

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def ensure_exists(self, initial_password_provider: Callable[[], str]) -> bool:
        """Create an empty vault if none exists yet.

        The provider is only called when the file is missing; the password
        it returns is used once and never stored.

        Args:
            initial_password_provider: Returns the first-run password.

        Returns:
            True if the vault was created, False if it already existed.
        """
        if self.exists():
            return False
        password = initial_password_provider()
        self.save(password, SecretSet(new=True))
        logger.info("Created new vault file %s", self._path)
        return True

    def load(self, password: str) -> SecretSet:
        """Read and decrypt the secret set.

        Raises:
            StorageFailure: If the file cannot be read.
            MalformedBlob: If the file content is not a valid blob.
            BadPasswordOrCorruptData: If the password is wrong.
        """
        blob = self._read()
        secrets = SecretSet.decode(decrypt(blob, password))
        logger.debug("Vault loaded: %d secret(s)", len(secrets))
        return secrets

    def save(self, password: str, secrets: SecretSet) -> None:
        """Encrypt the secret set under password and replace the vault file."""
        self._write_atomic(encrypt(secrets.encode(), password))
        secrets.is_changed = False
        logger.debug("Vault saved: %d secret(s)", len(secrets))

    def load_and_reconcile(
        self,
        password: str,
        definitions: Iterable[SecretDefinition],
    ) -> SecretSet:
        """Load the vault and fill in every declared key it lacks.

        Generators only run for absent keys. The vault is rewritten, under
        the same password, only when at least one key was added.

        Args:
            password: Operator password.
            definitions: Secrets the protected service requires.

        Returns:
            The reconciled SecretSet.
        """
        definitions = validate_definitions(definitions)
        secrets = self.load(password)
        added = secrets.reconcile(definitions)
        if added:
            logger.info("Generated missing secret(s): %s", ", ".join(added))
            self.save(password, secrets)
        return secrets
