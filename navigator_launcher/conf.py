"""
Launcher Configuration — constants and validated settings.

Reads launcher settings from environment variables:
    LAUNCHER_VAULT_PATH = <path to the encrypted vault file>
    LAUNCHER_HOST = <bind address, default 0.0.0.0>
    LAUNCHER_PORT = <listen port, default 3000>
    LAUNCHER_HEALTH_CHECK_URL = <URL shown on the "starting" page>
    LAUNCHER_GRACE_SECONDS = <drain window before closing, default 3>
    LAUNCHER_RETRY_SECONDS = <backoff between close attempts, default 5>
    LAUNCHER_MAX_CLOSE_ATTEMPTS = <cap on close attempts, unset = unbounded>

Security Note:
    The vault password is never part of the configuration.
"""
import os
import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("navigator.launcher")

# Drain window granted to in-flight responses before connections are severed.
DRAIN_GRACE_SECONDS = 3
# Fixed backoff between listener close attempts.
CLOSE_RETRY_SECONDS = 5

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000

# Fixed scrypt work factor (N=2**14, r=8, p=1).
SCRYPT_N = 2 ** 14
SCRYPT_R = 8
SCRYPT_P = 1


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    return int(raw)


class LauncherConfig(BaseModel):
    """Validated launcher configuration."""

    vault_path: str
    host: str = Field(default=DEFAULT_HOST)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    health_check_url: str = Field(default="")
    grace_seconds: float = Field(default=DRAIN_GRACE_SECONDS, ge=0)
    retry_seconds: float = Field(default=CLOSE_RETRY_SECONDS, gt=0)
    max_close_attempts: Optional[int] = Field(default=None, ge=1)

    @field_validator("vault_path")
    @classmethod
    def validate_vault_path(cls, v: str) -> str:
        """Reject an empty vault path."""
        if not v or not v.strip():
            raise ValueError("vault_path cannot be empty")
        return v

    @classmethod
    def from_env(cls) -> "LauncherConfig":
        """Create LauncherConfig by loading values from environment.

        Returns:
            Populated LauncherConfig instance.

        Raises:
            RuntimeError: If LAUNCHER_VAULT_PATH is not set.
        """
        vault_path = os.environ.get("LAUNCHER_VAULT_PATH")
        if vault_path is None:
            raise RuntimeError(
                "LAUNCHER_VAULT_PATH environment variable is not set"
            )
        config = cls(
            vault_path=vault_path,
            host=os.environ.get("LAUNCHER_HOST", DEFAULT_HOST),
            port=int(os.environ.get("LAUNCHER_PORT", DEFAULT_PORT)),
            health_check_url=os.environ.get("LAUNCHER_HEALTH_CHECK_URL", ""),
            grace_seconds=float(
                os.environ.get("LAUNCHER_GRACE_SECONDS", DRAIN_GRACE_SECONDS)
            ),
            retry_seconds=float(
                os.environ.get("LAUNCHER_RETRY_SECONDS", CLOSE_RETRY_SECONDS)
            ),
            max_close_attempts=_env_optional_int("LAUNCHER_MAX_CLOSE_ATTEMPTS"),
        )
        logger.debug(
            "Loaded launcher config: vault=%s port=%d", config.vault_path, config.port
        )
        return config
