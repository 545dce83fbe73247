"""Helpers shared by launcher callers: generators and the default message sink."""
import logging
import secrets
import sys
from typing import Any, Callable, Optional, TextIO

logger = logging.getLogger("navigator.launcher")


def generate_token(length: int = 30) -> str:
    """Return ``length`` random bytes as a hex string.

    Suitable as a SecretDefinition generator.
    """
    return secrets.token_hex(length)


def generate_password(length: int = 10) -> str:
    """Return a random first-run vault password (hex of ``length`` bytes)."""
    return secrets.token_hex(length)


def announce_password(
    generator: Callable[[], str] = generate_password,
    stream: Optional[TextIO] = None,
) -> Callable[[], str]:
    """Wrap a password generator so its result is shown to the operator.

    The password is written once to the console (stderr by default),
    never to the logger, since it is stored nowhere else.

    Returns:
        An initial-password provider for ``SecretsStore.ensure_exists``.
    """
    def provider() -> str:
        password = generator()
        out = stream if stream is not None else sys.stderr
        print(f"Launcher initiated with new password: {password}", file=out, flush=True)
        return password
    return provider


def log_message(is_error: bool, *parts: Any) -> None:
    """Default message sink: route operator messages to the logger."""
    text = " ".join(str(part) for part in parts)
    if is_error:
        logger.error(text)
    else:
        logger.info(text)
