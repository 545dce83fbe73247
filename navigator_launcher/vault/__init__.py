"""Vault — Password-encrypted secret set stored in a single file.

Security Note (Threat Model):
    The unlocked secret set lives in process memory until the process
    exits. The password itself is never persisted; losing it means
    losing the vault.
"""

from .crypto import VaultBlob, derive_key, encrypt, decrypt
from .store import SecretsStore

__all__ = [
    "VaultBlob",
    "derive_key",
    "encrypt",
    "decrypt",
    "SecretsStore",
]
