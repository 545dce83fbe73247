"""
Vault Crypto Core — Password key derivation, encryption/decryption and blob format.

Every encryption draws a fresh salt and IV:
    scrypt(password, salt) → 256-bit key → AES-256-CBC + PKCS7 → [iv|salt|ciphertext]

The blob is stored hex-encoded and is self-describing: the password is
the only external secret needed to read it back.

Security Note:
    Never log plaintext, passwords or derived keys.
    CBC with PKCS7 has no authentication tag; a failed padding check is
    the only integrity signal and is reported as BadPasswordOrCorruptData.
"""
import os
import logging
from dataclasses import dataclass
from typing import Union

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..conf import SCRYPT_N, SCRYPT_R, SCRYPT_P
from ..exceptions import MalformedBlob, BadPasswordOrCorruptData

logger = logging.getLogger("navigator.launcher")

IV_SIZE = 16
SALT_SIZE = 16
KEY_LENGTH = 32  # AES-256
BLOCK_SIZE = 16  # AES block, bytes
HEADER_SIZE = IV_SIZE + SALT_SIZE


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(password: str, salt: bytes) -> bytes:
    """Derive a 32-byte encryption key from a password using scrypt.

    The work factor is fixed; it is not a caller-tunable parameter.

    Args:
        password: Operator password.
        salt: 16 random bytes stored alongside the ciphertext.

    Returns:
        32-byte derived key.
    """
    kdf = Scrypt(
        salt=salt,
        length=KEY_LENGTH,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
    )
    return kdf.derive(password.encode("utf-8"))


# ---------------------------------------------------------------------------
# Blob format
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VaultBlob:
    """Parsed vault blob: ``[iv 16B][salt 16B][ciphertext]``."""

    iv: bytes
    salt: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        return self.iv + self.salt + self.ciphertext

    def hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_hex(cls, blob: Union[str, bytes]) -> "VaultBlob":
        """Parse a hex-encoded blob.

        Raises:
            MalformedBlob: If the blob is not hex, is shorter than the header
                plus one cipher block, or its ciphertext is not block aligned.
        """
        try:
            if isinstance(blob, bytes):
                blob = blob.decode("ascii")
            raw = bytes.fromhex(blob.strip())
        except (UnicodeDecodeError, ValueError) as err:
            raise MalformedBlob("Vault blob is not valid hex") from err
        _min = HEADER_SIZE + BLOCK_SIZE
        if len(raw) < _min:
            raise MalformedBlob(
                f"Vault blob too short: {len(raw)} bytes (minimum {_min})"
            )
        ciphertext = raw[HEADER_SIZE:]
        if len(ciphertext) % BLOCK_SIZE:
            raise MalformedBlob(
                f"Vault ciphertext is not a multiple of {BLOCK_SIZE} bytes"
            )
        return cls(
            iv=raw[:IV_SIZE],
            salt=raw[IV_SIZE:HEADER_SIZE],
            ciphertext=ciphertext,
        )


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------

def encrypt(plaintext: bytes, password: str) -> str:
    """Encrypt plaintext under a password.

    Format: hex([iv 16B][salt 16B][AES-256-CBC(PKCS7(plaintext))])

    Args:
        plaintext: Data to encrypt.
        password: Password the key is derived from.

    Returns:
        Hex-encoded vault blob. Never the same twice for equal inputs.
    """
    salt = os.urandom(SALT_SIZE)
    iv = os.urandom(IV_SIZE)
    key = derive_key(password, salt)
    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ct = encryptor.update(padded) + encryptor.finalize()
    return VaultBlob(iv=iv, salt=salt, ciphertext=ct).hex()


def decrypt(blob: Union[str, bytes], password: str) -> bytes:
    """Decrypt a hex-encoded vault blob.

    The key is re-derived from the password and the salt stored in the blob.

    Args:
        blob: Hex-encoded ``[iv|salt|ciphertext]``.
        password: Password supplied by the operator.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        MalformedBlob: If the blob is structurally invalid.
        BadPasswordOrCorruptData: If the padding check fails.
    """
    parsed = VaultBlob.from_hex(blob)
    key = derive_key(password, parsed.salt)
    decryptor = Cipher(algorithms.AES(key), modes.CBC(parsed.iv)).decryptor()
    padded = decryptor.update(parsed.ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as err:
        raise BadPasswordOrCorruptData(
            "Bad password or corrupt vault data"
        ) from err
