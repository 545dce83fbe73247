"""
Tests for the vault codec.

Tests cover:
- Round trip and non-determinism of encryption
- Blob layout (iv, salt, ciphertext, hex at rest)
- Wrong password classification
- Malformed blob classification
"""
import pytest

from navigator_launcher.vault.crypto import (
    BLOCK_SIZE,
    HEADER_SIZE,
    IV_SIZE,
    SALT_SIZE,
    VaultBlob,
    decrypt,
    derive_key,
    encrypt,
)
from navigator_launcher.exceptions import BadPasswordOrCorruptData, MalformedBlob


PASSWORD = "correct horse battery staple"


class TestRoundTrip:
    """Tests for encrypt/decrypt."""

    @pytest.mark.parametrize('plaintext', [
        b'',
        b'{}',
        b'{"API_KEY":"abc"}',
        bytes(range(256)),
    ])
    def test_round_trip(self, plaintext):
        """Test decrypt(encrypt(P, W), W) == P."""
        assert decrypt(encrypt(plaintext, PASSWORD), PASSWORD) == plaintext

    def test_unicode_password(self):
        """Test non-ASCII passwords work."""
        blob = encrypt(b'secret', 'pässwörd-🔑')
        assert decrypt(blob, 'pässwörd-🔑') == b'secret'

    def test_non_deterministic(self):
        """Test equal inputs produce different blobs."""
        assert encrypt(b'{}', PASSWORD) != encrypt(b'{}', PASSWORD)

    def test_fresh_salt_and_iv(self):
        """Test salt and iv are never reused across writes."""
        first = VaultBlob.from_hex(encrypt(b'{}', PASSWORD))
        second = VaultBlob.from_hex(encrypt(b'{}', PASSWORD))
        assert first.iv != second.iv
        assert first.salt != second.salt


class TestBlobLayout:
    """Tests for the stored blob format."""

    def test_blob_is_hex(self):
        """Test the blob is a lowercase hex string."""
        blob = encrypt(b'{}', PASSWORD)
        assert isinstance(blob, str)
        assert bytes.fromhex(blob).hex() == blob

    def test_blob_length(self):
        """Test header plus one padded block for a short payload."""
        raw = bytes.fromhex(encrypt(b'{}', PASSWORD))
        assert len(raw) == IV_SIZE + SALT_SIZE + BLOCK_SIZE

    def test_full_block_gets_padding_block(self):
        """Test PKCS7 adds a whole block to block-aligned plaintext."""
        raw = bytes.fromhex(encrypt(b'x' * BLOCK_SIZE, PASSWORD))
        assert len(raw) == HEADER_SIZE + 2 * BLOCK_SIZE

    def test_layout_iv_then_salt(self):
        """Test the key is derived from the salt stored after the iv."""
        blob = VaultBlob.from_hex(encrypt(b'{}', PASSWORD))
        assert len(blob.iv) == IV_SIZE
        assert len(blob.salt) == SALT_SIZE
        # rebuilding the blob from its parts decrypts the same
        assert decrypt(blob.hex(), PASSWORD) == b'{}'

    def test_derive_key_length_and_determinism(self):
        """Test scrypt derivation is 32 bytes and repeatable per salt."""
        salt = b'\x00' * SALT_SIZE
        key = derive_key(PASSWORD, salt)
        assert len(key) == 32
        assert derive_key(PASSWORD, salt) == key
        assert derive_key(PASSWORD, b'\x01' * SALT_SIZE) != key

    def test_surrounding_whitespace_ignored(self):
        """Test a trailing newline in the file does not break decoding."""
        blob = encrypt(b'{}', PASSWORD) + "\n"
        assert decrypt(blob, PASSWORD) == b'{}'


class TestFailures:
    """Tests for error classification."""

    def test_wrong_password(self):
        """Test a wrong password fails with BadPasswordOrCorruptData.

        The padding check lets a wrong key through about once in 256
        tries, so a fixed set of passwords is checked until one is caught.
        """
        blob = encrypt(b'{"API_KEY":"abc"}', PASSWORD)
        failures = 0
        for attempt in range(8):
            try:
                result = decrypt(blob, f"wrong-{attempt}")
            except BadPasswordOrCorruptData:
                failures += 1
            else:
                assert result != b'{"API_KEY":"abc"}'
        assert failures >= 1

    def test_tampered_ciphertext(self):
        """Test flipping the last block corrupts the padding."""
        raw = bytearray(bytes.fromhex(encrypt(b'{}', PASSWORD)))
        # altering the previous block (the iv here) shifts the padding byte
        raw[IV_SIZE - 1] ^= 0xFF
        with pytest.raises(BadPasswordOrCorruptData):
            decrypt(bytes(raw).hex(), PASSWORD)

    @pytest.mark.parametrize('blob', [
        'not-hex-or-too-short',
        'abc',
        '00' * (HEADER_SIZE + BLOCK_SIZE - 1),
        '00' * (HEADER_SIZE + BLOCK_SIZE + 1),
        '',
        b'\xff\xfe',
    ])
    def test_malformed_blob(self, blob):
        """Test structural errors fail with MalformedBlob."""
        with pytest.raises(MalformedBlob):
            decrypt(blob, PASSWORD)

    def test_malformed_is_not_bad_password(self):
        """Test the two error kinds stay distinct."""
        assert not issubclass(MalformedBlob, BadPasswordOrCorruptData)
        assert not issubclass(BadPasswordOrCorruptData, MalformedBlob)
