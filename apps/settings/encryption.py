"""
🔒 Value-level encryption for sensitive storefront settings

Encrypts individual string values (SMTP passwords, payment secrets, API keys)
before they are written to the settings table:
- AES-256-CBC with PKCS7 padding
- Fresh random 16-byte IV per call, so ciphertext never repeats
- Persisted envelope format: ``<ivHex>:<cipherTextHex>``

The key is 64 hex characters (32 bytes) from SETTINGS_ENCRYPTION_KEY and is
read once when the cipher is built at startup.
"""

from __future__ import annotations

import logging
import re
import secrets
from typing import Any

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from django.conf import settings

from .exceptions import ConfigurationError, InvalidEnvelopeError

logger = logging.getLogger(__name__)

# Encryption constants
KEY_SIZE = 32  # 256 bits
KEY_HEX_LENGTH = KEY_SIZE * 2
IV_SIZE = 16  # AES block size
ENVELOPE_SEPARATOR = ":"

# Key fragments that mark a setting as sensitive, matched after separators are stripped
SENSITIVE_TOKENS: tuple[str, ...] = ("password", "secret", "token", "apikey", "private")

_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_KEY_SEPARATORS_RE = re.compile(r"[_\-.\s]")


def _is_hex(value: str) -> bool:
    return bool(_HEX_RE.fullmatch(value))


def _load_key(raw_key: str | None) -> bytes:
    if not raw_key:
        raise ConfigurationError(
            "SETTINGS_ENCRYPTION_KEY is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
        )
    if len(raw_key) != KEY_HEX_LENGTH or not _is_hex(raw_key):
        raise ConfigurationError(
            f"SETTINGS_ENCRYPTION_KEY must be {KEY_HEX_LENGTH} hex characters ({KEY_SIZE} bytes). "
            f"Current length: {len(raw_key)}"
        )
    return bytes.fromhex(raw_key)


class SettingsCipher:
    """
    🔒 AES-256-CBC cipher for sensitive setting values

    Usage:
        cipher = SettingsCipher.from_settings()
        envelope = cipher.encrypt("smtp-password")
        plaintext = cipher.decrypt(envelope)
    """

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_SIZE:
            raise ConfigurationError(f"Settings encryption key must be {KEY_SIZE} bytes, got {len(key)}")
        self._key = key

    @classmethod
    def from_settings(cls) -> SettingsCipher:
        """Build the cipher from SETTINGS_ENCRYPTION_KEY; ConfigurationError if absent or malformed."""
        return cls(_load_key(getattr(settings, "SETTINGS_ENCRYPTION_KEY", None)))

    def encrypt(self, plaintext: str) -> str:
        """
        🔒 Encrypt a string value

        Returns:
            Envelope string ``ivHex:cipherTextHex``
        """
        iv = secrets.token_bytes(IV_SIZE)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        logger.debug("🔒 [Settings Encryption] Value encrypted successfully")
        return f"{iv.hex()}{ENVELOPE_SEPARATOR}{ciphertext.hex()}"

    def decrypt(self, envelope: str) -> str:
        """
        🔓 Decrypt an envelope produced by encrypt()

        Raises:
            InvalidEnvelopeError: If the envelope is malformed or does not decrypt
        """
        if not isinstance(envelope, str):
            raise InvalidEnvelopeError(f"Envelope must be a string, got {type(envelope).__name__}")

        parts = envelope.split(ENVELOPE_SEPARATOR)
        if len(parts) != 2 or not all(parts):  # noqa: PLR2004
            raise InvalidEnvelopeError('Invalid encrypted value format. Expected "IV:EncryptedData"')

        iv_hex, ciphertext_hex = parts
        if not (_is_hex(iv_hex) and _is_hex(ciphertext_hex)):
            raise InvalidEnvelopeError("Envelope segments must be hex encoded")
        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
        except ValueError as e:
            raise InvalidEnvelopeError(f"Envelope segments must be hex encoded: {e}") from e

        if len(iv) != IV_SIZE:
            raise InvalidEnvelopeError(f"IV must be {IV_SIZE} bytes, got {len(iv)}")
        if len(ciphertext) % IV_SIZE:
            raise InvalidEnvelopeError("Ciphertext length is not a multiple of the block size")

        try:
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except ValueError as e:
            # bad padding (wrong key / tampered) and invalid UTF-8 both land here
            raise InvalidEnvelopeError(f"Decryption failed: {e}") from e

    def encryption_status(self) -> dict[str, Any]:
        """
        📊 Self-test for monitoring and the settings health endpoint
        """
        test_value = "test_encryption"
        try:
            envelope = self.encrypt(test_value)
            working = self.decrypt(envelope) == test_value
        except InvalidEnvelopeError as e:
            logger.error("🔥 [Settings Encryption] Status check failed: %s", e)
            return {"encryption_enabled": True, "encryption_working": False, "error": str(e)}

        return {
            "encryption_enabled": True,
            "encryption_working": working,
            "algorithm": "AES-256-CBC",
            "key_configured": True,
            "sensitive_tokens": list(SENSITIVE_TOKENS),
        }


def is_sensitive_field(key: Any) -> bool:
    """
    🔍 Classify a setting key as sensitive by naming convention

    Case-insensitive and separator-insensitive, so ``email_smtp_password``,
    ``payment.stripe.secret_key`` and ``resendApiKey`` are all sensitive.
    Never raises: anything that is not a string is not sensitive.
    """
    if not isinstance(key, str):
        return False
    normalized = _KEY_SEPARATORS_RE.sub("", key).lower()
    return any(token in normalized for token in SENSITIVE_TOKENS)


def get_sensitive_tokens() -> tuple[str, ...]:
    return SENSITIVE_TOKENS


def looks_like_envelope(value: Any) -> bool:
    """Shape check only: two hex segments with a 16-byte IV. Does not decrypt."""
    if not isinstance(value, str):
        return False
    parts = value.split(ENVELOPE_SEPARATOR)
    if len(parts) != 2:  # noqa: PLR2004
        return False
    iv_hex, ciphertext_hex = parts
    return (
        len(iv_hex) == IV_SIZE * 2
        and _is_hex(iv_hex)
        and bool(ciphertext_hex)
        and _is_hex(ciphertext_hex)
        and len(ciphertext_hex) % (IV_SIZE * 2) == 0
    )


def generate_encryption_key() -> str:
    """🔑 Generate a new 64-hex-character key for SETTINGS_ENCRYPTION_KEY"""
    return secrets.token_hex(KEY_SIZE)
