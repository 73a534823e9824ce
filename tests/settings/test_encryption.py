"""
🔒 Tests for sensitive setting encryption

Covers the AES-256-CBC envelope, key validation and the naming-convention
classification of sensitive keys.
"""

from django.test import SimpleTestCase, override_settings

from apps.settings.encryption import (
    SENSITIVE_TOKENS,
    SettingsCipher,
    generate_encryption_key,
    is_sensitive_field,
    looks_like_envelope,
)
from apps.settings.exceptions import ConfigurationError, InvalidEnvelopeError

TEST_KEY = "0123456789abcdef" * 4
OTHER_KEY = "fedcba9876543210" * 4


class SettingsCipherTests(SimpleTestCase):
    """🔒 Envelope encryption round-trips"""

    def setUp(self):
        self.cipher = SettingsCipher(bytes.fromhex(TEST_KEY))

    def test_round_trip(self):
        for plaintext in ("smtp-password", "", "p@ss:word", "Ünïcødé 🔑 ключ", "x" * 1000):
            with self.subTest(plaintext=plaintext[:20]):
                self.assertEqual(self.cipher.decrypt(self.cipher.encrypt(plaintext)), plaintext)

    def test_envelope_shape(self):
        envelope = self.cipher.encrypt("secret")
        iv_hex, ciphertext_hex = envelope.split(":")

        self.assertEqual(len(iv_hex), 32)
        self.assertEqual(len(ciphertext_hex) % 32, 0)
        self.assertTrue(looks_like_envelope(envelope))

    def test_encryption_is_not_deterministic(self):
        first = self.cipher.encrypt("same value")
        second = self.cipher.encrypt("same value")

        self.assertNotEqual(first, second)
        self.assertNotEqual(first.split(":")[0], second.split(":")[0])

    def test_invalid_envelopes_are_rejected(self):
        valid = self.cipher.encrypt("secret")
        iv_hex, ciphertext_hex = valid.split(":")
        invalid = [
            "plaintext",
            "",
            ":",
            f"{iv_hex}:",
            f":{ciphertext_hex}",
            f"{iv_hex}:{ciphertext_hex}:extra",
            f"zz{iv_hex[2:]}:{ciphertext_hex}",
            f"{iv_hex[:30]}:{ciphertext_hex}",
            f"{iv_hex}:{ciphertext_hex[:-2]}",
        ]
        for envelope in invalid:
            with self.subTest(envelope=envelope):
                with self.assertRaises(InvalidEnvelopeError):
                    self.cipher.decrypt(envelope)

    def test_non_string_envelope_is_rejected(self):
        with self.assertRaises(InvalidEnvelopeError):
            self.cipher.decrypt(None)

    def test_wrong_key_does_not_decrypt(self):
        envelope = self.cipher.encrypt("secret value")
        other = SettingsCipher(bytes.fromhex(OTHER_KEY))

        try:
            decrypted = other.decrypt(envelope)
        except InvalidEnvelopeError:
            return
        # a wrong key can, rarely, produce valid padding; it never yields the plaintext
        self.assertNotEqual(decrypted, "secret value")

    def test_encryption_status(self):
        status = self.cipher.encryption_status()

        self.assertTrue(status["encryption_working"])
        self.assertEqual(status["algorithm"], "AES-256-CBC")
        self.assertEqual(status["sensitive_tokens"], list(SENSITIVE_TOKENS))


class EncryptionKeyConfigurationTests(SimpleTestCase):
    """🔑 Key loading fails fast"""

    @override_settings(SETTINGS_ENCRYPTION_KEY=TEST_KEY)
    def test_valid_key(self):
        cipher = SettingsCipher.from_settings()
        self.assertEqual(cipher.decrypt(cipher.encrypt("ok")), "ok")

    @override_settings(SETTINGS_ENCRYPTION_KEY="")
    def test_missing_key(self):
        with self.assertRaises(ConfigurationError):
            SettingsCipher.from_settings()

    @override_settings(SETTINGS_ENCRYPTION_KEY="abc123")
    def test_short_key(self):
        with self.assertRaisesMessage(ConfigurationError, "Current length: 6"):
            SettingsCipher.from_settings()

    @override_settings(SETTINGS_ENCRYPTION_KEY="g" * 64)
    def test_non_hex_key(self):
        with self.assertRaises(ConfigurationError):
            SettingsCipher.from_settings()

    def test_raw_key_must_be_32_bytes(self):
        with self.assertRaises(ConfigurationError):
            SettingsCipher(b"short")

    def test_generated_key_is_usable(self):
        key = generate_encryption_key()

        self.assertEqual(len(key), 64)
        with override_settings(SETTINGS_ENCRYPTION_KEY=key):
            SettingsCipher.from_settings()


class SensitiveFieldTests(SimpleTestCase):
    """🔍 Naming-convention classification"""

    def test_sensitive_keys(self):
        for key in (
            "email_smtp_password",
            "payment_stripe_secret_key",
            "resendApiKey",
            "resend_api_key",
            "social.facebook.token",
            "PAYMENT-PRIVATE-KEY",
        ):
            with self.subTest(key=key):
                self.assertTrue(is_sensitive_field(key))

    def test_plain_keys(self):
        for key in ("site_name", "contact_email", "product_card_showBrand", "ecommerce_enabled", "currency"):
            with self.subTest(key=key):
                self.assertFalse(is_sensitive_field(key))

    def test_non_string_keys_are_not_sensitive(self):
        for key in (None, 42, ["password"]):
            with self.subTest(key=key):
                self.assertFalse(is_sensitive_field(key))

    def test_looks_like_envelope(self):
        self.assertTrue(looks_like_envelope(f"{'a' * 32}:{'b' * 32}"))
        self.assertFalse(looks_like_envelope("plain password"))
        self.assertFalse(looks_like_envelope(f"{'a' * 32}:{'b' * 31}"))
        self.assertFalse(looks_like_envelope(f"{'a' * 30}:{'b' * 32}"))
        self.assertFalse(looks_like_envelope(None))
