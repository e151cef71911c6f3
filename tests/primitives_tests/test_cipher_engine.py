import unittest
from pre_primitives.cipher_engine import (
    generate_aes_gcm_key,
    derive_aes_key,
    encrypt_with_aad,
    decrypt_with_aad,
    read_aad,
    AES_KEY_SIZE_BYTES,
    AAD_LEN_FIELD_BYTES,
    GCM_NONCE_SIZE_BYTES,
    GCM_TAG_SIZE_BYTES,
)


class TestCipherEngine(unittest.TestCase):
    def setUp(self):
        self.key = generate_aes_gcm_key()
        self.plaintext = b"document private key material"
        self.aad = b"signer-public-key"

    def test_key_generation(self):
        key = generate_aes_gcm_key()
        self.assertIsInstance(key, bytes)
        self.assertEqual(len(key), AES_KEY_SIZE_BYTES)

    def test_derive_aes_key_is_deterministic_per_label(self):
        k1 = derive_aes_key(b"shared point", b"label-a")
        k2 = derive_aes_key(b"shared point", b"label-a")
        k3 = derive_aes_key(b"shared point", b"label-b")
        self.assertEqual(len(k1), AES_KEY_SIZE_BYTES)
        self.assertEqual(k1, k2)
        self.assertNotEqual(k1, k3)

    def test_derive_aes_key_rejects_empty_secret(self):
        with self.assertRaises(ValueError):
            derive_aes_key(b"", b"label")

    def test_encrypt_decrypt_with_aad(self):
        encrypted = encrypt_with_aad(self.key, self.plaintext, self.aad)
        self.assertEqual(decrypt_with_aad(self.key, encrypted), self.plaintext)
        self.assertEqual(read_aad(encrypted), self.aad)

    def test_encrypt_decrypt_without_aad(self):
        encrypted = encrypt_with_aad(self.key, self.plaintext)
        self.assertEqual(decrypt_with_aad(self.key, encrypted), self.plaintext)
        self.assertEqual(int.from_bytes(encrypted[:AAD_LEN_FIELD_BYTES], 'big'), 0)
        self.assertGreaterEqual(len(encrypted),
                                AAD_LEN_FIELD_BYTES + GCM_NONCE_SIZE_BYTES + GCM_TAG_SIZE_BYTES)

    def test_decryption_failure_wrong_key(self):
        encrypted = encrypt_with_aad(self.key, self.plaintext, self.aad)
        self.assertIsNone(decrypt_with_aad(generate_aes_gcm_key(), encrypted))

    def test_decryption_failure_tampered_aad(self):
        encrypted = bytearray(encrypt_with_aad(self.key, self.plaintext, self.aad))
        encrypted[AAD_LEN_FIELD_BYTES] ^= 0x01
        self.assertIsNone(decrypt_with_aad(self.key, bytes(encrypted)))

    def test_decryption_failure_tampered_ciphertext(self):
        encrypted = bytearray(encrypt_with_aad(self.key, self.plaintext, self.aad))
        encrypted[-5] ^= 0x01
        self.assertIsNone(decrypt_with_aad(self.key, bytes(encrypted)))

    def test_malformed_payloads_return_none(self):
        self.assertIsNone(decrypt_with_aad(self.key, b""))
        self.assertIsNone(decrypt_with_aad(self.key, b"\x00\x10short"))
        self.assertIsNone(decrypt_with_aad(self.key, b"\x00\x00" + b"n" * GCM_NONCE_SIZE_BYTES))

    def test_invalid_key_size(self):
        with self.assertRaisesRegex(ValueError, "AES key must be"):
            encrypt_with_aad(b"short", self.plaintext)
        with self.assertRaisesRegex(ValueError, "AES key must be"):
            decrypt_with_aad(b"short", b"payload")

    def test_type_checks(self):
        with self.assertRaises(TypeError):
            encrypt_with_aad(self.key, "not bytes")
        with self.assertRaises(TypeError):
            encrypt_with_aad(self.key, self.plaintext, "not bytes")


if __name__ == '__main__':
    unittest.main()
