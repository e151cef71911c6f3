"""
AES-GCM envelope used for wrapped keys, document texts and the identity file.
Associated data (typically the signer's public key or a file header) is
carried in clear in front of the nonce and authenticated by the GCM tag.
"""
import os
from typing import Optional
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.exceptions import InvalidTag

AES_KEY_SIZE_BYTES = 32    # AES-256
GCM_NONCE_SIZE_BYTES = 12
GCM_TAG_SIZE_BYTES = 16
AAD_LEN_FIELD_BYTES = 2    # big-endian length prefix for the AAD


def generate_aes_gcm_key() -> bytes:
    """Generates a new AES-256 key."""
    return AESGCM.generate_key(bit_length=AES_KEY_SIZE_BYTES * 8)


def derive_aes_key(secret: bytes, info: bytes, salt: Optional[bytes] = None) -> bytes:
    """
    Stretches shared secret material into an AES-256 key with HKDF-SHA256.

    Args:
        secret: Input keying material (a shared curve point, a private scalar...).
        info: Context label; different labels give independent keys.
        salt: Optional HKDF salt.

    Returns:
        A 32 byte key for encrypt_with_aad / decrypt_with_aad.
    """
    if not secret:
        raise ValueError("HKDF input secret must not be empty.")
    hkdf = HKDF(algorithm=hashes.SHA256(), length=AES_KEY_SIZE_BYTES, salt=salt, info=info)
    return hkdf.derive(secret)


def encrypt_with_aad(key: bytes, plaintext: bytes, aad: Optional[bytes] = None) -> bytes:
    """
    Encrypts plaintext with AES-GCM.

    Output layout:
    [AAD_LENGTH (2 bytes, big-endian)] [AAD] [NONCE (12 bytes)] [CIPHERTEXT + TAG]

    Raises:
        ValueError: If the key has the wrong size or the AAD is too long.
        TypeError: If plaintext or aad are not bytes.
    """
    if not isinstance(key, bytes) or len(key) != AES_KEY_SIZE_BYTES:
        raise ValueError(f"AES key must be {AES_KEY_SIZE_BYTES} bytes long for AES-256 GCM.")
    if not isinstance(plaintext, bytes):
        raise TypeError("Plaintext must be bytes.")
    if aad is not None and not isinstance(aad, bytes):
        raise TypeError("aad must be bytes or None.")

    aad = aad or b""
    if len(aad) > (2 ** (AAD_LEN_FIELD_BYTES * 8) - 1):
        raise ValueError(f"AAD length ({len(aad)}) does not fit in {AAD_LEN_FIELD_BYTES} bytes.")

    nonce = os.urandom(GCM_NONCE_SIZE_BYTES)
    ciphertext_blob = AESGCM(key).encrypt(nonce, plaintext, aad)
    return len(aad).to_bytes(AAD_LEN_FIELD_BYTES, 'big') + aad + nonce + ciphertext_blob


def read_aad(full_payload: bytes) -> Optional[bytes]:
    """Returns the clear AAD section of a payload, or None if the payload is malformed."""
    if len(full_payload) < AAD_LEN_FIELD_BYTES:
        return None
    aad_len = int.from_bytes(full_payload[:AAD_LEN_FIELD_BYTES], 'big')
    if len(full_payload) < AAD_LEN_FIELD_BYTES + aad_len:
        return None
    return full_payload[AAD_LEN_FIELD_BYTES:AAD_LEN_FIELD_BYTES + aad_len]


def decrypt_with_aad(key: bytes, full_payload: bytes) -> Optional[bytes]:
    """
    Decrypts a payload produced by encrypt_with_aad.

    Returns:
        The plaintext, or None when the key is wrong, the payload was tampered
        with or it cannot be parsed.

    Raises:
        ValueError: If the key has the wrong size.
    """
    if not isinstance(key, bytes) or len(key) != AES_KEY_SIZE_BYTES:
        raise ValueError(f"AES key must be {AES_KEY_SIZE_BYTES} bytes long for AES-256 GCM.")
    if not isinstance(full_payload, bytes):
        raise TypeError("Full payload must be bytes.")

    aad = read_aad(full_payload)
    if aad is None:
        return None
    offset = AAD_LEN_FIELD_BYTES + len(aad)

    if len(full_payload) < offset + GCM_NONCE_SIZE_BYTES + GCM_TAG_SIZE_BYTES:
        return None
    nonce = full_payload[offset:offset + GCM_NONCE_SIZE_BYTES]
    ciphertext_blob = full_payload[offset + GCM_NONCE_SIZE_BYTES:]

    try:
        return AESGCM(key).decrypt(nonce, ciphertext_blob, aad)
    except InvalidTag:
        # Wrong key, tampered ciphertext or mismatched AAD.
        return None
