"""
Software implementation of the PRE primitives.

Encryption keys live on the ed25519 prime-order group (libsodium through PyNaCl).
A ciphertext is an ElGamal-style capsule plus an AES-GCM box:

    pre1.<P0~P1~...~Pn>.<box>.<signer_pub>.<signature>

P0 starts as r*G for a fresh r; the box key is HKDF(r*A) for recipient A.
A transform key from a to B is (k = a / d, X = x*G) with d = H(x*B). The proxy
multiplies the last capsule point by k and appends X, so the holder of b
recovers d = H(b*X) and walks the hop list back to r*A. The proxy never holds
d, so k alone reveals nothing about a.

Signatures are Ed25519 (cryptography). The signer signs the AES-GCM box, which
re-encryption never touches, and the box authenticates the signer's public key
as associated data.
"""
import base64
import hashlib
import logging
import os
from typing import List, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from nacl import bindings as sodium
from nacl.exceptions import CryptoError

from pre_primitives.cipher_engine import derive_aes_key, encrypt_with_aad, decrypt_with_aad, read_aad
from pre_primitives.primitives_interface import (
    DecryptionError,
    KeyPair,
    PrimitivesError,
    PrimitivesInterface,
)

logger = logging.getLogger(__name__)

CIPHERTEXT_PREFIX = "pre1"
TRANSFORM_KEY_PREFIX = "prk1"
FIELD_SEPARATOR = "."
POINT_SEPARATOR = "~"

POINT_SIZE_BYTES = sodium.crypto_core_ed25519_BYTES
SCALAR_SIZE_BYTES = sodium.crypto_core_ed25519_SCALARBYTES
ED25519_KEY_SIZE_BYTES = 32

WRAP_KDF_INFO = b"pre_primitives/wrap-key"
HOP_HASH_LABEL = b"pre_primitives/hop-scalar"


# --- Encoding helpers ---
def b64_encode(raw: bytes) -> str:
    """URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(raw).decode('ascii').rstrip("=")


def b64_decode(text: str) -> bytes:
    if not isinstance(text, str) or not text:
        raise PrimitivesError("Expected a non-empty base64 string.")
    try:
        return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (ValueError, TypeError) as e:
        raise PrimitivesError(f"Invalid base64 value: {e}") from e


def _decode_point(text: str) -> bytes:
    point = b64_decode(text)
    if len(point) != POINT_SIZE_BYTES or not sodium.crypto_core_ed25519_is_valid_point(point):
        raise PrimitivesError("Invalid public crypt key or capsule point.")
    return point


def _decode_scalar(text: str) -> bytes:
    scalar = b64_decode(text)
    if len(scalar) != SCALAR_SIZE_BYTES:
        raise PrimitivesError("Invalid private crypt key.")
    return scalar


def _decode_ed25519(text: str) -> bytes:
    raw = b64_decode(text)
    if len(raw) != ED25519_KEY_SIZE_BYTES:
        raise PrimitivesError("Invalid Ed25519 key.")
    return raw


# --- Group arithmetic ---
def _random_scalar() -> bytes:
    return sodium.crypto_core_ed25519_scalar_reduce(os.urandom(64))


def _base_mult(scalar: bytes) -> bytes:
    try:
        return sodium.crypto_scalarmult_ed25519_base_noclamp(scalar)
    except CryptoError as e:
        raise PrimitivesError(f"Scalar multiplication failed: {e}") from e


def _mult(scalar: bytes, point: bytes) -> bytes:
    try:
        return sodium.crypto_scalarmult_ed25519_noclamp(scalar, point)
    except CryptoError as e:
        raise PrimitivesError(f"Scalar multiplication failed: {e}") from e


def _hop_scalar(shared_point: bytes) -> bytes:
    digest = hashlib.sha512(HOP_HASH_LABEL + shared_point).digest()
    return sodium.crypto_core_ed25519_scalar_reduce(digest)


# --- Wire formats ---
def _parse_ciphertext(ciphertext: str) -> Tuple[List[bytes], bytes, bytes, bytes]:
    if not isinstance(ciphertext, str):
        raise PrimitivesError("Ciphertext must be a string.")
    fields = ciphertext.split(FIELD_SEPARATOR)
    if len(fields) != 5 or fields[0] != CIPHERTEXT_PREFIX:
        raise PrimitivesError("Unrecognized ciphertext format.")
    points = [_decode_point(p) for p in fields[1].split(POINT_SEPARATOR)]
    return points, b64_decode(fields[2]), _decode_ed25519(fields[3]), b64_decode(fields[4])


def _format_ciphertext(points: List[bytes], box: bytes, signer_pub: bytes, signature: bytes) -> str:
    return FIELD_SEPARATOR.join([
        CIPHERTEXT_PREFIX,
        POINT_SEPARATOR.join(b64_encode(p) for p in points),
        b64_encode(box),
        b64_encode(signer_pub),
        b64_encode(signature),
    ])


def _parse_transform_key(transform_key: str) -> Tuple[bytes, bytes, bytes, bytes, bytes]:
    if not isinstance(transform_key, str):
        raise PrimitivesError("Transform key must be a string.")
    fields = transform_key.split(FIELD_SEPARATOR)
    if len(fields) != 5 or fields[0] != TRANSFORM_KEY_PREFIX:
        raise PrimitivesError("Unrecognized transform key format.")
    signed_part = FIELD_SEPARATOR.join(fields[:3]).encode('ascii')
    return (_decode_scalar(fields[1]), _decode_point(fields[2]),
            _decode_ed25519(fields[3]), b64_decode(fields[4]), signed_part)


def _ed25519_sign(priv_raw: bytes, data: bytes) -> Tuple[bytes, bytes]:
    private_key = Ed25519PrivateKey.from_private_bytes(priv_raw)
    pub_raw = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw)
    return pub_raw, private_key.sign(data)


def _ed25519_verify(pub_raw: bytes, data: bytes, signature: bytes) -> bool:
    try:
        Ed25519PublicKey.from_public_bytes(pub_raw).verify(signature, data)
        return True
    except (InvalidSignature, ValueError):
        return False


class SoftwarePrimitives(PrimitivesInterface):
    """PRE primitives computed in-process."""

    async def crypt_key_gen(self) -> KeyPair:
        priv = _random_scalar()
        return KeyPair(pub_key=b64_encode(_base_mult(priv)), priv_key=b64_encode(priv))

    async def sign_key_gen(self) -> KeyPair:
        private_key = Ed25519PrivateKey.generate()
        priv_raw = private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption())
        pub_raw = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw)
        return KeyPair(pub_key=b64_encode(pub_raw), priv_key=b64_encode(priv_raw))

    async def encrypt(self, pub_key: str, plaintext: str, signer: KeyPair) -> str:
        recipient = _decode_point(pub_key)
        r = _random_scalar()
        capsule = _base_mult(r)
        shared = _mult(r, recipient)

        signer_pub = _decode_ed25519(signer.pub_key)
        box = encrypt_with_aad(derive_aes_key(shared, WRAP_KDF_INFO), plaintext.encode('utf-8'), signer_pub)
        derived_pub, signature = _ed25519_sign(_decode_ed25519(signer.priv_key), box)
        if derived_pub != signer_pub:
            raise PrimitivesError("Signer key pair is inconsistent.")
        return _format_ciphertext([capsule], box, signer_pub, signature)

    async def decrypt(self, key_pair: KeyPair, ciphertext: str) -> str:
        points, box, signer_pub, signature = _parse_ciphertext(ciphertext)
        if read_aad(box) != signer_pub or not _ed25519_verify(signer_pub, box, signature):
            raise DecryptionError("Ciphertext signature does not verify.")

        shared = _mult(_decode_scalar(key_pair.priv_key), points[-1])
        for point in reversed(points[:-1]):
            shared = _mult(_hop_scalar(shared), point)

        plaintext = decrypt_with_aad(derive_aes_key(shared, WRAP_KDF_INFO), box)
        if plaintext is None:
            raise DecryptionError("Ciphertext is not addressed to this key pair.")
        return plaintext.decode('utf-8')

    async def sign(self, key_pair: KeyPair, text: str) -> str:
        _, signature = _ed25519_sign(_decode_ed25519(key_pair.priv_key), text.encode('utf-8'))
        return b64_encode(signature)

    async def verify(self, pub_key: str, text: str, signature: str) -> bool:
        try:
            pub_raw = _decode_ed25519(pub_key)
            sig_raw = b64_decode(signature)
        except PrimitivesError:
            return False
        return _ed25519_verify(pub_raw, text.encode('utf-8'), sig_raw)

    async def crypt_transform_key_gen(self, from_key_pair: KeyPair, to_pub_key: str,
                                      signer: KeyPair) -> str:
        owner_priv = _decode_scalar(from_key_pair.priv_key)
        recipient = _decode_point(to_pub_key)

        x = _random_scalar()
        hop_point = _base_mult(x)
        d = _hop_scalar(_mult(x, recipient))
        k = sodium.crypto_core_ed25519_scalar_mul(owner_priv, sodium.crypto_core_ed25519_scalar_invert(d))

        signed_part = FIELD_SEPARATOR.join([TRANSFORM_KEY_PREFIX, b64_encode(k), b64_encode(hop_point)])
        signer_pub, signature = _ed25519_sign(_decode_ed25519(signer.priv_key), signed_part.encode('ascii'))
        return FIELD_SEPARATOR.join([signed_part, b64_encode(signer_pub), b64_encode(signature)])

    async def crypt_transform(self, transform_key: str, ciphertext: str) -> str:
        k, hop_point, signer_pub, signature, signed_part = _parse_transform_key(transform_key)
        if not _ed25519_verify(signer_pub, signed_part, signature):
            raise PrimitivesError("Transform key signature does not verify.")

        points, box, box_signer, box_signature = _parse_ciphertext(ciphertext)
        points = points[:-1] + [_mult(k, points[-1]), hop_point]
        logger.debug("[SoftwarePrimitives] Re-encrypted ciphertext, now %d hop(s).", len(points) - 1)
        return _format_ciphertext(points, box, box_signer, box_signature)
