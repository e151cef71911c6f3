"""
Passphrase-protected storage for a client's own key pairs.

The file is JSON: a clear header (format version and Argon2id parameters) and
an AES-GCM payload holding the sign and crypt key pairs. The key comes from
Argon2id over the passphrase; the header is bound to the payload as AAD so the
KDF parameters cannot be swapped.
"""
import base64
import binascii
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict

from argon2 import low_level
from argon2.exceptions import Argon2Error

from pre_primitives.cipher_engine import decrypt_with_aad, encrypt_with_aad
from pre_primitives.primitives_interface import KeyPair, PrimitivesInterface

logger = logging.getLogger(__name__)

IDENTITY_FILE_VERSION = 1
ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST_KB = 65536
ARGON2_PARALLELISM = 1
ARGON2_HASH_LEN = 32
ARGON2_SALT_LEN = 16


class IdentityStoreError(Exception):
    """Raised when an identity file cannot be read, parsed or decrypted."""


@dataclass(frozen=True)
class ClientIdentity:
    sign_key_pair: KeyPair
    crypt_key_pair: KeyPair


async def generate_identity(primitives: PrimitivesInterface) -> ClientIdentity:
    return ClientIdentity(sign_key_pair=await primitives.sign_key_gen(),
                          crypt_key_pair=await primitives.crypt_key_gen())


def _derive_file_key(passphrase: str, header: Dict[str, Any]) -> bytes:
    try:
        return low_level.hash_secret_raw(
            secret=passphrase.encode('utf-8'),
            salt=base64.b64decode(header["salt"]),
            time_cost=header["time_cost"],
            memory_cost=header["memory_cost_kb"],
            parallelism=header["parallelism"],
            hash_len=ARGON2_HASH_LEN,
            type=low_level.Type.ID,
        )
    except Argon2Error as e:
        raise IdentityStoreError(f"Argon2id key derivation failed: {e}") from e


def _header_aad(header: Dict[str, Any]) -> bytes:
    return json.dumps(header, sort_keys=True, separators=(",", ":")).encode('utf-8')


def save_identity(path: str, identity: ClientIdentity, passphrase: str) -> None:
    """
    Encrypts identity under passphrase and writes it to path.

    Raises:
        ValueError: If the passphrase is empty.
        IdentityStoreError: If the file cannot be written.
    """
    if not passphrase:
        raise ValueError("Identity passphrase must not be empty.")

    header = {
        "version": IDENTITY_FILE_VERSION,
        "kdf": "argon2id",
        "salt": base64.b64encode(os.urandom(ARGON2_SALT_LEN)).decode('ascii'),
        "time_cost": ARGON2_TIME_COST,
        "memory_cost_kb": ARGON2_MEMORY_COST_KB,
        "parallelism": ARGON2_PARALLELISM,
    }
    secret = json.dumps({
        "sign": {"pub_key": identity.sign_key_pair.pub_key, "priv_key": identity.sign_key_pair.priv_key},
        "crypt": {"pub_key": identity.crypt_key_pair.pub_key, "priv_key": identity.crypt_key_pair.priv_key},
    }).encode('utf-8')

    payload = encrypt_with_aad(_derive_file_key(passphrase, header), secret, _header_aad(header))
    document = {"header": header, "payload": base64.b64encode(payload).decode('ascii')}

    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(document, f, indent=2)
    except OSError as e:
        raise IdentityStoreError(f"Could not write identity file '{path}': {e}") from e
    logger.info("[IdentityStore] Identity saved to '%s'.", path)


def load_identity(path: str, passphrase: str) -> ClientIdentity:
    """
    Reads and decrypts an identity file.

    Raises:
        IdentityStoreError: Missing or malformed file, wrong passphrase or tampered content.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            document = json.load(f)
        header = document["header"]
        payload = base64.b64decode(document["payload"], validate=True)
    except OSError as e:
        raise IdentityStoreError(f"Could not read identity file '{path}': {e}") from e
    except (json.JSONDecodeError, KeyError, TypeError, binascii.Error) as e:
        raise IdentityStoreError(f"Identity file '{path}' is malformed: {e}") from e

    if not isinstance(header, dict) or header.get("version") != IDENTITY_FILE_VERSION:
        raise IdentityStoreError(f"Unsupported identity file version in '{path}'.")

    try:
        key = _derive_file_key(passphrase, header)
    except (KeyError, TypeError, binascii.Error) as e:
        raise IdentityStoreError(f"Identity file '{path}' has an invalid header: {e}") from e

    secret = decrypt_with_aad(key, payload)
    if secret is None:
        raise IdentityStoreError("Wrong passphrase or corrupted identity file.")

    keys = json.loads(secret.decode('utf-8'))
    return ClientIdentity(sign_key_pair=KeyPair(**keys["sign"]), crypt_key_pair=KeyPair(**keys["crypt"]))
