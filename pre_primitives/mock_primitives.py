"""
Deterministic, non-cryptographic primitives for testing.
Every artifact is a readable string so tests can assert exactly which key was
encrypted to which public key.
"""
from pre_primitives.primitives_interface import DecryptionError, KeyPair, PrimitivesError, PrimitivesInterface


class MockPrimitives(PrimitivesInterface):
    """
    Produces predictable artifacts:
        encrypt           -> "encrypted:<pub_key>:<plaintext>"
        transform key gen -> "transform:<from_priv_key>:<to_pub_key>"
        sign              -> "signature:<pub_key>:<text>"
    Generated key pairs are numbered in creation order.
    """
    def __init__(self, start: int = 1):
        self._counter = start

    def _next(self) -> int:
        value = self._counter
        self._counter += 1
        return value

    async def crypt_key_gen(self) -> KeyPair:
        n = self._next()
        return KeyPair(pub_key=f"cryptPub{n}", priv_key=f"cryptPriv{n}")

    async def sign_key_gen(self) -> KeyPair:
        n = self._next()
        return KeyPair(pub_key=f"signPub{n}", priv_key=f"signPriv{n}")

    async def encrypt(self, pub_key: str, plaintext: str, signer: KeyPair) -> str:
        return f"encrypted:{pub_key}:{plaintext}"

    async def decrypt(self, key_pair: KeyPair, ciphertext: str) -> str:
        prefix, _, rest = ciphertext.partition(":")
        pub_key, _, plaintext = rest.partition(":")
        if prefix != "encrypted":
            raise PrimitivesError("Not a mock ciphertext.")
        if pub_key != key_pair.pub_key:
            raise DecryptionError(f"Ciphertext is addressed to {pub_key}.")
        return plaintext

    async def sign(self, key_pair: KeyPair, text: str) -> str:
        return f"signature:{key_pair.pub_key}:{text}"

    async def verify(self, pub_key: str, text: str, signature: str) -> bool:
        return signature == f"signature:{pub_key}:{text}"

    async def crypt_transform_key_gen(self, from_key_pair: KeyPair, to_pub_key: str,
                                      signer: KeyPair) -> str:
        return f"transform:{from_key_pair.priv_key}:{to_pub_key}"

    async def crypt_transform(self, transform_key: str, ciphertext: str) -> str:
        _, _, to_pub_key = transform_key.rpartition(":")
        _, _, rest = ciphertext.partition(":")
        _, _, plaintext = rest.partition(":")
        return f"encrypted:{to_pub_key}:{plaintext}"
