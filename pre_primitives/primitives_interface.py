"""
Contract for the proxy re-encryption primitives consumed by the client.
Keys, ciphertexts, signatures and transform keys are opaque strings; callers
never look inside them.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class KeyPair:
    """A public/private key pair, both halves encoded as strings."""
    pub_key: str
    priv_key: str

    def __repr__(self) -> str:
        # Keep private halves out of logs and tracebacks.
        return f"KeyPair(pub_key={self.pub_key!r}, priv_key='***')"


class PrimitivesError(Exception):
    """Raised for malformed keys, ciphertexts or signatures."""


class DecryptionError(PrimitivesError):
    """Raised when a ciphertext cannot be opened with the given key pair."""


# --- Primitives Interface Definition ---
class PrimitivesInterface(ABC):
    """
    Asynchronous PRE primitives. Implementations may be backed by software,
    a remote signer or hardware key storage.
    """

    @abstractmethod
    async def crypt_key_gen(self) -> KeyPair:
        """Generates a key pair for encryption."""

    @abstractmethod
    async def sign_key_gen(self) -> KeyPair:
        """Generates a key pair for signing."""

    @abstractmethod
    async def encrypt(self, pub_key: str, plaintext: str, signer: KeyPair) -> str:
        """
        Encrypts plaintext to pub_key and signs the result with signer.

        Args:
            pub_key: Recipient public crypt key.
            plaintext: Text to encrypt (typically a private key).
            signer: Signing key pair of the identity producing the ciphertext.

        Returns:
            The encoded ciphertext.
        """

    @abstractmethod
    async def decrypt(self, key_pair: KeyPair, ciphertext: str) -> str:
        """
        Decrypts a ciphertext addressed (directly or via re-encryption) to key_pair.

        Raises:
            DecryptionError: If key_pair is not the holder or the ciphertext was altered.
        """

    @abstractmethod
    async def sign(self, key_pair: KeyPair, text: str) -> str:
        """Signs text with a signing key pair."""

    @abstractmethod
    async def verify(self, pub_key: str, text: str, signature: str) -> bool:
        """Returns True if signature is valid for text under pub_key."""

    @abstractmethod
    async def crypt_transform_key_gen(self, from_key_pair: KeyPair, to_pub_key: str,
                                      signer: KeyPair) -> str:
        """
        Derives a transform key letting a proxy re-encrypt ciphertext addressed to
        from_key_pair so that it opens with the private key of to_pub_key.
        """

    @abstractmethod
    async def crypt_transform(self, transform_key: str, ciphertext: str) -> str:
        """Applies one re-encryption hop. Run by the service, never by clients."""
