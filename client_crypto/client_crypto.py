"""
Per-identity cryptographic operations for a rights client.

Holds the client's own sign/crypt key pairs and derives everything else
(wrapped keys, transform keys, document text ciphertexts) through a
PrimitivesInterface. Stateless beyond those key pairs.
"""
import base64
import binascii
import logging
from typing import List, Optional, Sequence

from client_crypto.capabilities import (
    AccountCreator,
    ClientAuth,
    ClientAuthorizer,
    CreatedAccount,
    CreatedDocument,
    CreatedGroup,
    DocumentCreator,
    DocumentTextCipher,
    Grant,
    GrantCreator,
    GroupCreator,
    Membership,
    MembershipCreator,
    PublicKeys,
    RequestSigner,
)
from pre_primitives.cipher_engine import decrypt_with_aad, derive_aes_key, encrypt_with_aad
from pre_primitives.primitives_interface import KeyPair, PrimitivesInterface
from rights_protocol.models import Action, Request, canonical_body

logger = logging.getLogger(__name__)

DOCUMENT_TEXT_KDF_INFO = b"client_crypto/document-text"


class ClientCrypto(RequestSigner, AccountCreator, ClientAuthorizer, DocumentCreator, GroupCreator,
                   MembershipCreator, GrantCreator, DocumentTextCipher):
    """Full-featured client crypto; implements every capability."""

    def __init__(self, primitives: PrimitivesInterface, client_sign_key_pair: KeyPair,
                 client_crypt_key_pair: KeyPair, account_sign_pub_key: str = "",
                 account_crypt_pub_key: str = ""):
        self.primitives = primitives
        self.client_sign_key_pair = client_sign_key_pair
        self.client_crypt_key_pair = client_crypt_key_pair
        self.account_sign_pub_key = account_sign_pub_key
        self.account_crypt_pub_key = account_crypt_pub_key

    def public_keys(self) -> PublicKeys:
        return PublicKeys(
            client_sign_pub_key=self.client_sign_key_pair.pub_key,
            client_crypt_pub_key=self.client_crypt_key_pair.pub_key,
            account_sign_pub_key=self.account_sign_pub_key,
            account_crypt_pub_key=self.account_crypt_pub_key,
        )

    async def sign_request(self, actions: Sequence[Action]) -> Request:
        body = canonical_body(list(actions))
        signature = await self.primitives.sign(self.client_sign_key_pair, body)
        return Request(body=body, client_id=self.client_sign_key_pair.pub_key, signature=signature)

    # --- Key wrapping helpers ---
    async def _wrap(self, pub_key: str, priv_key: str) -> str:
        return await self.primitives.encrypt(pub_key, priv_key, self.client_sign_key_pair)

    async def _unwrap(self, enc_priv_key: str) -> str:
        """Opens a key the service has re-encrypted (directly or over several hops) to this client."""
        return await self.primitives.decrypt(self.client_crypt_key_pair, enc_priv_key)

    # --- Accounts and clients ---
    async def create_account(self) -> CreatedAccount:
        account_crypt = await self.primitives.crypt_key_gen()
        account_sign = await self.primitives.sign_key_gen()

        enc_crypt_priv_key = await self._wrap(account_crypt.pub_key, account_crypt.priv_key)
        enc_sign_priv_key = await self._wrap(account_crypt.pub_key, account_sign.priv_key)
        transform_key = await self.primitives.crypt_transform_key_gen(
            account_crypt, self.client_crypt_key_pair.pub_key, account_sign)

        return CreatedAccount(
            account_crypt_pub_key=account_crypt.pub_key,
            account_sign_pub_key=account_sign.pub_key,
            account_enc_crypt_priv_key=enc_crypt_priv_key,
            account_enc_sign_priv_key=enc_sign_priv_key,
            client_crypt_transform_key=transform_key,
        )

    async def create_client_auth(self, account_crypt_pub_key: str, account_enc_crypt_priv_key: str,
                                 client_crypt_pub_key: str) -> ClientAuth:
        account_crypt = KeyPair(pub_key=account_crypt_pub_key,
                                priv_key=await self._unwrap(account_enc_crypt_priv_key))
        transform_key = await self.primitives.crypt_transform_key_gen(
            account_crypt, client_crypt_pub_key, self.client_sign_key_pair)
        return ClientAuth(client_crypt_transform_key=transform_key)

    # --- Documents ---
    async def create_document(self, account_crypt_pub_key: str) -> CreatedDocument:
        document_crypt = await self.primitives.crypt_key_gen()
        return CreatedDocument(
            document_crypt_pub_key=document_crypt.pub_key,
            document_enc_crypt_priv_key=await self._wrap(account_crypt_pub_key, document_crypt.priv_key),
        )

    async def create_grant(self, document_enc_crypt_priv_key: str, grantee_crypt_pub_key: str) -> Grant:
        document_priv_key = await self._unwrap(document_enc_crypt_priv_key)
        return Grant(
            document_enc_crypt_priv_key_for_grantee=await self._wrap(grantee_crypt_pub_key, document_priv_key))

    # --- Groups ---
    async def create_group(self, account_crypt_pub_key: str) -> CreatedGroup:
        group_crypt = await self.primitives.crypt_key_gen()
        group_sign = await self.primitives.sign_key_gen()

        transform_key = await self.primitives.crypt_transform_key_gen(
            group_crypt, account_crypt_pub_key, group_sign)

        return CreatedGroup(
            group_crypt_pub_key=group_crypt.pub_key,
            group_sign_pub_key=group_sign.pub_key,
            group_enc_crypt_priv_key=await self._wrap(account_crypt_pub_key, group_crypt.priv_key),
            group_enc_sign_priv_key=await self._wrap(account_crypt_pub_key, group_sign.priv_key),
            member_crypt_transform_key=transform_key,
        )

    async def create_membership(self, group_crypt_pub_key: str, group_enc_crypt_priv_key: str,
                                member_crypt_pub_key: str, admin: bool = False) -> Membership:
        group_priv_key = await self._unwrap(group_enc_crypt_priv_key)
        group_crypt = KeyPair(pub_key=group_crypt_pub_key, priv_key=group_priv_key)

        transform_key = await self.primitives.crypt_transform_key_gen(
            group_crypt, member_crypt_pub_key, self.client_sign_key_pair)
        enc_crypt_priv_key = await self._wrap(member_crypt_pub_key, group_priv_key) if admin else ""
        return Membership(member_crypt_transform_key=transform_key, enc_crypt_priv_key=enc_crypt_priv_key)

    # --- Document texts ---
    async def _document_text_key(self, document_enc_crypt_priv_key: str) -> bytes:
        document_priv_key = await self._unwrap(document_enc_crypt_priv_key)
        return derive_aes_key(document_priv_key.encode('utf-8'), DOCUMENT_TEXT_KDF_INFO)

    async def encrypt_document_texts(self, document_enc_crypt_priv_key: str,
                                     plaintexts: Sequence[str]) -> List[str]:
        key = await self._document_text_key(document_enc_crypt_priv_key)
        return [base64.b64encode(encrypt_with_aad(key, text.encode('utf-8'))).decode('ascii')
                for text in plaintexts]

    async def decrypt_document_texts(self, document_enc_crypt_priv_key: str,
                                     ciphertexts: Sequence[str]) -> List[Optional[str]]:
        key = await self._document_text_key(document_enc_crypt_priv_key)
        plaintexts: List[Optional[str]] = []
        for index, ciphertext in enumerate(ciphertexts):
            try:
                payload = base64.b64decode(ciphertext, validate=True)
            except (binascii.Error, ValueError):
                payload = b""
            plaintext = decrypt_with_aad(key, payload) if payload else None
            if plaintext is None:
                logger.warning("[ClientCrypto] Document text %d could not be decrypted.", index)
                plaintexts.append(None)
                continue
            plaintexts.append(plaintext.decode('utf-8', errors='replace'))
        return plaintexts
