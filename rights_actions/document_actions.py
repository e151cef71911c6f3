"""
Document handlers.

Document grants are full key disclosure: the document crypt private key is
unwrapped locally and re-wrapped to the grantee once, at grant time. Read and
sign grants differ only in the can_sign flag the service enforces.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from client_crypto.capabilities import (
    CreatedDocument,
    DocumentCreator,
    DocumentTextCipher,
    Grant,
    GrantCreator,
    RequestSigner,
)
from rights_actions.batch import get_key_pairs, get_pub_keys, require_capability, send_batch
from rights_protocol.models import (
    Action,
    ActionType,
    CreateDocumentPayload,
    CreateDocumentResultPayload,
    DecryptDocumentResultPayload,
    DocumentRefPayload,
    GrantKind,
    GrantPayload,
    KeyPairsResultPayload,
    PubKeysResultPayload,
    SignDocumentPayload,
    SignDocumentResultPayload,
    UpdateDocumentPayload,
)
from rights_protocol.response_checks import result_payload
from rights_protocol.service import ServiceInterface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreatedDocumentRecord:
    document_id: str
    document: CreatedDocument


def decrypt_document(document_id: str) -> Action:
    return Action(type=ActionType.DECRYPT_DOCUMENT, payload=DocumentRefPayload(document_id=document_id))


async def _fetch_document_key(client_crypto: RequestSigner, service: ServiceInterface,
                              document_id: str) -> str:
    """Returns the document crypt private key as re-encrypted by the service for this client."""
    response = await send_batch(client_crypto, service, [decrypt_document(document_id)])
    return result_payload(response, ActionType.DECRYPT_DOCUMENT, DecryptDocumentResultPayload).enc_crypt_priv_key


async def _account_crypt_pub_key(client_crypto: RequestSigner, service: ServiceInterface,
                                 account_id: str) -> str:
    response = await send_batch(client_crypto, service, [get_key_pairs(GrantKind.ACCOUNT, account_id)])
    return result_payload(response, ActionType.GET_KEY_PAIRS, KeyPairsResultPayload).crypt_pub_key


async def create_document_action(client_crypto: RequestSigner, service: ServiceInterface,
                                 account_id: str) -> CreatedDocumentRecord:
    document_creator = require_capability(client_crypto, DocumentCreator, "createDocument")

    account_crypt_pub_key = await _account_crypt_pub_key(client_crypto, service, account_id)
    document = await document_creator.create_document(account_crypt_pub_key)

    response = await send_batch(client_crypto, service, [
        Action(type=ActionType.CREATE_DOCUMENT, payload=CreateDocumentPayload(
            creator_id=account_id,
            crypt_account_id=account_id,
            crypt_pub_key=document.document_crypt_pub_key,
            enc_crypt_priv_key=document.document_enc_crypt_priv_key,
        )),
    ])
    document_id = result_payload(response, ActionType.CREATE_DOCUMENT, CreateDocumentResultPayload).document_id
    logger.info("[CreateDocument] Document %s created.", document_id)
    return CreatedDocumentRecord(document_id=document_id, document=document)


async def update_document_action(client_crypto: RequestSigner, service: ServiceInterface,
                                 account_id: str, document_id: str) -> CreatedDocument:
    """
    Rotates a document's encryption: a brand new crypt key pair is generated and
    wrapped to the account. The previous key pair is left untouched, so content
    encrypted under it stays readable only where it is re-encrypted.
    """
    document_creator = require_capability(client_crypto, DocumentCreator, "createDocument")

    account_crypt_pub_key = await _account_crypt_pub_key(client_crypto, service, account_id)
    document = await document_creator.create_document(account_crypt_pub_key)

    await send_batch(client_crypto, service, [
        Action(type=ActionType.UPDATE_DOCUMENT, payload=UpdateDocumentPayload(
            document_id=document_id,
            crypt_account_id=account_id,
            crypt_pub_key=document.document_crypt_pub_key,
            enc_crypt_priv_key=document.document_enc_crypt_priv_key,
        )),
    ])
    return document


async def grant_access_action(client_crypto: RequestSigner, service: ServiceInterface,
                              document_id: str, grant_kind: GrantKind, grantee_id: str,
                              can_sign: bool = False) -> Grant:
    grant_creator = require_capability(client_crypto, GrantCreator, "createGrant")

    response = await send_batch(client_crypto, service, [
        get_pub_keys(grant_kind, grantee_id),
        decrypt_document(document_id),
    ])
    grantee_keys = result_payload(response, ActionType.GET_PUB_KEYS, PubKeysResultPayload)
    document_key = result_payload(response, ActionType.DECRYPT_DOCUMENT, DecryptDocumentResultPayload)

    grant = await grant_creator.create_grant(
        document_enc_crypt_priv_key=document_key.enc_crypt_priv_key,
        grantee_crypt_pub_key=grantee_keys.crypt_pub_key,
    )

    await send_batch(client_crypto, service, [
        Action(type=ActionType.GRANT_ACCESS, payload=GrantPayload(
            document_id=document_id,
            kind=grant_kind,
            id=grantee_id,
            can_sign=can_sign,
            enc_crypt_priv_key=grant.document_enc_crypt_priv_key_for_grantee,
        )),
    ])
    return grant


# TODO: cascade to accounts whose signing delegation runs through the revoked grantee.
async def revoke_access_action(client_crypto: RequestSigner, service: ServiceInterface,
                               document_id: str, grant_kind: GrantKind, grantee_id: str) -> None:
    await send_batch(client_crypto, service, [
        Action(type=ActionType.REVOKE_ACCESS,
               payload=GrantPayload(document_id=document_id, kind=grant_kind, id=grantee_id)),
    ])


async def sign_document_hashes_action(client_crypto: RequestSigner, service: ServiceInterface,
                                      document_id: str, hashes: Sequence[str]) -> List[str]:
    response = await send_batch(client_crypto, service, [
        Action(type=ActionType.SIGN_DOCUMENT,
               payload=SignDocumentPayload(document_id=document_id, hashes=list(hashes))),
    ])
    return result_payload(response, ActionType.SIGN_DOCUMENT, SignDocumentResultPayload).signatures


async def encrypt_document_texts_action(client_crypto: RequestSigner, service: ServiceInterface,
                                        document_id: str, plaintexts: Sequence[str]) -> List[str]:
    text_cipher = require_capability(client_crypto, DocumentTextCipher, "encryptDocumentTexts")
    enc_crypt_priv_key = await _fetch_document_key(client_crypto, service, document_id)
    return await text_cipher.encrypt_document_texts(enc_crypt_priv_key, plaintexts)


async def decrypt_document_texts_action(client_crypto: RequestSigner, service: ServiceInterface,
                                        document_id: str, ciphertexts: Sequence[str]) -> List[Optional[str]]:
    text_cipher = require_capability(client_crypto, DocumentTextCipher, "decryptDocumentTexts")
    enc_crypt_priv_key = await _fetch_document_key(client_crypto, service, document_id)
    return await text_cipher.decrypt_document_texts(enc_crypt_priv_key, ciphertexts)
