"""Handlers for login and account registration."""
import logging
from dataclasses import dataclass
from typing import List

from client_crypto.capabilities import (
    AccountCreator,
    ClientAuthorizer,
    CreatedDocument,
    DocumentCreator,
    RequestSigner,
)
from rights_actions.batch import require_capability, send_batch
from rights_protocol.errors import CallerPreconditionError
from rights_protocol.models import (
    Action,
    ActionType,
    ClientAuthPayload,
    InitializeAccountPayload,
    LoginPayload,
    LoginResultPayload,
)
from rights_protocol.response_checks import result_payload
from rights_protocol.service import ServiceInterface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredAccount:
    account_crypt_pub_key: str
    account_sign_pub_key: str
    root_doc: CreatedDocument


async def login_action(client_crypto: RequestSigner, service: ServiceInterface) -> LoginResultPayload:
    """
    Sends a single Login action.

    An empty account_id in the result means the client is not registered yet;
    that is a valid answer, not an error.
    """
    client_crypt_pub_key = client_crypto.public_keys().client_crypt_pub_key
    actions = [Action(type=ActionType.LOGIN, payload=LoginPayload(crypt_pub_key=client_crypt_pub_key))]
    response = await send_batch(client_crypto, service, actions)
    return result_payload(response, ActionType.LOGIN, LoginResultPayload)


async def register_account_action(client_crypto: RequestSigner,
                                  service: ServiceInterface) -> RegisteredAccount:
    """
    Creates the account (unless the client crypto already knows one), its root
    document and, when the account creation produced transform material, the
    authorization of this client. Everything goes out in one batch.
    """
    document_creator = require_capability(client_crypto, DocumentCreator, "createDocument")
    account_creator = require_capability(client_crypto, AccountCreator, "createAccount")
    require_capability(client_crypto, ClientAuthorizer, "createClientAuth")

    pub_keys = client_crypto.public_keys()
    account_crypt_pub_key = pub_keys.account_crypt_pub_key
    account_sign_pub_key = pub_keys.account_sign_pub_key
    enc_crypt_priv_key = ""
    enc_sign_priv_key = ""
    client_transform_key = ""

    if not account_crypt_pub_key or not account_sign_pub_key:
        created = await account_creator.create_account()
        account_crypt_pub_key = created.account_crypt_pub_key
        account_sign_pub_key = created.account_sign_pub_key
        enc_crypt_priv_key = created.account_enc_crypt_priv_key
        enc_sign_priv_key = created.account_enc_sign_priv_key
        client_transform_key = created.client_crypt_transform_key

    if not account_crypt_pub_key or not account_sign_pub_key:
        raise CallerPreconditionError("Unable to create account")

    root_doc = await document_creator.create_document(account_crypt_pub_key)

    actions: List[Action] = [
        Action(type=ActionType.INITIALIZE_ACCOUNT, payload=InitializeAccountPayload(
            account_id=account_sign_pub_key,
            crypt_pub_key=account_crypt_pub_key,
            sign_pub_key=account_sign_pub_key,
            enc_crypt_priv_key=enc_crypt_priv_key,
            enc_sign_priv_key=enc_sign_priv_key,
            root_doc_crypt_pub_key=root_doc.document_crypt_pub_key,
            root_doc_enc_crypt_priv_key=root_doc.document_enc_crypt_priv_key,
        ))
    ]

    if pub_keys.client_sign_pub_key and pub_keys.client_crypt_pub_key and client_transform_key:
        actions.append(Action(type=ActionType.AUTHORIZE_CLIENT, payload=ClientAuthPayload(
            account_id=account_sign_pub_key,
            client_id=pub_keys.client_sign_pub_key,
            crypt_transform_key=client_transform_key,
        )))

    await send_batch(client_crypto, service, actions)
    logger.info("[RegisterAccount] Account %s initialized.", account_sign_pub_key)

    return RegisteredAccount(
        account_crypt_pub_key=account_crypt_pub_key,
        account_sign_pub_key=account_sign_pub_key,
        root_doc=root_doc,
    )
