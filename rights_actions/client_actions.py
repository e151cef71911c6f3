"""Handlers for authorizing and deauthorizing client devices on an account."""
from client_crypto.capabilities import ClientAuthorizer, RequestSigner
from rights_actions.batch import get_key_pairs, get_pub_keys, require_capability, send_batch
from rights_protocol.models import (
    Action,
    ActionType,
    ClientAuthPayload,
    GrantKind,
    KeyPairsResultPayload,
    PubKeysResultPayload,
)
from rights_protocol.response_checks import result_payload
from rights_protocol.service import ServiceInterface


async def authorize_client_action(client_crypto: RequestSigner, service: ServiceInterface,
                                  account_id: str, client_id: str) -> None:
    """
    Reads the new client's public keys and the account key pairs, derives an
    account -> client transform key locally and sends AuthorizeClient.
    """
    authorizer = require_capability(client_crypto, ClientAuthorizer, "createClientAuth")

    response = await send_batch(client_crypto, service, [
        get_pub_keys(GrantKind.CLIENT, client_id),
        get_key_pairs(GrantKind.ACCOUNT, account_id),
    ])
    client_keys = result_payload(response, ActionType.GET_PUB_KEYS, PubKeysResultPayload)
    account_keys = result_payload(response, ActionType.GET_KEY_PAIRS, KeyPairsResultPayload)

    auth = await authorizer.create_client_auth(
        account_crypt_pub_key=account_keys.crypt_pub_key,
        account_enc_crypt_priv_key=account_keys.enc_crypt_priv_key,
        client_crypt_pub_key=client_keys.crypt_pub_key,
    )

    await send_batch(client_crypto, service, [
        Action(type=ActionType.AUTHORIZE_CLIENT, payload=ClientAuthPayload(
            account_id=account_id,
            client_id=client_id,
            crypt_transform_key=auth.client_crypt_transform_key,
        )),
    ])


async def deauthorize_client_action(client_crypto: RequestSigner, service: ServiceInterface,
                                    account_id: str, client_id: str) -> None:
    await send_batch(client_crypto, service, [
        Action(type=ActionType.DEAUTHORIZE_CLIENT,
               payload=ClientAuthPayload(account_id=account_id, client_id=client_id)),
    ])
