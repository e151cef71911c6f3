import json
import unittest
from typing import Sequence
from unittest.mock import AsyncMock, MagicMock

from client_crypto.capabilities import PublicKeys, RequestSigner
from client_crypto.client_crypto import ClientCrypto
from pre_primitives.mock_primitives import MockPrimitives
from pre_primitives.primitives_interface import KeyPair
from rights_actions.session_actions import login_action, register_account_action
from rights_protocol.errors import ActionError, MissingResultError, UnsupportedOperationError
from rights_protocol.models import Action, Request, Response, Result, canonical_body
from rights_protocol.service import ServiceInterface

CLIENT_SIGN = KeyPair(pub_key="clientSignPub", priv_key="clientSignPriv")
CLIENT_CRYPT = KeyPair(pub_key="clientCryptPub", priv_key="clientCryptPriv")


class SigningOnlyCrypto(RequestSigner):
    """A client crypto that can only sign requests (e.g. a hardware token)."""
    def public_keys(self) -> PublicKeys:
        return PublicKeys(client_sign_pub_key="clientSignPub", client_crypt_pub_key="clientCryptPub")

    async def sign_request(self, actions: Sequence[Action]) -> Request:
        return Request(body=canonical_body(list(actions)), client_id="clientSignPub", signature="sig")


def make_service(*responses: Response) -> MagicMock:
    service = MagicMock(spec=ServiceInterface)
    service.request = AsyncMock(side_effect=list(responses))
    return service


def sent_actions(service: MagicMock, call_index: int = 0) -> list:
    request = service.request.await_args_list[call_index].args[0]
    return json.loads(request.body)


class TestLoginAction(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.crypto = ClientCrypto(MockPrimitives(), CLIENT_SIGN, CLIENT_CRYPT)

    async def test_login_sends_single_login_action(self):
        service = make_service(Response(results=[
            Result(type="Login", payload={"accountId": "acct", "rootDocumentId": "root"}, success=True)]))

        result = await login_action(self.crypto, service)

        self.assertEqual(result.account_id, "acct")
        self.assertEqual(result.root_document_id, "root")
        self.assertEqual(sent_actions(service), [{"type": "Login", "payload": {"cryptPubKey": "clientCryptPub"}}])

    async def test_unregistered_client_is_not_an_error(self):
        service = make_service(Response(results=[Result(type="Login", payload={"accountId": ""}, success=True)]))
        result = await login_action(self.crypto, service)
        self.assertEqual(result.account_id, "")

    async def test_missing_login_result(self):
        service = make_service(Response(results=[]))
        with self.assertRaises(MissingResultError):
            await login_action(self.crypto, service)

    async def test_login_error_result(self):
        service = make_service(Response(results=[Result(type="Login", error="bad signature")]))
        with self.assertRaisesRegex(ActionError, "bad signature"):
            await login_action(self.crypto, service)


class TestRegisterAccountAction(unittest.IsolatedAsyncioTestCase):
    async def test_registers_account_root_document_and_client_in_one_batch(self):
        crypto = ClientCrypto(MockPrimitives(), CLIENT_SIGN, CLIENT_CRYPT)
        service = make_service(Response(results=[
            Result(type="InitializeAccount", success=True), Result(type="AuthorizeClient", success=True)]))

        registered = await register_account_action(crypto, service)

        self.assertEqual(service.request.await_count, 1)
        self.assertEqual(sent_actions(service), [
            {"type": "InitializeAccount", "payload": {
                "accountId": "signPub2",
                "cryptPubKey": "cryptPub1",
                "signPubKey": "signPub2",
                "encCryptPrivKey": "encrypted:cryptPub1:cryptPriv1",
                "encSignPrivKey": "encrypted:cryptPub1:signPriv2",
                "rootDocCryptPubKey": "cryptPub3",
                "rootDocEncCryptPrivKey": "encrypted:cryptPub1:cryptPriv3",
            }},
            {"type": "AuthorizeClient", "payload": {
                "accountId": "signPub2",
                "clientId": "clientSignPub",
                "cryptTransformKey": "transform:cryptPriv1:clientCryptPub",
            }},
        ])
        self.assertEqual(registered.account_sign_pub_key, "signPub2")
        self.assertEqual(registered.root_doc.document_crypt_pub_key, "cryptPub3")

    async def test_known_account_keys_skip_creation_and_client_authorization(self):
        crypto = ClientCrypto(MockPrimitives(), CLIENT_SIGN, CLIENT_CRYPT,
                              account_sign_pub_key="acctSignPub", account_crypt_pub_key="acctCryptPub")
        service = make_service(Response(results=[Result(type="InitializeAccount", success=True)]))

        await register_account_action(crypto, service)

        actions = sent_actions(service)
        self.assertEqual([a["type"] for a in actions], ["InitializeAccount"])
        self.assertEqual(actions[0]["payload"]["accountId"], "acctSignPub")
        self.assertEqual(actions[0]["payload"]["encCryptPrivKey"], "")
        self.assertEqual(actions[0]["payload"]["rootDocEncCryptPrivKey"], "encrypted:acctCryptPub:cryptPriv1")

    async def test_unsupported_capability_fails_before_any_send(self):
        service = make_service()
        with self.assertRaisesRegex(UnsupportedOperationError, "createDocument"):
            await register_account_action(SigningOnlyCrypto(), service)
        service.request.assert_not_awaited()

    async def test_erroring_registration_batch(self):
        crypto = ClientCrypto(MockPrimitives(), CLIENT_SIGN, CLIENT_CRYPT)
        service = make_service(Response(results=[
            Result(type="InitializeAccount", error="account exists"),
            Result(type="AuthorizeClient", error="unknown account"),
        ]))
        with self.assertRaises(ActionError) as ctx:
            await register_account_action(crypto, service)
        self.assertEqual(len(ctx.exception.results), 2)


if __name__ == '__main__':
    unittest.main()
