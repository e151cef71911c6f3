import json
import unittest
from unittest.mock import AsyncMock, MagicMock

from client_crypto.client_crypto import ClientCrypto
from pre_primitives.mock_primitives import MockPrimitives
from pre_primitives.primitives_interface import KeyPair
from rights_client.client import RightsClient, hash_for_signature
from rights_client.session import Session
from rights_protocol.errors import CallerPreconditionError, MissingResultError, TransportError
from rights_protocol.models import GrantKind, Response, Result
from rights_protocol.service import ServiceInterface

CLIENT_SIGN = KeyPair(pub_key="clientSignPub", priv_key="clientSignPriv")
CLIENT_CRYPT = KeyPair(pub_key="clientCryptPub", priv_key="clientCryptPriv")

LOGGED_IN = Response(results=[
    Result(type="Login", payload={"accountId": "acct", "rootDocumentId": "root"}, success=True)])
OK = Response(results=[])


def make_service(*responses) -> MagicMock:
    service = MagicMock(spec=ServiceInterface)
    service.request = AsyncMock(side_effect=list(responses))
    return service


def sent_actions(service: MagicMock, call_index: int = 0) -> list:
    return json.loads(service.request.await_args_list[call_index].args[0].body)


class TestRightsClientSession(unittest.IsolatedAsyncioTestCase):
    def make_client(self, *responses):
        self.service = make_service(*responses)
        return RightsClient(ClientCrypto(MockPrimitives(), CLIENT_SIGN, CLIENT_CRYPT), self.service)

    async def test_client_id_is_sign_public_key(self):
        client = self.make_client()
        self.assertEqual(client.client_id, "clientSignPub")
        self.assertEqual(client.new_session(), Session(client_id="clientSignPub"))

    async def test_login_returns_logged_in_session(self):
        client = self.make_client(LOGGED_IN)
        session = client.new_session()

        logged_in = await client.login(session)

        self.assertEqual(logged_in.account_id, "acct")
        self.assertEqual(logged_in.root_document_id, "root")
        self.assertTrue(logged_in.is_logged_in)
        self.assertFalse(session.is_logged_in)

    async def test_login_without_account_is_anonymous(self):
        client = self.make_client(Response(results=[Result(type="Login", payload={}, success=True)]))
        stale = Session(client_id="clientSignPub", account_id="old", root_document_id="oldRoot")

        session = await client.login(stale)

        self.assertEqual(session, Session(client_id="clientSignPub"))

    async def test_login_with_null_account_is_anonymous(self):
        client = self.make_client(Response.model_validate({"results": [
            {"type": "Login", "payload": {"accountId": None, "rootDocumentId": None}, "success": True}]}))

        session = await client.login(client.new_session())

        self.assertEqual(session, Session(client_id="clientSignPub"))

    async def test_failed_login_leaves_session_untouched(self):
        client = self.make_client(OK)
        session = Session(client_id="clientSignPub", account_id="acct", root_document_id="root")
        with self.assertRaises(MissingResultError):
            await client.login(session)
        self.assertEqual(session.account_id, "acct")

    async def test_transport_errors_propagate(self):
        client = self.make_client(TransportError("Bad HTTP Response: 502", status_code=502))
        with self.assertRaises(TransportError):
            await client.login(client.new_session())

    async def test_register_is_noop_when_logged_in(self):
        client = self.make_client()
        session = Session(client_id="clientSignPub", account_id="acct")

        self.assertIs(await client.register_account(session), session)
        self.service.request.assert_not_awaited()

    async def test_register_then_login(self):
        client = self.make_client(
            Response(results=[Result(type="InitializeAccount", success=True),
                              Result(type="AuthorizeClient", success=True)]),
            LOGGED_IN,
        )

        session = await client.register_account(client.new_session())

        self.assertEqual(session.account_id, "acct")
        self.assertEqual([a["type"] for a in sent_actions(self.service, 0)], ["InitializeAccount", "AuthorizeClient"])
        self.assertEqual([a["type"] for a in sent_actions(self.service, 1)], ["Login"])

    async def test_deauthorize_self_by_default(self):
        client = self.make_client(OK)
        session = Session(client_id="clientSignPub", account_id="acct", root_document_id="root")

        new_session = await client.deauthorize_client(session)

        self.assertFalse(new_session.is_logged_in)
        self.assertEqual(sent_actions(self.service)[0]["payload"], {"accountId": "acct", "clientId": "clientSignPub"})

    async def test_deauthorize_self_explicitly(self):
        client = self.make_client(OK)
        session = Session(client_id="clientSignPub", account_id="acct")
        self.assertFalse((await client.deauthorize_client(session, "clientSignPub")).is_logged_in)

    async def test_deauthorize_other_client_keeps_session(self):
        client = self.make_client(OK)
        session = Session(client_id="clientSignPub", account_id="acct")

        self.assertIs(await client.deauthorize_client(session, "otherClient"), session)
        self.assertEqual(sent_actions(self.service)[0]["payload"]["clientId"], "otherClient")


class TestRightsClientPreconditions(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.service = make_service()
        self.client = RightsClient(ClientCrypto(MockPrimitives(), CLIENT_SIGN, CLIENT_CRYPT), self.service)
        self.anonymous = self.client.new_session()

    async def test_grants_require_grantee(self):
        with self.assertRaisesRegex(CallerPreconditionError, "grantee"):
            await self.client.grant_read_access("doc1", GrantKind.ACCOUNT, "")
        with self.assertRaisesRegex(CallerPreconditionError, "grantee"):
            await self.client.grant_sign_access("doc1", GrantKind.GROUP, "")
        self.service.request.assert_not_awaited()

    async def test_empty_ids_fail_before_any_send(self):
        logged_in = Session(client_id="clientSignPub", account_id="acct")
        calls = {
            "client id": self.client.authorize_client(logged_in, ""),
            "group id": self.client.add_reader_to_group("", "member"),
            "member account id": self.client.add_signer_to_group("group1", ""),
            "admin account id": self.client.remove_admin_from_group("group1", ""),
            "document id": self.client.revoke_access("", GrantKind.ACCOUNT, "grantee"),
        }
        for name, call in calls.items():
            with self.assertRaisesRegex(CallerPreconditionError, name):
                await call
        for call in (
            self.client.add_admin_to_group("group1", ""),
            self.client.remove_member_from_group("", "member"),
            self.client.revoke_access("doc1", GrantKind.GROUP, ""),
            self.client.update_document_encryption(logged_in, ""),
            self.client.sign_document_hashes("", ["h"]),
            self.client.encrypt_document_texts("", ["p"]),
            self.client.decrypt_document_texts("", ["c"]),
        ):
            with self.assertRaises(CallerPreconditionError):
                await call
        self.service.request.assert_not_awaited()

    async def test_account_scoped_operations_require_login(self):
        for call in (
            self.client.create_document(self.anonymous),
            self.client.create_group(self.anonymous),
            self.client.authorize_client(self.anonymous, "otherClient"),
            self.client.update_document_encryption(self.anonymous, "doc1"),
        ):
            with self.assertRaises(CallerPreconditionError):
                await call
        self.service.request.assert_not_awaited()


class TestRightsClientDocuments(unittest.IsolatedAsyncioTestCase):
    async def test_sign_document_texts_sends_hashes(self):
        service = make_service(Response(results=[
            Result(type="SignDocument", payload={"signatures": ["sig1"]}, success=True)]))
        client = RightsClient(ClientCrypto(MockPrimitives(), CLIENT_SIGN, CLIENT_CRYPT), service)

        signatures = await client.sign_document_texts("doc1", ["hello"])

        self.assertEqual(signatures, ["sig1"])
        self.assertEqual(sent_actions(service)[0]["payload"]["hashes"], [
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"])
        self.assertEqual(hash_for_signature("hello"), sent_actions(service)[0]["payload"]["hashes"][0])

    async def test_grant_accepts_kind_as_string(self):
        service = make_service(
            Response(results=[
                Result(type="GetPubKeys", payload={"cryptPubKey": "groupCryptPub"}),
                Result(type="DecryptDocument", payload={"encCryptPrivKey": "encrypted:clientCryptPub:docPriv"}),
            ]),
            OK,
        )
        client = RightsClient(ClientCrypto(MockPrimitives(), CLIENT_SIGN, CLIENT_CRYPT), service)

        await client.grant_sign_access("doc1", "group", "group1")

        payload = sent_actions(service, 1)[0]["payload"]
        self.assertEqual((payload["kind"], payload["id"], payload["canSign"]), ("group", "group1", True))


if __name__ == '__main__':
    unittest.main()
