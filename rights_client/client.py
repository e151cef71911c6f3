"""
High-level rights client.

Wraps the action handlers behind simple async methods. The client holds no
session state of its own: every method takes the caller's Session, and the
three session-changing operations (login, register_account,
deauthorize_client) return the new one.
"""
import hashlib
import logging
from typing import List, Optional, Sequence

from client_crypto.capabilities import RequestSigner
from rights_actions.client_actions import authorize_client_action, deauthorize_client_action
from rights_actions.document_actions import (
    create_document_action,
    decrypt_document_texts_action,
    encrypt_document_texts_action,
    grant_access_action,
    revoke_access_action,
    sign_document_hashes_action,
    update_document_action,
)
from rights_actions.group_actions import (
    add_member_to_group_action,
    create_group_action,
    remove_admin_from_group_action,
    remove_member_from_group_action,
)
from rights_actions.session_actions import login_action, register_account_action
from rights_client.session import Session
from rights_protocol.errors import CallerPreconditionError
from rights_protocol.models import GrantKind
from rights_protocol.service import ServiceInterface

logger = logging.getLogger(__name__)


def hash_for_signature(text: str) -> str:
    """SHA-256 hex digest of a UTF-8 text; the form SignDocument expects for texts."""
    return hashlib.sha256(text.encode('utf-8')).hexdigest()


class RightsClient:
    def __init__(self, client_crypto: RequestSigner, service: ServiceInterface):
        self.client_crypto = client_crypto
        self.service = service
        self.client_id = client_crypto.public_keys().client_sign_pub_key

    @staticmethod
    def _required(value: str, name: str) -> str:
        if not value:
            raise CallerPreconditionError(f"missing {name}")
        return value

    @staticmethod
    def _account_id(session: Session) -> str:
        if not session.account_id:
            raise CallerPreconditionError("session has no account id; login or register first")
        return session.account_id

    # --- Session ---
    def new_session(self) -> Session:
        """An anonymous session for this client."""
        return Session(client_id=self.client_id)

    async def login(self, session: Session) -> Session:
        """
        Asks the service whether this client is authorized on an account.

        Returns:
            A logged-in session if the service reported an account, otherwise an
            anonymous one. On failure the exception propagates and the caller's
            session is untouched.
        """
        result = await login_action(self.client_crypto, self.service)
        if not result.account_id:
            logger.info("[RightsClient] Client %s is not registered on any account.", self.client_id)
            return session.anonymous()
        return session.logged_in(result.account_id, result.root_document_id)

    async def register_account(self, session: Session) -> Session:
        """Creates an account for this client and logs in. No-op if the session already has one."""
        if session.account_id:
            return session
        await register_account_action(self.client_crypto, self.service)
        return await self.login(session)

    async def authorize_client(self, session: Session, client_id: str) -> None:
        await authorize_client_action(self.client_crypto, self.service,
                                      account_id=self._account_id(session),
                                      client_id=self._required(client_id, "client id"))

    async def deauthorize_client(self, session: Session, client_id: str = "") -> Session:
        """
        Deauthorizes client_id from the session's account; defaults to this client.
        Deauthorizing this client returns an anonymous session.
        """
        target = client_id or self.client_id
        await deauthorize_client_action(self.client_crypto, self.service,
                                        account_id=session.account_id,
                                        client_id=target)
        if target == self.client_id:
            return session.anonymous()
        return session

    # --- Groups ---
    async def create_group(self, session: Session) -> str:
        """Returns the new group's id."""
        group = await create_group_action(self.client_crypto, self.service, self._account_id(session))
        return group.group_sign_pub_key

    async def add_reader_to_group(self, group_id: str, member_account_id: str) -> None:
        await add_member_to_group_action(self.client_crypto, self.service,
                                         self._required(group_id, "group id"),
                                         self._required(member_account_id, "member account id"))

    async def add_signer_to_group(self, group_id: str, member_account_id: str) -> None:
        await add_member_to_group_action(self.client_crypto, self.service,
                                         self._required(group_id, "group id"),
                                         self._required(member_account_id, "member account id"),
                                         can_sign=True)

    async def add_admin_to_group(self, group_id: str, member_account_id: str) -> None:
        await add_member_to_group_action(self.client_crypto, self.service,
                                         self._required(group_id, "group id"),
                                         self._required(member_account_id, "member account id"),
                                         admin=True)

    async def remove_member_from_group(self, group_id: str, member_account_id: str) -> None:
        await remove_member_from_group_action(self.client_crypto, self.service,
                                              self._required(group_id, "group id"),
                                              self._required(member_account_id, "member account id"))

    async def remove_admin_from_group(self, group_id: str, admin_account_id: str) -> None:
        """Revokes admin rights; the account stays a member of the group."""
        await remove_admin_from_group_action(self.client_crypto, self.service,
                                             self._required(group_id, "group id"),
                                             self._required(admin_account_id, "admin account id"))

    # --- Documents ---
    async def create_document(self, session: Session) -> str:
        """Returns the new document's id."""
        record = await create_document_action(self.client_crypto, self.service, self._account_id(session))
        return record.document_id

    async def update_document_encryption(self, session: Session, document_id: str) -> str:
        """Rotates the document's crypt key pair; returns the new public crypt key."""
        document = await update_document_action(self.client_crypto, self.service, self._account_id(session),
                                                self._required(document_id, "document id"))
        return document.document_crypt_pub_key

    async def grant_read_access(self, document_id: str, grant_kind: GrantKind, grantee_id: str) -> None:
        await grant_access_action(self.client_crypto, self.service, self._required(document_id, "document id"),
                                  GrantKind(grant_kind), self._required(grantee_id, "grantee id"))

    async def grant_sign_access(self, document_id: str, grant_kind: GrantKind, grantee_id: str) -> None:
        await grant_access_action(self.client_crypto, self.service, self._required(document_id, "document id"),
                                  GrantKind(grant_kind), self._required(grantee_id, "grantee id"), can_sign=True)

    async def revoke_access(self, document_id: str, grant_kind: GrantKind, grantee_id: str) -> None:
        await revoke_access_action(self.client_crypto, self.service, self._required(document_id, "document id"),
                                   GrantKind(grant_kind), self._required(grantee_id, "grantee id"))

    async def sign_document_hashes(self, document_id: str, hashes: Sequence[str]) -> List[str]:
        return await sign_document_hashes_action(self.client_crypto, self.service,
                                                 self._required(document_id, "document id"), hashes)

    async def sign_document_texts(self, document_id: str, texts: Sequence[str]) -> List[str]:
        hashes = [hash_for_signature(text) for text in texts]
        return await self.sign_document_hashes(document_id, hashes)

    async def encrypt_document_texts(self, document_id: str, plaintexts: Sequence[str]) -> List[str]:
        return await encrypt_document_texts_action(self.client_crypto, self.service,
                                                   self._required(document_id, "document id"), plaintexts)

    async def decrypt_document_texts(self, document_id: str, ciphertexts: Sequence[str]) -> List[Optional[str]]:
        return await decrypt_document_texts_action(self.client_crypto, self.service,
                                                   self._required(document_id, "document id"), ciphertexts)
