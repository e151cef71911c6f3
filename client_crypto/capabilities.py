"""
Capability interfaces for client crypto.

Only RequestSigner is mandatory. Each optional family of operations is its own
ABC; a concrete client crypto inherits the families it supports and action
handlers check for the narrowest one they need before doing any work.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rights_protocol.models import Action, Request


# --- Derivation results ---
@dataclass(frozen=True)
class PublicKeys:
    client_sign_pub_key: str
    client_crypt_pub_key: str
    account_sign_pub_key: str = ""
    account_crypt_pub_key: str = ""


@dataclass(frozen=True)
class CreatedAccount:
    account_crypt_pub_key: str
    account_sign_pub_key: str
    account_enc_crypt_priv_key: str
    account_enc_sign_priv_key: str
    client_crypt_transform_key: str


@dataclass(frozen=True)
class CreatedDocument:
    document_crypt_pub_key: str
    document_enc_crypt_priv_key: str


@dataclass(frozen=True)
class CreatedGroup:
    group_crypt_pub_key: str
    group_sign_pub_key: str
    group_enc_crypt_priv_key: str
    group_enc_sign_priv_key: str
    member_crypt_transform_key: str


@dataclass(frozen=True)
class Membership:
    member_crypt_transform_key: str
    enc_crypt_priv_key: str = ""  # empty unless the member is an admin


@dataclass(frozen=True)
class Grant:
    document_enc_crypt_priv_key_for_grantee: str


@dataclass(frozen=True)
class ClientAuth:
    client_crypt_transform_key: str


# --- Mandatory ---
class RequestSigner(ABC):
    @abstractmethod
    def public_keys(self) -> PublicKeys:
        """The identity's own public keys, plus the account's if known."""

    @abstractmethod
    async def sign_request(self, actions: Sequence[Action]) -> Request:
        """Serializes actions canonically and signs the body with the client sign key."""


# --- Optional capabilities ---
class AccountCreator(ABC):
    @abstractmethod
    async def create_account(self) -> CreatedAccount:
        ...


class ClientAuthorizer(ABC):
    @abstractmethod
    async def create_client_auth(self, account_crypt_pub_key: str, account_enc_crypt_priv_key: str,
                                 client_crypt_pub_key: str) -> ClientAuth:
        ...


class DocumentCreator(ABC):
    @abstractmethod
    async def create_document(self, account_crypt_pub_key: str) -> CreatedDocument:
        ...


class GroupCreator(ABC):
    @abstractmethod
    async def create_group(self, account_crypt_pub_key: str) -> CreatedGroup:
        ...


class MembershipCreator(ABC):
    @abstractmethod
    async def create_membership(self, group_crypt_pub_key: str, group_enc_crypt_priv_key: str,
                                member_crypt_pub_key: str, admin: bool = False) -> Membership:
        ...


class GrantCreator(ABC):
    @abstractmethod
    async def create_grant(self, document_enc_crypt_priv_key: str, grantee_crypt_pub_key: str) -> Grant:
        ...


class DocumentTextCipher(ABC):
    @abstractmethod
    async def encrypt_document_texts(self, document_enc_crypt_priv_key: str,
                                     plaintexts: Sequence[str]) -> List[str]:
        ...

    @abstractmethod
    async def decrypt_document_texts(self, document_enc_crypt_priv_key: str,
                                     ciphertexts: Sequence[str]) -> List[Optional[str]]:
        """Decrypts each text independently; a text that fails yields None."""
