# rights_protocol/models.py
import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# --- Common Base Models ---
class WireModel(BaseModel):
    """Base for everything on the wire: snake_case in Python, camelCase in JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ActionType(str, Enum):
    LOGIN = "Login"
    INITIALIZE_ACCOUNT = "InitializeAccount"
    AUTHORIZE_CLIENT = "AuthorizeClient"
    DEAUTHORIZE_CLIENT = "DeauthorizeClient"
    CREATE_GROUP = "CreateGroup"
    ADD_MEMBER_TO_GROUP = "AddMemberToGroup"
    ADD_ADMIN_TO_GROUP = "AddAdminToGroup"
    REMOVE_MEMBER_FROM_GROUP = "RemoveMemberFromGroup"
    REMOVE_ADMIN_FROM_GROUP = "RemoveAdminFromGroup"
    CREATE_DOCUMENT = "CreateDocument"
    UPDATE_DOCUMENT = "UpdateDocument"
    GRANT_ACCESS = "GrantAccess"
    REVOKE_ACCESS = "RevokeAccess"
    SIGN_DOCUMENT = "SignDocument"
    DECRYPT_DOCUMENT = "DecryptDocument"
    GET_PUB_KEYS = "GetPubKeys"
    GET_KEY_PAIRS = "GetKeyPairs"


class GrantKind(str, Enum):
    ACCOUNT = "account"
    GROUP = "group"
    CLIENT = "client"


# --- Action Payloads ---
class LoginPayload(WireModel):
    crypt_pub_key: str


class InitializeAccountPayload(WireModel):
    account_id: str
    crypt_pub_key: str
    sign_pub_key: str
    enc_crypt_priv_key: str = Field(..., description="Account crypt private key wrapped to the account.")
    enc_sign_priv_key: str = Field(..., description="Account sign private key wrapped to the account.")
    root_doc_crypt_pub_key: str
    root_doc_enc_crypt_priv_key: str


class ClientAuthPayload(WireModel):
    """Payload for AuthorizeClient and DeauthorizeClient."""
    account_id: str
    client_id: str
    crypt_transform_key: Optional[str] = Field(None, description="Account to client transform key (authorize only).")


class CreateGroupPayload(WireModel):
    account_id: str
    group_id: str
    crypt_pub_key: str
    enc_crypt_priv_key: str
    enc_sign_priv_key: str


class GroupMemberPayload(WireModel):
    """Payload for AddMemberToGroup and RemoveMemberFromGroup."""
    account_id: str
    group_id: str
    can_sign: Optional[bool] = None
    crypt_transform_key: Optional[str] = None


class GroupAdminPayload(WireModel):
    """Payload for AddAdminToGroup and RemoveAdminFromGroup."""
    account_id: str
    group_id: str
    enc_crypt_priv_key: Optional[str] = Field(None, description="Group crypt private key wrapped to the admin.")


class CreateDocumentPayload(WireModel):
    creator_id: str
    crypt_account_id: str
    crypt_pub_key: str
    enc_crypt_priv_key: str


class UpdateDocumentPayload(WireModel):
    document_id: str
    crypt_account_id: str
    crypt_pub_key: str
    enc_crypt_priv_key: str


class GrantPayload(WireModel):
    """Payload for GrantAccess and RevokeAccess."""
    document_id: str
    kind: GrantKind
    id: str
    can_sign: Optional[bool] = None
    enc_crypt_priv_key: Optional[str] = None


class SignDocumentPayload(WireModel):
    document_id: str
    hashes: List[str]


class DocumentRefPayload(WireModel):
    """Payload for DecryptDocument."""
    document_id: str


class KeyLookupPayload(WireModel):
    """Payload for GetPubKeys and GetKeyPairs."""
    kind: GrantKind
    id: str


# --- Result Payloads ---
class LoginResultPayload(WireModel):
    account_id: str = ""
    root_document_id: str = ""

    @field_validator("account_id", "root_document_id", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        # An unregistered client may get nulls back.
        return "" if value is None else value


class CreateDocumentResultPayload(WireModel):
    document_id: str


class SignDocumentResultPayload(WireModel):
    signatures: List[str]


class DecryptDocumentResultPayload(WireModel):
    document_id: str = ""
    enc_crypt_priv_key: str


class PubKeysResultPayload(WireModel):
    kind: Optional[GrantKind] = None
    id: str = ""
    crypt_pub_key: str
    sign_pub_key: str = ""


class KeyPairsResultPayload(PubKeysResultPayload):
    enc_crypt_priv_key: str = ""
    enc_sign_priv_key: str = ""


# --- Envelopes ---
class Action(WireModel):
    type: ActionType
    payload: WireModel

    def to_wire(self) -> Dict[str, Any]:
        return {"type": self.type.value, "payload": self.payload.to_wire()}


class Request(WireModel):
    body: str = Field(..., description="Canonical JSON array of actions.")
    client_id: str = Field(..., description="Signing public key of the sender.")
    signature: str


class Result(WireModel):
    type: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    success: bool = False
    error: Optional[str] = None

    @field_validator("payload", mode="before")
    @classmethod
    def _null_payload(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("error", mode="before")
    @classmethod
    def _stringify_error(cls, value: Any) -> Optional[str]:
        if not value:
            return None
        return value if isinstance(value, str) else str(value)


class Response(WireModel):
    results: List[Result] = Field(default_factory=list)


def canonical_body(actions: List[Action]) -> str:
    """Deterministic serialization of an action batch; the exact bytes that get signed."""
    return json.dumps([action.to_wire() for action in actions], sort_keys=True, separators=(",", ":"))
