"""
Group handlers.

A plain member gets a group -> member transform key (read through the
service). An admin additionally receives the group crypt private key wrapped
to its own public key, which is what lets it add further members.
"""
import logging
from typing import List

from client_crypto.capabilities import CreatedGroup, GroupCreator, Membership, MembershipCreator, RequestSigner
from rights_actions.batch import get_key_pairs, get_pub_keys, require_capability, send_batch
from rights_protocol.models import (
    Action,
    ActionType,
    CreateGroupPayload,
    GrantKind,
    GroupAdminPayload,
    GroupMemberPayload,
    KeyPairsResultPayload,
    PubKeysResultPayload,
)
from rights_protocol.response_checks import result_payload
from rights_protocol.service import ServiceInterface

logger = logging.getLogger(__name__)


async def create_group_action(client_crypto: RequestSigner, service: ServiceInterface,
                              account_id: str) -> CreatedGroup:
    """
    Creates a group owned by account_id. The creating account joins as a
    signing member and as admin in the same batch as CreateGroup.
    """
    group_creator = require_capability(client_crypto, GroupCreator, "createGroup")
    require_capability(client_crypto, MembershipCreator, "createMembership")

    response = await send_batch(client_crypto, service, [get_key_pairs(GrantKind.ACCOUNT, account_id)])
    account_keys = result_payload(response, ActionType.GET_KEY_PAIRS, KeyPairsResultPayload)

    group = await group_creator.create_group(account_keys.crypt_pub_key)

    await send_batch(client_crypto, service, [
        Action(type=ActionType.CREATE_GROUP, payload=CreateGroupPayload(
            account_id=account_id,
            group_id=group.group_sign_pub_key,
            crypt_pub_key=group.group_crypt_pub_key,
            enc_crypt_priv_key=group.group_enc_crypt_priv_key,
            enc_sign_priv_key=group.group_enc_sign_priv_key,
        )),
        Action(type=ActionType.ADD_MEMBER_TO_GROUP, payload=GroupMemberPayload(
            account_id=account_id,
            group_id=group.group_sign_pub_key,
            can_sign=True,
            crypt_transform_key=group.member_crypt_transform_key,
        )),
        Action(type=ActionType.ADD_ADMIN_TO_GROUP, payload=GroupAdminPayload(
            account_id=account_id,
            group_id=group.group_sign_pub_key,
            enc_crypt_priv_key=group.group_enc_crypt_priv_key,
        )),
    ])
    logger.info("[CreateGroup] Group %s created by %s.", group.group_sign_pub_key, account_id)
    return group


async def add_member_to_group_action(client_crypto: RequestSigner, service: ServiceInterface,
                                     group_id: str, member_account_id: str,
                                     can_sign: bool = False, admin: bool = False) -> Membership:
    """
    Adds member_account_id to group_id.

    Args:
        can_sign: Lets the member sign on behalf of the group. Implied by admin.
        admin: Also re-wrap the group private key to the member. AddAdminToGroup
            is only sent when that derivation produced a wrapped key.
    """
    membership_creator = require_capability(client_crypto, MembershipCreator, "createMembership")

    response = await send_batch(client_crypto, service, [
        get_pub_keys(GrantKind.ACCOUNT, member_account_id),
        get_key_pairs(GrantKind.GROUP, group_id),
    ])
    member_keys = result_payload(response, ActionType.GET_PUB_KEYS, PubKeysResultPayload)
    group_keys = result_payload(response, ActionType.GET_KEY_PAIRS, KeyPairsResultPayload)

    membership = await membership_creator.create_membership(
        group_crypt_pub_key=group_keys.crypt_pub_key,
        group_enc_crypt_priv_key=group_keys.enc_crypt_priv_key,
        member_crypt_pub_key=member_keys.crypt_pub_key,
        admin=admin,
    )

    actions: List[Action] = [
        Action(type=ActionType.ADD_MEMBER_TO_GROUP, payload=GroupMemberPayload(
            account_id=member_account_id,
            group_id=group_id,
            can_sign=admin or can_sign,
            crypt_transform_key=membership.member_crypt_transform_key,
        )),
    ]
    if admin and membership.enc_crypt_priv_key:
        actions.append(Action(type=ActionType.ADD_ADMIN_TO_GROUP, payload=GroupAdminPayload(
            account_id=member_account_id,
            group_id=group_id,
            enc_crypt_priv_key=membership.enc_crypt_priv_key,
        )))

    await send_batch(client_crypto, service, actions)
    return membership


# TODO: re-issue memberships and grants for accounts whose signing delegation
# runs through the removed member; removal currently sends one action only.
async def remove_member_from_group_action(client_crypto: RequestSigner, service: ServiceInterface,
                                          group_id: str, member_account_id: str) -> None:
    await send_batch(client_crypto, service, [
        Action(type=ActionType.REMOVE_MEMBER_FROM_GROUP,
               payload=GroupMemberPayload(account_id=member_account_id, group_id=group_id)),
    ])


async def remove_admin_from_group_action(client_crypto: RequestSigner, service: ServiceInterface,
                                         group_id: str, admin_account_id: str) -> None:
    await send_batch(client_crypto, service, [
        Action(type=ActionType.REMOVE_ADMIN_FROM_GROUP,
               payload=GroupAdminPayload(account_id=admin_account_id, group_id=group_id)),
    ])
