"""Shared plumbing for action handlers: capability checks and signed batch round trips."""
import logging
from typing import Sequence, Type, TypeVar

from client_crypto.capabilities import RequestSigner
from rights_protocol.errors import UnsupportedOperationError
from rights_protocol.models import Action, ActionType, GrantKind, KeyLookupPayload, Response
from rights_protocol.response_checks import raise_on_errors
from rights_protocol.service import ServiceInterface

logger = logging.getLogger(__name__)

CapabilityT = TypeVar("CapabilityT")


def require_capability(client_crypto: RequestSigner, capability: Type[CapabilityT],
                       operation: str) -> CapabilityT:
    """Fails before any network call if client_crypto does not implement capability."""
    if not isinstance(client_crypto, capability):
        raise UnsupportedOperationError(operation)
    return client_crypto


async def send_batch(client_crypto: RequestSigner, service: ServiceInterface,
                     actions: Sequence[Action]) -> Response:
    """
    Signs and sends one batch, then fails on any erroring result.

    Raises:
        ActionError: With every erroring result of the batch.
        TransportError: If the service could not be reached.
    """
    logger.debug("[ActionBatch] Sending %s", ", ".join(a.type.value for a in actions))
    request = await client_crypto.sign_request(actions)
    return raise_on_errors(await service.request(request))


def get_pub_keys(kind: GrantKind, id: str) -> Action:
    return Action(type=ActionType.GET_PUB_KEYS, payload=KeyLookupPayload(kind=kind, id=id))


def get_key_pairs(kind: GrantKind, id: str) -> Action:
    return Action(type=ActionType.GET_KEY_PAIRS, payload=KeyLookupPayload(kind=kind, id=id))
