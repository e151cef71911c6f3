# tests/integration_tests/conftest.py
from typing import AsyncGenerator, Awaitable, Callable

import httpx
import pytest
import pytest_asyncio

from client_crypto.client_crypto import ClientCrypto
from memory_service import ACTIONS_PATH, MemoryRightsService, create_app
from pre_primitives.software_primitives import SoftwarePrimitives
from rights_client.client import RightsClient
from rights_client.identity_store import generate_identity
from rights_protocol.service import RemoteHttpService

BASE_URL = "http://rights.test"


@pytest.fixture
def rights_service() -> MemoryRightsService:
    return MemoryRightsService()


@pytest_asyncio.fixture
async def http_client(rights_service: MemoryRightsService) -> AsyncGenerator[httpx.AsyncClient, None]:
    """An httpx client wired straight into the in-memory service app, no sockets involved."""
    transport = httpx.ASGITransport(app=create_app(rights_service))
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def remote_service(http_client: httpx.AsyncClient) -> RemoteHttpService:
    return RemoteHttpService(BASE_URL + ACTIONS_PATH, client=http_client)


@pytest.fixture
def make_rights_client(remote_service: RemoteHttpService) -> Callable[[], Awaitable[RightsClient]]:
    """Each call builds a client for a brand new device identity."""
    async def factory() -> RightsClient:
        primitives = SoftwarePrimitives()
        identity = await generate_identity(primitives)
        client_crypto = ClientCrypto(primitives, identity.sign_key_pair, identity.crypt_key_pair)
        return RightsClient(client_crypto, remote_service)
    return factory
