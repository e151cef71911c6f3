# tests/protocol_tests/conftest.py
import json
from typing import Callable, List

import httpx
import pytest

from rights_protocol.models import Request


@pytest.fixture
def sample_request() -> Request:
    return Request(body='[{"payload":{"cryptPubKey":"k"},"type":"Login"}]', client_id="signPub", signature="sig")


@pytest.fixture
def recorded_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_http_client(recorded_requests: List[httpx.Request]) -> Callable[..., httpx.AsyncClient]:
    """
    Builds an httpx.AsyncClient whose transport answers every POST with the
    given status and JSON body, recording what was sent.
    """
    def factory(status_code: int = 200, body=None) -> httpx.AsyncClient:
        def handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            if isinstance(body, (bytes, str)):
                return httpx.Response(status_code, content=body)
            return httpx.Response(status_code, content=json.dumps(body if body is not None else {"results": []}))
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return factory
