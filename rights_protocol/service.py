"""
Service boundary: accepts a signed batch of actions and returns a batch of results.
RemoteHttpService POSTs the request JSON to a configured endpoint with httpx.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from pydantic import ValidationError

from rights_protocol.errors import TransportError
from rights_protocol.models import Request, Response

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class ServiceInterface(ABC):
    @abstractmethod
    async def request(self, request: Request) -> Response:
        """Sends one signed batch and returns the service's results."""


class RemoteHttpService(ServiceInterface):
    """
    Talks to a rights service over HTTP.

    An httpx.AsyncClient may be injected (shared connection pool, custom
    transport in tests); otherwise one is created and owned by this instance
    and released by aclose() or the async context manager.
    """
    def __init__(self, url: str, client: Optional[httpx.AsyncClient] = None,
                 timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        if not url:
            raise ValueError("Service URL must not be empty.")
        self.url = url
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout_seconds)

    async def request(self, request: Request) -> Response:
        logger.debug("[RemoteHttpService] POST %s", self.url)
        try:
            http_response = await self._client.post(
                self.url,
                content=json.dumps(request.to_wire()),
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException as timeout_err:
            raise TransportError(f"Request to {self.url} timed out: {timeout_err}") from timeout_err
        except httpx.RequestError as req_err:
            raise TransportError(f"Could not reach {self.url}: {req_err}") from req_err

        if http_response.status_code >= 300:
            logger.warning("[RemoteHttpService] Bad HTTP response %d from %s",
                           http_response.status_code, self.url)
            raise TransportError(f"Bad HTTP Response: {http_response.status_code}",
                                 status_code=http_response.status_code)

        try:
            return Response.model_validate(http_response.json())
        except (json.JSONDecodeError, ValidationError) as parse_err:
            raise TransportError(f"Malformed response body from {self.url}: {parse_err}",
                                 status_code=http_response.status_code) from parse_err

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RemoteHttpService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
