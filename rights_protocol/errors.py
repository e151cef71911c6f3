"""
Exception hierarchy for the rights client.

    RightsClientError
    ├── MissingResultError          expected result type absent from a response
    ├── ActionError                 one or more results carry an error
    ├── UnsupportedOperationError   client crypto lacks a required capability
    ├── CallerPreconditionError     a required argument or session field is empty
    └── TransportError              HTTP failure talking to the service
"""
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from rights_protocol.models import Result


class RightsClientError(Exception):
    """Base exception for every failure surfaced by the rights client."""


class MissingResultError(RightsClientError):
    def __init__(self, expected_type: str):
        self.expected_type = expected_type
        super().__init__(f"No {expected_type} result")


class ActionError(RightsClientError):
    """
    Raised when a response contains erroring results.

    Attributes:
        results: Every erroring result of the batch, in response order.
    """
    def __init__(self, results: List["Result"]):
        self.results = list(results)
        summary = "; ".join(f"{r.type}: {r.error}" for r in self.results)
        super().__init__(f"{len(self.results)} action(s) failed: {summary}")

    @property
    def errors(self) -> List[str]:
        return [r.error or "" for r in self.results]


class UnsupportedOperationError(RightsClientError):
    def __init__(self, capability: str):
        self.capability = capability
        super().__init__(f"client crypto does not support {capability}")


class CallerPreconditionError(RightsClientError):
    pass


class TransportError(RightsClientError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
