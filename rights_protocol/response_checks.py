# rights_protocol/response_checks.py
import logging
from typing import Type, TypeVar

from pydantic import ValidationError

from rights_protocol.errors import ActionError, MissingResultError
from rights_protocol.models import ActionType, Response, Result, WireModel

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=WireModel)


def raise_on_errors(response: Response) -> Response:
    """
    Fails with every erroring result of the batch, not just the first.
    Successful results in the same batch are not interpreted.
    """
    failed = [result for result in response.results if result.error]
    if failed:
        logger.warning("[ResponseChecks] %d of %d result(s) failed: %s",
                       len(failed), len(response.results), ", ".join(r.type for r in failed))
        raise ActionError(failed)
    return response


def find_result(response: Response, action_type: ActionType) -> Result:
    """Returns the first result of the given type; results are matched by type, never by index."""
    for result in response.results:
        if result.type == action_type.value:
            return result
    raise MissingResultError(action_type.value)


def result_payload(response: Response, action_type: ActionType, model: Type[PayloadT]) -> PayloadT:
    """
    Finds a result by type and validates its payload.

    Raises:
        MissingResultError: If no result of that type exists, or its payload lacks required fields.
    """
    result = find_result(response, action_type)
    try:
        return model.model_validate(result.payload)
    except ValidationError as e:
        raise MissingResultError(action_type.value) from e
