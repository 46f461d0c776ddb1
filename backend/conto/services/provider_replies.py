"""Provider Replies — decode bank API bodies and turn error envelopes into failures.

Invariants:
    - Error messages list every {code, description} pair:
      "ErrorCode 500 - code: C1, description: D1; code: C2, description: D2; "
    - An error body that is not a valid error envelope → ProviderParseError
      ("Error parsing error response"), never a guessed message
    - A valid envelope with no errors falls back to the raw status and body
"""

import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from conto.core.call_outcome import AmbiguousFailure, ProviderFailure
from conto.core.errors import ErrorCode, ProviderParseError
from conto.schemas.provider import ErrorEnvelope

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_success_body(body: str, model: type[ModelT]) -> ModelT:
    """Decode a success body or raise ProviderParseError."""
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        logger.error(f"Error parsing JSON response from bank API: {e}")
        raise ProviderParseError("Error parsing JSON response")


def describe_provider_error(outcome: ProviderFailure | AmbiguousFailure) -> str:
    """Synthesize the error message for a non-success response.

    Raises ProviderParseError when the body is not an error envelope.
    """
    try:
        envelope = ErrorEnvelope.model_validate_json(outcome.body)
    except ValidationError as e:
        logger.error(
            f"Error parsing error response from bank API: {e}",
            extra={"status_code": outcome.status_code},
        )
        raise ProviderParseError("Error parsing error response")

    prefix = f"ErrorCode {int(ErrorCode.API_ERROR)} - "
    if not envelope.errors:
        return f"{prefix}API returned HTTP {outcome.status_code}: {outcome.body}"
    details = "".join(
        f"code: {err.code}, description: {err.description}; "
        for err in envelope.errors
    )
    return prefix + details
