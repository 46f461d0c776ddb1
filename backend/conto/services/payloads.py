"""Worker payload helpers — required-field access and reply encoding."""

from typing import Any

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from conto.core.errors import ErrorCode, InvalidRequestError, SerializationError


def require_field(payload: Any, name: str) -> Any:
    """Return payload[name] or fail with VALIDATION_MISSING_PARAMETER."""
    if not isinstance(payload, dict) or payload.get(name) in (None, ""):
        raise InvalidRequestError(
            f"Missing required field: {name}",
            ErrorCode.VALIDATION_MISSING_PARAMETER,
        )
    return payload[name]


def encode_reply(model: BaseModel) -> dict:
    """Dump a reply model to its camelCase JSON-compatible form."""
    try:
        return model.model_dump(by_alias=True, mode="json")
    except PydanticSerializationError as e:
        raise SerializationError(f"Error serializing response: {e}")
