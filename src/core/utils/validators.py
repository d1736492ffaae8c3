"""Request validation utilities."""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from core.models.errors import MediaServiceError

ModelT = TypeVar("ModelT", bound=BaseModel)


def sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Sanitize Pydantic validation errors for API responses.

    Removes sensitive/internal fields like:
    - url
    - ctx
    - input
    - internal exception details
    """
    sanitized: list[dict[str, str]] = []

    for err in errors:
        field = ".".join(str(x) for x in err.get("loc", [])) or "query"
        raw_msg = err.get("msg", "Invalid value")

        # Remove noisy prefixes
        msg = raw_msg.replace("Value error,", "").strip()

        if "field required" in msg.lower():
            msg = f"{field} is required"

        sanitized.append(
            {
                "field": field,
                "message": msg,
            }
        )

    return sanitized


def validate_request(model: type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """Validate request data against a Pydantic model.

    Args:
        model: Pydantic model class
        data: Input data to validate

    Returns:
        The validated model

    Raises:
        MediaServiceError: INVALID_INPUT carrying the sanitized field errors;
            the message is the first field's message
    """
    try:
        return model(**data)

    except ValidationError as exc:
        sanitized = sanitize_validation_errors(list(exc.errors()))
        message = sanitized[0]["message"] if sanitized else "Invalid request parameters"
        raise MediaServiceError.invalid_input(
            message, details={"fields": sanitized}
        ) from exc


def extract_query_params(event: Mapping[str, Any]) -> dict[str, str]:
    """Flatten API Gateway query parameters.

    Array-valued parameters resolve to their first element, so the
    multi-value map wins over the single-value one (which holds the last).
    """
    single: Mapping[str, Any] = event.get("queryStringParameters") or {}
    multi: Mapping[str, Any] = event.get("multiValueQueryStringParameters") or {}

    params: dict[str, str] = {str(k): str(v) for k, v in single.items() if v is not None}
    for name, values in multi.items():
        if isinstance(values, list) and values:
            params[str(name)] = str(values[0])

    return params
