"""Shared plumbing for the ``/api/v1/functions/*`` endpoints.

These endpoints parse their own bodies so validation failures come back as
400 with a single human-readable message instead of FastAPI's 422 list.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from collabex.errors import ValidationFailed

INVALID_BODY = "Invalid request body"
GENERIC_ERROR = "An error occurred processing your request"


async def read_json_body(request: Request) -> dict[str, Any]:
    """
    Decode the request body as a JSON object.

    Raises:
        ValidationFailed: If the body is not valid JSON or not an object.
    """
    try:
        body = await request.json()
    except ValueError as e:
        raise ValidationFailed(INVALID_BODY) from e
    if not isinstance(body, dict):
        raise ValidationFailed(INVALID_BODY)
    return body


def first_validation_message(exc: ValidationError, messages: dict[str, str], default_field: str) -> str:
    """Map the first failing field (by alias) to its fixed message.

    Model-level validator errors carry an empty location and are reported
    against ``default_field``.
    """
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = str(loc[0]) if loc else default_field
        return messages.get(field, INVALID_BODY)
    return INVALID_BODY


def error_response(status_code: int, content: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content)
