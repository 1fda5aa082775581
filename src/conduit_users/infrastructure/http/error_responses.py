"""JSON error bodies for the user API; every error nests under `errors`."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from conduit_users.domain.users.validation import INVALID_MESSAGE
from conduit_users.infrastructure.http.auth_guard import AuthTokenError

NOT_FOUND_MESSAGE = "not found"


def field_errors_response(
    errors: Mapping[str, Sequence[str]],
    *,
    status_code: int = 422,
) -> JSONResponse:
    """Render a field-error map, e.g. `{"errors": {"email": ["can't be blank"]}}`."""

    return JSONResponse(
        status_code=status_code,
        content={"errors": {field: list(messages) for field, messages in errors.items()}},
    )


def auth_error_response(exc: AuthTokenError) -> JSONResponse:
    """Render a 401 with a human message and a diagnostic error object."""

    return JSONResponse(
        status_code=401,
        content={
            "errors": {
                "message": str(exc),
                "error": {"name": "UnauthorizedError", "code": exc.code},
            }
        },
        headers={"WWW-Authenticate": "Token"},
    )


def user_not_found_response() -> JSONResponse:
    """Render the 404 used when an authenticated user id has no account."""

    return field_errors_response({"user": [NOT_FOUND_MESSAGE]}, status_code=404)


async def request_validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Map body parsing/type errors to `is invalid` under the offending field."""

    _ = request
    return invalid_fields_response(exc.errors())


def invalid_fields_response(errors: Iterable[Mapping[str, Any]]) -> JSONResponse:
    """Collapse pydantic error entries into one `is invalid` per payload field."""

    fields: dict[str, list[str]] = {}
    for error in errors:
        field = _error_field(error.get("loc", ()))
        messages = fields.setdefault(field, [])
        if INVALID_MESSAGE not in messages:
            messages.append(INVALID_MESSAGE)
    return field_errors_response(fields)


def _error_field(loc: Sequence[object]) -> str:
    """Pick the payload field from a location like `("body", "user", "email")`."""

    names = [part for part in loc if isinstance(part, str) and part != "body"]
    if "user" in names:
        position = names.index("user")
        return names[position + 1] if position + 1 < len(names) else "user"
    return names[0] if names else "body"
