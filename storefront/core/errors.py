# storefront/core/errors.py
from typing import Any

from fastapi import HTTPException, status


class ValidationFailed(HTTPException):
    """
    Malformed or out-of-range input (400).

    Carries a list of field-level entries, each shaped like
    ``{"msg": ..., "param": ...}``.
    """

    def __init__(self, errors: list[dict[str, Any]]):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=errors)


class BadRequest(HTTPException):
    def __init__(self, msg: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=msg)


class Conflict(HTTPException):
    """Duplicate email/username. Reported as 400 like other bad input."""

    def __init__(self, msg: str = "Resource already exists"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=msg)


class Unauthenticated(HTTPException):
    """No token on the request."""

    def __init__(self, msg: str = "Unauthenticated"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=msg)


class Unauthorized(HTTPException):
    """Token unknown/expired, or credentials rejected."""

    def __init__(self, msg: str = "Invalid authentication token"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=msg)


class Forbidden(HTTPException):
    def __init__(self, msg: str = "User is unauthorized to access this resource"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=msg)


class NotFound(HTTPException):
    def __init__(self, msg: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=msg)


class Unexpected(HTTPException):
    def __init__(self, msg: str = "Unexpected error encountered"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=msg
        )


class CacheUnavailable(Exception):
    """The session cache backend could not be reached or rejected a command."""


def field_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Convert pydantic error dicts into ``{"msg", "param"}`` entries.

    `param` is the last element of the error location ("body.email" -> "email").
    """
    entries = []
    for err in errors:
        loc = err.get("loc") or ()
        entries.append({
            "msg": err.get("msg", "Invalid value"),
            "param": str(loc[-1]) if loc else None,
        })
    return entries


def error_body(detail: Any) -> dict[str, list[dict[str, Any]]]:
    """
    Normalize an exception detail into the uniform ``{"errors": [...]}`` shape.

    - str        -> [{"msg": detail}]
    - list[dict] -> passed through (field-level validation entries)
    """
    if isinstance(detail, list):
        return {"errors": detail}
    return {"errors": [{"msg": str(detail)}]}
