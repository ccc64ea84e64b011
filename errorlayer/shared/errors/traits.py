"""
Capability probing for failures raised by unrelated subsystems.

Errors reach the classifier from pydantic, FastAPI, Starlette,
SQLAlchemy, DB-API drivers, PyJWT and plain Python code. Each has its
own shape. ``inspect_error`` reads everything classification needs in
one pass, so the rules only ever see an ``ErrorTraits`` value.
"""

import re
import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import jwt
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import DataError, IntegrityError

from errorlayer.domain.errors import ApiError

HTTP_413 = 413

SIZE_LIMIT_TYPE = "entity.too.large"

# SQLSTATE codes reported by PostgreSQL drivers.
UNIQUE_VIOLATION = "23505"
INVALID_TEXT_REPRESENTATION = "22P02"

VALIDATION_NAMES = frozenset({"ValidationError"})
TOKEN_NAMES = frozenset({"JsonWebTokenError", "TokenExpiredError"})
CAST_NAMES = frozenset({"CastError"})

LOCATION_SOURCES = frozenset({"body", "query", "path", "header", "cookie"})

_PG_KEY_DETAIL = re.compile(r"Key \((?P<fields>[^)]+)\)=")
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<fields>.+)")


@dataclass(frozen=True)
class ErrorTraits:
    """Everything the classification rules may look at.

    Attributes:
        name: Kind name. ``ApiError.name`` for domain errors, the
            exception type name otherwise.
        message: Best human-readable text carried by the error, if any.
        declared_message: An explicit ``message`` attribute, if any.
        status_code: Integer status the error carries, if any.
        trace: Diagnostic trace. Server-side and development use only.
        is_domain: The error is an ``ApiError``.
        size_limited: The error marks an oversized request body.
        is_validation: The error comes from a validation library.
        field_errors: Field name to message, for validation errors.
        is_token_failure: A credential token failed verification.
        conflict_fields: Fields reported by a uniqueness violation, in
            storage order; ``None`` when the error is not a conflict.
        is_malformed_identifier: Storage rejected a value's format.
    """

    name: str
    message: str | None
    declared_message: str | None
    status_code: int | None
    trace: str
    is_domain: bool = False
    size_limited: bool = False
    is_validation: bool = False
    field_errors: dict[str, str] | None = None
    is_token_failure: bool = False
    conflict_fields: tuple[str, ...] | None = None
    is_malformed_identifier: bool = False


def inspect_error(error: BaseException) -> ErrorTraits:
    """Inspect ``error`` for every capability the classifier understands."""
    is_domain = isinstance(error, ApiError)
    status_code = _status_code_of(error)
    is_validation = not is_domain and _is_validation(error)

    return ErrorTraits(
        name=error.name if is_domain else type(error).__name__,
        message=_message_of(error),
        declared_message=_string_attr(error, "message"),
        status_code=status_code,
        trace=_trace_of(error),
        is_domain=is_domain,
        size_limited=not is_domain and _is_size_limited(error, status_code),
        is_validation=is_validation,
        field_errors=_field_errors_of(error) if is_validation else None,
        is_token_failure=not is_domain and _is_token_failure(error),
        conflict_fields=None if is_domain else _conflict_fields_of(error),
        is_malformed_identifier=not is_domain and _is_malformed_identifier(error),
    )


def _string_attr(error: BaseException, attr: str) -> str | None:
    value = getattr(error, attr, None)
    if isinstance(value, str) and value:
        return value
    return None


def _status_code_of(error: BaseException) -> int | None:
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _message_of(error: BaseException) -> str | None:
    return (
        _string_attr(error, "detail")
        or _string_attr(error, "message")
        or str(error)
        or None
    )


def _trace_of(error: BaseException) -> str:
    if isinstance(error, ApiError):
        return error.stack
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def _is_size_limited(error: BaseException, status_code: int | None) -> bool:
    if getattr(error, "size_limit_exceeded", False) is True:
        return True
    if getattr(error, "type", None) == SIZE_LIMIT_TYPE:
        return True
    return status_code == HTTP_413


def _is_validation(error: BaseException) -> bool:
    if isinstance(error, (PydanticValidationError, RequestValidationError)):
        return True
    return type(error).__name__ in VALIDATION_NAMES


def _is_token_failure(error: BaseException) -> bool:
    if isinstance(error, jwt.InvalidTokenError):
        return True
    return type(error).__name__ in TOKEN_NAMES


def _is_malformed_identifier(error: BaseException) -> bool:
    if isinstance(error, DataError):
        return True
    if _sqlstate_of(error) == INVALID_TEXT_REPRESENTATION:
        return True
    return type(error).__name__ in CAST_NAMES


# ------------------------------------------------------------------
# Validation field errors
# ------------------------------------------------------------------


def _field_errors_of(error: BaseException) -> dict[str, str] | None:
    errors = getattr(error, "errors", None)
    if callable(errors):
        errors = errors()
    if isinstance(errors, Mapping):
        return {str(field): _sub_error_message(sub) for field, sub in errors.items()}
    if isinstance(errors, (list, tuple)):
        return _from_error_list(errors)
    return None


def _from_error_list(items: Any) -> dict[str, str]:
    """Key pydantic-style error dicts by their dotted location.

    Unlike the mapping shape, where N fields give exactly N entries, errors
    sharing a location collapse into one entry holding the first message.
    Pydantic reports every failed constraint on a field separately, and
    the response carries one message per field. Items that are not
    mappings are skipped.
    """
    result: dict[str, str] = {}
    for item in items:
        if not isinstance(item, Mapping):
            continue
        loc = item.get("loc") or ()
        loc = list(loc) if isinstance(loc, (list, tuple)) else [loc]
        if len(loc) > 1 and loc[0] in LOCATION_SOURCES:
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) or "__root__"
        result.setdefault(field, str(item.get("msg", "Invalid value")))
    return result


def _sub_error_message(sub: Any) -> str:
    if isinstance(sub, str):
        return sub
    if isinstance(sub, Mapping) and "message" in sub:
        return str(sub["message"])
    message = getattr(sub, "message", None)
    if isinstance(message, str):
        return message
    if isinstance(sub, (list, tuple)) and sub:
        return _sub_error_message(sub[0])
    return str(sub)


# ------------------------------------------------------------------
# Storage-layer signals
# ------------------------------------------------------------------


def _driver_error(error: BaseException) -> BaseException:
    # SQLAlchemy wraps the DB-API exception in ``orig``.
    orig = getattr(error, "orig", None)
    return orig if isinstance(orig, BaseException) else error


def _sqlstate_of(error: BaseException) -> str | None:
    driver = _driver_error(error)
    return getattr(driver, "pgcode", None) or getattr(driver, "sqlstate", None)


def _driver_text(error: BaseException) -> str:
    driver = _driver_error(error)
    parts = [str(driver)]
    detail = getattr(getattr(driver, "diag", None), "message_detail", None)
    if detail:
        parts.append(detail)
    return "\n".join(parts)


def _conflict_fields_of(error: BaseException) -> tuple[str, ...] | None:
    key_value = getattr(error, "key_value", None)
    if isinstance(key_value, Mapping):
        return tuple(str(field) for field in key_value)

    is_unique_violation = _sqlstate_of(error) == UNIQUE_VIOLATION
    if not (is_unique_violation or isinstance(error, IntegrityError)):
        return None

    text = _driver_text(error)
    if not is_unique_violation and "duplicate key" not in text and "UNIQUE constraint failed" not in text:
        return None

    match = _PG_KEY_DETAIL.search(text)
    if match:
        return tuple(field.strip() for field in match["fields"].split(","))
    match = _SQLITE_UNIQUE.search(text)
    if match:
        return tuple(
            column.strip().rsplit(".", 1)[-1] for column in match["fields"].split(",")
        )
    return ()
