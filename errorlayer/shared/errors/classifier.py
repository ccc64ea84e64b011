"""
Error classification.

Maps any failure raised while serving a request onto a single
NormalizedFailure. Rules run in a fixed order and the first match
wins; a later rule never overrides the status an earlier rule chose.
The request context is used for logging only, never for decisions.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

from starlette.requests import Request

from errorlayer.core.config import BYTES_PER_MB, DisclosureMode
from errorlayer.shared.errors.traits import ErrorTraits, inspect_error

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_413 = 413
HTTP_500 = 500

PAYLOAD_TOO_LARGE = "PayloadTooLarge"
VALIDATION_ERROR = "ValidationError"

INVALID_FIELDS_MESSAGE = "One or more fields are invalid"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"
INVALID_ID_MESSAGE = "Invalid ID format"
ALREADY_EXISTS_MESSAGE = "Resource already exists"
FALLBACK_MESSAGE = "An error occurred"


@dataclass(frozen=True)
class RequestContext:
    """Request details recorded alongside a failure."""

    method: str
    path: str
    client_address: str = "-"

    @classmethod
    def from_request(cls, request: Request) -> "RequestContext":
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        client = request.client.host if request.client else "-"
        return cls(method=request.method, path=path, client_address=client)


@dataclass(frozen=True)
class NormalizedFailure:
    """Classifier output, consumed once by logging and once by the sanitizer.

    Attributes:
        status_code: Effective HTTP status.
        kind: Failure kind shown as ``error`` in the response.
        message: Failure message shown to the client (subject to sanitizing).
        field_errors: Field name to message, validation failures only.
        trace: Diagnostic trace of the original error.
        from_domain: The failure came from a deliberately raised ApiError.
        short_circuit: The response is final and skips sanitizing.
    """

    status_code: int
    kind: str
    message: str
    field_errors: dict[str, str] | None = None
    trace: str | None = None
    from_domain: bool = False
    short_circuit: bool = False


Rule = Callable[[ErrorTraits], NormalizedFailure | None]


def payload_too_large_message(max_payload_bytes: int) -> str:
    ceiling = f"{max_payload_bytes / BYTES_PER_MB:g}MB"
    return (
        f"Request payload too large. Maximum file size is {ceiling}. "
        "Please reduce the file size and try again."
    )


def match_payload_too_large(
    traits: ErrorTraits, *, max_payload_bytes: int
) -> NormalizedFailure | None:
    if not traits.size_limited:
        return None
    return NormalizedFailure(
        status_code=HTTP_413,
        kind=PAYLOAD_TOO_LARGE,
        message=payload_too_large_message(max_payload_bytes),
        short_circuit=True,
    )


def match_domain_error(traits: ErrorTraits) -> NormalizedFailure | None:
    # 401/403 from domain logic keep their own status.
    if not traits.is_domain:
        return None
    return NormalizedFailure(
        status_code=traits.status_code,
        kind=traits.name,
        message=traits.declared_message or FALLBACK_MESSAGE,
        trace=traits.trace,
        from_domain=True,
    )


def match_validation_error(traits: ErrorTraits) -> NormalizedFailure | None:
    if not traits.is_validation:
        return None
    return NormalizedFailure(
        status_code=HTTP_400,
        kind=VALIDATION_ERROR,
        message=traits.declared_message or INVALID_FIELDS_MESSAGE,
        field_errors=traits.field_errors,
        trace=traits.trace,
    )


def match_token_failure(traits: ErrorTraits) -> NormalizedFailure | None:
    if not traits.is_token_failure:
        return None
    return NormalizedFailure(
        status_code=HTTP_401,
        kind=traits.name,
        message=INVALID_TOKEN_MESSAGE,
        trace=traits.trace,
    )


def match_uniqueness_conflict(traits: ErrorTraits) -> NormalizedFailure | None:
    if traits.conflict_fields is None:
        return None
    # Only the first conflicting field is reported.
    if traits.conflict_fields:
        message = f"{traits.conflict_fields[0]} already exists"
    else:
        message = ALREADY_EXISTS_MESSAGE
    return NormalizedFailure(
        status_code=HTTP_400,
        kind=traits.name,
        message=message,
        trace=traits.trace,
    )


def match_malformed_identifier(traits: ErrorTraits) -> NormalizedFailure | None:
    if not traits.is_malformed_identifier:
        return None
    return NormalizedFailure(
        status_code=HTTP_400,
        kind=traits.name,
        message=INVALID_ID_MESSAGE,
        trace=traits.trace,
    )


def match_fallback(traits: ErrorTraits) -> NormalizedFailure:
    status_code = traits.status_code
    if status_code is None or not HTTP_400 <= status_code <= 599:
        status_code = HTTP_500
    return NormalizedFailure(
        status_code=status_code,
        kind=traits.name,
        message=traits.message or FALLBACK_MESSAGE,
        trace=traits.trace,
    )


class ErrorClassifier:
    """Ordered, first-match classification of request failures.

    Args:
        mode: Disclosure mode; decides whether traces reach the log payload.
        max_payload_bytes: Body size ceiling quoted in the 413 message.
    """

    def __init__(self, mode: DisclosureMode, max_payload_bytes: int) -> None:
        self.mode = mode
        self.max_payload_bytes = max_payload_bytes
        self.rules: tuple[Rule, ...] = (
            partial(match_payload_too_large, max_payload_bytes=max_payload_bytes),
            match_domain_error,
            match_validation_error,
            match_token_failure,
            match_uniqueness_conflict,
            match_malformed_identifier,
            match_fallback,
        )

    def classify(self, error: BaseException, context: RequestContext) -> NormalizedFailure:
        """Classify ``error`` and record exactly one log line for it."""
        traits = inspect_error(error)
        failure = self._first_match(traits)

        if failure.short_circuit:
            logger.warning(
                "%d - Payload too large - %s - %s - %s",
                failure.status_code,
                context.path,
                context.method,
                context.client_address,
            )
            return failure

        logger.error(
            "%d - %s - %s - %s - %s",
            failure.status_code,
            traits.message or FALLBACK_MESSAGE,
            context.path,
            context.method,
            context.client_address,
            extra={"stack": traits.trace if self.mode is DisclosureMode.DEVELOPMENT else {}},
        )
        return failure

    def _first_match(self, traits: ErrorTraits) -> NormalizedFailure:
        for rule in self.rules:
            failure = rule(traits)
            if failure is not None:
                return failure
        raise AssertionError("fallback rule must always match")
