"""
Response sanitizing.

Applies the disclosure policy to a classified failure. In production a
client never sees a trace, never learns the cause of a server fault,
and only sees the real message of a 4xx when it came from an ApiError.
"""

from errorlayer.core.config import DisclosureMode
from errorlayer.shared.errors.classifier import NormalizedFailure
from errorlayer.shared.errors.schemas import ErrorResponse

SERVER_ERROR = "ServerError"
SERVER_ERROR_MESSAGE = "An internal server error occurred"
BAD_REQUEST = "BadRequest"
BAD_REQUEST_MESSAGE = "Invalid request"


def sanitize(
    failure: NormalizedFailure, was_domain_error: bool, mode: DisclosureMode
) -> ErrorResponse:
    """Build the client payload for ``failure`` under ``mode``.

    Args:
        failure: The classified failure.
        was_domain_error: The failure came from a deliberately raised
            ApiError whose message is safe to disclose.
        mode: Disclosure mode in effect for this process.

    Returns:
        The response body to serialize.
    """
    if mode is DisclosureMode.DEVELOPMENT:
        return ErrorResponse(
            error=failure.kind,
            message=failure.message,
            errors=failure.field_errors,
            stack=failure.trace or "",
        )

    if failure.status_code >= 500:
        return ErrorResponse(error=SERVER_ERROR, message=SERVER_ERROR_MESSAGE)
    if failure.status_code >= 400 and not was_domain_error:
        return ErrorResponse(error=BAD_REQUEST, message=BAD_REQUEST_MESSAGE)
    return ErrorResponse(
        error=failure.kind,
        message=failure.message,
        errors=failure.field_errors,
    )
