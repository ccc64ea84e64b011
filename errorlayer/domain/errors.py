"""
Domain errors raised deliberately by business logic.

Every ApiError carries a message that is safe to show to clients
in any environment. These are mapped to HTTP responses at the
interface layer. No framework imports allowed.
"""

import traceback

MIN_ERROR_STATUS = 400
MAX_ERROR_STATUS = 599

NOT_FOUND_MESSAGE = "Resource not found"


class ApiError(Exception):
    """Pre-vetted error with an explicit HTTP status code.

    Attributes:
        status_code: HTTP status in the 4xx/5xx range.
        message: Client-safe description of the failure.
        is_operational: True for expected, recoverable conditions;
            False when the error signals a programming defect.
    """

    name = "ApiError"

    def __init__(
        self,
        status_code: int,
        message: str,
        is_operational: bool = True,
        stack: str | None = None,
    ) -> None:
        if not MIN_ERROR_STATUS <= status_code <= MAX_ERROR_STATUS:
            raise ValueError(f"ApiError status must be 4xx or 5xx, got {status_code}")
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.is_operational = is_operational
        self._stack = stack

    @property
    def stack(self) -> str:
        """Diagnostic trace for server-side use only."""
        if self._stack:
            return self._stack
        return "".join(traceback.format_exception(type(self), self, self.__traceback__))


def not_found() -> ApiError:
    """Build the error used when no route matches the request.

    The requested path is never part of the message.
    """
    return ApiError(404, NOT_FOUND_MESSAGE)
