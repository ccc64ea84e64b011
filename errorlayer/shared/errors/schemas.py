"""
Wire schema for error responses.
"""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response returned by every error handler.

    ``errors`` is only set for validation failures and ``stack``
    only in development mode; both are dropped from the body when unset.
    """

    success: bool = False
    error: str
    message: str
    errors: dict[str, str] | None = None
    stack: str | None = None

    def to_content(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)
