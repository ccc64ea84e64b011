"""
Request body size limiting.

Rejects requests whose declared Content-Length exceeds the configured
ceiling before any route runs. The rejection is rendered through the
error pipeline stored on ``app.state.error_pipeline`` so it gets the
same 413 payload and log line as a size failure raised inside a route.
"""

from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

HTTP_400 = 400
HTTP_413 = 413


class PayloadTooLargeError(Exception):
    """Raised when a request body exceeds the size ceiling.

    Carries the size-limit marker the classifier looks for.
    """

    size_limit_exceeded = True
    status_code = HTTP_413

    def __init__(self, limit_bytes: int, received_bytes: int | None = None) -> None:
        super().__init__(f"Request body exceeds {limit_bytes} bytes")
        self.limit_bytes = limit_bytes
        self.received_bytes = received_bytes


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Middleware that enforces a maximum request body size.

    Only the Content-Length header is checked; chunked bodies without
    one pass through to the route.
    """

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length")
        if declared is None:
            return await call_next(request)

        pipeline = request.app.state.error_pipeline
        try:
            size = int(declared)
        except ValueError:
            size = -1
        if size < 0:
            return pipeline.render(
                request, HTTPException(status_code=HTTP_400, detail="Invalid Content-Length header")
            )
        if size > self.max_bytes:
            return pipeline.render(request, PayloadTooLargeError(self.max_bytes, size))
        return await call_next(request)
