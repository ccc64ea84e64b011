"""
Centralized error handlers for FastAPI.

Every failure, whatever subsystem raised it, goes through one pipeline:
classify, log, sanitize, respond. Exactly one response is produced per
failed request. No stack traces or internal details are exposed to
clients in production. All error responses use the ErrorResponse schema.
"""

import jwt
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import DataError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from errorlayer.core.config import DisclosureMode, Settings
from errorlayer.domain.errors import ApiError, not_found
from errorlayer.shared.errors.classifier import ErrorClassifier, RequestContext
from errorlayer.shared.errors.sanitizer import sanitize
from errorlayer.shared.errors.schemas import ErrorResponse
from errorlayer.shared.security.body_limit import PayloadTooLargeError
from errorlayer.shared.security.rate_limiting import rate_limited_error

HTTP_404 = 404

# Routed through the ExceptionMiddleware. ``Exception`` itself is
# registered separately and handled by Starlette's ServerErrorMiddleware.
PIPELINE_ERRORS: tuple[type[Exception], ...] = (
    ApiError,
    RequestValidationError,
    PydanticValidationError,
    IntegrityError,
    DataError,
    jwt.InvalidTokenError,
    PayloadTooLargeError,
)


class ErrorPipeline:
    """Turns one request failure into one JSON response.

    Args:
        mode: Disclosure mode, read once at startup.
        max_payload_bytes: Body size ceiling quoted in 413 responses.
    """

    def __init__(self, mode: DisclosureMode, max_payload_bytes: int) -> None:
        self.mode = mode
        self.classifier = ErrorClassifier(mode, max_payload_bytes)

    def render(
        self,
        request: Request,
        exc: BaseException,
        headers: dict[str, str] | None = None,
    ) -> JSONResponse:
        """Classify ``exc`` raised while serving ``request`` and build the response."""
        failure = self.classifier.classify(exc, RequestContext.from_request(request))
        if failure.short_circuit:
            body = ErrorResponse(error=failure.kind, message=failure.message)
        else:
            body = sanitize(failure, failure.from_domain, self.mode)
        return JSONResponse(
            status_code=failure.status_code,
            content=body.to_content(),
            headers=headers,
        )


def register_error_handlers(app: FastAPI, settings: Settings) -> ErrorPipeline:
    """Register the error pipeline on the FastAPI application.

    Args:
        app: The FastAPI application instance.
        settings: Settings providing the disclosure mode and size ceiling.

    Returns:
        The pipeline, also stored on ``app.state.error_pipeline``.
    """
    pipeline = ErrorPipeline(settings.disclosure_mode, settings.max_request_size_bytes)
    app.state.error_pipeline = pipeline

    async def handle_failure(request: Request, exc: Exception) -> JSONResponse:
        """Handle any failure the pipeline classifies directly."""
        return pipeline.render(request, exc)

    for error_class in PIPELINE_ERRORS:
        app.add_exception_handler(error_class, handle_failure)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle framework HTTP errors. Unmatched routes become not_found()."""
        if exc.status_code == HTTP_404:
            return pipeline.render(request, not_found())
        return pipeline.render(request, exc, headers=exc.headers)

    @app.exception_handler(RateLimitExceeded)
    def handle_rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        """Handle rate limit rejections with a fixed 429 message.

        SlowAPIMiddleware calls this directly and sends its return value,
        so it must stay synchronous.
        """
        return pipeline.render(request, rate_limited_error(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals in production."""
        return pipeline.render(request, exc)

    return pipeline
