"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers
- Error handlers (one pipeline for every failure)
- Security middleware (body size limit, rate limiting)
- Logging configuration

No business logic belongs here.
"""

from fastapi import FastAPI
from slowapi.middleware import SlowAPIMiddleware

from errorlayer.core.config import Settings, settings
from errorlayer.interfaces.health import router as health_router
from errorlayer.shared.errors.handlers import register_error_handlers
from errorlayer.shared.logging import configure_logging
from errorlayer.shared.security.body_limit import BodySizeLimitMiddleware
from errorlayer.shared.security.rate_limiting import build_limiter


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Args:
        app_settings: Settings to build the app from. Defaults to the
            process-wide settings loaded from the environment.

    Returns:
        A fully configured FastAPI application instance.
    """
    app_settings = app_settings or settings
    configure_logging(level=app_settings.log_level, mode=app_settings.disclosure_mode)

    app = FastAPI(
        title=app_settings.project_name,
        version=app_settings.version,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
    )

    # --- Rate Limiting ---
    app.state.limiter = build_limiter(app_settings.rate_limit_default)
    app.add_middleware(SlowAPIMiddleware)

    # --- Security Middleware ---
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=app_settings.max_request_size_bytes)

    # --- Error Handlers ---
    register_error_handlers(app, app_settings)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")

    return app


app = create_app()
