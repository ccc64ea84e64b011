"""
errorlayer: centralized error translation for HTTP APIs.

Application package root. Every failure raised while serving a request
is classified, logged, sanitized according to the disclosure mode, and
returned to the client in one stable JSON shape.

Layers:
    - domain: Error types business logic raises on purpose.
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, security, logging).
    - core: Configuration.
"""
