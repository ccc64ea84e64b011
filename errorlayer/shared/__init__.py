"""
Shared module package.

Contains cross-cutting concerns used by every router:
- Error classification, sanitizing and handler registration
- Security middleware (body size limit, rate limiting)
- Logging configuration
"""
