"""
Shared error handling package.

Centralizes error-to-HTTP mapping so that failures from any subsystem
are consistently translated into API responses.
"""
