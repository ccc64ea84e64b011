"""
Domain layer.

Holds the error types business logic raises on purpose.
"""
