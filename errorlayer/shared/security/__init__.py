"""
Security middleware and request guards.
"""
