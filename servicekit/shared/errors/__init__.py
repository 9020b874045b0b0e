"""
Shared error handling package.

Centralizes exception-to-HTTP mapping so that every failure is
rendered through the same negotiated error response.
"""

from servicekit.shared.errors.handlers import ServiceError, register_error_handlers

__all__ = ["ServiceError", "register_error_handlers"]
