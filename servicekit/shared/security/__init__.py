"""
Service-to-service authorization.
"""

from servicekit.shared.security.auth import AuthorizationMiddleware

__all__ = ["AuthorizationMiddleware"]
