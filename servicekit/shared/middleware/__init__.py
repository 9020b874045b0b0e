"""
Request middleware shared by every service.
"""

from servicekit.shared.middleware.access_log import AccessLogMiddleware
from servicekit.shared.middleware.preflight import PreflightMiddleware

__all__ = ["AccessLogMiddleware", "PreflightMiddleware"]
