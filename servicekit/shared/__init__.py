"""
Shared module package.

Contains cross-cutting concerns used by every service:
- Error handling and mapping
- Authorization and access logging middleware
- Logging configuration
"""
