"""
Pydantic schemas for the built-in routes.

These define the API contract of the health endpoint.
No business logic belongs here.
"""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response schema for the health endpoint."""

    status: str
