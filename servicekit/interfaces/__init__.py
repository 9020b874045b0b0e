"""
Interfaces layer package.

Contains the transport seam between FastAPI and the response layer:
the responder, the request body reader and the health route.
No negotiation rules belong here.
"""
