"""
servicekit: shared HTTP/RPC service scaffolding.

Library package root. Services import it to get content-negotiated
responses and a graceful server lifecycle.

Layers:
    - domain: Format negotiation and error assembly. No framework imports.
    - infrastructure: Wire encoders and server handles (uvicorn, gRPC).
    - interfaces: Transport seam (responder, body reader) and the health route.
    - shared: Cross-cutting concerns (errors, security, logging, middleware).
"""

__version__ = "0.1.0"
