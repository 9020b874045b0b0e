"""
Infrastructure layer package.

Contains the concrete wire encoders and the server handles
(uvicorn for HTTP, grpc.aio for RPC) driven by the lifecycle.
"""
