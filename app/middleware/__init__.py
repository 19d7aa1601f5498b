"""
Middleware components for request processing.

- Request context (request ID, client IP, request logging)
- CORS for the dashboard origins
"""

from app.middleware.cors import CORSMiddleware
from app.middleware.request_context import RequestContextMiddleware

__all__ = [
    "RequestContextMiddleware",
    "CORSMiddleware",
]
