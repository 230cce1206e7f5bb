"""
Retrying HTTP client library.

This library provides:
- An asyncio HTTP client with per-attempt timeouts, retries and cancellation
- JSON, form and query-string request encoders
- Structured logging setup
- Environment-driven configuration
- Canned-response helpers for tests
"""

from .http import (
    CancelToken,
    ClientOptions,
    ConstructionError,
    HttpClient,
    HttpClientError,
    RequestCancelledError,
)

__version__ = "1.0.0"

__all__ = [
    "HttpClient",
    "ClientOptions",
    "CancelToken",
    "HttpClientError",
    "ConstructionError",
    "RequestCancelledError",
]
