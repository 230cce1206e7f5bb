from typing import Any

import httpx

from .errors import ConstructionError


def default_transport() -> httpx.AsyncBaseTransport:
    """Build the transport used when the caller does not supply one"""
    # Connection-level retries stay off, the executor owns the retry policy
    return httpx.AsyncHTTPTransport(retries=0)


def resolve_transport(transport: Any = None) -> httpx.AsyncBaseTransport:
    """Return the supplied transport, or a default one when none was supplied"""
    if transport is None:
        return default_transport()
    if not isinstance(transport, httpx.AsyncBaseTransport):
        raise ConstructionError(
            f"transport must be an httpx.AsyncBaseTransport, got {type(transport).__name__}"
        )
    return transport
