"""Test helpers for code built on the retrying HTTP client."""

from .mock_transport import MockResponder, NoResponderError, ResponseNotFoundError

__all__ = [
    "MockResponder",
    "NoResponderError",
    "ResponseNotFoundError",
]
