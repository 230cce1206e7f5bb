class HttpClientError(Exception):
    """Base exception for the retrying HTTP client"""

    pass


class ConstructionError(HttpClientError):
    """Raised when a client or request cannot be built (bad URL, bad transport, bad settings)"""

    pass


class RequestCancelledError(HttpClientError):
    """Raised when the caller's cancel token fires before or during a call"""

    def __init__(self, reason: str = "cancelled"):
        self.reason = reason
        super().__init__(f"request cancelled: {reason}")
