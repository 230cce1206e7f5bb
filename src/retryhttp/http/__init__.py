"""HTTP client utilities with retry, timeout and cancellation support."""

from .cancel import CancelToken
from .client import HttpClient, create_http_client
from .encoders import build_form_request, build_json_request, build_query_request, parse_url
from .errors import ConstructionError, HttpClientError, RequestCancelledError
from .executor import Outcome, RetryExecutor, classify_status
from .options import ClientConfig, ClientOptions, resolve_config
from .transport import default_transport

__all__ = [
    "HttpClient",
    "create_http_client",
    "CancelToken",
    "ClientConfig",
    "ClientOptions",
    "resolve_config",
    "default_transport",
    "build_json_request",
    "build_form_request",
    "build_query_request",
    "parse_url",
    "RetryExecutor",
    "Outcome",
    "classify_status",
    "HttpClientError",
    "ConstructionError",
    "RequestCancelledError",
]
