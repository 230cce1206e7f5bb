import httpx
import structlog

from ..config import ClientSettings, get_settings
from .cancel import CancelToken
from .encoders import (
    HeaderParams,
    JsonParams,
    MultiParams,
    build_form_request,
    build_json_request,
    build_query_request,
)
from .executor import RetryExecutor
from .options import ClientConfig, ClientOptions, resolve_config

logger = structlog.get_logger(__name__)


class HttpClient:
    """HTTP client with per-attempt timeouts, retries on transient failures and cancellation.

    Every verb comes in two forms: a plain one that runs to completion
    (bounded only by the per-attempt timeout) and a ``*_with_cancel`` one that
    takes a caller-owned ``CancelToken``. Both share the same encoding and
    retry path. One instance is safe to share between concurrent tasks.
    """

    def __init__(
        self,
        retries: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_delay: float | None = None,
    ):
        self.config: ClientConfig = resolve_config(
            ClientOptions(retries=retries, timeout=timeout, transport=transport, retry_delay=retry_delay)
        )
        self._http = httpx.AsyncClient(
            transport=self.config.transport,
            timeout=httpx.Timeout(self.config.timeout),
        )
        self._executor = RetryExecutor(
            self._http,
            retries=self.config.retries,
            attempt_timeout=self.config.timeout,
            retry_delay=self.config.retry_delay,
        )

        logger.debug(
            "HTTP client initialized",
            retries=self.config.retries,
            timeout=self.config.timeout,
            transport=type(self.config.transport).__name__,
        )

    @classmethod
    def default(cls) -> "HttpClient":
        """Client with default retries, timeout and transport"""
        return cls()

    @classmethod
    def custom(cls, retries: int, timeout: float) -> "HttpClient":
        """Client with explicit retries and per-attempt timeout (seconds)"""
        return cls(retries=retries, timeout=timeout)

    @classmethod
    def from_options(cls, options: ClientOptions) -> "HttpClient":
        """Client from an options record; unset fields use their defaults"""
        return cls(
            retries=options.retries,
            timeout=options.timeout,
            transport=options.transport,
            retry_delay=options.retry_delay,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpClient":
        """Client from environment settings"""
        settings = settings or get_settings()
        return cls(
            retries=settings.retries,
            timeout=settings.timeout,
            transport=transport,
            retry_delay=settings.retry_delay,
        )

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a pre-built request through the retry executor"""
        return await self._executor.execute(request, CancelToken.never())

    async def send_with_cancel(self, token: CancelToken, request: httpx.Request) -> httpx.Response:
        return await self._executor.execute(request, token)

    async def get(
        self,
        url: str,
        params: MultiParams | None = None,
        headers: HeaderParams | None = None,
    ) -> httpx.Response:
        """Make GET request with params in the query string"""
        return await self.get_with_cancel(CancelToken.never(), url, params, headers)

    async def get_with_cancel(
        self,
        token: CancelToken,
        url: str,
        params: MultiParams | None = None,
        headers: HeaderParams | None = None,
    ) -> httpx.Response:
        request = build_query_request(url, params, headers)
        return await self._executor.execute(request, token)

    async def post_json(
        self,
        url: str,
        params: JsonParams | None = None,
        headers: HeaderParams | None = None,
    ) -> httpx.Response:
        """Make POST request with params as a JSON object body"""
        return await self.post_json_with_cancel(CancelToken.never(), url, params, headers)

    async def post_json_with_cancel(
        self,
        token: CancelToken,
        url: str,
        params: JsonParams | None = None,
        headers: HeaderParams | None = None,
    ) -> httpx.Response:
        request = build_json_request("POST", url, params, headers)
        return await self._executor.execute(request, token)

    async def put_json(
        self,
        url: str,
        params: JsonParams | None = None,
        headers: HeaderParams | None = None,
    ) -> httpx.Response:
        """Make PUT request with params as a JSON object body"""
        return await self.put_json_with_cancel(CancelToken.never(), url, params, headers)

    async def put_json_with_cancel(
        self,
        token: CancelToken,
        url: str,
        params: JsonParams | None = None,
        headers: HeaderParams | None = None,
    ) -> httpx.Response:
        request = build_json_request("PUT", url, params, headers)
        return await self._executor.execute(request, token)

    async def post_form(
        self,
        url: str,
        params: MultiParams | None = None,
        headers: HeaderParams | None = None,
    ) -> httpx.Response:
        """Make POST request with params form-encoded in the body"""
        return await self.post_form_with_cancel(CancelToken.never(), url, params, headers)

    async def post_form_with_cancel(
        self,
        token: CancelToken,
        url: str,
        params: MultiParams | None = None,
        headers: HeaderParams | None = None,
    ) -> httpx.Response:
        request = build_form_request("POST", url, params, headers)
        return await self._executor.execute(request, token)

    async def put_form(
        self,
        url: str,
        params: MultiParams | None = None,
        headers: HeaderParams | None = None,
    ) -> httpx.Response:
        """Make PUT request with params form-encoded in the body"""
        return await self.put_form_with_cancel(CancelToken.never(), url, params, headers)

    async def put_form_with_cancel(
        self,
        token: CancelToken,
        url: str,
        params: MultiParams | None = None,
        headers: HeaderParams | None = None,
    ) -> httpx.Response:
        request = build_form_request("PUT", url, params, headers)
        return await self._executor.execute(request, token)

    async def aclose(self) -> None:
        """Close the underlying httpx client and its transport"""
        await self._http.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<HttpClient retries={self.config.retries} timeout={self.config.timeout}>"


def create_http_client(
    retries: int | None = None,
    timeout: float | None = None,
    **kwargs,
) -> HttpClient:
    """Factory function to create HTTP client"""
    return HttpClient(retries=retries, timeout=timeout, **kwargs)
