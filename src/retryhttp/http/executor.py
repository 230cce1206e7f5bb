import asyncio
import enum

import httpx
import structlog

from .cancel import DEADLINE_EXCEEDED, CancelToken
from .errors import RequestCancelledError

logger = structlog.get_logger(__name__)


class Outcome(enum.Enum):
    """Classification of a single attempt"""

    SUCCESS = "success"
    TRANSIENT = "transient"


def classify_status(status_code: int) -> Outcome:
    """5xx responses are worth another attempt, everything else is final"""
    if status_code >= 500:
        return Outcome.TRANSIENT
    return Outcome.SUCCESS


# Close tasks for late responses, kept referenced until they finish
_closing: set[asyncio.Task] = set()


def _discard(task: asyncio.Future) -> None:
    """Done-callback for abandoned sends: close a late response, swallow a late error"""
    if task.cancelled() or task.exception() is not None:
        return
    closer = asyncio.ensure_future(task.result().aclose())
    _closing.add(closer)
    closer.add_done_callback(_closing.discard)


class RetryExecutor:
    """Send a request through an httpx client, re-sending it on transient failures.

    The executor keeps no per-call state on the instance, so a single
    executor can serve any number of concurrent calls.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        retries: int,
        attempt_timeout: float,
        retry_delay: float = 0.0,
    ):
        self.http = http
        self.retries = retries
        self.attempt_timeout = attempt_timeout
        self.retry_delay = retry_delay

    async def execute(self, request: httpx.Request, token: CancelToken) -> httpx.Response:
        """Send ``request`` with retries.

        Returns the first non-5xx response, or the last 5xx response once the
        retry budget is spent. Re-raises the last ``httpx.RequestError`` when
        the final attempt failed at the transport level, and raises
        ``RequestCancelledError`` as soon as the token fires.
        """
        max_attempts = self.retries + 1
        log = logger.bind(method=request.method, url=str(request.url), max_attempts=max_attempts)
        attempt = 0

        while True:
            token.raise_if_cancelled()
            log.debug("Making HTTP request", attempt=attempt + 1)

            response: httpx.Response | None = None
            failure: httpx.RequestError | None = None
            try:
                response = await self._attempt(request, token)
            except httpx.RequestError as e:
                failure = e

            if response is not None:
                log.debug("HTTP response received", attempt=attempt + 1, status_code=response.status_code)
                if classify_status(response.status_code) is Outcome.SUCCESS:
                    return response

            error = str(failure) if failure is not None else f"HTTP {response.status_code}"

            if attempt >= self.retries:
                log.error("HTTP request failed after all retries", attempts=attempt + 1, error=error)
                if response is not None:
                    return response
                raise failure

            log.warning(
                "HTTP request failed, retrying",
                attempt=attempt + 1,
                error=error,
                delay_seconds=self.retry_delay,
            )
            if response is not None:
                await response.aclose()

            attempt += 1
            if self.retry_delay > 0:
                await token.sleep(self.retry_delay)

    async def _attempt(self, request: httpx.Request, token: CancelToken) -> httpx.Response:
        """One send, bounded by the attempt timeout, the token deadline and ``token.cancel()``"""
        budget = self.attempt_timeout
        remaining = token.remaining()
        deadline_bound = remaining is not None and remaining <= budget
        if deadline_bound:
            budget = remaining

        send = asyncio.ensure_future(self.http.send(request))
        cancelled = asyncio.ensure_future(token.wait())
        done: set[asyncio.Future] = set()
        try:
            done, _ = await asyncio.wait(
                {send, cancelled},
                timeout=budget,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancelled.cancel()
            if send not in done:
                send.cancel()
                send.add_done_callback(_discard)

        if send in done:
            return send.result()

        if token.cancelled:
            raise RequestCancelledError(token.reason or "cancelled")
        if deadline_bound:
            raise RequestCancelledError(DEADLINE_EXCEEDED)
        raise httpx.TimeoutException(
            f"attempt exceeded {self.attempt_timeout}s timeout",
            request=request,
        )
