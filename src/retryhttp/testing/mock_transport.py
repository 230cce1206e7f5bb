"""Canned HTTP responses for unit tests, served through ``httpx.MockTransport``."""

import threading
from collections import Counter
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Union

import httpx

Outcome = Union[httpx.Response, BaseException]
Handler = Callable[[httpx.Request], object]
RouteKey = tuple[str, str, str, int | None, str]


class ResponseNotFoundError(httpx.TransportError):
    """Raised when a sequenced route has no response left"""

    pass


class NoResponderError(httpx.TransportError):
    """Raised when no route matches the request"""

    pass


def _route_key(method: str, url: str | httpx.URL) -> RouteKey:
    parsed = httpx.URL(url)
    return (method.upper(), parsed.scheme, parsed.host, parsed.port, parsed.path or "/")


class MockResponder:
    """Route table of canned responses keyed by method and URL (query ignored).

    Pass ``responder.transport`` as the client transport. Sequenced routes
    hand out one outcome per call under a lock, so they can be shared by
    concurrent requests.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._routes: dict[RouteKey, Handler] = {}
        self._calls: Counter = Counter()
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request):
        key = _route_key(request.method, request.url)
        with self._lock:
            self._calls[key] += 1
            self.requests.append(request)
            handler = self._routes.get(key)

        if handler is None:
            raise NoResponderError(
                f"no responder found for {request.method} {request.url}",
                request=request,
            )
        return handler(request)

    def add_responder(self, method: str, url: str, handler: Handler) -> None:
        """Register a handler; it may return a response or an awaitable of one"""
        with self._lock:
            self._routes[_route_key(method, url)] = handler

    def add_response(self, method: str, url: str, status_code: int, content: str | bytes) -> None:
        """Always answer ``method url`` with the same response"""

        def respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, content=content)

        self.add_responder(method, url, respond)

    def add_response_from_file(self, method: str, url: str, status_code: int, path: str | Path) -> None:
        """Always answer with the contents of a file"""
        self.add_response(method, url, status_code, Path(path).read_bytes())

    def add_sequence(self, method: str, url: str, outcomes: Sequence[Outcome]) -> None:
        """Answer successive calls with successive outcomes; exceptions are raised"""
        remaining = list(outcomes)
        lock = threading.Lock()

        def respond(request: httpx.Request) -> httpx.Response:
            with lock:
                if not remaining:
                    raise ResponseNotFoundError("response not found", request=request)
                outcome = remaining.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome

        self.add_responder(method, url, respond)

    def add_sequenced_responses(
        self,
        method: str,
        url: str,
        status_code: int,
        paths: Sequence[str | Path],
    ) -> None:
        """One file per call, all with the same status code"""
        self.add_sequence(
            method,
            url,
            [httpx.Response(status_code, content=Path(path).read_bytes()) for path in paths],
        )

    def add_sequenced_plain_responses(
        self,
        method: str,
        url: str,
        status_codes: Sequence[int],
        contents: Sequence[str | bytes],
    ) -> None:
        """One (status code, content) pair per call"""
        if len(status_codes) != len(contents):
            raise ValueError("status_codes and contents must have the same length")
        self.add_sequence(
            method,
            url,
            [httpx.Response(code, content=content) for code, content in zip(status_codes, contents)],
        )

    def call_count(self, method: str, url: str) -> int:
        with self._lock:
            return self._calls[_route_key(method, url)]

    def reset(self) -> None:
        with self._lock:
            self._routes.clear()
            self._calls.clear()
            self.requests.clear()
