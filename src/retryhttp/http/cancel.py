import asyncio
import time

from .errors import RequestCancelledError

DEADLINE_EXCEEDED = "deadline exceeded"


class CancelToken:
    """Caller-owned cancellation and deadline signal.

    A token fires either when ``cancel()`` is called or when its deadline
    passes, whichever comes first. ``cancel()`` must be called from the
    event loop thread that awaits the request.
    """

    def __init__(self, deadline: float | None = None):
        self._deadline = deadline
        self._event = asyncio.Event()
        self._reason: str | None = None

    @classmethod
    def never(cls) -> "CancelToken":
        """Token that never fires"""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancelToken":
        """Token that fires ``seconds`` from now"""
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def reason(self) -> str | None:
        if self._reason is not None:
            return self._reason
        if self.cancelled:
            return DEADLINE_EXCEEDED
        return None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def remaining(self) -> float | None:
        """Seconds left until the deadline, ``None`` when there is none"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RequestCancelledError(self.reason or "cancelled")

    async def wait(self) -> None:
        """Block until ``cancel()`` is called (deadlines are enforced by callers via ``remaining()``)"""
        await self._event.wait()

    async def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds``, returning early when the token fires"""
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except TimeoutError:
            pass

    def __repr__(self) -> str:
        return f"<CancelToken cancelled={self.cancelled} deadline={self._deadline}>"
