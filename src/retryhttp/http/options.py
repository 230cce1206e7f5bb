from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConstructionError
from .transport import resolve_transport

DEFAULT_RETRIES = 3
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRY_DELAY = 0.0


class ClientOptions(BaseModel):
    """Caller-facing construction options; ``None`` means "use the default" """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    retries: int | None = None
    timeout: float | None = None
    transport: Any = None
    retry_delay: float | None = None


class ClientConfig(BaseModel):
    """Resolved, immutable client configuration"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    retries: int = Field(ge=0)
    timeout: float = Field(gt=0)
    transport: httpx.AsyncBaseTransport
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, ge=0)


def resolve_config(options: ClientOptions | None = None) -> ClientConfig:
    """Fill unset options with defaults and validate the result"""
    options = options or ClientOptions()
    transport = resolve_transport(options.transport)
    # A zero timeout means "unset", like None
    timeout = options.timeout if options.timeout else DEFAULT_TIMEOUT

    try:
        return ClientConfig(
            retries=DEFAULT_RETRIES if options.retries is None else options.retries,
            timeout=timeout,
            transport=transport,
            retry_delay=DEFAULT_RETRY_DELAY if options.retry_delay is None else options.retry_delay,
        )
    except ValidationError as e:
        raise ConstructionError(f"Invalid client options: {e}") from e
