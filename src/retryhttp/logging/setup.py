import io
import json
import logging
import re
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO

import structlog
from pythonjsonlogger import jsonlogger
from structlog.stdlib import LoggerFactory

from ..config import get_logging_settings

DEFAULT_LEVEL = "info"
DEFAULT_HANDLER = "json"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}
LOG_HANDLERS = ("json", "text")

_LOGFMT_EVENT = re.compile(r'(?:^|\s)event=("(?:[^"\\]|\\.)*"|\S+)')

_bootstrap_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoggingConfig:
    """Resolved verbosity level and output encoding"""

    level: str
    handler: str

    @property
    def level_no(self) -> int:
        return LOG_LEVELS[self.level]


def resolve_logging_config(level: str | None = None, handler: str | None = None) -> LoggingConfig:
    """
    Resolve level and handler, falling back to LOG_LEVEL / LOG_HANDLER

    Invalid values are reported and replaced by the defaults ("info", "json").
    """
    if level is None or handler is None:
        settings = get_logging_settings()
        level = settings.log_level if level is None else level
        handler = settings.log_handler if handler is None else handler

    level = level.lower()
    if level not in LOG_LEVELS:
        _bootstrap_logger.warning("Invalid LOG_LEVEL %r, using %s default", level, DEFAULT_LEVEL)
        level = DEFAULT_LEVEL

    handler = handler.lower()
    if handler not in LOG_HANDLERS:
        _bootstrap_logger.warning("Invalid LOG_HANDLER %r, using %s default", handler, DEFAULT_HANDLER)
        handler = DEFAULT_HANDLER

    return LoggingConfig(level=level, handler=handler)


def setup_logging(
    level: str | None = None,
    handler: str | None = None,
    stream: TextIO | None = None,
) -> LoggingConfig:
    """
    Set up structured logging for the process

    Args:
        level: "debug", "info", "warn" or "error" (default: LOG_LEVEL)
        handler: "json" or "text" (default: LOG_HANDLER)
        stream: Output stream (default: stderr)

    Returns:
        The resolved logging configuration
    """
    config = resolve_logging_config(level, handler)
    stream = stream or sys.stderr

    # Configure stdlib logging
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level_no)

    log_handler = logging.StreamHandler(stream)
    if config.handler == "json":
        log_handler.setFormatter(
            jsonlogger.JsonFormatter(
                fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
            )
        )
    else:
        log_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.handlers = [log_handler]

    # Configure processors
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.handler == "json":
        # python-json-logger renders the event and its fields as one JSON object
        processors.append(structlog.stdlib.render_to_log_kwargs)
    else:
        processors[1:1] = [structlog.stdlib.add_logger_name, structlog.stdlib.add_log_level]
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
        processors.append(structlog.processors.LogfmtRenderer(key_order=["timestamp", "level", "event"]))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    return config


def _sink_processors(handler: str) -> list:
    renderer = (
        structlog.processors.JSONRenderer()
        if handler == "json"
        else structlog.processors.LogfmtRenderer(key_order=["timestamp", "level", "event"])
    )
    return [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def build_logger(
    level: str | None = None,
    handler: str | None = None,
    stream: TextIO | None = None,
):
    """Build a logger writing to ``stream`` without touching process-wide configuration"""
    config = resolve_logging_config(level, handler)
    return structlog.wrap_logger(
        structlog.PrintLogger(file=stream or sys.stderr),
        processors=_sink_processors(config.handler),
        wrapper_class=structlog.make_filtering_bound_logger(config.level_no),
        context_class=dict,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


def fatal(logger, event: str, **kwargs) -> None:
    """Log at error level and exit the process with status 1"""
    logger.error(event, **kwargs)
    raise SystemExit(1)


def _parse_messages(output: str, handler: str) -> list[str]:
    messages = []
    for line in output.splitlines():
        if not line.strip():
            continue
        if handler == "json":
            try:
                entry = json.loads(line)
            except ValueError:
                continue
            if isinstance(entry.get("event"), str):
                messages.append(entry["event"])
        else:
            match = _LOGFMT_EVENT.search(line)
            if match:
                value = match.group(1)
                if value.startswith('"'):
                    value = value[1:-1].replace('\\"', '"')
                messages.append(value)
    return messages


def new_test_logger(
    level: str | None = "debug",
    handler: str | None = None,
) -> tuple[object, Callable[[], list[str]]]:
    """
    Create a logger backed by an in-memory sink

    Returns:
        (logger, read_messages) where read_messages() returns the event
        messages logged so far, in order.
    """
    config = resolve_logging_config(level, handler)
    sink = io.StringIO()
    logger = build_logger(config.level, config.handler, sink)

    def read_messages() -> list[str]:
        return _parse_messages(sink.getvalue(), config.handler)

    return logger, read_messages
