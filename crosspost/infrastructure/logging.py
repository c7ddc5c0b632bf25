"""
Structured logging for crosspost.

Every record carries the service name and, inside a request, its correlation
id. Provider credentials are masked wherever they appear in an event,
including inside nested provider payloads.
"""

import logging
import sys
import time
from contextvars import ContextVar
from typing import Any

import structlog

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

REDACTED = "[REDACTED]"

# Suffixes also catch provider spellings such as "page_access_token" and "refreshJwt"
SECRET_KEYS = frozenset({"code", "code_verifier", "authorization"})
SECRET_SUFFIXES = ("token", "secret", "password", "jwt")


def configure_logging(service_name: str, debug: bool = False) -> None:
    """
    Route structlog through the stdlib root logger.

    Args:
        service_name: Value of the ``service`` field on every record
        debug: Emit DEBUG records and render them for a terminal
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )

    def add_service(logger, method_name, event_dict):
        event_dict.setdefault("service", service_name)
        return event_dict

    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_service,
            add_correlation_id,
            redact_secrets,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def set_correlation_id(cid: str) -> None:
    _correlation_id.set(cid)


def current_correlation_id() -> str:
    return _correlation_id.get()


def add_correlation_id(logger, method_name, event_dict):
    cid = _correlation_id.get()
    if cid:
        event_dict.setdefault("correlation_id", cid)
    return event_dict


def _is_secret(key: str) -> bool:
    key = key.lower()
    return key in SECRET_KEYS or key.endswith(SECRET_SUFFIXES)


def _scrub(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if isinstance(k, str) and _is_secret(k) else _scrub(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_scrub(v) for v in value)
    return value


def redact_secrets(logger, method_name, event_dict):
    """Mask credential-bearing keys at any depth of the event."""
    return _scrub(event_dict)


class Timer:
    """
    Wall-clock timer for provider and database calls.

    Usage:
        with Timer() as timer:
            response = await client.post(...)
        logger.info("Provider call finished", duration_ms=timer.duration_ms)
    """

    def __init__(self) -> None:
        self._started: float | None = None
        self._stopped: float | None = None

    def __enter__(self) -> "Timer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, *exc_info) -> None:
        self._stopped = time.perf_counter()

    @property
    def duration_ms(self) -> float:
        if self._started is None:
            return 0.0
        end = self._stopped if self._stopped is not None else time.perf_counter()
        return round((end - self._started) * 1000, 2)


def mask_value(value: str, visible_chars: int = 8) -> str:
    """Keep the first ``visible_chars`` of an opaque value such as a state token."""
    if len(value) <= visible_chars:
        return value
    return value[:visible_chars] + "..."
