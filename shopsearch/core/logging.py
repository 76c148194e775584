"""
Structured logging and in-process metrics

structlog is configured once at startup. Request-scoped values (request id,
search query, product id, batch process id) are bound through contextvars, so
every event logged while a request is served carries them.
"""

import logging
import sys
import time
from collections import Counter
from contextlib import contextmanager
from functools import wraps
from typing import Any, Awaitable, Callable, Iterator, TypeVar

import structlog
from structlog.types import EventDict, Processor

from shopsearch.core.config import settings

T = TypeVar("T")

# Log every backend request at INFO; only shown in debug mode.
_HTTP_CLIENT_LOGGERS = ("httpx", "httpcore")

_COUNTERS: Counter = Counter()


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def configure_logging() -> None:
    """
    Configure structlog and the stdlib root logger

    JSON lines when ``log_json`` is set, coloured console output in debug
    mode, plain console output otherwise.
    """
    level = logging.getLevelName(settings.log_level)
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_app_context,
    ]
    if settings.log_json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.debug))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _HTTP_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(level if settings.debug else logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("search_completed", results=3)
    """
    return structlog.get_logger(name)


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind ``values`` (None skipped) to every event logged inside the block."""
    bound = {key: value for key, value in values.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


def _metric_key(name: str, labels: dict[str, Any]) -> str:
    if not labels:
        return name
    rendered = ",".join(f"{key}={value}" for key, value in sorted(labels.items()))
    return f"{name}{{{rendered}}}"


def metrics_counter(name: str, **labels: Any) -> None:
    """Increment the counter ``name{label=value,...}``."""
    _COUNTERS[_metric_key(name, labels)] += 1


def get_metrics_snapshot() -> dict[str, int]:
    return dict(_COUNTERS)


def reset_metrics() -> None:
    _COUNTERS.clear()


def measure_latency(
    operation: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Log the latency of an async service call and count it by outcome.

    Emits ``latency`` with ``operation``, ``latency_ms`` and ``outcome``
    (``ok`` / ``error``), and increments ``<operation>_calls{outcome=...}``.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        logger = get_logger(func.__module__)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.perf_counter()
            outcome = "error"
            try:
                result = await func(*args, **kwargs)
                outcome = "ok"
                return result
            finally:
                latency_ms = round((time.perf_counter() - start) * 1000, 2)
                metrics_counter(f"{operation}_calls", outcome=outcome)
                logger.info("latency", operation=operation, latency_ms=latency_ms, outcome=outcome)

        return wrapper

    return decorator


def log_llm_call(
    *,
    operation: str,
    model: str | None,
    latency_ms: float,
    tokens: dict | None = None,
    error: str | None = None,
) -> None:
    """Log one chat or embedding request and count it per operation."""
    metrics_counter("llm_calls", operation=operation, failed=error is not None)
    logger = get_logger("shopsearch.llm")
    log = logger.warning if error else logger.info
    log(
        "llm_call",
        operation=operation,
        model=model,
        latency_ms=round(latency_ms, 2),
        tokens=tokens,
        error=error,
    )
