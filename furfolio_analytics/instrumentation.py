"""Call-site instrumentation for the analytics core.

The analyses themselves never log. Callers that want an event trail wrap them
here instead: :func:`instrumented` decorates a single function and
:class:`InstrumentedAnalytics` wraps every public method of a classifier,
aggregator or forecaster. Each call emits a structured log event and, when
an :class:`OperationLog` is supplied, is recorded in a bounded in-memory
buffer holding the most recent operations.

Usage::

    configure_logging()
    log = OperationLog(maxlen=200)
    revenue = InstrumentedAnalytics(RevenueAggregator(), log=log)
    revenue.total_revenue(transactions)
    log.summary()["total_revenue"].success_rate_pct
"""

from __future__ import annotations

import functools
import logging
import sys
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Optional, TypeVar

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

DEFAULT_OPERATION_LOG_SIZE = 500


def configure_logging(level: int = logging.INFO, json: bool = True) -> None:
    """Configure structlog to write analytics events to stderr.

    Args:
        level: Minimum level to emit
        json: Render JSON lines (default) or human-readable console output
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


@dataclass(frozen=True)
class OperationRecord:
    """One completed analytics call."""

    operation: str
    started_at: datetime
    duration_ms: float
    success: bool
    error_type: Optional[str] = None


class OperationStats(BaseModel):
    """Aggregate statistics for one operation name."""

    total_calls: int = Field(description="Number of recorded calls")
    failed_calls: int = Field(description="Number of calls that raised")
    avg_duration_ms: float = Field(description="Average call duration in ms")
    max_duration_ms: float = Field(description="Slowest call duration in ms")
    success_rate_pct: float = Field(description="Success rate percentage (0-100)")
    error_types: dict[str, int] = Field(
        default_factory=dict, description="Count of errors by exception type"
    )


class OperationLog:
    """Thread-safe bounded buffer of the most recent operations."""

    def __init__(self, maxlen: int = DEFAULT_OPERATION_LOG_SIZE) -> None:
        if maxlen < 1:
            raise ValueError(f"maxlen must be at least 1: {maxlen}")
        self._lock = Lock()
        self._records: deque[OperationRecord] = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        return self._records.maxlen or 0

    def append(self, record: OperationRecord) -> None:
        with self._lock:
            self._records.append(record)

    def records(self) -> list[OperationRecord]:
        """Recorded operations, oldest first."""
        with self._lock:
            return list(self._records)

    def summary(self) -> dict[str, OperationStats]:
        """Per-operation statistics over the buffered records."""
        grouped: dict[str, list[OperationRecord]] = defaultdict(list)
        for record in self.records():
            grouped[record.operation].append(record)

        stats: dict[str, OperationStats] = {}
        for operation, records in grouped.items():
            durations = [r.duration_ms for r in records]
            failures = [r for r in records if not r.success]
            error_types: dict[str, int] = defaultdict(int)
            for failure in failures:
                if failure.error_type:
                    error_types[failure.error_type] += 1
            stats[operation] = OperationStats(
                total_calls=len(records),
                failed_calls=len(failures),
                avg_duration_ms=sum(durations) / len(durations),
                max_duration_ms=max(durations),
                success_rate_pct=(len(records) - len(failures)) / len(records) * 100,
                error_types=dict(error_types),
            )
        return stats

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def _call_logged(
    operation: str,
    func: Callable[..., Any],
    args: tuple,
    kwargs: dict,
    log: Optional[OperationLog],
) -> Any:
    started_at = datetime.now(timezone.utc)
    start = time.perf_counter()
    try:
        result = func(*args, **kwargs)
    except Exception as exc:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.warning(
            "analytics_operation_failed",
            operation=operation,
            duration_ms=round(duration_ms, 3),
            error_type=type(exc).__name__,
            error=str(exc),
        )
        if log is not None:
            log.append(
                OperationRecord(
                    operation=operation,
                    started_at=started_at,
                    duration_ms=duration_ms,
                    success=False,
                    error_type=type(exc).__name__,
                )
            )
        raise

    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "analytics_operation_completed",
        operation=operation,
        duration_ms=round(duration_ms, 3),
    )
    if log is not None:
        log.append(
            OperationRecord(
                operation=operation,
                started_at=started_at,
                duration_ms=duration_ms,
                success=True,
            )
        )
    return result


def instrumented(
    operation: Optional[str] = None, *, log: Optional[OperationLog] = None
) -> Callable[[F], F]:
    """Decorator logging each call of a pure analytics function.

    Exceptions are logged and re-raised unchanged.

    Example:
        >>> @instrumented("weekly_total")
        ... def weekly_total(transactions):
        ...     return RevenueAggregator().total_revenue(transactions)
    """

    def decorator(func: F) -> F:
        name = operation or func.__name__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return _call_logged(name, func, args, kwargs, log)

        return wrapper  # type: ignore[return-value]

    return decorator


class InstrumentedAnalytics:
    """Proxy that instruments every public method of ``target``.

    Attributes that are not callables (configuration, calendar) are passed
    through untouched. The wrapped object is not modified.
    """

    def __init__(
        self,
        target: Any,
        log: Optional[OperationLog] = None,
        prefix: Optional[str] = None,
    ) -> None:
        self._target = target
        self._log = log
        self._prefix = prefix

    @property
    def target(self) -> Any:
        return self._target

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._target, name)
        if name.startswith("_") or not callable(attr):
            return attr
        operation = f"{self._prefix}.{name}" if self._prefix else name

        @functools.wraps(attr)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return _call_logged(operation, attr, args, kwargs, self._log)

        return wrapper
