"""Per-source call metrics and degradation tracking for the catalog's upstreams.

Both the metadata API and the URL shortener run through one ``SourceMonitor``
so ``/health`` can report them side by side.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, TypeVar

from moviefy.utils.redaction import redact_secrets

logger = logging.getLogger("moviefy.sources")

T = TypeVar("T")


@dataclass
class SourceCircuit:
    """Marks a source degraded after consecutive faults; each reopening doubles the window up to a cap."""
    threshold: int
    base_backoff_seconds: float
    max_backoff_seconds: float
    failure_streak: int = 0
    opened_count: int = 0
    open_until: float = 0.0

    def backoff(self) -> float:
        if not self.opened_count:
            return self.base_backoff_seconds
        return min(self.base_backoff_seconds * 2 ** (self.opened_count - 1), self.max_backoff_seconds)

    def remaining_cooldown(self) -> float:
        return max(0.0, self.open_until - time.monotonic())

    def on_success(self) -> None:
        self.failure_streak = 0
        self.open_until = 0.0

    def on_failure(self) -> None:
        self.failure_streak += 1
        if self.failure_streak >= self.threshold:
            self.failure_streak = 0
            self.opened_count += 1
            self.open_until = time.monotonic() + self.backoff()

    def describe(self) -> dict[str, Any]:
        return {
            "failure_streak": self.failure_streak,
            "opened_count": self.opened_count,
            "open_until": self.open_until,
            "remaining_cooldown": self.remaining_cooldown(),
            "current_backoff": self.backoff(),
        }


@dataclass
class OperationStats:
    started: int = 0
    succeeded: int = 0
    failed: int = 0
    rejected: int = 0
    last_latency_ms: float | None = None
    last_error: str | None = None

    def finished(self, latency_ms: float, error: BaseException | None = None) -> None:
        self.last_latency_ms = latency_ms
        if error is None:
            self.succeeded += 1
            self.last_error = None
        else:
            self.failed += 1
            self.last_error = redact_secrets(str(error))


def is_upstream_fault(exc: BaseException) -> bool:
    """Client errors other than throttling are the caller's fault, not the source's."""
    status_code = getattr(exc, "status_code", None)
    if not isinstance(status_code, int) or status_code == 429:
        return True
    return not 400 <= status_code < 500


def _log_event(level: int, event: str, **fields: Any) -> None:
    logger.log(level, redact_secrets(json.dumps({"event": event, **fields}, default=str)))


class SourceMonitor:
    """Latency/error accounting per upstream, with a circuit that reports degradation.

    The circuit only feeds ``/health``. Calls are never refused, so one
    request's failures cannot change what another request gets back.
    """

    def __init__(
        self,
        *,
        circuit_threshold: int = 5,
        base_backoff_seconds: float = 10.0,
        max_backoff_seconds: float = 120.0,
    ) -> None:
        self._circuit_threshold = circuit_threshold
        self._base_backoff_seconds = base_backoff_seconds
        self._max_backoff_seconds = max_backoff_seconds
        self._lock = asyncio.Lock()
        self.reset()

    def reset(self) -> None:
        """Forget all stats and close every circuit."""
        self._circuits: dict[str, SourceCircuit] = {}
        self._stats: dict[str, dict[str, OperationStats]] = {}

    def _circuit(self, source: str) -> SourceCircuit:
        if source not in self._circuits:
            self._circuits[source] = SourceCircuit(
                threshold=self._circuit_threshold,
                base_backoff_seconds=self._base_backoff_seconds,
                max_backoff_seconds=self._max_backoff_seconds,
            )
        return self._circuits[source]

    def _operation(self, source: str, operation: str) -> OperationStats:
        return self._stats.setdefault(source, {}).setdefault(operation, OperationStats())

    async def track(
        self,
        source: str,
        operation: str,
        func: Callable[[], Awaitable[T]],
        *,
        context: dict[str, Any] | None = None,
    ) -> T:
        """Run ``func`` and record its outcome; exceptions are re-raised.

        Errors ``is_upstream_fault`` rejects (4xx replies) are counted as
        ``rejected`` and leave the circuit alone.
        """
        context = context or {}
        async with self._lock:
            circuit = self._circuit(source)
            stats = self._operation(source, operation)
            stats.started += 1

        start = time.monotonic()
        try:
            result = await func()
        except Exception as exc:  # noqa: BLE001
            latency_ms = (time.monotonic() - start) * 1000
            if not is_upstream_fault(exc):
                async with self._lock:
                    stats.rejected += 1
                    stats.last_latency_ms = latency_ms
                _log_event(
                    logging.INFO,
                    "source_rejected",
                    source=source,
                    operation=operation,
                    error=str(exc),
                    context=context,
                )
                raise
            async with self._lock:
                stats.finished(latency_ms, exc)
                circuit.on_failure()
                circuit_state = circuit.describe()
            _log_event(
                logging.WARNING,
                "source_failure",
                source=source,
                operation=operation,
                error=str(exc),
                latency_ms=round(latency_ms, 2),
                context=context,
                circuit=circuit_state,
            )
            raise

        latency_ms = (time.monotonic() - start) * 1000
        async with self._lock:
            stats.finished(latency_ms)
            circuit.on_success()
        _log_event(
            logging.DEBUG,
            "source_success",
            source=source,
            operation=operation,
            latency_ms=round(latency_ms, 2),
            context=context,
        )
        return result

    async def snapshot(self) -> dict[str, Any]:
        """Per-source circuit state and per-operation counters."""
        async with self._lock:
            return {
                source: {
                    "circuit": self._circuit(source).describe(),
                    "operations": {name: asdict(stats) for name, stats in operations.items()},
                }
                for source, operations in self._stats.items()
            }


source_monitor = SourceMonitor()
