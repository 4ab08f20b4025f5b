"""In-memory sliding-window metrics for dispatches."""

from __future__ import annotations

import statistics
from collections import Counter, deque
from dataclasses import dataclass

from src.ports.metrics import DispatchAttemptDto, MetricsPort

__all__ = ["Metrics"]


@dataclass(slots=True, frozen=True)
class _Sample:
    """Internal record for one dispatch."""

    latency_ms: float
    outcome: str
    failed: bool
    status_code: int


class Metrics(MetricsPort):
    """Fast, lock-free metrics for async context.

    Tracks:
    - Average dispatch latency.
    - Failure rate (construction, transport and rejected dispatches).
    - Outcome counts within the window.
    - Last status code.
    - Total dispatches seen.

    Not thread-safe; create one instance per event loop.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent dispatches to keep for statistics.
        """
        self._window: deque[_Sample] = deque(maxlen=window_size)
        self._total_seen: int = 0

    def update(self, attempt: DispatchAttemptDto) -> None:
        """Record a finished dispatch.

        Args:
            attempt: Dispatch with timing and result info.
        """
        latency_ms = (attempt.finished_at_sec - attempt.started_at_sec) * 1_000.0
        self._window.append(
            _Sample(
                latency_ms=latency_ms,
                outcome=attempt.outcome,
                failed=attempt.is_failed,
                status_code=attempt.status_code or 0,
            )
        )
        self._total_seen += 1

    def __str__(self) -> str:
        """Return human-readable one-line summary for logging.

        Returns:
            Formatted metrics string.
        """
        if not self._window:
            return "Metrics: waiting for data …"

        n_window = len(self._window)
        failures = sum(1 for s in self._window if s.failed)
        fail_pct = (failures / n_window) * 100
        avg_latency = statistics.fmean(s.latency_ms for s in self._window)
        last = self._window[-1]
        outcomes = ",".join(
            f"{name}:{count}" for name, count in sorted(Counter(s.outcome for s in self._window).items())
        )

        return (
            f"latency={avg_latency:5.1f} ms | "
            f"status={last.status_code:3d} | "
            f"fail={fail_pct:5.1f}% | "
            f"outcomes={outcomes} | "
            f"win={n_window}/{self._window.maxlen} | "
            f"total={self._total_seen}"
        )
