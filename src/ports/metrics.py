"""Metrics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

__all__ = ["DispatchAttemptDto", "MetricsPort"]


@dataclass(slots=True, frozen=True)
class DispatchAttemptDto:
    """Immutable snapshot of a single dispatch.

    Attributes:
        started_at_sec: Monotonic seconds when the dispatch began.
        finished_at_sec: Monotonic seconds when the outcome was known.
        outcome: Outcome kind name (e.g. "delivered", "rejected").
        is_failed: True unless the sink accepted the message.
        status_code: HTTP status code when a response arrived; None otherwise.
    """

    started_at_sec: float
    finished_at_sec: float
    outcome: str
    is_failed: bool = False
    status_code: int | None = None


class MetricsPort(Protocol):
    """Interface for recording dispatch metrics.

    Implementations must be async-safe and non-blocking.
    The dispatcher calls update() after each dispatch; presentation layers
    call __str__() to render summaries.
    """

    def update(self, attempt: DispatchAttemptDto, /) -> None:
        """Record a finished dispatch.

        Args:
            attempt: The attempt to record.
        """
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans.

        Returns:
            Formatted metrics string.
        """
        ...
