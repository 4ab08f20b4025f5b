"""Settings port definitions (DTOs)."""

from dataclasses import dataclass

__all__ = ["OutboundOptions", "OutboundSettings"]


@dataclass(frozen=True)
class OutboundOptions:
    """Sparse outbound configuration as supplied by a configuration source.

    Every field may be left as None; the resolver fills in defaults.
    Durations are expressed in seconds.
    """

    method: str | None = None
    endpoint: str | None = None
    device_name_header: str | None = None
    content_type: str | None = None
    timeout: float | None = None
    max_idle_conns: int | None = None
    max_idle_conns_per_host: int | None = None
    idle_conn_timeout: float | None = None


@dataclass(frozen=True)
class OutboundSettings:
    """Fully resolved outbound configuration.

    Resolved once at startup and shared, read-only, by every dispatch.

    Attributes:
        method: HTTP method used for every notification.
        endpoint: URL of the notification sink.
        device_name_header: Header carrying the device identifier.
        content_type: Value of the Content-Type header.
        timeout: Total per-request deadline in seconds.
        max_idle_conns: Connection pool size; 0 means unbounded.
        max_idle_conns_per_host: Per-host connection cap.
        idle_conn_timeout: Seconds an idle connection is kept; 0 means no limit.
    """

    method: str
    endpoint: str
    device_name_header: str
    content_type: str
    timeout: float
    max_idle_conns: int
    max_idle_conns_per_host: int
    idle_conn_timeout: float
