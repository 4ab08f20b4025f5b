"""Pooled transport and session construction."""

import aiohttp

from src.ports.settings import OutboundSettings

__all__ = ["UNBOUNDED_KEEPALIVE_SEC", "build_connector", "build_session"]

# aiohttp has no "never expire" keep-alive; one day stands in for it.
UNBOUNDED_KEEPALIVE_SEC = 24 * 60 * 60.0


def build_connector(settings: OutboundSettings) -> aiohttp.TCPConnector:
    """Create the connection pool shared by every dispatch.

    Args:
        settings: Resolved outbound settings.

    Returns:
        Connector sized from the pool settings. A limit of 0 is unbounded.
    """
    keepalive = settings.idle_conn_timeout
    if keepalive <= 0:
        keepalive = UNBOUNDED_KEEPALIVE_SEC

    return aiohttp.TCPConnector(
        limit=settings.max_idle_conns,
        limit_per_host=settings.max_idle_conns_per_host,
        keepalive_timeout=keepalive,
    )


def build_session(
    settings: OutboundSettings,
    connector: aiohttp.BaseConnector | None = None,
) -> aiohttp.ClientSession:
    """Wrap the pooled connector in a session with the request deadline.

    Must be called from a running event loop. The session owns the connector
    and closes it along with itself.

    Args:
        settings: Resolved outbound settings.
        connector: Connector to use instead of a fresh one from build_connector().

    Returns:
        Long-lived client session.
    """
    return aiohttp.ClientSession(
        connector=connector or build_connector(settings),
        timeout=aiohttp.ClientTimeout(total=settings.timeout),
    )
