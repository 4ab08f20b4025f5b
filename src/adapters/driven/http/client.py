"""HTTP client adapter for the notification sink."""

import logging
from types import TracebackType

import aiohttp
from aiohttp import ClientTimeout

from src.adapters.driven.http.transport import build_session
from src.ports.http import HttpStatus, OutboundRequest
from src.ports.settings import OutboundSettings

__all__ = ["HttpClient"]

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 10


class HttpClient:
    """Shared HTTP client used for every dispatch.

    Features:
    - One pooled session for the lifetime of the process.
    - Context manager for proper resource cleanup.
    - Health check/probe functionality.
    """

    def __init__(self, settings: OutboundSettings) -> None:
        """Initialize HTTP client.

        Args:
            settings: Resolved outbound settings used to size the pool.
        """
        self.settings = settings
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = build_session(self.settings)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session).

        Args:
            exc_type: Exception type if raised in context.
            exc: Exception instance if raised in context.
            tb: Traceback if raised in context.
        """
        if self.session:
            await self.session.close()

    def _require_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")
        return self.session

    async def send(self, req: OutboundRequest, timeout: float | None = None) -> HttpStatus:
        """Send one request and return its status line.

        The response body is not read; the connection goes back to the pool
        as soon as the status is known.

        Args:
            req: Request to send.
            timeout: Optional total deadline in seconds overriding the session's.

        Returns:
            Status code and reason phrase.

        Raises:
            RuntimeError: If session not initialized.
            aiohttp.ClientError: On network failures.
            asyncio.TimeoutError: When the deadline expires.
        """
        session = self._require_session()
        kwargs = {}
        if timeout is not None:
            kwargs["timeout"] = ClientTimeout(total=timeout)

        async with session.request(
            req.method,
            req.url,
            data=req.body,
            headers=req.headers,
            **kwargs,
        ) as resp:
            return HttpStatus(status=resp.status, reason=resp.reason or "")

    async def probe(self, url: str, timeout: int = PROBE_TIMEOUT) -> bool:
        """Check if HTTP endpoint is reachable.

        Args:
            url: URL to probe.
            timeout: Timeout in seconds.

        Returns:
            True if reachable ( 200 <= status < 300), False otherwise.
        """
        logger.info(f"Probing endpoint {url}...")
        try:
            session = self._require_session()
            async with session.get(
                url, timeout=ClientTimeout(total=timeout), allow_redirects=True
            ) as resp:
                logger.info(f"Probe for {url} returned status {resp.status}")
                return 200 <= resp.status < 300
        except Exception as e:
            logger.warning(f"Probe failed for {url}: {e}")
            return False
