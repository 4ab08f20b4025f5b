"""Dispatch of device messages to the notification sink."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import aiohttp

from src.core.request_factory import HeaderEnricher, RequestConstructionError, RequestFactory
from src.ports.device import DeviceId, ParsedMessage
from src.ports.http import HttpStatus, OutboundRequest
from src.ports.logger import LoggerPort
from src.ports.metrics import DispatchAttemptDto, MetricsPort
from src.ports.settings import OutboundSettings

__all__ = [
    "DispatchOutcome",
    "FIRST_FAILING_HTTP_CODE",
    "OutcomeKind",
    "Outbounder",
    "SendFn",
    "TRANSPORT_ERRORS",
]

FIRST_FAILING_HTTP_CODE = 400

# Network failures, refused connections and deadline expiry
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)

SendFn = Callable[..., Awaitable[HttpStatus]]


class OutcomeKind(str, enum.Enum):
    """How a single dispatch ended."""

    NOT_BUILT = "not_built"
    TRANSPORT_ERROR = "transport_error"
    DELIVERED = "delivered"
    REJECTED = "rejected"


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one dispatch. Only ever logged and counted.

    Attributes:
        kind: Outcome classification.
        status: Status line when the sink answered.
        error: Construction or transport error, if any.
    """

    kind: OutcomeKind
    status: HttpStatus | None = None
    error: BaseException | None = None

    @property
    def is_failed(self) -> bool:
        return self.kind is not OutcomeKind.DELIVERED


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class Outbounder:
    """Message listener forwarding each device message to the notification sink.

    Holds the resolved settings, the request factory and the shared sending
    function for the lifetime of the process. Stateless per call, so it may be
    invoked concurrently from any number of tasks.

    Every failure is terminal for its message: it is logged and the message is
    dropped. Nothing is retried and nothing is raised to the caller, except
    ``asyncio.CancelledError`` so that callers can abandon in-flight dispatches.
    """

    def __init__(
        self,
        settings: OutboundSettings,
        send_fn: SendFn,
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
        header_enricher: HeaderEnricher | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            settings: Resolved outbound settings.
            send_fn: Async function sending one request on the shared client,
                called as ``send_fn(request, timeout=...)``.
            logger: Logging capability; defaults to this module's logger.
            metrics: Optional collector updated after every dispatch.
            header_enricher: Optional hook adding headers from the decoded message.
        """
        self.settings = settings
        self.send_fn = send_fn
        self.logger: LoggerPort = logger or logging.getLogger(__name__)
        self.metrics = metrics
        self.request_factory = RequestFactory(settings, header_enricher=header_enricher)

    async def __call__(
        self, device_id: DeviceId, raw: bytes, message: ParsedMessage = None
    ) -> None:
        """Listener entry point: dispatch and discard the outcome."""
        try:
            await self.dispatch(device_id, raw, message)
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            self.logger.error("Unexpected error for device [%s]: %s", device_id, _describe(e))

    async def dispatch(
        self,
        device_id: DeviceId,
        raw: bytes,
        message: ParsedMessage = None,
        *,
        timeout: float | None = None,
    ) -> DispatchOutcome:
        """Forward one device message and classify the result.

        Args:
            device_id: Identifier of the originating device.
            raw: Encoded message bytes, sent verbatim.
            message: Decoded message, handed to the header enricher only.
            timeout: Optional deadline in seconds for this dispatch, used
                instead of the configured request timeout.

        Returns:
            The classified outcome.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()

        outcome = await self._dispatch(device_id, raw, message, timeout)

        if self.metrics is not None:
            self.metrics.update(
                DispatchAttemptDto(
                    started_at_sec=started,
                    finished_at_sec=loop.time(),
                    outcome=outcome.kind.value,
                    is_failed=outcome.is_failed,
                    status_code=outcome.status.status if outcome.status else None,
                )
            )

        return outcome

    async def _dispatch(
        self,
        device_id: DeviceId,
        raw: bytes,
        message: ParsedMessage,
        timeout: float | None,
    ) -> DispatchOutcome:
        try:
            request: OutboundRequest = self.request_factory.build(device_id, raw, message)
        except RequestConstructionError as e:
            self.logger.error("Unable to create request for device [%s]: %s", device_id, e)
            return DispatchOutcome(OutcomeKind.NOT_BUILT, error=e)

        try:
            status = await self.send_fn(request, timeout=timeout)
        except TRANSPORT_ERRORS as e:
            self.logger.error("HTTP error for device [%s]: %s", device_id, _describe(e))
            return DispatchOutcome(OutcomeKind.TRANSPORT_ERROR, error=e)

        if status.status < FIRST_FAILING_HTTP_CODE:
            self.logger.debug("HTTP response for device [%s]: %s", device_id, status)
            return DispatchOutcome(OutcomeKind.DELIVERED, status=status)

        self.logger.error("HTTP response for device [%s]: %s", device_id, status)
        return DispatchOutcome(OutcomeKind.REJECTED, status=status)
