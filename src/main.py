"""Application entrypoint."""

import asyncio
import logging
import sys

from src.adapters.driven.config.settings import load_health_check_endpoint, load_settings
from src.adapters.driven.http.client import HttpClient
from src.adapters.driven.logging.logging_config import configure_logs
from src.adapters.driven.metrics.dispatch_metrics import Metrics
from src.adapters.driving.signals import make_stop_on_sigterm
from src.adapters.driving.stdin_messages import start_stream_reader
from src.core.dispatcher import Outbounder
from src.core.event_loop import start_listener_loop
from src.ports.device import DeviceMessage

__all__ = ["main"]

logger = logging.getLogger(__name__)


async def main() -> None:
    """Start the device outbounder.

    Startup sequence:
    1. Configure logging.
    2. Load and resolve the outbound configuration.
    3. Optionally probe the health endpoint.
    4. Forward device messages read from stdin until input ends.
    5. Gracefully shutdown on SIGTERM.
    """
    configure_logs()
    logger.info("Starting device outbounder...")

    try:
        settings = load_settings()
        health_check_endpoint = load_health_check_endpoint()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check OUTBOUND_CONFIG_FILE, the DEVICE_OUTBOUND_* variables "
            "and OUTBOUND_HEALTH_CHECK_ENDPOINT.",
            exc,
        )
        return

    metrics = Metrics()
    http_client = HttpClient(settings)

    async with http_client as http:
        if not await optional_endpoint_health_check(health_check_endpoint, http):
            return

        outbounder = Outbounder(settings, send_fn=http.send, metrics=metrics)
        queue: asyncio.Queue[DeviceMessage] = asyncio.Queue()
        input_done = start_stream_reader(sys.stdin, queue, asyncio.get_running_loop())
        stop_on_signal = make_stop_on_sigterm()

        def stop_fn() -> bool:
            return stop_on_signal() or (input_done.is_set() and queue.empty())

        try:
            await start_listener_loop(
                source=queue,
                stop_fn=stop_fn,
                listener=outbounder,
                grace_sec=settings.timeout,
            )
        except Exception as e:
            logger.error(f"Unhandled exception in listener loop: {e}", exc_info=True)

        logger.info(f"Dispatch metrics: {metrics}")
        logger.info("Device outbounder stopped.")


async def optional_endpoint_health_check(endpoint: str | None, http: HttpClient) -> bool:
    """Perform optional health check before forwarding.

    Only runs if OUTBOUND_HEALTH_CHECK_ENDPOINT is configured.

    Args:
        endpoint: Health endpoint URL, or None when disabled.
        http: HTTP client for probing.

    Returns:
        True if healthy or check disabled, False if check failed.
    """
    if endpoint:
        logger.info(f"Performing health check on {endpoint}...")
        if not await http.probe(url=endpoint):
            logger.error(f"Health check failed for {endpoint}, aborting startup")
            return False

        logger.info("Health check passed, forwarding device messages...")
    return True


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")
