"""Signal handling for graceful shutdown."""

import asyncio
import logging
import signal
from collections.abc import Callable

__all__ = ["make_stop_on_sigterm"]

logger = logging.getLogger(__name__)


def make_stop_on_sigterm() -> Callable[[], bool]:
    """Create SIGTERM-based stop flag for the listener loop.

    Registers SIGTERM/SIGINT handlers that set an asyncio.Event, returning
    an is_set-style callable for the loop to poll.

    Returns:
        Callable that returns True once a termination signal has been received.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal() -> None:
        """Signal handler that sets the stop event."""
        logger.info("Termination signal received, initiating graceful shutdown...")
        stop.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal)

    return stop.is_set
