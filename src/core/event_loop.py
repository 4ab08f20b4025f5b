"""Listener loop that hands queued device messages to the dispatcher."""

import asyncio
import logging
from collections.abc import Callable

from src.ports.device import DeviceMessage, MessageListener

__all__ = ["POLL_INTERVAL_SEC", "start_listener_loop"]

logger = logging.getLogger(__name__)

POLL_INTERVAL_SEC = 0.5


async def start_listener_loop(
    source: "asyncio.Queue[DeviceMessage]",
    stop_fn: Callable[[], bool],
    listener: MessageListener,
    poll_interval_sec: float = POLL_INTERVAL_SEC,
    grace_sec: float = 0.0,
) -> None:
    """Run the listener loop.

    Repeatedly:
    1. Wait for the next device message (at most poll_interval_sec).
    2. Run the listener for it as a background task (fire-and-forget).
    3. Repeat until stop_fn() returns True, then cancel in-flight tasks.

    Args:
        source: Queue of inbound device messages.
        stop_fn: Callable that returns True when loop should exit.
        listener: Callback invoked once per device message.
        poll_interval_sec: How often stop_fn() is checked while idle.
        grace_sec: How long in-flight dispatches may run on after stop.

    Notes:
        - The loop never awaits individual dispatches: each runs in its own
          asyncio.Task so a slow sink does not hold up other devices.
        - On shutdown (stop_fn() -> True), pending tasks get grace_sec to
          finish; the rest are cancelled and awaited to ensure a clean exit.
    """
    pending: set[asyncio.Task[None]] = set()
    loop = asyncio.get_running_loop()

    async def _run_once(item: DeviceMessage) -> None:
        """Run the listener for one message and log unexpected errors."""
        try:
            await listener(item.device_id, item.raw, item.message)
        except asyncio.CancelledError:
            logger.info("Shutdown requested (task cancelled).")
        except Exception as e:  # noqa: BLE001
            logger.error(f"Unexpected error in dispatch task: {e}", exc_info=True)
        finally:
            task = asyncio.current_task()
            if task is not None:
                pending.discard(task)

    while not stop_fn():
        try:
            item = await asyncio.wait_for(source.get(), timeout=poll_interval_sec)
        except asyncio.TimeoutError:
            continue

        # Fire and forget
        task: asyncio.Task[None] = loop.create_task(_run_once(item))
        pending.add(task)
        source.task_done()

    if pending and grace_sec > 0:
        await asyncio.wait(set(pending), timeout=grace_sec)

    if pending:
        for task in list(pending):
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
