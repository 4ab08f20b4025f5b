"""Device messages read as JSON lines from a text stream."""

import asyncio
import base64
import binascii
import logging
import threading
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.ports.device import DeviceId, DeviceMessage

__all__ = ["MessageLine", "parse_line", "start_stream_reader"]

logger = logging.getLogger(__name__)


class MessageLine(BaseModel):
    """One input line: {"device_id": ..., "payload": <base64>, "message": ...}."""

    device_id: str = Field(..., min_length=1)
    payload: bytes = b""
    message: Any = None

    @field_validator("payload", mode="before")
    @classmethod
    def decode_payload(cls, v: Any) -> bytes:
        """Decode the base64 payload.

        Raises:
            ValueError: If the payload is not valid base64 text.
        """
        if not isinstance(v, str):
            raise ValueError("payload must be a base64 string")
        try:
            return base64.b64decode(v, validate=True)
        except binascii.Error as e:
            raise ValueError(f"payload is not valid base64: {e}") from e


def parse_line(line: str) -> DeviceMessage:
    """Parse one JSON line into a device message.

    Raises:
        ValueError: If the line is not a valid message record.
    """
    record = MessageLine.model_validate_json(line)
    return DeviceMessage(
        device_id=DeviceId(record.device_id),
        raw=record.payload,
        message=record.message,
    )


def start_stream_reader(
    stream: Iterable[str],
    queue: "asyncio.Queue[DeviceMessage]",
    loop: asyncio.AbstractEventLoop,
) -> asyncio.Event:
    """Read device messages from a blocking stream on a daemon thread.

    Malformed lines are logged and skipped.

    Args:
        stream: Line iterable such as sys.stdin.
        queue: Queue receiving the parsed messages.
        loop: Event loop owning the queue.

    Returns:
        Event set once the stream is exhausted.
    """
    done = asyncio.Event()

    def _read() -> None:
        count = 0
        try:
            for line in stream:
                line = line.strip()
                if not line:
                    continue
                try:
                    item = parse_line(line)
                except ValueError as e:
                    logger.warning(f"Skipping malformed message line: {e}")
                    continue
                loop.call_soon_threadsafe(queue.put_nowait, item)
                count += 1
        finally:
            logger.info(f"Input exhausted after {count} messages")
            if not loop.is_closed():
                loop.call_soon_threadsafe(done.set)

    threading.Thread(target=_read, name="message-reader", daemon=True).start()
    return done
