"""Device-side port definitions (types and interfaces)."""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, NewType, Protocol

__all__ = ["DeviceId", "DeviceMessage", "MessageListener", "ParsedMessage"]

DeviceId = NewType("DeviceId", str)

# Structured form of a device message as produced by the codec.
ParsedMessage = Any


@dataclass(frozen=True)
class DeviceMessage:
    """One inbound device message as handed over by the session layer.

    Attributes:
        device_id: Identifier of the originating device.
        raw: Encoded message bytes.
        message: Decoded message, if the codec produced one.
    """

    device_id: DeviceId
    raw: bytes
    message: ParsedMessage = None


class MessageListener(Protocol):
    """Callback invoked once per device message.

    Implementations never raise for per-message failures.
    """

    def __call__(
        self, device_id: DeviceId, raw: bytes, message: ParsedMessage, /
    ) -> Awaitable[None]: ...
