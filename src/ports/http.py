"""HTTP port definitions (DTOs)."""

from dataclasses import dataclass, field
from typing import Mapping

__all__ = ["HttpStatus", "OutboundRequest"]


@dataclass(frozen=True)
class OutboundRequest:
    """One outbound notification, built per dispatch and never retained.

    Decouples request shaping from the HTTP implementation.

    Attributes:
        method: HTTP method.
        url: Target endpoint URL.
        headers: Request headers.
        body: Raw message bytes, sent verbatim.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""


@dataclass(frozen=True)
class HttpStatus:
    """Status line of a completed HTTP exchange."""

    status: int
    reason: str = ""

    def __str__(self) -> str:
        return f"{self.status} {self.reason}".rstrip()
