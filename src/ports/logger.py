"""Logging capability consumed by the dispatcher."""

from typing import Any, Protocol

__all__ = ["LoggerPort"]


class LoggerPort(Protocol):
    """Two-severity logging interface.

    ``logging.Logger`` satisfies it; messages use %-style formatting.
    """

    def debug(self, msg: str, *args: Any) -> None: ...

    def error(self, msg: str, *args: Any) -> None: ...
