"""Console logging setup for the outbounder."""

import logging
import os

__all__ = ["configure_logs"]


def configure_logs(level: str | None = None) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at INFO level.
    - Framework loggers (aiohttp, asyncio) at WARNING level.
    - Application loggers (src) at DEBUG level, or at LOG_LEVEL when set.
    - Format with timestamp, level, module, and line number.

    Args:
        level: Level name for application loggers; overrides LOG_LEVEL.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
    date_format = "%d/%m/%y %H:%M:%S"

    formatter = logging.Formatter(log_format, date_format)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    # Root logger
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(handler)

    # Suppress verbose framework loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # Application loggers
    app_level = (level or os.getenv("LOG_LEVEL") or "DEBUG").upper()
    logging.getLogger("src").setLevel(app_level)
