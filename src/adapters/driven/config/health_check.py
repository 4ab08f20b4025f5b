"""Healthcheck validator for container orchestration."""

import logging

from src.adapters.driven.config.settings import load_health_check_endpoint, load_settings
from src.adapters.driven.logging.logging_config import configure_logs

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Run health check for container orchestration.

    Validates:
    - The configuration file, when configured, exists and is valid JSON.
    - The outbound section and environment overrides are well formed.
    - The optional health check endpoint is a valid URL.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        _ = load_settings()
        _ = load_health_check_endpoint()
    except Exception as exc:
        logger.error(f"Outbounder healthcheck FAILED: {exc}")
        return 1

    logger.info("Outbounder healthcheck OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
