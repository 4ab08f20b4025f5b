"""Default policy for outbound configuration."""

from src.ports.settings import OutboundOptions, OutboundSettings

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_DEVICE_NAME_HEADER",
    "DEFAULT_ENDPOINT",
    "DEFAULT_IDLE_CONN_TIMEOUT",
    "DEFAULT_MAX_IDLE_CONNS",
    "DEFAULT_MAX_IDLE_CONNS_PER_HOST",
    "DEFAULT_METHOD",
    "DEFAULT_TIMEOUT",
    "resolve",
]

DEFAULT_METHOD = "POST"
DEFAULT_ENDPOINT = "http://localhost:8090/api/v2/notify"
DEFAULT_DEVICE_NAME_HEADER = "X-Webpa-Device-Name"
DEFAULT_CONTENT_TYPE = "application/wrp"
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_IDLE_CONNS = 0
DEFAULT_MAX_IDLE_CONNS_PER_HOST = 100
DEFAULT_IDLE_CONN_TIMEOUT = 0.0


def _text(value: str | None, default: str) -> str:
    return value if value else default


def _positive(value, default):
    if value is not None and value > 0:
        return value
    return default


def resolve(options: OutboundOptions | None = None) -> OutboundSettings:
    """Fill every unset option with its default.

    Strings are unset when None or empty; numbers and durations when None
    or not positive. Never raises.

    Args:
        options: Sparse options; None means all defaults.

    Returns:
        Fully resolved settings.
    """
    if options is None:
        options = OutboundOptions()

    return OutboundSettings(
        method=_text(options.method, DEFAULT_METHOD),
        endpoint=_text(options.endpoint, DEFAULT_ENDPOINT),
        device_name_header=_text(options.device_name_header, DEFAULT_DEVICE_NAME_HEADER),
        content_type=_text(options.content_type, DEFAULT_CONTENT_TYPE),
        timeout=float(_positive(options.timeout, DEFAULT_TIMEOUT)),
        max_idle_conns=int(_positive(options.max_idle_conns, DEFAULT_MAX_IDLE_CONNS)),
        max_idle_conns_per_host=int(
            _positive(options.max_idle_conns_per_host, DEFAULT_MAX_IDLE_CONNS_PER_HOST)
        ),
        idle_conn_timeout=float(
            _positive(options.idle_conn_timeout, DEFAULT_IDLE_CONN_TIMEOUT)
        ),
    )
