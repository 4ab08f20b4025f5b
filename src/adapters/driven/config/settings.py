"""Configuration loading from environment variables and files."""

import json
import logging
import math
import os
import re
from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, HttpUrl, TypeAdapter, field_validator

from src.core.config_resolver import resolve
from src.ports.settings import OutboundOptions, OutboundSettings

__all__ = [
    "CONFIG_FILE_ENV",
    "ENV_PREFIX",
    "HEALTH_CHECK_ENV",
    "OUTBOUNDER_KEY",
    "OutboundConfig",
    "extract_section",
    "load_config_file",
    "load_health_check_endpoint",
    "load_settings",
    "parse_duration",
]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

# Key under which the outbound section lives in a configuration document
OUTBOUNDER_KEY = "device.outbound"
CONFIG_FILE_ENV = "OUTBOUND_CONFIG_FILE"
HEALTH_CHECK_ENV = "OUTBOUND_HEALTH_CHECK_ENDPOINT"
ENV_PREFIX = "DEVICE_OUTBOUND_"

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: Any) -> float:
    """Convert a duration to seconds.

    Numbers are taken as seconds. Strings may be plain numbers or Go-style
    durations such as "10s", "1m30s", "250ms" or "-5s".

    Args:
        value: Duration to convert.

    Returns:
        Duration in seconds.

    Raises:
        ValueError: If the value is not a finite duration.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        seconds = _parse_duration_text(value)
    else:
        raise ValueError(f"invalid duration {value!r}")

    if not math.isfinite(seconds):
        raise ValueError(f"invalid duration {value!r}")
    return seconds


def _parse_duration_text(value: str) -> float:
    text = value.strip()
    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if not text:
        raise ValueError(f"invalid duration {value!r}")

    try:
        return sign * float(text)
    except ValueError:
        pass

    total = 0.0
    pos = 0
    for match in _DURATION_PART_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return sign * total


def _normalize_key(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


class OutboundConfig(BaseModel):
    """Sparse outbound configuration as read from a configuration source.

    Attributes:
        method: HTTP method for notifications.
        endpoint: Notification sink URL.
        device_name_header: Header carrying the device identifier.
        content_type: Content-Type of the forwarded payload.
        timeout: Total request deadline in seconds.
        max_idle_conns: Connection pool size.
        max_idle_conns_per_host: Per-host connection cap.
        idle_conn_timeout: Idle connection lifetime in seconds.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    method: str | None = None
    endpoint: str | None = None
    device_name_header: str | None = None
    content_type: str | None = None
    timeout: float | None = None
    max_idle_conns: int | None = None
    max_idle_conns_per_host: int | None = None
    idle_conn_timeout: float | None = None

    @field_validator("timeout", "idle_conn_timeout", mode="before")
    @classmethod
    def validate_duration(cls, v: Any) -> float | None:
        """Accept seconds or Go-style duration strings.

        Raises:
            ValueError: If the value is not a duration.
        """
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return parse_duration(v)

    @field_validator("max_idle_conns", "max_idle_conns_per_host", mode="before")
    @classmethod
    def validate_count(cls, v: Any) -> Any:
        """Treat a blank value as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "OutboundConfig":
        """Build from a loosely keyed mapping.

        Keys match fields ignoring case, underscores and dashes, so
        "maxIdleConnsPerHost" and "max_idle_conns_per_host" are the same key.
        Unknown keys are ignored; on duplicates the last one wins.

        Raises:
            ValueError: If a value has the wrong type.
        """
        if not mapping:
            return cls()

        fields = {_normalize_key(name): name for name in cls.model_fields}
        data: dict[str, Any] = {}
        for key, value in mapping.items():
            field = fields.get(_normalize_key(str(key)))
            if field is not None:
                data[field] = value
        return cls(**data)

    def to_options(self) -> OutboundOptions:
        return OutboundOptions(**self.model_dump())


def extract_section(
    document: Mapping[str, Any], key: str = OUTBOUNDER_KEY
) -> Mapping[str, Any] | None:
    """Find a configuration section by dotted key.

    The section may be stored under the literal dotted key or as nested
    objects, matched case-insensitively.

    Args:
        document: Whole configuration document.
        key: Dotted key of the section.

    Returns:
        The section, or None when absent.

    Raises:
        ValueError: If the key holds something other than an object.
    """
    if key in document:
        section = document[key]
    else:
        section = document
        for part in key.split("."):
            if not isinstance(section, Mapping):
                return None
            section = next(
                (v for k, v in section.items() if str(k).lower() == part.lower()),
                None,
            )
            if section is None:
                return None

    if section is None:
        return None
    if not isinstance(section, Mapping):
        raise ValueError(f"Configuration key {key!r} must be an object")
    return section


def load_config_file(path: str, key: str = OUTBOUNDER_KEY) -> Mapping[str, Any]:
    """Read the outbound section from a JSON configuration file.

    Args:
        path: Path to the JSON document.
        key: Dotted key of the section.

    Returns:
        The section; empty when the document has none.

    Raises:
        ValueError: If file not found, unreadable, invalid JSON or wrong format.
    """
    try:
        with open(path) as f:
            document = json.load(f)
    except FileNotFoundError as e:
        raise ValueError(f"Configuration file not found: {path}") from e
    except OSError as e:
        raise ValueError(f"Configuration file cannot be read: {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Configuration file contains invalid JSON: {path}") from e

    if not isinstance(document, dict):
        raise ValueError("Configuration file must be a JSON object")

    section = extract_section(document, key)
    logger.debug(f"Loaded {key!r} section from {path}: {'present' if section else 'absent'}")
    return section or {}


def _env_overrides() -> dict[str, str]:
    overrides = {}
    for name in OutboundConfig.model_fields:
        env_name = ENV_PREFIX + name.upper()
        value = os.environ.get(env_name, "")
        if value.strip():
            overrides[name] = value
    return overrides


def load_settings() -> OutboundSettings:
    """Load, validate and resolve the outbound settings.

    Sources, later ones winning:
    - OUTBOUND_CONFIG_FILE: optional JSON document holding a "device.outbound" section.
    - DEVICE_OUTBOUND_<FIELD> environment variables, e.g. DEVICE_OUTBOUND_ENDPOINT.
      Empty variables are ignored.

    Anything left unset resolves to its default.

    Returns:
        Resolved settings.

    Raises:
        ValueError: If a source is unreadable or holds malformed values.
    """
    data: dict[str, Any] = {}

    config_path = os.getenv(CONFIG_FILE_ENV)
    if config_path:
        data.update(load_config_file(config_path))

    data.update(_env_overrides())

    config = OutboundConfig.from_mapping(data)
    settings = resolve(config.to_options())

    logger.info(
        f"Outbounder configured: {settings.method} {settings.endpoint}, "
        f"device_header={settings.device_name_header}, "
        f"content_type={settings.content_type}, "
        f"timeout={settings.timeout}s, "
        f"pool={settings.max_idle_conns or 'unbounded'}/"
        f"{settings.max_idle_conns_per_host} per host, "
        f"idle_timeout={settings.idle_conn_timeout or '<none>'}"
    )

    return settings


def load_health_check_endpoint() -> str | None:
    """Return the optional health check endpoint.

    Returns:
        The validated URL, or None when OUTBOUND_HEALTH_CHECK_ENDPOINT is unset.

    Raises:
        ValueError: If the URL is invalid or not http(s).
    """
    endpoint = os.getenv(HEALTH_CHECK_ENV)
    if not endpoint:
        return None
    try:
        url = _http_url_adapter.validate_python(endpoint)
        if url.scheme not in ("http", "https"):
            raise ValueError("Only http(s) endpoints allowed")
    except Exception as e:
        raise ValueError(f"Invalid health endpoint: {e}") from e
    return endpoint
