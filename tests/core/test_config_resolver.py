"""Tests for the outbound default policy."""

import dataclasses

import pytest

from src.core.config_resolver import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_DEVICE_NAME_HEADER,
    DEFAULT_ENDPOINT,
    DEFAULT_IDLE_CONN_TIMEOUT,
    DEFAULT_MAX_IDLE_CONNS,
    DEFAULT_MAX_IDLE_CONNS_PER_HOST,
    DEFAULT_METHOD,
    DEFAULT_TIMEOUT,
    resolve,
)
from src.ports.settings import OutboundOptions, OutboundSettings

__all__ = []


def test_resolve_none_yields_all_defaults() -> None:
    """No options at all should resolve to the documented defaults."""
    settings = resolve(None)

    assert settings == OutboundSettings(
        method="POST",
        endpoint="http://localhost:8090/api/v2/notify",
        device_name_header="X-Webpa-Device-Name",
        content_type="application/wrp",
        timeout=10.0,
        max_idle_conns=0,
        max_idle_conns_per_host=100,
        idle_conn_timeout=0.0,
    )


def test_resolve_empty_options_equals_no_options() -> None:
    """An empty option set should resolve like a missing one."""
    assert resolve(OutboundOptions()) == resolve()


@pytest.mark.parametrize(
    ("field", "unset", "default"),
    [
        ("method", "", DEFAULT_METHOD),
        ("endpoint", "", DEFAULT_ENDPOINT),
        ("device_name_header", "", DEFAULT_DEVICE_NAME_HEADER),
        ("content_type", "", DEFAULT_CONTENT_TYPE),
        ("timeout", 0, DEFAULT_TIMEOUT),
        ("timeout", -1.5, DEFAULT_TIMEOUT),
        ("max_idle_conns", 0, DEFAULT_MAX_IDLE_CONNS),
        ("max_idle_conns", -3, DEFAULT_MAX_IDLE_CONNS),
        ("max_idle_conns_per_host", 0, DEFAULT_MAX_IDLE_CONNS_PER_HOST),
        ("max_idle_conns_per_host", -1, DEFAULT_MAX_IDLE_CONNS_PER_HOST),
        ("idle_conn_timeout", 0, DEFAULT_IDLE_CONN_TIMEOUT),
        ("idle_conn_timeout", -30, DEFAULT_IDLE_CONN_TIMEOUT),
    ],
)
def test_resolve_unset_values_fall_back_to_default(field: str, unset, default) -> None:
    """Empty strings and non-positive numbers should count as unset."""
    settings = resolve(OutboundOptions(**{field: unset}))

    assert getattr(settings, field) == default


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("method", "PUT"),
        ("endpoint", "https://sink.example.com/notify"),
        ("device_name_header", "X-Device"),
        ("content_type", "application/msgpack"),
        ("timeout", 2.5),
        ("max_idle_conns", 50),
        ("max_idle_conns_per_host", 7),
        ("idle_conn_timeout", 90.0),
    ],
)
def test_resolve_passes_concrete_values_through(field: str, value) -> None:
    """A non-default concrete value should be kept unchanged."""
    settings = resolve(OutboundOptions(**{field: value}))

    assert getattr(settings, field) == value


def test_resolved_settings_are_immutable() -> None:
    """Resolved settings should not be modifiable after resolution."""
    settings = resolve()

    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.endpoint = "http://elsewhere"  # type: ignore[misc]
