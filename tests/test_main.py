"""Tests for main application entrypoint."""

from unittest.mock import AsyncMock, patch

import pytest

from src.adapters.driven.http.client import HttpClient
from src.core.config_resolver import resolve
from src.main import main, optional_endpoint_health_check

__all__ = []


@pytest.mark.asyncio
async def test_optional_endpoint_health_check_when_disabled() -> None:
    """Health check should return True when endpoint not configured."""
    http_client = HttpClient(resolve())

    result = await optional_endpoint_health_check(None, http_client)

    assert result is True


@pytest.mark.asyncio
async def test_optional_endpoint_health_check_succeeds() -> None:
    """Health check should return True when probe succeeds."""
    http_client = HttpClient(resolve())

    with patch.object(http_client, "probe", new_callable=AsyncMock) as mock_probe:
        mock_probe.return_value = True
        result = await optional_endpoint_health_check("http://localhost:8090/health", http_client)

    assert result is True
    mock_probe.assert_called_once_with(url="http://localhost:8090/health")


@pytest.mark.asyncio
async def test_optional_endpoint_health_check_fails() -> None:
    """Health check should return False when probe fails."""
    http_client = HttpClient(resolve())

    with patch.object(http_client, "probe", new_callable=AsyncMock) as mock_probe:
        mock_probe.return_value = False
        result = await optional_endpoint_health_check("http://localhost:8090/health", http_client)

    assert result is False


@pytest.mark.asyncio
async def test_main_starts_and_runs_successfully() -> None:
    """Main should wire the outbounder into the listener loop."""
    with (
        patch("src.main.configure_logs"),
        patch("src.main.load_settings") as mock_load_settings,
        patch("src.main.load_health_check_endpoint") as mock_load_health,
        patch("src.main.HttpClient") as mock_http_client_class,
        patch("src.main.Metrics"),
        patch("src.main.make_stop_on_sigterm"),
        patch("src.main.start_stream_reader"),
        patch("src.main.start_listener_loop", new_callable=AsyncMock) as mock_loop,
        patch("src.main.optional_endpoint_health_check", new_callable=AsyncMock) as mock_health,
    ):
        # Setup mocks
        mock_load_settings.return_value = resolve()
        mock_load_health.return_value = None

        mock_http_client = AsyncMock()
        mock_http_client_class.return_value = mock_http_client
        mock_http_client.__aenter__.return_value = mock_http_client

        mock_health.return_value = True

        # Run main
        await main()

        # Verify calls
        mock_load_settings.assert_called_once()
        mock_health.assert_called_once()
        mock_loop.assert_awaited_once()
        kwargs = mock_loop.call_args.kwargs
        assert kwargs["grace_sec"] == 10.0
        assert kwargs["listener"].send_fn is mock_http_client.send


@pytest.mark.asyncio
async def test_main_aborts_on_health_check_failure() -> None:
    """Main should abort startup if health check fails."""
    with (
        patch("src.main.configure_logs"),
        patch("src.main.load_settings") as mock_load_settings,
        patch("src.main.load_health_check_endpoint") as mock_load_health,
        patch("src.main.HttpClient") as mock_http_client_class,
        patch("src.main.Metrics"),
        patch("src.main.make_stop_on_sigterm"),
        patch("src.main.start_stream_reader"),
        patch("src.main.start_listener_loop", new_callable=AsyncMock) as mock_loop,
        patch("src.main.optional_endpoint_health_check", new_callable=AsyncMock) as mock_health,
    ):
        # Setup mocks
        mock_load_settings.return_value = resolve()
        mock_load_health.return_value = "http://localhost:8090/health"

        mock_http_client = AsyncMock()
        mock_http_client_class.return_value = mock_http_client
        mock_http_client.__aenter__.return_value = mock_http_client

        mock_health.return_value = False  # Health check fails

        # Run main
        await main()

        # Listener loop should NOT be called
        mock_loop.assert_not_called()


@pytest.mark.asyncio
async def test_main_aborts_on_configuration_error() -> None:
    """Main should not open a client when configuration is invalid."""
    with (
        patch("src.main.configure_logs"),
        patch("src.main.load_settings") as mock_load_settings,
        patch("src.main.HttpClient") as mock_http_client_class,
        patch("src.main.start_listener_loop", new_callable=AsyncMock) as mock_loop,
    ):
        mock_load_settings.side_effect = ValueError("bad timeout")

        await main()

        mock_http_client_class.assert_not_called()
        mock_loop.assert_not_called()


@pytest.mark.asyncio
async def test_main_continues_on_loop_exception() -> None:
    """Main should catch exceptions raised by the listener loop."""
    with (
        patch("src.main.configure_logs"),
        patch("src.main.load_settings") as mock_load_settings,
        patch("src.main.load_health_check_endpoint") as mock_load_health,
        patch("src.main.HttpClient") as mock_http_client_class,
        patch("src.main.Metrics"),
        patch("src.main.make_stop_on_sigterm"),
        patch("src.main.start_stream_reader"),
        patch("src.main.start_listener_loop", new_callable=AsyncMock) as mock_loop,
        patch("src.main.optional_endpoint_health_check", new_callable=AsyncMock) as mock_health,
        patch("src.main.logger") as mock_logger,
    ):
        # Setup mocks
        mock_load_settings.return_value = resolve()
        mock_load_health.return_value = None
        mock_http_client = AsyncMock()
        mock_http_client_class.return_value = mock_http_client
        mock_http_client.__aenter__.return_value = mock_http_client
        mock_health.return_value = True

        mock_loop.side_effect = RuntimeError("Test error in loop")

        # Run main - should NOT raise
        try:
            await main()
        except RuntimeError:
            pytest.fail("main() should not raise; exceptions are caught internally")

        # Verify error was logged
        mock_logger.error.assert_called()
