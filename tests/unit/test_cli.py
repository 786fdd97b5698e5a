"""Unit tests for the command-line interface."""

import asyncio
import os
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from xbs.cli import cli, serve_with_tls
from xbs.core.config import Settings


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def patched_settings(settings):
    """Serve CLI commands from the test settings without touching logging."""
    with patch("xbs.cli.get_settings", return_value=settings), \
         patch("xbs.cli.configure_logging"):
        yield settings


def test_info(runner, patched_settings):
    result = runner.invoke(cli, ["info"])

    assert result.exit_code == 0
    assert f"xbs v{patched_settings.app_version}" in result.output
    assert f"{patched_settings.max_sync_size} bytes" in result.output
    assert "SSL Port:     disabled" in result.output


def test_init_db(runner, patched_settings, tmp_path):
    result = runner.invoke(cli, ["init-db", "--force"])

    assert result.exit_code == 0
    assert "Database initialized successfully." in result.output
    assert (tmp_path / "xbs.db").exists()


def test_init_db_aborts_without_confirmation(runner, patched_settings):
    result = runner.invoke(cli, ["init-db"], input="n\n")

    assert result.exit_code == 1
    assert "Aborted" in result.output


def test_serve(runner, patched_settings):
    with patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve", "--port", "9000"])

    assert result.exit_code == 0
    mock_run.assert_called_once()
    args, kwargs = mock_run.call_args
    assert args == ("xbs.infrastructure.api.app:create_app",)
    assert kwargs["factory"] is True
    assert kwargs["port"] == 9000
    assert kwargs["workers"] == 1


def test_serve_invalid_workers_sqlite(runner, patched_settings):
    """Verify CLI fails when --workers > 1 is used with SQLite."""
    with patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve", "--workers", "2"])

    assert result.exit_code == 1
    assert "SQLite does not support multiple worker processes" in result.output
    mock_run.assert_not_called()


@pytest.fixture
def tls_settings(tmp_path):
    return Settings(
        environment="testing",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'xbs.db'}",
        port=8080,
        ssl_port=8443,
        ssl_keyfile="key.pem",
        ssl_certfile="cert.pem",
    )


def test_serve_tls_refuses_reload(runner, tls_settings):
    with patch("xbs.cli.get_settings", return_value=tls_settings), \
         patch("xbs.cli.configure_logging"), \
         patch("uvicorn.Server") as mock_server:
        result = runner.invoke(cli, ["serve", "--reload"])

    assert result.exit_code == 1
    assert "TLS listener requires a single worker" in result.output
    mock_server.assert_not_called()


def test_config_option_sets_config_file(runner, patched_settings, tmp_path, monkeypatch):
    config_file = tmp_path / "xbs.yml"
    config_file.write_text("port: 8080\n")
    monkeypatch.delenv("XBS_CONFIG_FILE", raising=False)

    result = runner.invoke(cli, ["--config", str(config_file), "info"])

    assert result.exit_code == 0
    assert os.environ["XBS_CONFIG_FILE"] == str(config_file)


def test_serve_tls_runs_http_and_https_listeners(runner, tls_settings):
    with patch("xbs.cli.get_settings", return_value=tls_settings), \
         patch("xbs.cli.configure_logging"), \
         patch("uvicorn.Config") as mock_config, \
         patch("uvicorn.Server") as mock_server, \
         patch("xbs.cli.serve_with_tls", new_callable=AsyncMock) as mock_serve:
        result = runner.invoke(cli, ["serve"])

    assert result.exit_code == 0
    http_config, https_config = mock_config.call_args_list
    assert http_config.args[0] is https_config.args[0]
    assert http_config.kwargs["port"] == 8080
    assert http_config.kwargs["lifespan"] == "on"
    assert "ssl_keyfile" not in http_config.kwargs
    assert https_config.kwargs["port"] == 8443
    assert https_config.kwargs["ssl_keyfile"] == "key.pem"
    assert https_config.kwargs["ssl_certfile"] == "cert.pem"
    assert https_config.kwargs["lifespan"] == "off"
    assert "factory" not in https_config.kwargs
    assert mock_server.call_count == 2
    mock_serve.assert_awaited_once()


class FakeServer:
    """Stand-in for uvicorn.Server that runs until asked to exit."""

    def __init__(self, fail_startup: bool = False, on_serve=None) -> None:
        self.fail_startup = fail_startup
        self.on_serve = on_serve
        self.started = False
        self.should_exit = False
        self.served = False

    async def serve(self) -> None:
        self.served = True
        if self.on_serve is not None:
            self.on_serve()
        await asyncio.sleep(0.01)
        if self.fail_startup:
            return
        self.started = True
        while not self.should_exit:
            await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_https_listener_starts_after_http_startup():
    http_server = FakeServer()
    http_started_when_https_served = []
    https_server = FakeServer(
        on_serve=lambda: http_started_when_https_served.append(http_server.started)
    )

    task = asyncio.create_task(serve_with_tls(http_server, https_server, poll_interval=0.01))
    while not https_server.started:
        await asyncio.sleep(0.01)

    # Stopping one listener stops the other
    https_server.should_exit = True
    await asyncio.wait_for(task, timeout=5)

    assert http_started_when_https_served == [True]
    assert http_server.should_exit is True


@pytest.mark.asyncio
async def test_https_listener_not_started_when_http_startup_fails():
    http_server = FakeServer(fail_startup=True)
    https_server = FakeServer()

    await asyncio.wait_for(
        serve_with_tls(http_server, https_server, poll_interval=0.01), timeout=5
    )

    assert https_server.served is False
