"""Command-line interface for xbs.

This module provides the CLI commands for running and managing
the xbs sync server.
"""

import asyncio
import os
from typing import Any, NoReturn

import click

from xbs.core.config import CONFIG_FILE_ENV, get_settings
from xbs.core.logging import configure_logging, get_logger

# Seconds between checks for the HTTP listener to finish startup
STARTUP_POLL_INTERVAL = 0.1


async def serve_with_tls(
    http_server: Any,
    https_server: Any,
    poll_interval: float = STARTUP_POLL_INTERVAL,
) -> None:
    """Run the HTTP and HTTPS listeners of one app until either stops.

    Only the HTTP server runs the app lifespan, so the HTTPS server starts
    once the HTTP server has finished startup. If the HTTP server exits
    during startup the HTTPS server is never started.
    """
    tasks = [asyncio.create_task(http_server.serve())]
    while not http_server.started and not tasks[0].done():
        await asyncio.sleep(poll_interval)

    if not tasks[0].done():
        tasks.append(asyncio.create_task(https_server.serve()))
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

    # A signal only reaches one of the servers; stop the other too
    http_server.should_exit = True
    https_server.should_exit = True
    await asyncio.gather(*tasks)


@click.group()
@click.version_option(version="1.1.13", prog_name="xbs")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a YAML configuration file (default: ./xbs.yml if present)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides config file)",
)
def cli(config: str | None, log_level: str | None) -> None:
    """xbs - an xBrowserSync-compatible bookmarks sync server."""
    # Settings read the config path and log level from the environment
    if config is not None:
        os.environ[CONFIG_FILE_ENV] = config
    if log_level is not None:
        os.environ["XBS_LOG_LEVEL"] = log_level
    get_settings.cache_clear()


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the xbs server.

    Serves plain HTTP on the configured port and, when ssl_port,
    ssl_keyfile and ssl_certfile are configured, HTTPS on ssl_port.
    """
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = 1 if reload else (workers or settings.workers)

    if bind_workers > 1 and settings.is_sqlite:
        click.echo(
            "Error: SQLite does not support multiple worker processes. "
            "Use --workers 1 or switch to PostgreSQL.",
            err=True,
        )
        raise SystemExit(1)

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting xbs server",
        host=bind_host,
        port=bind_port,
        ssl_port=settings.ssl_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    common = dict(
        factory=True,
        host=bind_host,
        log_level=settings.log_level.lower(),
        access_log=True,
    )

    if not settings.ssl_enabled:
        uvicorn.run(
            "xbs.infrastructure.api.app:create_app",
            port=bind_port,
            workers=bind_workers,
            reload=reload,
            **common,
        )
        return

    if reload or bind_workers > 1:
        click.echo("ERROR: TLS listener requires a single worker without --reload.", err=True)
        raise SystemExit(1)

    # One app instance shared by the HTTP and HTTPS listeners
    from xbs.infrastructure.api.app import create_app

    app = create_app(settings)
    common.pop("factory")
    http_server = uvicorn.Server(uvicorn.Config(app, port=bind_port, lifespan="on", **common))
    https_server = uvicorn.Server(
        uvicorn.Config(
            app,
            port=settings.ssl_port,
            ssl_keyfile=settings.ssl_keyfile,
            ssl_certfile=settings.ssl_certfile,
            lifespan="off",
            **common,
        )
    )

    asyncio.run(serve_with_tls(http_server, https_server))


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def init_db(force: bool) -> None:
    """Create the bookmarks table.

    Use this for development and small SQLite deployments. In production,
    use the Alembic migrations instead.
    """
    from xbs.infrastructure.persistence.database import DatabaseManager

    settings = get_settings()
    configure_logging(settings)

    if not force:
        click.confirm(
            f"This will create the database tables in {settings.database_url}. Continue?",
            abort=True,
            default=False,
        )

    async def initialize() -> None:
        db = DatabaseManager(settings)
        try:
            if not await db.check_connection():
                click.echo("Error: could not connect to the database.", err=True)
                raise SystemExit(1)
            await db.create_tables()
            click.echo("Database initialized successfully.")
        finally:
            await db.disconnect()

    asyncio.run(initialize())


@cli.command()
def info() -> None:
    """Display xbs configuration."""
    settings = get_settings()

    click.echo(f"""
xbs v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  SSL Port:     {settings.ssl_port or 'disabled'}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}

Sync:
  Max Size:     {settings.max_sync_size} bytes
  New Syncs:    {'allowed' if settings.allow_new_syncs else 'refused'}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
  File:         {settings.log_file or 'stdout'}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `xbs` command is run
    or when using `python -m xbs`.
    """
    cli()


if __name__ == "__main__":
    main()
