"""CLI commands for the PuppetDB exporter."""

import logging
import sys
from collections.abc import Callable
from typing import Any, TypeVar

import click
import structlog

from src.config.constants import COMPONENT_CLI
from src.config.error_hints import format_validation_error
from src.config.errors import ConfigError
from src.config.loader import load_config
from src.config.models import ExporterConfig
from src.exporter.gauges import GaugeRegistry
from src.exporter.loop import ReconciliationLoop
from src.exporter.server import build_wsgi_app, start_exposition_server
from src.observability.logging import configure_logging
from src.puppetdb.client import PuppetDBClient, PuppetDBOptions
from src.settings.app import AppSettings, get_settings


logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])


def _exporter_options(func: F) -> F:
    """Attach the options shared by every command."""
    options = [
        click.option(
            "--puppetdb-url",
            type=str,
            default=None,
            help="PuppetDB query API base URL (default: https://puppetdb:8081/pdb/query).",
        ),
        click.option(
            "--cert-file",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="Client certificate used to authenticate to PuppetDB.",
        ),
        click.option(
            "--key-file",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="Private key of the client certificate.",
        ),
        click.option(
            "--ca-file",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="CA bundle used to verify the PuppetDB server certificate.",
        ),
        click.option(
            "--ssl-skip-verify",
            is_flag=True,
            default=False,
            help="Skip verification of the PuppetDB server certificate.",
        ),
        click.option(
            "--scrape-interval",
            type=str,
            default=None,
            help="Duration between two polls of PuppetDB (default: 5s).",
        ),
        click.option(
            "--unreported-node",
            "unreported_threshold",
            type=str,
            default=None,
            help="Report age after which a node counts as unreported (default: 2h).",
        ),
        click.option(
            "--categories",
            type=str,
            default=None,
            help="Comma-separated report metric categories to export "
            "(default: resources,time,changes,events).",
        ),
        click.option(
            "--verbose",
            "-v",
            is_flag=True,
            help="Enable debug logging, including per-node unreported reasons.",
        ),
        click.option(
            "--json-logs/--no-json-logs",
            default=True,
            help="Use JSON format for logs (default: true).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _setup_logging(
    settings: AppSettings, verbose: bool, json_logs: bool
) -> structlog.typing.FilteringBoundLogger:
    """Configure logging before anything else logs.

    Args:
        settings: Environment settings (may enable verbose mode).
        verbose: Value of the --verbose flag.
        json_logs: Whether to render logs as JSON.

    Returns:
        Logger bound to the CLI component.
    """
    debug = verbose or bool(settings.verbose)
    configure_logging(
        level=logging.DEBUG if debug else logging.INFO, json_format=json_logs
    )
    return logger.bind(component=COMPONENT_CLI)  # type: ignore[no-any-return]


def _load_config_or_exit(
    settings: AppSettings,
    overrides: dict[str, object],
    log: structlog.typing.FilteringBoundLogger,
) -> ExporterConfig:
    """Assemble the configuration, exiting with status 1 on failure."""
    try:
        return load_config(settings=settings, overrides=overrides)
    except ConfigError as e:
        log.error("config_invalid", error=str(e))
        click.echo("Configuration validation failed:", err=True)
        for error in e.errors:
            formatted = format_validation_error(
                location=error["loc"],
                message=error["msg"],
                error_type=error.get("type", "unknown"),
                include_hint=True,
            )
            click.echo(f"  - {formatted}", err=True)
        sys.exit(1)


def _build_client_or_exit(
    config: ExporterConfig, log: structlog.typing.FilteringBoundLogger
) -> PuppetDBClient:
    """Create the PuppetDB client, exiting with status 1 on TLS setup errors."""
    try:
        return PuppetDBClient(PuppetDBOptions.from_config(config))
    except OSError as e:
        log.error("puppetdb_client_setup_failed", error=str(e))
        click.echo(f"Error: cannot set up TLS for PuppetDB: {e}", err=True)
        sys.exit(1)


def _collect_overrides(**values: object) -> dict[str, object]:
    """Keep only the options given explicitly on the command line."""
    return {k: v for k, v in values.items() if v not in (None, False)}


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Prometheus exporter for PuppetDB node report status."""


@cli.command()
@_exporter_options
@click.option(
    "--listen-address",
    type=str,
    default=None,
    help="Address to expose metrics on (default: :9635).",
)
@click.option(
    "--metrics-path",
    type=str,
    default=None,
    help="Path under which to expose metrics (default: /metrics).",
)
def run(  # noqa: PLR0913
    puppetdb_url: str | None,
    cert_file: str | None,
    key_file: str | None,
    ca_file: str | None,
    ssl_skip_verify: bool,
    scrape_interval: str | None,
    unreported_threshold: str | None,
    categories: str | None,
    verbose: bool,
    json_logs: bool,
    listen_address: str | None,
    metrics_path: str | None,
) -> None:
    """Serve metrics and poll PuppetDB until interrupted."""
    settings = get_settings()
    log = _setup_logging(settings, verbose, json_logs)
    config = _load_config_or_exit(
        settings,
        _collect_overrides(
            puppetdb_url=puppetdb_url,
            cert_file=cert_file,
            key_file=key_file,
            ca_file=ca_file,
            ssl_skip_verify=ssl_skip_verify,
            scrape_interval=scrape_interval,
            unreported_threshold=unreported_threshold,
            categories=categories,
            verbose=verbose,
            listen_address=listen_address,
            metrics_path=metrics_path,
        ),
        log,
    )

    gauges = GaugeRegistry(config.categories)
    client = _build_client_or_exit(config, log)

    try:
        server, _ = start_exposition_server(
            config.listen_host,
            config.listen_port,
            build_wsgi_app(gauges.registry, config.metrics_path),
        )
    except OSError as e:
        client.close()
        log.error("listen_failed", listen_address=config.listen_address, error=str(e))
        click.echo(f"Error: cannot listen on {config.listen_address}: {e}", err=True)
        sys.exit(1)

    loop = ReconciliationLoop(
        client=client,
        gauges=gauges,
        interval=config.scrape_interval,
        unreported_threshold=config.unreported_threshold,
        verbose=config.verbose,
    )
    try:
        loop.run()
    except KeyboardInterrupt:
        log.info("exporter_stopped", cycles_total=loop.metrics.cycles_total)
    finally:
        server.shutdown()
        server.server_close()
        client.close()


@cli.command()
@_exporter_options
def check(  # noqa: PLR0913
    puppetdb_url: str | None,
    cert_file: str | None,
    key_file: str | None,
    ca_file: str | None,
    ssl_skip_verify: bool,
    scrape_interval: str | None,
    unreported_threshold: str | None,
    categories: str | None,
    verbose: bool,
    json_logs: bool,
) -> None:
    """Poll PuppetDB once and print the resulting metrics."""
    settings = get_settings()
    log = _setup_logging(settings, verbose, json_logs)
    config = _load_config_or_exit(
        settings,
        _collect_overrides(
            puppetdb_url=puppetdb_url,
            cert_file=cert_file,
            key_file=key_file,
            ca_file=ca_file,
            ssl_skip_verify=ssl_skip_verify,
            scrape_interval=scrape_interval,
            unreported_threshold=unreported_threshold,
            categories=categories,
            verbose=verbose,
        ),
        log,
    )

    gauges = GaugeRegistry(config.categories)
    with _build_client_or_exit(config, log) as client:
        loop = ReconciliationLoop(
            client=client,
            gauges=gauges,
            interval=config.scrape_interval,
            unreported_threshold=config.unreported_threshold,
            verbose=config.verbose,
        )
        result = loop.run_cycle()

    click.echo(gauges.exposition().decode("utf-8"), nl=False)
    if result.nodes_fetch_failed:
        click.echo("Error: failed to fetch nodes from PuppetDB", err=True)
        sys.exit(1)


@cli.command()
@_exporter_options
def validate(  # noqa: PLR0913
    puppetdb_url: str | None,
    cert_file: str | None,
    key_file: str | None,
    ca_file: str | None,
    ssl_skip_verify: bool,
    scrape_interval: str | None,
    unreported_threshold: str | None,
    categories: str | None,
    verbose: bool,
    json_logs: bool,
) -> None:
    """Validate the configuration without contacting PuppetDB."""
    settings = get_settings()
    log = _setup_logging(settings, verbose, json_logs)
    config = _load_config_or_exit(
        settings,
        _collect_overrides(
            puppetdb_url=puppetdb_url,
            cert_file=cert_file,
            key_file=key_file,
            ca_file=ca_file,
            ssl_skip_verify=ssl_skip_verify,
            scrape_interval=scrape_interval,
            unreported_threshold=unreported_threshold,
            categories=categories,
            verbose=verbose,
        ),
        log,
    )

    click.echo("Configuration is valid!")
    for key, value in config.to_display_dict().items():
        if isinstance(value, list):
            value = ",".join(value)
        click.echo(f"  {key}: {value}")
