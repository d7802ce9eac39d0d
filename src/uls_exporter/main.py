"""
ULS exporter entry point.

Usage:
    uls-exporter                                  Serve metrics on :9101/metrics
    uls-exporter -uri http://uls:8080 -listen :9200
    uls-exporter leases                           Print the current leases once

Every flag falls back to its environment variable (ULS_LISTEN,
ULS_PATH, ULS_URI) and then to the built-in default.
"""

from __future__ import annotations

import logging

import click

from uls_exporter import __version__
from uls_exporter.collector.errors import LeaseFetchError
from uls_exporter.collector.uls_collector import ULSCollector
from uls_exporter.config import (
    DEFAULT_LISTEN,
    DEFAULT_PATH,
    DEFAULT_URI,
    ENV_LISTEN,
    ENV_PATH,
    ENV_URI,
    ExporterConfig,
)
from uls_exporter.server import serve


log = logging.getLogger("uls_exporter")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="uls-exporter")
@click.option("-listen", "--listen", "listen", envvar=ENV_LISTEN, default=DEFAULT_LISTEN,
              show_default=True, help=f"Address to listen on [env {ENV_LISTEN}]")
@click.option("-path", "--path", "path", envvar=ENV_PATH, default=DEFAULT_PATH,
              show_default=True, help=f"Path to export metrics on [env {ENV_PATH}]")
@click.option("-uri", "--uri", "uri", envvar=ENV_URI, default=DEFAULT_URI,
              show_default=True, help=f"ULS server base URI [env {ENV_URI}]")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, listen: str, path: str, uri: str, verbose: bool):
    """Prometheus exporter for ULS floating-license leases."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["listen"] = listen
    ctx.obj["path"] = path
    ctx.obj["uri"] = uri

    if ctx.invoked_subcommand is None:
        try:
            config = ExporterConfig(listen=listen, path=path, uri=uri)
            serve(config)
        except (ValueError, OSError) as e:
            log.critical("%s", e)
            raise SystemExit(1)


@cli.command()
@click.pass_context
def leases(ctx):
    """Fetch the active leases once and print them as a table."""
    from uls_exporter.dashboard.lease_table import print_leases

    try:
        collector = ULSCollector(base_url=ctx.obj["uri"])
    except ValueError as e:
        log.critical("%s", e)
        raise SystemExit(1)

    try:
        records = collector.fetch_leases()
    except LeaseFetchError as e:
        click.echo(f"Could not fetch leases: {e}", err=True)
        raise SystemExit(1)
    finally:
        collector.close()

    print_leases(records, collector.name())


if __name__ == "__main__":
    cli()
