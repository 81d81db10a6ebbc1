from __future__ import annotations

import asyncio
import json
from typing import Optional

import click
import httpx
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import AppSettings
from .dns_cache import HostCache
from .dns_client import TXTClient
from .http_client import fetch_meta_imports
from .logging_config import setup_logging
from .models import ImportDirective
from .cli_errors import handle_cli_errors, CLIError, NetworkError
from .server import run_server

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", envvar="LOG_LEVEL", default="INFO", show_default=True)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None)
def cli(log_level: str, log_file: Optional[str]) -> None:
    """
    govanity: go-import redirects for vanity domains, driven by DNS TXT records.
    """
    setup_logging(log_level, log_file=log_file)


def _emit_imports(title: str, imports: list[ImportDirective], as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps([directive.to_dict() for directive in imports], indent=2))
    else:
        _print_imports(title, imports)


def _print_imports(title: str, imports: list[ImportDirective]) -> None:
    table = Table(title=title)
    table.add_column("Prefix", style="cyan")
    table.add_column("VCS")
    table.add_column("Repository", style="green")
    for directive in imports:
        table.add_row(directive.prefix, directive.vcs, directive.url)
    console.print(table)


@cli.command()
@click.option("--http", "http_addr", help="HTTP listen address, e.g. :8080.")
@click.option("--https", "https_addr", help="HTTPS listen address (requires --tls-cert/--tls-key).")
@click.option("--tls-cert", type=click.Path(exists=True, dir_okay=False))
@click.option("--tls-key", type=click.Path(exists=True, dir_okay=False))
@click.option("--resolver", help="DNS resolver address, e.g. 8.8.8.8:53.")
@click.option("--refresh", type=click.FloatRange(min=0, min_open=True), help="Refresh period in seconds.")
@click.option("--dns-timeout", type=click.FloatRange(min=0, min_open=True), help="DNS timeout in seconds.")
@click.option("--doc-url", help="Where requests without go-get=1 are redirected.")
@click.option("--track-requests/--no-track-requests", default=None, help="Serve /debug/requests.")
@handle_cli_errors(context="Serve")
def serve(
    http_addr: Optional[str],
    https_addr: Optional[str],
    tls_cert: Optional[str],
    tls_key: Optional[str],
    resolver: Optional[str],
    refresh: Optional[float],
    dns_timeout: Optional[float],
    doc_url: Optional[str],
    track_requests: Optional[bool],
) -> None:
    """Run the vanity import server."""
    settings = AppSettings().with_overrides(
        HTTP_ADDR=http_addr,
        HTTPS_ADDR=https_addr,
        TLS_CERT=tls_cert,
        TLS_KEY=tls_key,
        RESOLVER=resolver,
        REFRESH=refresh,
        DNS_TIMEOUT=dns_timeout,
        DOC_URL=doc_url,
        TRACK_REQUESTS=track_requests,
    )
    console.print(
        f"Resolving via [cyan]{settings.RESOLVER}[/cyan], refreshing every {settings.REFRESH:g}s"
    )
    asyncio.run(run_server(settings))


async def _lookup_async(hostname: str, settings: AppSettings) -> list[ImportDirective]:
    client = TXTClient(timeout=settings.DNS_TIMEOUT)
    cache = HostCache(client, resolver=settings.RESOLVER, refresh=settings.REFRESH)
    resolved = await cache.resolve(hostname)
    return list(resolved.imports)


@cli.command()
@click.argument("hostname")
@click.option("--resolver", help="DNS resolver address, e.g. 8.8.8.8:53.")
@click.option("--dns-timeout", type=click.FloatRange(min=0, min_open=True))
@click.option("--json", "as_json", is_flag=True, help="Print the directives as JSON.")
@handle_cli_errors(context="Lookup")
def lookup(hostname: str, resolver: Optional[str], dns_timeout: Optional[float], as_json: bool) -> None:
    """Resolve HOSTNAME's go-import TXT records and print them."""
    settings = AppSettings().with_overrides(RESOLVER=resolver, DNS_TIMEOUT=dns_timeout)
    imports = asyncio.run(_lookup_async(hostname, settings))
    _emit_imports(hostname, imports, as_json)


@cli.command()
@click.argument("import_path")
@click.option("--server", help="Query this server (base URL) instead of the import path's host.")
@click.option("--json", "as_json", is_flag=True, help="Print the tags as JSON.")
@handle_cli_errors(context="Check")
def check(import_path: str, server: Optional[str], as_json: bool) -> None:
    """Fetch IMPORT_PATH with go-get=1 and print the advertised go-import tags."""
    try:
        imports = asyncio.run(fetch_meta_imports(import_path, server=server))
    except httpx.TransportError as exc:
        raise NetworkError(f"could not reach the server for {import_path}: {exc}") from exc
    if not imports:
        raise CLIError(f"no go-import meta tags served for {import_path}")
    _emit_imports(import_path, imports, as_json)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":  # pragma: no cover - module execution convenience
    main()
