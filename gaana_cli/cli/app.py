"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import json
import logging
import os
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from gaana_cli import __version__
from gaana_cli.api.client import GaanaAPIClient
from gaana_cli.core.resolver import StreamResolver
from gaana_cli.crypto.stream_decoder import decode_stream_path, encode_stream_path
from gaana_cli.exceptions import GaanaCliError
from gaana_cli.models.config import ResolverConfig
from gaana_cli.models.stats import ResolveStats
from gaana_cli.storage.config_manager import ConfigManager
from gaana_cli.utils.formatting import mask_stream_path
from gaana_cli.utils.structured_logger import create_structured_logger

from .formatters import (
    print_config,
    print_media_table,
    print_summary_panel,
    print_validation_table,
)

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("gaana_cli")

app = typer.Typer(
    name="gaana-cli",
    help=(
        "Resolve playable HLS stream URLs for Gaana tracks. Use 'gcli"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "gaana-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> ResolverConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    except GaanaCliError as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
    log_dir: Path | None = typer.Option(
        None,
        "--log-dir",
        help="Write JSON-lines event logs to this directory.",
        file_okay=False,
    ),
):
    """Gaana Stream Resolver CLI"""
    if version:
        console.print(f"[bold]gaana-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose == 1:
        log_level = "INFO"
    elif verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("gaana_cli").setLevel(log_level)

    ctx.obj = {"log_dir": log_dir}

    if show_config:
        config = _load_config()
        print_config(CONFIG_FILE, config.model_dump(exclude={"config_path"}))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Write a configuration file with default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config()
    except GaanaCliError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command(name="resolve")
def resolve_command(
    ctx: typer.Context,
    track_ids: list[str] = typer.Argument(  # noqa: B008
        ..., help="One or more Gaana track IDs."
    ),
    quality: str | None = typer.Option(
        None,
        "-q",
        "--quality",
        help="Quality tier to request: high, medium or low (default high).",
    ),
    fallback: bool | None = typer.Option(
        None,
        "--fallback/--no-fallback",
        help="Try lower tiers when the requested one yields no stream.",
    ),
    workers: int | None = typer.Option(
        None, "-w", "--workers", help="Number of tracks resolved concurrently."
    ),
    as_json: bool = typer.Option(
        False, "--json", help="Print the resolved streams as JSON."
    ),
):
    """Resolve stream URLs for one or more tracks."""
    cli_options = {
        key: value
        for key, value in {
            "quality": quality,
            "fallback": fallback,
            "max_workers": workers,
        }.items()
        if value is not None
    }
    config = _load_config(cli_options)

    log_dir = (ctx.obj or {}).get("log_dir")
    if log_dir is None and config.json_logs:
        log_dir = CONFIG_DIR / "logs"

    stats = ResolveStats()

    async def _resolve_async():
        structured, event_logger = create_structured_logger(
            log_dir, enable_json=log_dir is not None
        )
        structured.set_session_context(
            quality=config.quality, fallback=config.fallback, tracks=len(track_ids)
        )
        with structured:
            async with GaanaAPIClient(config.max_workers, config.timeout) as client:
                resolver = StreamResolver(client, config, stats, event_logger)
                return await resolver.resolve_many(
                    track_ids, fallback=config.fallback, quality=config.quality
                )

    start_time = time.monotonic()
    try:
        results = asyncio.run(_resolve_async())
    except GaanaCliError as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e
    duration = time.monotonic() - start_time

    if as_json:
        payload = [
            {"trackId": track_id, "mediaUrls": [m.to_output() for m in media_urls]}
            for track_id, media_urls in results.items()
        ]
        typer.echo(json.dumps(payload, indent=2))
    else:
        print_media_table(results, console)
        if len(results) > 1 or log.isEnabledFor(logging.INFO):
            print_summary_panel(stats, duration)

    if not any(results.values()):
        raise typer.Exit(code=1)


@app.command()
def decode(
    stream_path: str = typer.Argument(
        ..., help="The encrypted 'stream_path' value returned by the stream API."
    ),
):
    """Decode an encrypted stream path offline and print the stream URL."""
    log.debug(f"Decoding stream path {mask_stream_path(stream_path)}")
    result = decode_stream_path(stream_path)
    if not result.ok:
        console.print(
            f"[red]✗ {result.failure.value}[/red] [dim]{escape(result.detail)}[/dim]"
        )
        raise typer.Exit(code=1)
    typer.echo(result.url)


@app.command()
def encode(
    path: str = typer.Argument(..., help="Plaintext stream path, e.g. 'hls/a/b.m3u8'."),
    offset: int = typer.Option(
        0, "--offset", min=0, max=9, help="Offset digit placed at the start."
    ),
):
    """Produce an encrypted stream path, e.g. for test fixtures."""
    typer.echo(encode_stream_path(path, offset))


@app.command()
def validate():
    """Validate the current configuration."""
    print_validation_table(_load_config())


@app.command()
def diagnose():
    """Diagnose common configuration and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False

    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print(
            "[yellow]○[/] No config file, defaults are used. "
            "Run [cyan]gaana-cli init[/cyan] to create one."
        )
    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        console.print("[green]✓[/] Configuration is valid.")
    except GaanaCliError as e:
        console.print(f"[red]✗ Configuration validation failed: {escape(str(e))}[/red]")
        config = ResolverConfig()
        issues_found = True

    probe = "hls/diagnose/probe.m3u8"
    result = decode_stream_path(encode_stream_path(probe, offset=7))
    if result.ok and result.url.endswith(probe):
        console.print("[green]✓[/] Stream path decoder works.")
    else:
        console.print("[red]✗ Stream path decoder self-test failed.[/red]")
        issues_found = True

    console.print("\n[dim]Testing connectivity to Gaana servers...[/dim]")

    async def test_connection():
        import aiohttp

        try:
            timeout = aiohttp.ClientTimeout(total=config.timeout)
            async with (
                aiohttp.ClientSession(timeout=timeout) as session,
                session.get(GaanaAPIClient.BASE_URL) as resp,
            ):
                if resp.status == 200:
                    console.print("[green]✓[/] Successfully connected to Gaana.")
                    return True
                console.print(
                    f"[red]✗ Could not connect to Gaana (Status: {resp.status}).[/red]"
                )
                return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            console.print(f"[red]✗ Connection test failed: {escape(str(e))}[/red]")
            return False

    if not asyncio.run(test_connection()):
        issues_found = True
    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
