"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gaana_cli.models.config import ResolverConfig
from gaana_cli.models.media import MediaUrl, get_quality_info
from gaana_cli.models.stats import ResolveStats
from gaana_cli.utils.formatting import format_duration


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your configuration file.",
            "• Run `gaana-cli init --force` to recreate it with defaults.",
        ],
        "InvalidQualityError": [
            "• Use one of: high, medium, low.",
        ],
        "StreamDecodeError": [
            "• Make sure the whole `stream_path` value was copied.",
            "• The stream API may have changed its obfuscation scheme.",
        ],
        "APIResponseError": [
            "• The Gaana API answered with something unexpected.",
            "• It may be blocking requests from your region.",
        ],
        "ClientResponseError": [
            "• A network connection issue occurred.",
            "• The Gaana API might be temporarily unavailable.",
            "• Please try again in a few minutes.",
        ],
        "TimeoutError": [
            "• The request timed out.",
            "• Increase `timeout` in the configuration file.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = "\n".join(f"{key} = {value}" for key, value in config_data.items())
    console.print(
        Panel(
            content,
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: ResolverConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    quality_info = get_quality_info(config.quality)
    table.add_row(
        "Quality:", f"[{quality_info['color']}]{quality_info['name']}[/]"
    )
    table.add_row(
        "Fallback:", "✓ Enabled" if config.fallback else "✗ Disabled (highest only)"
    )
    table.add_row("Stream Format:", config.stream_format)
    table.add_row("Max Workers:", str(config.max_workers))
    table.add_row("Timeout:", f"{config.timeout}s")
    table.add_row("JSON Logs:", "✓ Enabled" if config.json_logs else "✗ Disabled")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_media_table(results: dict[str, list[MediaUrl]], console: Console | None = None):
    """Displays resolved streams, one row per track."""
    console = console or Console()
    table = Table(box=box.ROUNDED, title="Resolved Streams")
    table.add_column("Track", style="bold")
    table.add_column("Quality")
    table.add_column("Bitrate", justify="right")
    table.add_column("Format", style="dim")
    table.add_column("URL", overflow="fold")

    for track_id, media_urls in results.items():
        if not media_urls:
            table.add_row(track_id, "[red]✗[/red]", "", "", "[dim]No stream available[/dim]")
            continue
        for media in media_urls:
            quality_info = get_quality_info(media.quality)
            table.add_row(
                track_id,
                f"[{quality_info['color']}]{quality_info['short']}[/]",
                media.bit_rate or "?",
                media.format,
                media.url,
            )

    console.print(table)


def print_summary_panel(stats: ResolveStats, duration_s: float):
    """Displays a summary of the resolve session."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row("Tracks:", str(len(stats.tracks_requested)))
    stats_table.add_row("✓ Resolved:", f"[bold green]{stats.resolved}[/bold green]")

    if stats.unavailable > 0:
        stats_table.add_row("○ Unavailable:", f"[yellow]{stats.unavailable}[/yellow]")
    if stats.transport_failures > 0:
        stats_table.add_row(
            "✗ Request Errors:", f"[bold red]{stats.transport_failures}[/bold red]"
        )
    if stats.decode_failures:
        breakdown = ", ".join(
            f"{kind} ({count})" for kind, count in stats.decode_failures.most_common()
        )
        stats_table.add_row("✗ Decode Errors:", f"[red]{breakdown}[/red]")

    stats_table.add_row("Attempts:", str(stats.attempts))
    stats_table.add_row("Duration:", format_duration(duration_s))

    border = "green" if stats.resolved and stats.attempts == stats.resolved else "yellow"
    console.print(
        Panel(
            stats_table,
            title="[bold]Session Summary[/bold]",
            border_style=border,
            expand=False,
        )
    )
