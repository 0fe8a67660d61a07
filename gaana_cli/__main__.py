"""
Console entry point: runs the Typer app and turns errors that escape it into
a Rich error panel on stderr and a non-zero exit status.
"""

import logging
import sys

from rich.console import Console

from gaana_cli.cli.app import app
from gaana_cli.cli.formatters import format_error_with_suggestions
from gaana_cli.exceptions import GaanaCliError

# Conventional status for a process stopped by SIGINT
EXIT_INTERRUPTED = 130


def main(argv: list[str] | None = None) -> None:
    """Runs the CLI; Typer exits the process itself on normal completion."""
    error_console = Console(stderr=True)

    try:
        app(args=argv, prog_name="gaana-cli")
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    except GaanaCliError as e:
        error_console.print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        logging.getLogger("gaana_cli").debug("Unhandled error", exc_info=True)
        error_console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        sys.exit(1)


if __name__ == "__main__":
    main()
