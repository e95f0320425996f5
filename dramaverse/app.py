# ==============================================================================
# ShortDramaVerse Analytics CLI
# ==============================================================================
"""
Command-line interface for the analytics pipeline.

Usage:
    dramaverse --help
    dramaverse config show
    dramaverse queue status
    dramaverse queue flush
    dramaverse queue clear -y
    dramaverse record screen_view --data '{"screenName": "Home"}'
"""

import logging
import os
from typing import Annotated

import typer

from dramaverse.utils.config import get_settings

if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="dramaverse",
    help="ShortDramaVerse analytics pipeline CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def _configure_logging(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    settings = get_settings()
    level = "DEBUG" if verbose or settings.debug else settings.log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


queue_app = typer.Typer(
    help="Pending event queue operations",
    no_args_is_help=True,
)
app.add_typer(queue_app, name="queue")

# Register queue commands from cli.queue module
from dramaverse.cli.queue import queue_clear, queue_flush, queue_status

queue_app.command("status")(queue_status)
queue_app.command("flush")(queue_flush)
queue_app.command("clear")(queue_clear)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

from dramaverse.cli.config import config_show

config_app.command("show")(config_show)

# Record command is imported from dramaverse.cli.record
from dramaverse.cli.record import record_event

app.command("record")(record_event)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
