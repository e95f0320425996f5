# ==============================================================================
# Queue Commands
# ==============================================================================
"""
Commands for inspecting and delivering the persisted event queue.
"""

import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from dramaverse.cli.shared import C, I, open_persisted_queue
from dramaverse.pipeline import AnalyticsPipeline


def queue_status(
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show how many events are waiting for delivery, per event type.

    Examples:
        dramaverse queue status
        dramaverse queue status --json
    """
    queue = open_persisted_queue()
    counts = queue.count_by_type()
    total = len(queue)

    if json_output:
        print(json.dumps({"key": queue.key, "pending": total, "by_type": counts}))
        return

    if total == 0:
        print(f"\n  {C.BRIGHT_GREEN}{I.CHECK} No pending analytics events{C.RESET}\n")
        return

    console = Console()
    table = Table(title=f"Pending events: {queue.key}", show_header=True, header_style="bold")
    table.add_column("Event type")
    table.add_column("Count", justify="right")
    for event_type, count in counts.items():
        table.add_row(event_type, f"{count:,}")

    print()
    console.print(table)
    print(f"  {C.BOLD}Total:{C.RESET} {total:,}")
    print()


def queue_flush() -> None:
    """Deliver the persisted backlog to the ingestion endpoint.

    Exits with code 1 when the batch could not be delivered.
    """
    pipeline = AnalyticsPipeline.from_settings()
    pipeline.initialize()
    # initialize() may already have started sending the restored backlog
    pipeline.wait_until_idle()
    pipeline.flush_events()
    pending = pipeline.queue_length
    stats = pipeline.stats
    pipeline.cleanup()

    if pending:
        print(
            f"  {C.BRIGHT_RED}{I.CROSS} Delivery failed: {stats.last_failure_reason}{C.RESET} "
            f"({pending:,} events kept)"
        )
        raise typer.Exit(1)
    if stats.events_delivered:
        print(f"  {C.BRIGHT_GREEN}{I.CHECK} Delivered {stats.events_delivered:,} events{C.RESET}")
    else:
        print(f"  {C.DIM}Nothing to deliver{C.RESET}")


def queue_clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
) -> None:
    """Discard every pending event without delivering it."""
    queue = open_persisted_queue()
    total = len(queue)
    if total == 0:
        print(f"  {C.DIM}Queue is already empty{C.RESET}")
        return
    if not yes:
        typer.confirm(f"Discard {total:,} pending analytics events?", abort=True)
    if not queue.clear():
        print(f"  {C.BRIGHT_RED}{I.CROSS} Could not write {queue.key}{C.RESET}")
        raise typer.Exit(1)
    print(f"  {C.BRIGHT_GREEN}{I.CHECK} Discarded {total:,} events{C.RESET}")
