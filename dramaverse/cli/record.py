# ==============================================================================
# Record Command
# ==============================================================================
"""
Record a single event from the command line and deliver it.

Useful for smoke-testing an ingestion endpoint end to end.
"""

import json
from typing import Annotated, Optional

import typer

from dramaverse.cli.shared import C, I
from dramaverse.core.models import AnalyticsEventType
from dramaverse.pipeline import AnalyticsPipeline, FlushResult


def _parse_data(value: Optional[str]) -> dict:
    if not value:
        return {}
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"--data is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise typer.BadParameter("--data must be a JSON object")
    return data


def record_event(
    event_type: Annotated[
        AnalyticsEventType, typer.Argument(help="Event type, e.g. screen_view")
    ],
    data: Annotated[
        Optional[str], typer.Option("--data", "-d", help="Event payload as a JSON object")
    ] = None,
    user_id: Annotated[
        Optional[int], typer.Option("--user-id", "-u", help="Attach a user id")
    ] = None,
) -> None:
    """Record one event and flush it to the ingestion endpoint.

    The event stays queued on disk when delivery fails.

    Examples:
        dramaverse record screen_view --data '{"screenName": "Home"}'
    """
    payload = _parse_data(data)

    pipeline = AnalyticsPipeline.from_settings()
    pipeline.initialize()
    pipeline.set_user_id(user_id)
    pipeline.record_event(event_type, payload)
    pipeline.wait_until_idle()
    result = pipeline.flush_events()
    pending = pipeline.queue_length
    pipeline.cleanup()

    if result in (FlushResult.DELIVERED, FlushResult.EMPTY):
        print(f"  {C.BRIGHT_GREEN}{I.CHECK} Recorded and delivered {event_type.value}{C.RESET}")
    else:
        print(
            f"  {C.BRIGHT_YELLOW}{I.WARN} Recorded {event_type.value}, "
            f"not delivered ({result.value}); {pending:,} events queued{C.RESET}"
        )
        raise typer.Exit(1)
