# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for the analytics pipeline.

Commands are organized into separate modules for maintainability:
- shared.py: Colors, icons and queue helpers
- config.py: config show
- queue.py: queue status / flush / clear
- record.py: record a single event
"""

from dramaverse.cli.shared import C, I, Colors, Icons, open_persisted_queue

__all__ = [
    "C",
    "Colors",
    "I",
    "Icons",
    "open_persisted_queue",
]
