# ==============================================================================
# Shared Utilities for CLI Commands
# ==============================================================================
"""
Shared utilities, constants, and helper functions used across CLI command modules.

This module provides:
- ANSI color codes and status icons
- Helpers that open the configured queue without starting a pipeline
"""

from dramaverse.core.queue import DurableEventQueue
from dramaverse.utils.config import get_settings

# ==============================================================================
# ANSI Colors and Icons
# ==============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Colors
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # Bright colors
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"


class Icons:
    """Status icons using Unicode symbols."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "!"


# Short aliases
C = Colors
I = Icons


# ==============================================================================
# Queue Helpers
# ==============================================================================


def open_persisted_queue() -> DurableEventQueue:
    """
    Open the configured store and load the persisted queue.

    Used by inspection commands that must not record or send anything.

    Returns:
        DurableEventQueue restored from storage
    """
    from dramaverse.infrastructure.storage import get_store

    settings = get_settings()
    queue = DurableEventQueue(get_store(), settings.storage.queue_storage_key)
    queue.restore()
    return queue
