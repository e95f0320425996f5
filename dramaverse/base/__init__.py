# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes defining the ports of the analytics pipeline.

The pipeline depends only on these contracts; concrete adapters live in
dramaverse.infrastructure.
"""

from dramaverse.base.storage import KeyValueStore
from dramaverse.base.transport import DeliveryOutcome, Transport

__all__ = [
    "DeliveryOutcome",
    "KeyValueStore",
    "Transport",
]
