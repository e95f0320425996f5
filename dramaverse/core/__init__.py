# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Domain logic of the analytics pipeline, independent of concrete adapters.

This module contains:
- Domain models (AnalyticsEvent, AnalyticsEventType, DeviceInfo)
- The durable FIFO queue with two-phase drain/commit
- Delivery trigger policies and delivery statistics
- Device and session identity helpers
"""

from dramaverse.core.models import (
    VIDEO_EVENT_TYPES,
    AnalyticsEvent,
    AnalyticsEventType,
    DeviceInfo,
)
from dramaverse.core.queue import DurableEventQueue
from dramaverse.core.stats import DeliveryStats
from dramaverse.core.trigger import DeliveryTrigger, PeriodicTrigger

__all__ = [
    "AnalyticsEvent",
    "AnalyticsEventType",
    "DeliveryStats",
    "DeliveryTrigger",
    "DeviceInfo",
    "DurableEventQueue",
    "PeriodicTrigger",
    "VIDEO_EVENT_TYPES",
]
