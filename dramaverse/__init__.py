# ==============================================================================
# ShortDramaVerse Analytics
# ==============================================================================
"""
Client-side analytics event batching and delivery for ShortDramaVerse.

    from dramaverse import AnalyticsPipeline

    pipeline = AnalyticsPipeline.from_settings()
    pipeline.initialize()
    pipeline.record_screen_view("Home")
"""

from dramaverse.core.models import AnalyticsEvent, AnalyticsEventType, DeviceInfo
from dramaverse.pipeline import AnalyticsPipeline, FlushResult, PipelineStatus

__all__ = [
    "AnalyticsEvent",
    "AnalyticsEventType",
    "AnalyticsPipeline",
    "DeviceInfo",
    "FlushResult",
    "PipelineStatus",
]
