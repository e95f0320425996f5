# ==============================================================================
# Analytics Exceptions
# ==============================================================================
"""
Exception hierarchy for the analytics pipeline.

These never escape the public AnalyticsPipeline API; they travel between the
storage adapters and the pipeline, which logs and recovers.
"""


class AnalyticsError(Exception):
    """Base class for analytics pipeline errors."""


class StorageError(AnalyticsError):
    """Raised when key-value data cannot be read, decoded or written."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"{key}: {message}")
