# ==============================================================================
# Analytics Pipeline Utilities
# ==============================================================================
"""
Shared utilities for the analytics pipeline.

This module exports configuration for use throughout the package.
"""

from dramaverse.utils.config import (
    AnalyticsSettings,
    DeviceSettings,
    Settings,
    StorageSettings,
    ValkeySettings,
    get_settings,
)

__all__ = [
    "AnalyticsSettings",
    "DeviceSettings",
    "Settings",
    "StorageSettings",
    "ValkeySettings",
    "get_settings",
]
