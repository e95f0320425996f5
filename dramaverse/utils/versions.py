# ==============================================================================
# Version Utilities
# ==============================================================================
"""
Utilities for retrieving package versions.
"""

from importlib.metadata import version, PackageNotFoundError


def get_dramaverse_version() -> str:
    """
    Get the dramaverse-analytics package version.

    Returns:
        Version string (e.g., "0.1.0")
    """
    try:
        return version("dramaverse-analytics")
    except PackageNotFoundError:
        return "0.1.0"
