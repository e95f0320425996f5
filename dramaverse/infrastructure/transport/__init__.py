# ==============================================================================
# Transport Infrastructure
# ==============================================================================
"""
Transport implementations for delivering event batches.

Available implementations:
- HttpTransport: JSON POST to the REST API via requests
"""

from dramaverse.infrastructure.transport.http import HttpTransport

__all__ = [
    "HttpTransport",
]
