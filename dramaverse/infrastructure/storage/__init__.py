# ==============================================================================
# Storage Infrastructure
# ==============================================================================
"""
Key-value storage implementations for the ports-and-adapters architecture.

Available implementations:
- FileStore: device-local JSON files (default)
- ValkeyStore: Valkey/Redis-based store with JSON serialization
"""

from dramaverse.infrastructure.storage.factory import get_store
from dramaverse.infrastructure.storage.file import FileStore
from dramaverse.infrastructure.storage.valkey import ValkeyStore

__all__ = [
    "FileStore",
    "ValkeyStore",
    "get_store",
]
