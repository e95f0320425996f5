# ==============================================================================
# Infrastructure Adapters
# ==============================================================================
"""
Concrete adapters for the pipeline ports defined in dramaverse.base.

- storage: FileStore, ValkeyStore and the get_store() factory
- transport: HttpTransport
"""

from dramaverse.infrastructure.storage import FileStore, ValkeyStore, get_store
from dramaverse.infrastructure.transport import HttpTransport

__all__ = [
    "FileStore",
    "HttpTransport",
    "ValkeyStore",
    "get_store",
]
