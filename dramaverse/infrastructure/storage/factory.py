# ==============================================================================
# Storage Factory
# ==============================================================================
"""
Factory function for getting the active key-value store implementation.

The store is selected based on the STORAGE_IMPL environment variable.
"""

from dramaverse.base import KeyValueStore


def get_store() -> KeyValueStore:
    """
    Get the store instance based on STORAGE_IMPL setting.

    The store is determined by the STORAGE_IMPL environment variable:
    - "file" (default): JSON files under STORAGE_DATA_DIR
    - "valkey": Valkey/Redis at VALKEY_HOST:VALKEY_PORT

    Returns:
        KeyValueStore: The store instance

    Raises:
        ValueError: If an unknown store is specified

    Example:
        >>> from dramaverse.infrastructure.storage import get_store
        >>> store = get_store()
    """
    from dramaverse.utils.config import get_settings

    impl = get_settings().storage.impl

    match impl:
        case "file":
            from dramaverse.infrastructure.storage.file import FileStore

            return FileStore()
        case "valkey":
            from dramaverse.infrastructure.storage.valkey import ValkeyStore

            return ValkeyStore()
        case _:
            raise ValueError(f"Unknown store: '{impl}'.\nValid options are: file, valkey")
