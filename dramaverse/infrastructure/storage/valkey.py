# ==============================================================================
# Valkey Store Implementation
# ==============================================================================
"""
Valkey/Redis implementation of the KeyValueStore interface.

Uses JSON serialization for stored values. Useful when several short-lived
processes on the same host share one queue owner, or for kiosk/TV clients
that already run a local Valkey.
"""

import json
import logging
from typing import Any

import redis
from redis.backoff import NoBackoff
from redis.exceptions import RedisError
from redis.retry import Retry

from dramaverse.base import KeyValueStore
from dramaverse.exceptions import StorageError
from dramaverse.utils.config import get_settings
from dramaverse.utils.retry import STORAGE_RETRY_EXCEPTIONS, retry_light

logger = logging.getLogger(__name__)


class ValkeyStore(KeyValueStore):
    """
    Valkey/Redis implementation of the KeyValueStore interface.

    Configured with:
    - 5 second socket timeouts so a dead server never stalls the pipeline
    - No client-level retries: reads retry through retry_light, and a failed
      write is repaired by the next full-snapshot write
    - Health check interval to keep connections alive
    """

    def __init__(
        self,
        url: str | None = None,
        socket_timeout: int = 5,
        health_check_interval: int = 30,
    ):
        """
        Initialize Valkey store.

        Args:
            url: Valkey/Redis connection URL. If None, uses settings.
            socket_timeout: Socket timeout in seconds (default: 5)
            health_check_interval: Health check interval in seconds (default: 30)
        """
        if url is None:
            url = get_settings().valkey.url

        self._client = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            retry=Retry(NoBackoff(), 0),
            health_check_interval=health_check_interval,
        )
        self._url = url

    @property
    def client(self) -> redis.Redis:
        """Get the underlying Redis client for advanced operations."""
        return self._client

    @retry_light(STORAGE_RETRY_EXCEPTIONS, logger)
    def get(self, key: str) -> Any | None:
        """
        Get a stored value.

        Connection errors are retried briefly, then propagate.
        """
        value = self._client.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise StorageError(key, f"invalid JSON ({e})") from e

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-encoded value."""
        try:
            json_value = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(key, f"value is not JSON-serializable ({e})") from e
        try:
            self._client.set(key, json_value)
        except RedisError as e:
            raise StorageError(key, f"write failed ({e})") from e

    def delete(self, key: str) -> bool:
        """Delete a key."""
        return self._client.delete(key) > 0

    def ping(self) -> bool:
        """
        Check if the store is reachable.

        Returns:
            True if ping succeeds, False otherwise
        """
        try:
            return self._client.ping()
        except RedisError:
            return False

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
