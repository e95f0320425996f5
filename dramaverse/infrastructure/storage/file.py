# ==============================================================================
# File Store Implementation
# ==============================================================================
"""
Device-local implementation of the KeyValueStore interface.

Each key is a JSON file inside the data directory. Writes go to a temporary
file in the same directory that is fsynced and then renamed over the target,
so a crash mid-write leaves the previous value intact.
"""

import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any

from dramaverse.base import KeyValueStore
from dramaverse.exceptions import StorageError
from dramaverse.utils.config import get_settings

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileStore(KeyValueStore):
    """Key-value storage backed by one JSON file per key."""

    def __init__(self, data_dir: Path | None = None):
        """
        Initialize file store.

        Args:
            data_dir: Directory holding the key files. If None, uses settings.
        """
        if data_dir is None:
            data_dir = get_settings().storage.data_dir_path
        self._data_dir = Path(data_dir)
        self._lock = threading.Lock()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """Map a storage key to its file path (':' and other separators become '_')."""
        return self._data_dir / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Any | None:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(key, f"read failed ({e})") from e
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(key, f"invalid JSON ({e})") from e

    def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(key, f"value is not JSON-serializable ({e})") from e

        path = self.path_for(key)
        with self._lock:
            try:
                self._data_dir.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=self._data_dir, prefix=".tmp-", suffix=".json")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        f.write(payload)
                        f.flush()
                        os.fsync(f.fileno())
                    os.replace(tmp_name, path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as e:
                raise StorageError(key, f"write failed ({e})") from e

    def delete(self, key: str) -> bool:
        with self._lock:
            try:
                self.path_for(key).unlink()
                return True
            except FileNotFoundError:
                return False
