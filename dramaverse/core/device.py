# ==============================================================================
# Device and Session Identity
# ==============================================================================
"""
Identifier generation and device metadata collection.

- Session ids are created once per pipeline instance and never change.
- Device ids persist in the key-value store so they survive restarts.
- The device snapshot is collected once and shared by every event.
"""

import locale
import logging
import platform
import secrets
import string
import time
from datetime import datetime

from dramaverse.base import KeyValueStore
from dramaverse.core.models import DeviceInfo
from dramaverse.exceptions import StorageError
from dramaverse.utils.config import DeviceSettings
from dramaverse.utils.retry import STORAGE_RETRY_EXCEPTIONS

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase

DEVICE_ID_PREFIX = "dv_"
SESSION_ID_PREFIX = "session_"
UNKNOWN_DEVICE_ID = "unknown"


def _random_base36(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_device_id() -> str:
    """Generate a new device id, e.g. 'dv_k3j9x0q2m1z8w7v6u5t4s3r2q1'."""
    return DEVICE_ID_PREFIX + _random_base36(26)


def generate_session_id(now_ms: int | None = None) -> str:
    """Generate a session id of the form 'session_<epoch ms>_<7 base-36 chars>'."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{SESSION_ID_PREFIX}{now_ms}_{_random_base36(7)}"


def load_or_create_device_id(store: KeyValueStore, key: str) -> str:
    """
    Return the persisted device id, creating and storing one if needed.

    Never raises: unreadable storage yields a fresh id, and a failed write
    only means the next launch generates another one.

    Args:
        store: Key-value store owned by the pipeline
        key: Namespaced device id key

    Returns:
        Device id string
    """
    try:
        device_id = store.get(key)
    except (StorageError, *STORAGE_RETRY_EXCEPTIONS) as e:
        logger.warning("Could not read device id, generating a new one: %s", e)
        device_id = None

    if isinstance(device_id, str) and device_id:
        return device_id
    if device_id is not None:
        logger.warning("Ignoring malformed stored device id: %r", device_id)

    device_id = generate_device_id()
    try:
        store.set(key, device_id)
    except (StorageError, *STORAGE_RETRY_EXCEPTIONS) as e:
        logger.warning("Could not persist device id %s: %s", device_id, e)
    return device_id


def _detect_language() -> str:
    lang, _ = locale.getlocale()
    if not lang or lang == "C":
        return "en"
    return lang.split("_")[0].lower()


def _detect_timezone() -> str:
    tz = datetime.now().astimezone().tzinfo
    key = getattr(tz, "key", None)
    if key:
        return key
    return tz.tzname(None) if tz is not None else "UTC"


def collect_device_info(
    device_id: str,
    app_version: str,
    settings: DeviceSettings | None = None,
) -> DeviceInfo:
    """
    Build the device snapshot from the host platform and configuration.

    Args:
        device_id: Persistent device identifier
        app_version: Client application version
        settings: Device overrides (screen size, language, timezone)

    Returns:
        DeviceInfo snapshot
    """
    settings = settings or DeviceSettings()
    return DeviceInfo(
        device_id=device_id,
        platform=platform.system().lower() or "unknown",
        os_version=platform.release() or "unknown",
        app_version=app_version,
        device_model=platform.machine() or "unknown",
        screen_width=settings.screen_width,
        screen_height=settings.screen_height,
        language=settings.language or _detect_language(),
        timezone=settings.timezone or _detect_timezone(),
    )
