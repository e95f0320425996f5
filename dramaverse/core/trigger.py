# ==============================================================================
# Delivery Triggers
# ==============================================================================
"""
Policies deciding when the pipeline attempts delivery.

- Batch threshold: queue length reached the configured batch size
- Periodic: a timer fires every flush interval while events are queued
- Explicit: flush_events() / teardown (handled by the pipeline itself)

No trigger fires while the device is offline.
"""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class DeliveryTrigger:
    """Batch-size policy for automatic flushes."""

    def __init__(self, batch_size: int = 20):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.batch_size = batch_size

    def should_flush(self, queue_length: int, is_offline: bool) -> bool:
        """True when the batch threshold is reached and the device is online."""
        return not is_offline and queue_length >= self.batch_size


class PeriodicTrigger:
    """Daemon thread invoking a callback every ``interval`` seconds.

    Args:
        interval: Seconds between callbacks.
        callback: Invoked on the timer thread; exceptions are logged.
        name: Thread name.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "analytics-timer",
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self._callback = callback
        self._name = name
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Periodic flush callback failed")
