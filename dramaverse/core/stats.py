# ==============================================================================
# Delivery Statistics
# ==============================================================================
"""
Cumulative counters for the analytics pipeline.

Tracks recorded events, delivered and failed batches, and time spent in the
transport. A final summary is logged when the pipeline is torn down.

Usage:
    stats = DeliveryStats()
    stats.record_delivery(num_events=20, elapsed_ms=85.0)
    stats.log_final_summary()
"""

import logging
import threading
import time

logger = logging.getLogger(__name__)


class DeliveryStats:
    """Thread-safe delivery counters for one pipeline instance."""

    def __init__(self, log: logging.Logger | None = None):
        """
        Args:
            log: Optional logger override. Defaults to this module's logger.
        """
        self._log = log or logger
        self._lock = threading.Lock()
        self._start_time = time.monotonic()

        self.events_recorded = 0
        self.events_delivered = 0
        self.batches_delivered = 0
        self.batches_failed = 0
        self.last_failure_reason: str | None = None
        self._cum_send_ms = 0.0

    def record_recorded(self, count: int = 1) -> None:
        with self._lock:
            self.events_recorded += count

    def record_delivery(self, num_events: int, elapsed_ms: float) -> None:
        """Count an acknowledged batch."""
        with self._lock:
            self.events_delivered += num_events
            self.batches_delivered += 1
            self._cum_send_ms += elapsed_ms

    def record_failure(self, num_events: int, elapsed_ms: float, reason: str | None) -> None:
        """Count a batch that was not acknowledged."""
        with self._lock:
            self.batches_failed += 1
            self.last_failure_reason = reason
            self._cum_send_ms += elapsed_ms

    @property
    def avg_send_ms(self) -> float:
        with self._lock:
            attempts = self.batches_delivered + self.batches_failed
            return self._cum_send_ms / attempts if attempts else 0.0

    def as_dict(self) -> dict:
        """Counters as a plain dict (for JSON output)."""
        with self._lock:
            return {
                "events_recorded": self.events_recorded,
                "events_delivered": self.events_delivered,
                "batches_delivered": self.batches_delivered,
                "batches_failed": self.batches_failed,
                "last_failure_reason": self.last_failure_reason,
            }

    def log_final_summary(self, pending: int) -> None:
        """
        Log final summary on shutdown.

        Args:
            pending: Events still queued (and persisted) at teardown
        """
        total_elapsed = time.monotonic() - self._start_time
        avg_ms = self.avg_send_ms
        with self._lock:
            self._log.info(
                "Final: %s recorded, %s delivered in %d batches (%d failed) over %.1fs | "
                "avg_send=%.*fms | pending=%d",
                f"{self.events_recorded:,}",
                f"{self.events_delivered:,}",
                self.batches_delivered,
                self.batches_failed,
                total_elapsed,
                _precision(avg_ms),
                avg_ms,
                pending,
            )


def _precision(ms: float) -> int:
    """Return decimal precision for millisecond values.

    >= 10ms  → 0 decimals (e.g., 85ms)
    >= 1ms   → 1 decimal  (e.g., 3.2ms)
    < 1ms    → 2 decimals (e.g., 0.45ms)
    """
    if ms >= 10:
        return 0
    elif ms >= 1:
        return 1
    else:
        return 2
