# ==============================================================================
# Durable Event Queue
# ==============================================================================
"""
FIFO buffer of undelivered analytics events, mirrored to key-value storage.

Every mutation writes the full queue snapshot back to the store while the
queue lock is held, so the persisted copy always equals some earlier
in-memory state and concurrent appends can never interleave into a torn
snapshot.

Delivery is two-phase:

    batch = queue.drain()          # capture, queue untouched
    ... send batch ...
    queue.commit_drain(batch)      # remove exactly those events

Events appended while a batch is in flight stay queued after the commit.
"""

import logging
import threading
from collections import Counter

from pydantic import ValidationError

from dramaverse.base import KeyValueStore
from dramaverse.core.models import AnalyticsEvent
from dramaverse.exceptions import StorageError
from dramaverse.utils.retry import STORAGE_RETRY_EXCEPTIONS

logger = logging.getLogger(__name__)


class DurableEventQueue:
    """Thread-safe, persisted FIFO of AnalyticsEvent."""

    def __init__(self, store: KeyValueStore, key: str):
        """
        Initialize an empty queue.

        Args:
            store: Key-value store exclusively owned by this queue's pipeline
            key: Namespaced key holding the JSON array of events
        """
        self._store = store
        self._key = key
        self._events: list[AnalyticsEvent] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    @property
    def key(self) -> str:
        return self._key

    def snapshot(self) -> list[AnalyticsEvent]:
        """Return a copy of the current contents in FIFO order."""
        with self._lock:
            return list(self._events)

    def count_by_type(self) -> dict[str, int]:
        """Count queued events per event type."""
        with self._lock:
            counts = Counter(event.event_type.value for event in self._events)
        return dict(counts.most_common())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append(self, event: AnalyticsEvent) -> bool:
        """
        Push an event to the tail and persist the queue.

        The event stays in memory even if the write fails.

        Returns:
            True if the new snapshot was persisted
        """
        with self._lock:
            self._events.append(event)
            return self._persist_locked()

    def drain(self) -> list[AnalyticsEvent]:
        """
        Capture the current contents for delivery without removing them.

        Returns:
            Events in recording order (empty list if nothing is queued)
        """
        with self._lock:
            return list(self._events)

    def commit_drain(self, batch: list[AnalyticsEvent]) -> bool:
        """
        Remove exactly the events of a delivered batch and persist.

        Args:
            batch: The list returned by the preceding drain()

        Returns:
            True if the resulting snapshot was persisted
        """
        if not batch:
            return True
        with self._lock:
            n = len(batch)
            head = self._events[:n]
            if len(head) == n and all(a is b for a, b in zip(head, batch)):
                del self._events[:n]
            else:
                # Only a prefix can have been drained unless the queue was
                # replaced underneath us (clear/restore during a send).
                logger.warning("Committed batch is not the queue head; removing by identity")
                sent = {id(event) for event in batch}
                self._events = [event for event in self._events if id(event) not in sent]
            return self._persist_locked()

    def clear(self) -> bool:
        """Drop every queued event and persist the empty queue."""
        with self._lock:
            self._events = []
            return self._persist_locked()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def restore(self) -> int:
        """
        Load the persisted queue into memory, replacing current contents.

        Unreadable or non-list data yields an empty queue; individual
        entries that fail validation are skipped.

        Returns:
            Number of events restored
        """
        try:
            raw = self._store.get(self._key)
        except (StorageError, *STORAGE_RETRY_EXCEPTIONS) as e:
            logger.warning("Could not restore analytics queue, starting empty: %s", e)
            raw = None

        if raw is not None and not isinstance(raw, list):
            logger.warning(
                "Persisted analytics queue has unexpected type %s, starting empty",
                type(raw).__name__,
            )
            raw = None

        events: list[AnalyticsEvent] = []
        skipped = 0
        for item in raw or []:
            try:
                events.append(AnalyticsEvent.from_wire(item))
            except (ValidationError, TypeError):
                skipped += 1
        if skipped:
            logger.warning("Skipped %d malformed events while restoring queue", skipped)

        with self._lock:
            self._events = events
        if events:
            logger.info("Restored %d pending analytics events", len(events))
        return len(events)

    def _persist_locked(self) -> bool:
        """Write the full snapshot. Caller must hold self._lock."""
        try:
            self._store.set(self._key, [event.to_wire() for event in self._events])
            return True
        except StorageError as e:
            logger.warning(
                "Failed to persist analytics queue (%d events kept in memory): %s",
                len(self._events),
                e,
            )
            return False
