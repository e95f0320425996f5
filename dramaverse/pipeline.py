# ==============================================================================
# Analytics Pipeline
# ==============================================================================
"""
Client-side analytics event batching and delivery.

    record_event() -> DurableEventQueue.append() -> store
                   -> DeliveryTrigger -> Transport.send() -> commit_drain()

The pipeline is an explicit object: construct one per process (or per test)
and hand it to the code that records events. Recording never blocks on
storage or network and never raises; delivery failures keep the batch queued
for the next trigger (at-least-once delivery).

Threads:
- "record" worker: applies appends in call order and checks the batch trigger
- "delivery" worker: runs automatic flushes so appends continue mid-send
- timer thread: periodic flushes

Usage:
    pipeline = AnalyticsPipeline.from_settings()
    pipeline.initialize()
    pipeline.record_screen_view("Home")
    ...
    pipeline.cleanup()
"""

import json
import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from concurrent.futures import wait
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from dramaverse.base import DeliveryOutcome, KeyValueStore, Transport
from dramaverse.core.device import (
    collect_device_info,
    generate_session_id,
    load_or_create_device_id,
)
from dramaverse.core.models import (
    VIDEO_EVENT_TYPES,
    AnalyticsEvent,
    AnalyticsEventType,
    DeviceInfo,
)
from dramaverse.core.queue import DurableEventQueue
from dramaverse.core.stats import DeliveryStats
from dramaverse.core.trigger import DeliveryTrigger, PeriodicTrigger
from dramaverse.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

APP_STATES = ("active", "background", "inactive")


class FlushResult(str, Enum):
    """Outcome of a flush attempt."""

    DELIVERED = "delivered"
    EMPTY = "empty"
    OFFLINE = "offline"
    ALREADY_SENDING = "already_sending"
    FAILED = "failed"
    NOT_READY = "not_ready"

    @property
    def sent(self) -> bool:
        return self is FlushResult.DELIVERED


class PipelineStatus(str, Enum):
    """Conceptual pipeline state."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    SENDING = "sending"
    OFFLINE = "offline"
    CLOSED = "closed"


class AnalyticsPipeline:
    """
    Records analytics events and delivers them in batches.

    Public methods are safe to call from any thread.
    """

    def __init__(
        self,
        store: KeyValueStore,
        transport: Transport,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the pipeline. Call initialize() before recording.

        Args:
            store: Key-value store for the durable queue and device id
            transport: Transport used to deliver batches
            settings: Application settings (default: get_settings())
            clock: Wall clock in seconds, used for event timestamps
        """
        settings = settings or get_settings()
        self._settings = settings
        self._store = store
        self._transport = transport
        self._clock = clock
        self._owns_resources = False

        self._queue = DurableEventQueue(store, settings.storage.queue_storage_key)
        self._trigger = DeliveryTrigger(settings.analytics.batch_size)
        self._timer = PeriodicTrigger(settings.analytics.flush_interval_seconds, self._on_timer)
        self._stats = DeliveryStats()

        self._session_start_ms = int(clock() * 1000)
        self._session_id = generate_session_id(self._session_start_ms)
        self._user_id: Optional[int] = None
        self._device_info: Optional[DeviceInfo] = None
        self._is_offline = False
        self._app_state = "active"
        self._initialized = False
        self._closed = False

        self._init_lock = threading.Lock()
        self._send_lock = threading.Lock()
        self._record_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="analytics-record"
        )
        self._delivery_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="analytics-delivery"
        )
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()
        self._auto_flush_scheduled = False
        self._auto_flush_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "AnalyticsPipeline":
        """
        Build a pipeline with the configured store and HTTP transport.

        The pipeline owns both and closes them in cleanup().
        """
        from dramaverse.infrastructure.storage import get_store
        from dramaverse.infrastructure.transport import HttpTransport

        settings = settings or get_settings()
        pipeline = cls(get_store(), HttpTransport(), settings=settings)
        pipeline._owns_resources = True
        return pipeline

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def user_id(self) -> Optional[int]:
        return self._user_id

    @property
    def device_info(self) -> Optional[DeviceInfo]:
        return self._device_info

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_offline(self) -> bool:
        return self._is_offline

    @property
    def is_sending(self) -> bool:
        return self._send_lock.locked()

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def batch_size(self) -> int:
        return self._trigger.batch_size

    @property
    def stats(self) -> DeliveryStats:
        return self._stats

    @property
    def status(self) -> PipelineStatus:
        if self._closed:
            return PipelineStatus.CLOSED
        if not self._initialized:
            return PipelineStatus.UNINITIALIZED
        if self.is_sending:
            return PipelineStatus.SENDING
        if self._is_offline:
            return PipelineStatus.OFFLINE
        return PipelineStatus.READY

    def pending_events(self) -> list[AnalyticsEvent]:
        """Snapshot of the queued events in recording order."""
        return self._queue.snapshot()

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def initialize(self) -> None:
        """
        Establish the device id, restore the persisted queue and start the timer.

        Storage problems are logged and recovered from; this never raises.
        Any restored backlog is sent in the background.
        """
        with self._init_lock:
            if self._closed:
                logger.warning("Analytics pipeline already closed; initialize() ignored")
                return
            if self._initialized:
                return

            storage = self._settings.storage
            device_id = load_or_create_device_id(self._store, storage.device_id_storage_key)
            self._device_info = collect_device_info(
                device_id,
                app_version=self._settings.analytics.app_version,
                settings=self._settings.device,
            )
            restored = self._queue.restore()

            self._initialized = True
            self._timer.start()

        logger.info(
            "Analytics pipeline initialized | session=%s | device=%s | %d queued events",
            self._session_id,
            device_id,
            restored,
        )
        if restored:
            self._schedule_flush(min_length=1)

    def cleanup(self) -> None:
        """
        Tear down: settle pending appends, then flush best-effort.

        The final flush is bounded by ANALYTICS_TEARDOWN_TIMEOUT_SECONDS.
        Anything not delivered stays persisted for the next launch.
        """
        with self._init_lock:
            if self._closed:
                return
            self._closed = True

        self._timer.stop()
        self._record_executor.shutdown(wait=True)

        timed_out = False
        if self._initialized and not self._is_offline and len(self._queue):
            timeout = self._settings.analytics.teardown_timeout_seconds
            future = self._delivery_executor.submit(self._deliver)
            try:
                result = future.result(timeout=timeout)
                logger.debug("Teardown flush: %s", result.value)
            except FuturesTimeoutError:
                timed_out = True
                logger.warning(
                    "Teardown flush did not finish within %.1fs; %d events remain persisted",
                    timeout,
                    len(self._queue),
                )
        self._delivery_executor.shutdown(wait=not timed_out, cancel_futures=True)

        self._stats.log_final_summary(pending=len(self._queue))
        if self._owns_resources and not timed_out:
            self._transport.close()
            self._store.close()

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """
        Block until all scheduled appends and automatic flushes have finished.

        Args:
            timeout: Maximum seconds to wait (None waits forever)

        Returns:
            True if the pipeline went idle within the timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._pending_lock:
                pending = set(self._pending)
            if not pending:
                return True
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                return False
            wait(pending, timeout=remaining)

    # ==========================================================================
    # Context
    # ==========================================================================

    def set_user_id(self, user_id: Optional[int]) -> None:
        """Attach a user to subsequently recorded events (None on logout)."""
        self._user_id = user_id

    def set_offline_status(self, is_offline: bool) -> None:
        """
        Update connectivity. While offline no delivery is attempted.

        Coming back online with a full batch queued schedules a flush.
        """
        was_offline = self._is_offline
        self._is_offline = is_offline
        if was_offline and not is_offline:
            logger.info("Analytics back online with %d queued events", len(self._queue))
            if self._initialized and self._trigger.should_flush(len(self._queue), False):
                self._schedule_flush(min_length=self._trigger.batch_size)

    def on_app_state_change(self, state: str) -> None:
        """
        Lifecycle hook for the host application.

        Only transitions are recorded: leaving "active" records app_close with
        the session duration and flushes; returning to "active" records
        app_open as a resume. The session id stays the same.
        """
        if state not in APP_STATES:
            logger.warning("Unknown app state %r; ignored", state)
            return
        previous, self._app_state = self._app_state, state

        if previous == "active" and state != "active":
            duration_ms = int(self._clock() * 1000) - self._session_start_ms
            self.record_event(AnalyticsEventType.APP_CLOSE, {"sessionDuration": duration_ms})
            self.flush_events()
        elif previous != "active" and state == "active":
            self.record_event(AnalyticsEventType.APP_OPEN, {"isResume": True})

    # ==========================================================================
    # Recording
    # ==========================================================================

    def record_event(
        self,
        event_type: AnalyticsEventType | str,
        payload: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Record an event. Returns immediately; persistence happens in the background.

        Events recorded before initialize(), after cleanup(), with an unknown
        type or with a payload that is not a JSON-serializable mapping are
        dropped with a warning. Payload keys are converted to strings.

        Args:
            event_type: One of AnalyticsEventType (or its string value)
            payload: Event-specific data
        """
        if not self._initialized:
            logger.warning("Analytics pipeline not initialized; dropping %s event", event_type)
            return
        if self._closed:
            logger.warning("Analytics pipeline closed; dropping %s event", event_type)
            return

        try:
            event_type = AnalyticsEventType(event_type)
        except ValueError:
            logger.warning("Unknown analytics event type %r; dropping event", event_type)
            return

        try:
            # Round-trip through JSON so the stored payload matches what is sent.
            data = json.loads(json.dumps(dict(payload or {})))
            event = AnalyticsEvent(
                event_type=event_type,
                timestamp=int(self._clock() * 1000),
                session_id=self._session_id,
                user_id=self._user_id,
                data=data,
                device_info=self._device_info,
            )
        except (TypeError, ValueError, ValidationError) as e:
            logger.warning(
                "Payload for %s is not a JSON object (%s); dropping event",
                event_type.value,
                e,
            )
            return
        self._submit(self._record_executor, self._append, event)

    def record_screen_view(self, name: str, screen_class: Optional[str] = None) -> None:
        self.record_event(
            AnalyticsEventType.SCREEN_VIEW,
            _compact({"screenName": name, "screenClass": screen_class}),
        )

    def record_video_event(
        self,
        kind: AnalyticsEventType | str,
        episode_id: int,
        series_id: int,
        position: Optional[float] = None,
        duration: Optional[float] = None,
    ) -> None:
        """Record a video player event (play, pause, seek, complete, progress)."""
        try:
            video_type = AnalyticsEventType(kind)
        except ValueError:
            video_type = None
        if video_type not in VIDEO_EVENT_TYPES:
            logger.warning("Not a video event type: %r; dropping event", kind)
            return
        self.record_event(
            video_type,
            _compact(
                {
                    "episodeId": episode_id,
                    "seriesId": series_id,
                    "position": position,
                    "duration": duration,
                }
            ),
        )

    def record_search(
        self,
        query: str,
        result_count: int,
        filters: Optional[dict[str, Any]] = None,
    ) -> None:
        self.record_event(
            AnalyticsEventType.SEARCH,
            _compact({"query": query, "resultsCount": result_count, "filters": filters}),
        )

    def record_content_rating(self, series_id: int, score: int, has_comment: bool) -> None:
        self.record_event(
            AnalyticsEventType.RATE_CONTENT,
            {"seriesId": series_id, "score": score, "hasComment": has_comment},
        )

    def record_error(self, name: str, message: str, stack: Optional[str] = None) -> None:
        self.record_event(
            AnalyticsEventType.ERROR,
            _compact({"errorName": name, "errorMessage": message, "stack": stack}),
        )

    # ==========================================================================
    # Delivery
    # ==========================================================================

    def flush_events(self) -> FlushResult:
        """
        Deliver everything queued so far, blocking until the attempt finishes.

        Waits for previously recorded events to be appended first. Never
        raises; the result tells whether the batch went out.
        """
        if not self._initialized or self._closed:
            logger.warning("Analytics pipeline not ready; flush ignored")
            return FlushResult.NOT_READY

        self._settle_records()
        if self._is_offline:
            logger.info("Offline; %d analytics events kept queued", len(self._queue))
            return FlushResult.OFFLINE
        return self._deliver()

    def _deliver(self) -> FlushResult:
        """Drain, send and commit one batch. Serialized by the send lock."""
        if not self._send_lock.acquire(blocking=False):
            return FlushResult.ALREADY_SENDING
        try:
            batch = self._queue.drain()
            if not batch:
                return FlushResult.EMPTY

            t0 = time.monotonic()
            try:
                outcome = self._transport.send(batch)
            except Exception as e:
                logger.exception("Transport raised while sending analytics batch")
                outcome = DeliveryOutcome.failure(f"transport error: {e}")
            elapsed_ms = (time.monotonic() - t0) * 1000

            if outcome.delivered:
                self._queue.commit_drain(batch)
                self._stats.record_delivery(len(batch), elapsed_ms)
                logger.info(
                    "Delivered %d analytics events in %.0fms (%d still queued)",
                    len(batch),
                    elapsed_ms,
                    len(self._queue),
                )
                return FlushResult.DELIVERED

            self._stats.record_failure(len(batch), elapsed_ms, outcome.reason)
            logger.warning(
                "Analytics delivery failed, %d events kept for retry: %s",
                len(batch),
                outcome.reason,
            )
            return FlushResult.FAILED
        finally:
            self._send_lock.release()

    # ==========================================================================
    # Background tasks
    # ==========================================================================

    def _append(self, event: AnalyticsEvent) -> None:
        self._queue.append(event)
        self._stats.record_recorded()
        if self._trigger.should_flush(len(self._queue), self._is_offline):
            self._schedule_flush(min_length=self._trigger.batch_size)

    def _on_timer(self) -> None:
        if not self._is_offline and len(self._queue):
            self._schedule_flush(min_length=1)

    def _schedule_flush(self, min_length: int) -> None:
        with self._auto_flush_lock:
            if self._auto_flush_scheduled:
                return
            self._auto_flush_scheduled = True
        if not self._submit(self._delivery_executor, self._auto_flush, min_length):
            with self._auto_flush_lock:
                self._auto_flush_scheduled = False

    def _auto_flush(self, min_length: int) -> None:
        with self._auto_flush_lock:
            self._auto_flush_scheduled = False
        # Re-check at run time: an earlier flush may already have sent the batch.
        if self._is_offline or len(self._queue) < min_length:
            return
        result = self._deliver()
        logger.debug("Automatic flush: %s", result.value)

    def _settle_records(self) -> None:
        """Wait until every record_event() issued so far has been appended."""
        try:
            self._record_executor.submit(lambda: None).result()
        except RuntimeError:
            # executor already shut down, so nothing is pending
            pass

    def _submit(self, executor: ThreadPoolExecutor, fn: Callable, *args) -> bool:
        try:
            future = executor.submit(self._run_task, fn, *args)
        except RuntimeError:
            logger.warning("Analytics pipeline shutting down; background task dropped")
            return False
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._task_done)
        return True

    def _task_done(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    @staticmethod
    def _run_task(fn: Callable, *args) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception("Analytics background task failed")


def _compact(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {key: value for key, value in payload.items() if value is not None}
