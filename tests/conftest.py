# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- fakeredis-backed ValkeyStore instances
- In-memory transports that record or block delivery attempts
- A pipeline factory that tears every pipeline down after the test
"""

import threading

import fakeredis
import pytest

from dramaverse.base import DeliveryOutcome, KeyValueStore, Transport
from dramaverse.exceptions import StorageError
from dramaverse.infrastructure.storage import ValkeyStore
from dramaverse.pipeline import AnalyticsPipeline
from dramaverse.utils.config import (
    AnalyticsSettings,
    DeviceSettings,
    Settings,
    StorageSettings,
    get_settings,
)

QUEUE_KEY = "test:analytics_events_queue"
DEVICE_ID_KEY = "test:device_id"


# ==============================================================================
# Test Doubles
# ==============================================================================


class RecordingTransport(Transport):
    """Transport that records every batch and succeeds unless told otherwise."""

    def __init__(self):
        self.batches: list[list] = []
        self.fail = False
        self._lock = threading.Lock()

    def send(self, events):
        with self._lock:
            self.batches.append(list(events))
        if self.fail:
            return DeliveryOutcome.failure("simulated network error")
        return DeliveryOutcome.success(200)

    @property
    def sent_events(self) -> list:
        return [event for batch in self.batches for event in batch]


class BlockingTransport(RecordingTransport):
    """Transport whose send() blocks until `release` is set."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def send(self, events):
        self.started.set()
        self.release.wait(5)
        return super().send(events)


class FailingWriteStore(KeyValueStore):
    """Store whose reads find nothing and whose writes always fail."""

    def __init__(self):
        self.write_attempts = 0

    def get(self, key):
        return None

    def set(self, key, value):
        self.write_attempts += 1
        raise StorageError(key, "disk full")

    def delete(self, key):
        return False


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def fake_redis():
    """A clean fakeredis instance for each test.

    Uses decode_responses=True to match the real ValkeyStore behavior.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture()
def fake_store(fake_redis):
    """A ValkeyStore with its internal client replaced by fakeredis."""
    store = ValkeyStore.__new__(ValkeyStore)
    store._client = fake_redis
    store._url = "redis://fake:6379"
    return store


@pytest.fixture()
def transport():
    return RecordingTransport()


def make_settings(**analytics) -> Settings:
    """Settings with test keys and a timer that never fires during a test."""
    analytics.setdefault("flush_interval_seconds", 3600)
    analytics.setdefault("teardown_timeout_seconds", 2)
    return Settings(
        analytics=AnalyticsSettings(**analytics),
        storage=StorageSettings(
            namespace="test",
            queue_key="analytics_events_queue",
            device_id_key="device_id",
        ),
        device=DeviceSettings(screen_width=1080, screen_height=1920, language="en", timezone="UTC"),
    )


@pytest.fixture()
def make_pipeline(fake_store, transport):
    """Factory for pipelines; all of them are cleaned up after the test."""
    created: list[AnalyticsPipeline] = []

    def _make(store=None, transport_=None, initialize=True, clock=None, **analytics):
        kwargs = {}
        if clock is not None:
            kwargs["clock"] = clock
        pipeline = AnalyticsPipeline(
            store if store is not None else fake_store,
            transport_ if transport_ is not None else transport,
            settings=make_settings(**analytics),
            **kwargs,
        )
        created.append(pipeline)
        if initialize:
            pipeline.initialize()
        return pipeline

    yield _make

    for pipeline in created:
        pipeline.cleanup()


@pytest.fixture()
def pipeline(make_pipeline):
    """An initialized pipeline with batch size 20 over fakeredis."""
    return make_pipeline()
