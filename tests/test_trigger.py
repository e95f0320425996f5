# ==============================================================================
# Tests for Delivery Triggers
# ==============================================================================

import threading

import pytest

from dramaverse.core.trigger import DeliveryTrigger, PeriodicTrigger


class TestDeliveryTrigger:
    @pytest.mark.parametrize(
        "queue_length,is_offline,expected",
        [
            (0, False, False),
            (19, False, False),
            (20, False, True),
            (35, False, True),
            (20, True, False),
        ],
    )
    def test_should_flush(self, queue_length, is_offline, expected):
        assert DeliveryTrigger(20).should_flush(queue_length, is_offline) is expected

    def test_rejects_non_positive_batch_size(self):
        with pytest.raises(ValueError):
            DeliveryTrigger(0)


class TestPeriodicTrigger:
    def test_invokes_callback_repeatedly(self):
        calls = threading.Semaphore(0)
        timer = PeriodicTrigger(0.01, calls.release)
        timer.start()
        try:
            assert calls.acquire(timeout=2)
            assert calls.acquire(timeout=2)
        finally:
            timer.stop()
        assert not timer.running

    def test_callback_errors_do_not_stop_timer(self, caplog):
        calls = []
        second_call = threading.Event()

        def _callback():
            calls.append(1)
            if len(calls) >= 2:
                second_call.set()
            raise RuntimeError("boom")

        timer = PeriodicTrigger(0.01, _callback)
        timer.start()
        try:
            assert second_call.wait(2)
        finally:
            timer.stop()
        assert any("Periodic flush callback failed" in r.message for r in caplog.records)

    def test_stop_before_first_tick(self):
        calls = []
        timer = PeriodicTrigger(60, lambda: calls.append(1))
        timer.start()
        assert timer.running
        timer.stop()

        assert not timer.running
        assert calls == []

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            PeriodicTrigger(0, lambda: None)
