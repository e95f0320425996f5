# ==============================================================================
# Tests for the dramaverse CLI
# ==============================================================================
"""
CLI tests using typer's CliRunner against a file store in a temp directory.

The HTTP transport is patched so no request leaves the process.
"""

import json

import pytest
from typer.testing import CliRunner

from dramaverse.app import app
from dramaverse.base import DeliveryOutcome
from dramaverse.cli.shared import open_persisted_queue
from dramaverse.core.models import AnalyticsEventType
from dramaverse.infrastructure.transport import HttpTransport
from dramaverse.pipeline import AnalyticsPipeline

runner = CliRunner()


@pytest.fixture()
def cli_env(tmp_path, monkeypatch):
    """Point the CLI at an empty file store."""
    monkeypatch.setenv("STORAGE_IMPL", "file")
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ANALYTICS_TEARDOWN_TIMEOUT_SECONDS", "2")
    return tmp_path


@pytest.fixture()
def sent_batches(monkeypatch):
    """Capture batches instead of posting them."""
    batches = []

    def _send(self, events):
        batches.append(list(events))
        return DeliveryOutcome.success(200)

    monkeypatch.setattr(HttpTransport, "send", _send)
    return batches


@pytest.fixture()
def offline_endpoint(monkeypatch):
    def _send(self, events):
        return DeliveryOutcome.failure("request failed: connection refused")

    monkeypatch.setattr(HttpTransport, "send", _send)


def _seed_queue(count: int) -> None:
    """Persist `count` undelivered events the way a crashed app would leave them."""
    pipeline = AnalyticsPipeline.from_settings()
    pipeline.set_offline_status(True)
    pipeline.initialize()
    for n in range(count):
        pipeline.record_event(AnalyticsEventType.SCREEN_VIEW, {"n": n})
    pipeline.cleanup()


# ==============================================================================
# Help
# ==============================================================================


class TestHelp:
    def test_root_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "queue" in result.output
        assert "record" in result.output

    @pytest.mark.parametrize("group", ["queue", "config"])
    def test_group_help(self, group):
        result = runner.invoke(app, [group, "--help"])
        assert result.exit_code == 0


# ==============================================================================
# config show
# ==============================================================================


class TestConfigShow:
    def test_json_output(self, cli_env, monkeypatch):
        monkeypatch.setenv("ANALYTICS_BATCH_SIZE", "50")

        result = runner.invoke(app, ["config", "show", "--json"])

        assert result.exit_code == 0
        config = json.loads(result.output)
        assert config["analytics"]["batch_size"] == 50
        assert config["analytics"]["events_url"] == "http://localhost:5000/api/analytics/events"
        assert config["storage"]["queue_key"] == "dramaverse:analytics_events_queue"
        assert config["storage"]["data_dir"] == str(cli_env)

    def test_text_output(self, cli_env):
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "Configuration" in result.output
        assert "20 events" in result.output


# ==============================================================================
# queue status / clear / flush
# ==============================================================================


class TestQueueCommands:
    def test_status_empty(self, cli_env):
        result = runner.invoke(app, ["queue", "status"])

        assert result.exit_code == 0
        assert "No pending analytics events" in result.output

    def test_status_json(self, cli_env):
        _seed_queue(3)

        result = runner.invoke(app, ["queue", "status", "--json"])

        assert result.exit_code == 0
        status = json.loads(result.output)
        assert status["pending"] == 3
        assert status["by_type"] == {"screen_view": 3}

    def test_clear_with_yes(self, cli_env):
        _seed_queue(2)

        result = runner.invoke(app, ["queue", "clear", "-y"])

        assert result.exit_code == 0
        assert "Discarded 2 events" in result.output
        assert len(open_persisted_queue()) == 0

    def test_clear_aborted(self, cli_env):
        _seed_queue(2)

        result = runner.invoke(app, ["queue", "clear"], input="n\n")

        assert result.exit_code == 1
        assert len(open_persisted_queue()) == 2

    def test_clear_empty(self, cli_env):
        result = runner.invoke(app, ["queue", "clear", "-y"])
        assert "Queue is already empty" in result.output

    def test_flush_delivers_backlog(self, cli_env, sent_batches):
        _seed_queue(4)

        result = runner.invoke(app, ["queue", "flush"])

        assert result.exit_code == 0
        assert "Delivered 4 events" in result.output
        assert [e.data["n"] for batch in sent_batches for e in batch] == [0, 1, 2, 3]
        assert len(open_persisted_queue()) == 0

    def test_flush_nothing_to_deliver(self, cli_env, sent_batches):
        result = runner.invoke(app, ["queue", "flush"])

        assert result.exit_code == 0
        assert "Nothing to deliver" in result.output

    def test_flush_failure_exits_nonzero(self, cli_env, offline_endpoint):
        _seed_queue(2)

        result = runner.invoke(app, ["queue", "flush"])

        assert result.exit_code == 1
        assert "connection refused" in result.output
        assert len(open_persisted_queue()) == 2


# ==============================================================================
# record
# ==============================================================================


class TestRecordCommand:
    def test_record_and_deliver(self, cli_env, sent_batches):
        result = runner.invoke(
            app, ["record", "search", "--data", '{"query": "ceo"}', "--user-id", "9"]
        )

        assert result.exit_code == 0
        assert "Recorded and delivered search" in result.output
        event = sent_batches[0][0]
        assert event.event_type is AnalyticsEventType.SEARCH
        assert event.data == {"query": "ceo"}
        assert event.user_id == 9

    def test_record_keeps_event_when_delivery_fails(self, cli_env, offline_endpoint):
        result = runner.invoke(app, ["record", "app_open"])

        assert result.exit_code == 1
        assert "not delivered" in result.output
        assert len(open_persisted_queue()) == 1

    def test_invalid_event_type(self, cli_env):
        result = runner.invoke(app, ["record", "teleport"])
        assert result.exit_code != 0

    @pytest.mark.parametrize("data", ["{broken", "[1, 2]"])
    def test_invalid_data(self, cli_env, data):
        result = runner.invoke(app, ["record", "screen_view", "--data", data])
        assert result.exit_code != 0
