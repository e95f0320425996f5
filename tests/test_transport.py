# ==============================================================================
# Tests for HttpTransport
# ==============================================================================
"""
Unit tests for posting event batches over HTTP.

The requests session is mocked; no network access is needed.
"""

from unittest.mock import MagicMock

import requests

from dramaverse.core.models import AnalyticsEvent, AnalyticsEventType, DeviceInfo
from dramaverse.infrastructure.transport import HttpTransport


def _make_event(n: int = 0) -> AnalyticsEvent:
    return AnalyticsEvent(
        event_type=AnalyticsEventType.SEARCH,
        timestamp=1_700_000_000_000 + n,
        session_id="session_1_abcdefg",
        user_id=5,
        data={"query": "ceo"},
        device_info=DeviceInfo(
            device_id="dv_x",
            platform="linux",
            os_version="6.1",
            app_version="1.0.0",
            device_model="x86_64",
            screen_width=0,
            screen_height=0,
            language="en",
            timezone="UTC",
        ),
    )


def _response(status_code: int, reason: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    return response


def _transport(session, **kwargs) -> HttpTransport:
    kwargs.setdefault("url", "http://api.test/api/analytics/events")
    kwargs.setdefault("timeout", 2.5)
    return HttpTransport(session=session, **kwargs)


class TestHttpTransport:
    def test_posts_batch_as_events_array(self):
        session = MagicMock(headers={})
        session.post.return_value = _response(200)
        events = [_make_event(0), _make_event(1)]

        outcome = _transport(session).send(events)

        assert outcome.delivered
        assert outcome.status_code == 200
        session.post.assert_called_once_with(
            "http://api.test/api/analytics/events",
            json={"events": [e.to_wire() for e in events]},
            timeout=2.5,
        )

    def test_any_2xx_is_success(self):
        session = MagicMock(headers={})
        session.post.return_value = _response(204)

        assert _transport(session).send([_make_event()]).delivered

    def test_non_2xx_is_failure(self):
        session = MagicMock(headers={})
        session.post.return_value = _response(503, "Service Unavailable")

        outcome = _transport(session).send([_make_event()])

        assert not outcome.delivered
        assert outcome.status_code == 503
        assert outcome.reason == "HTTP 503 Service Unavailable"

    def test_redirect_is_failure(self):
        session = MagicMock(headers={})
        session.post.return_value = _response(302, "Found")

        assert not _transport(session).send([_make_event()]).delivered

    def test_timeout_is_failure(self):
        session = MagicMock(headers={})
        session.post.side_effect = requests.Timeout("slow")

        outcome = _transport(session).send([_make_event()])

        assert not outcome.delivered
        assert outcome.reason == "timed out after 2.5s"

    def test_connection_error_is_failure(self):
        session = MagicMock(headers={})
        session.post.side_effect = requests.ConnectionError("refused")

        outcome = _transport(session).send([_make_event()])

        assert not outcome.delivered
        assert outcome.reason.startswith("request failed")

    def test_sends_once_without_retry(self):
        session = MagicMock(headers={})
        session.post.return_value = _response(500, "Internal Server Error")

        _transport(session).send([_make_event()])

        assert session.post.call_count == 1

    def test_headers_include_bearer_token(self):
        session = MagicMock(headers={})
        _transport(session, auth_token="secret")

        assert session.headers["Authorization"] == "Bearer secret"
        assert session.headers["Content-Type"] == "application/json"
        assert session.headers["User-Agent"].startswith("dramaverse-analytics/")

    def test_no_auth_header_without_token(self):
        session = MagicMock(headers={})
        _transport(session, auth_token="")

        assert "Authorization" not in session.headers

    def test_defaults_come_from_settings(self, monkeypatch):
        monkeypatch.setenv("ANALYTICS_ENDPOINT_URL", "https://api.example.com/api/")
        monkeypatch.setenv("ANALYTICS_SEND_TIMEOUT_SECONDS", "7")

        transport = HttpTransport(session=MagicMock(headers={}))

        assert transport.url == "https://api.example.com/api/analytics/events"
        assert transport.timeout == 7
