# ==============================================================================
# HTTP Transport Implementation
# ==============================================================================
"""
HTTP transport posting event batches to the analytics ingestion endpoint.

    POST {endpoint_url}{events_path}
    {"events": [AnalyticsEvent, ...]}

Any 2xx response acknowledges the batch; the body is ignored. Non-2xx
responses, timeouts and connection errors all count as "not delivered".
There is deliberately no retry here: the batch stays queued and is picked
up by the next flush.
"""

import logging

import requests

from dramaverse.base import DeliveryOutcome, Transport
from dramaverse.core.models import AnalyticsEvent
from dramaverse.utils.config import get_settings
from dramaverse.utils.versions import get_dramaverse_version

logger = logging.getLogger(__name__)


class HttpTransport(Transport):
    """Transport using a pooled requests.Session."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        auth_token: str | None = None,
        session: requests.Session | None = None,
    ):
        """
        Initialize HTTP transport.

        Args:
            url: Full ingestion URL. If None, uses settings.
            timeout: Request timeout in seconds. If None, uses settings.
            auth_token: Optional bearer token. If None, uses settings.
            session: Optional pre-configured requests session.
        """
        settings = get_settings().analytics
        self._url = url or settings.events_url
        self._timeout = timeout if timeout is not None else settings.send_timeout_seconds
        token = auth_token if auth_token is not None else settings.auth_token

        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Content-Type": "application/json",
                "User-Agent": f"dramaverse-analytics/{get_dramaverse_version()}",
            }
        )
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    @property
    def url(self) -> str:
        return self._url

    @property
    def timeout(self) -> float:
        return self._timeout

    def send(self, events: list[AnalyticsEvent]) -> DeliveryOutcome:
        """Post the batch in a single request."""
        body = {"events": [event.to_wire() for event in events]}
        try:
            response = self._session.post(self._url, json=body, timeout=self._timeout)
        except requests.Timeout:
            return DeliveryOutcome.failure(f"timed out after {self._timeout:g}s")
        except requests.RequestException as e:
            return DeliveryOutcome.failure(f"request failed: {e}")

        if 200 <= response.status_code < 300:
            logger.debug("Delivered %d events (HTTP %d)", len(events), response.status_code)
            return DeliveryOutcome.success(response.status_code)
        return DeliveryOutcome.failure(
            f"HTTP {response.status_code} {response.reason}", status_code=response.status_code
        )

    def close(self) -> None:
        self._session.close()
