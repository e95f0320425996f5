# ==============================================================================
# Transport Abstract Base Class
# ==============================================================================
"""
Abstract interface for delivering event batches to the ingestion endpoint.

A transport performs exactly one delivery attempt per send() call and
reports the outcome. It never touches the event queue; the pipeline decides
whether to commit or retain the batch.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from dramaverse.core.models import AnalyticsEvent


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of a single delivery attempt."""

    delivered: bool
    status_code: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, status_code: Optional[int] = None) -> "DeliveryOutcome":
        return cls(delivered=True, status_code=status_code)

    @classmethod
    def failure(cls, reason: str, status_code: Optional[int] = None) -> "DeliveryOutcome":
        return cls(delivered=False, status_code=status_code, reason=reason)


class Transport(ABC):
    """Base class for event batch transports."""

    @abstractmethod
    def send(self, events: list[AnalyticsEvent]) -> DeliveryOutcome:
        """
        Deliver a batch in a single request.

        Network errors, timeouts and rejected responses are reported as a
        failed outcome, not raised.

        Args:
            events: Batch of events in recording order

        Returns:
            DeliveryOutcome describing whether the batch was acknowledged
        """
        ...

    def close(self) -> None:
        """Release connections. Optional override."""
        pass
