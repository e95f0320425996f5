# ==============================================================================
# Analytics Domain Models
# ==============================================================================
"""
Pydantic models for analytics events and device metadata.

These models are used for:
- Stamping recorded events with session, user and device context
- Serializing the persisted queue and the ingestion request body
- Type safety throughout the pipeline

Python attribute names are snake_case; the wire format (storage and HTTP)
uses the camelCase aliases expected by the ingestion endpoint.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AnalyticsEventType(str, Enum):
    """Event types recorded by the client application."""

    # App lifecycle
    APP_OPEN = "app_open"
    APP_CLOSE = "app_close"

    # Screen views
    SCREEN_VIEW = "screen_view"

    # Video player
    VIDEO_PLAY = "video_play"
    VIDEO_PAUSE = "video_pause"
    VIDEO_SEEK = "video_seek"
    VIDEO_COMPLETE = "video_complete"
    VIDEO_PROGRESS = "video_progress"

    # User interaction
    BUTTON_CLICK = "button_click"
    TAB_CHANGE = "tab_change"
    LIST_ITEM_CLICK = "list_item_click"

    # Search
    SEARCH = "search"
    FILTER_CHANGE = "filter_change"

    # Account
    LOGIN = "login"
    LOGOUT = "logout"
    REGISTRATION = "registration"

    # Content
    ADD_TO_WATCHLIST = "add_to_watchlist"
    REMOVE_FROM_WATCHLIST = "remove_from_watchlist"
    SHARE_CONTENT = "share_content"
    RATE_CONTENT = "rate_content"
    COMMENT = "comment"
    DOWNLOAD_START = "download_start"
    DOWNLOAD_COMPLETE = "download_complete"
    DOWNLOAD_ERROR = "download_error"

    # Purchases
    PURCHASE_INITIATED = "purchase_initiated"
    PURCHASE_COMPLETED = "purchase_completed"
    PURCHASE_FAILED = "purchase_failed"
    SUBSCRIPTION_STARTED = "subscription_started"
    SUBSCRIPTION_RENEWED = "subscription_renewed"
    SUBSCRIPTION_CANCELLED = "subscription_cancelled"

    # Errors
    ERROR = "error"


VIDEO_EVENT_TYPES = frozenset(
    {
        AnalyticsEventType.VIDEO_PLAY,
        AnalyticsEventType.VIDEO_PAUSE,
        AnalyticsEventType.VIDEO_SEEK,
        AnalyticsEventType.VIDEO_COMPLETE,
        AnalyticsEventType.VIDEO_PROGRESS,
    }
)


class DeviceInfo(BaseModel):
    """
    Snapshot of device and platform metadata.

    Captured once when the pipeline initializes and shared by every event
    recorded afterwards.
    """

    device_id: str = Field(..., alias="deviceId", description="Persistent device identifier")
    platform: str = Field(..., description="Operating system family")
    os_version: str = Field(..., alias="osVersion", description="Operating system release")
    app_version: str = Field(..., alias="appVersion", description="Client application version")
    device_model: str = Field(..., alias="deviceModel", description="Hardware model")
    screen_width: int = Field(0, alias="screenWidth", description="Screen width in pixels")
    screen_height: int = Field(0, alias="screenHeight", description="Screen height in pixels")
    language: str = Field(..., description="UI language code")
    timezone: str = Field(..., description="IANA timezone name")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class AnalyticsEvent(BaseModel):
    """
    Represents a single recorded analytics event.

    Attributes:
        event_type: Kind of event
        timestamp: Unix timestamp in milliseconds when the event was recorded
        session_id: Identifier of the pipeline session that recorded the event
        user_id: Authenticated user, absent for anonymous events
        data: Event-specific payload
        device_info: Device snapshot shared across the session
    """

    event_type: AnalyticsEventType = Field(..., alias="eventType", description="Event type")
    timestamp: int = Field(..., description="Unix timestamp in milliseconds")
    session_id: str = Field(..., alias="sessionId", description="Session identifier")
    user_id: Optional[int] = Field(None, alias="userId", description="User id (nullable)")
    data: dict[str, Any] = Field(default_factory=dict, description="Event payload")
    device_info: DeviceInfo = Field(..., alias="deviceInfo", description="Device snapshot")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> dict:
        """Serialize event for storage and for the ingestion request body."""
        record = self.model_dump(mode="json", by_alias=True)
        if record["userId"] is None:
            del record["userId"]
        return record

    @classmethod
    def from_wire(cls, data: dict) -> "AnalyticsEvent":
        """Deserialize event from its stored or wire representation."""
        return cls.model_validate(data)
