"""Status notification schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class NotificationKind(StrEnum):
    """Kinds of transient status notifications."""

    SUCCESS = "success"
    ERROR = "error"


class StatusNotification(BaseModel):
    """A transient, self-expiring status message."""

    id: str
    kind: NotificationKind
    message: str
    ttl_seconds: int
    created_at: datetime
    expires_at: datetime
