from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


def recipient_key(email: str | None) -> str:
    """Case- and whitespace-insensitive form used to match recipients."""
    return (email or "").strip().lower()


class GiftEvent(StrEnum):
    """Lifecycle events recorded in the audit log."""

    CREATED = "CREATED"
    OPENED = "OPENED"


class GiftContent(BaseModel):
    """What the recipient receives once the gift is open."""

    text_message: str | None = None
    image_url: str | None = None
    video_url: str | None = None

    def is_empty(self) -> bool:
        return not any(
            (value or "").strip() for value in (self.text_message, self.image_url, self.video_url)
        )


class Gift(BaseModel):
    """Stored gift record. passcode_hash never leaves the service layer."""

    model_config = ConfigDict(frozen=True)

    gift_id: str
    sender_id: str
    recipient_email: str
    recipient_user_id: str | None = None
    content: GiftContent
    unlock_at: datetime
    passcode_hash: str
    opened: bool = False
    opened_at: datetime | None = None
    created_at: datetime


class GiftHandle(BaseModel):
    """Returned to the sender on creation."""

    gift_id: str
    share_url: str
    unlock_at: datetime


class OpenedGift(BaseModel):
    """Result of a successful (first or repeated) open."""

    gift_id: str
    content: GiftContent
    unlock_at: datetime
    opened_at: datetime | None
    first_open: bool


class GiftMetadata(BaseModel):
    """Public view of a gift, safe to show before the recipient signs in."""

    gift_id: str
    sender_name: str | None
    unlock_at: datetime
    unlock_at_display: str
    display_timezone: str
    is_unlocked: bool
    opened: bool
    created_at: datetime


class SentGift(BaseModel):
    """History row for the sender's own gifts."""

    gift_id: str
    recipient_email: str
    content: GiftContent
    unlock_at: datetime
    opened: bool
    opened_at: datetime | None
    created_at: datetime


class TransactionRecord(BaseModel):
    """Immutable audit entry for a gift lifecycle event."""

    transaction_id: str
    gift_id: str
    event: GiftEvent
    sender_id: str
    recipient_email: str
    actor_user_id: str | None = None
    actor_email: str | None = None
    content: dict[str, Any] | None = None
    created_at: datetime
