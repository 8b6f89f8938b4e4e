# app/models/api/gift_response.py
from datetime import datetime

from pydantic import BaseModel

from app.models.domain.gift_domain import GiftContent, GiftHandle, OpenedGift


class CreateGiftResponse(BaseModel):
    """Response for POST /gift"""

    message: str = "Gift created successfully"
    gift_id: str
    share_url: str
    unlock_at: datetime

    @classmethod
    def from_domain(cls, handle: GiftHandle) -> "CreateGiftResponse":
        return cls(gift_id=handle.gift_id, share_url=handle.share_url, unlock_at=handle.unlock_at)


class OpenGiftResponse(BaseModel):
    """Response for POST /gift/open"""

    message: str
    gift_id: str
    content: GiftContent
    unlock_at: datetime
    opened_at: datetime | None
    first_open: bool

    @classmethod
    def from_domain(cls, opened: OpenedGift) -> "OpenGiftResponse":
        return cls(
            message="Gift opened successfully" if opened.first_open else "Gift already opened",
            gift_id=opened.gift_id,
            content=opened.content,
            unlock_at=opened.unlock_at,
            opened_at=opened.opened_at,
            first_open=opened.first_open,
        )
