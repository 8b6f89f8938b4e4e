# app/models/api/gift_request.py
from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from app.models.domain.gift_domain import GiftContent


class CreateGiftRequest(BaseModel):
    """Body for POST /gift. camelCase names used by the web client are accepted."""

    sender_id: str | None = Field(
        default=None, validation_alias=AliasChoices("sender_id", "senderId")
    )
    recipient_email: str = Field(
        ...,
        min_length=1,
        max_length=320,
        validation_alias=AliasChoices("recipient_email", "receiverEmail"),
    )
    text_message: str | None = Field(
        default=None,
        max_length=10_000,
        validation_alias=AliasChoices("text_message", "textMessage"),
    )
    image_url: str | None = Field(
        default=None, max_length=2048, validation_alias=AliasChoices("image_url", "imageUrl")
    )
    video_url: str | None = Field(
        default=None, max_length=2048, validation_alias=AliasChoices("video_url", "videoUrl")
    )
    unlock_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("unlock_at", "unlockTimestamp", "unlockInstant"),
        description="ISO-8601 instant; naive values are taken as UTC",
    )
    passcode: str = Field(..., min_length=1)

    def content(self) -> GiftContent:
        return GiftContent(
            text_message=self.text_message,
            image_url=self.image_url,
            video_url=self.video_url,
        )


class OpenGiftRequest(BaseModel):
    """Body for POST /gift/open"""

    gift_id: str = Field(..., min_length=1, validation_alias=AliasChoices("gift_id", "giftId"))
    passcode: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("passcode", "enteredPasscode")
    )
    recipient_email: str | None = Field(
        default=None,
        validation_alias=AliasChoices("recipient_email", "userEmail"),
        description="Only honoured when email-only opening is enabled",
    )
