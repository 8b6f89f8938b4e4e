"""
Gift lifecycle: create, open (exactly once), public metadata, sender history.

State machine per gift is CREATED -> OPENED, nothing else. The open checks
run in a fixed order so error precedence never depends on timing:

    exists -> right recipient -> already opened? -> unlocked -> passcode -> flip

The passcode is only ever evaluated for the recipient, after unlock.
"""

import re
import uuid
from datetime import datetime

from app.config import settings
from app.db.helpers import translate_db_errors
from app.errors import (
    AlreadyOpenedError,
    ForbiddenError,
    InvalidCredentialError,
    InvalidPasscodeError,
    NotFoundError,
    NotYetUnlockedError,
    ValidationError,
)
from app.infrastructure.audit import audit_logger
from app.infrastructure.observability.logging import get_logger
from app.models.domain.gift_domain import (
    Gift,
    GiftContent,
    GiftEvent,
    GiftHandle,
    GiftMetadata,
    OpenedGift,
    SentGift,
    recipient_key,
)
from app.models.domain.user_domain import User
from app.repositories.gift_repository import GiftRepository
from app.repositories.user_repository import UserRepository
from app.security.passcode import hash_passcode, verify_passcode
from app.security.pseudonym import recipient_hash
from app.utils.time_helpers import format_for_display, to_utc, utc_now

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def parse_handle(gift_id: str | None) -> str | None:
    """Canonical form of a gift handle, or None if it cannot be one."""
    try:
        return str(uuid.UUID(str(gift_id)))
    except (TypeError, ValueError):
        return None


def _clean_content(content: GiftContent) -> GiftContent:
    def _clean(value: str | None) -> str | None:
        value = (value or "").strip()
        return value or None

    return GiftContent(
        text_message=_clean(content.text_message),
        image_url=_clean(content.image_url),
        video_url=_clean(content.video_url),
    )


@translate_db_errors
async def create_gift(
    sender: User,
    recipient_email: str | None,
    content: GiftContent,
    unlock_at: datetime | None,
    passcode: str | None,
) -> GiftHandle:
    """
    Store a new locked gift and return its shareable handle.

    Raises:
        ValidationError: missing or malformed input
        UnavailableError: storage unavailable
    """
    recipient_email = (recipient_email or "").strip()
    if not recipient_email:
        raise ValidationError("Recipient email is required")
    if not EMAIL_PATTERN.match(recipient_email):
        raise ValidationError("Recipient email is not a valid address")

    content = _clean_content(content)
    if content.is_empty():
        raise ValidationError("A gift needs a message, an image or a video")

    if unlock_at is None:
        raise ValidationError("Unlock time is required")
    unlock_at = to_utc(unlock_at)
    if unlock_at <= utc_now():
        raise ValidationError("Unlock time must be in the future")

    if not passcode or not passcode.strip():
        raise ValidationError("Passcode is required")
    if len(passcode) > settings.PASSCODE_MAX_LENGTH:
        raise ValidationError(
            f"Passcode must be at most {settings.PASSCODE_MAX_LENGTH} characters"
        )

    gift = await GiftRepository.insert(
        gift_id=str(uuid.uuid4()),
        sender_id=sender.user_id,
        recipient_email=recipient_email,
        content=content,
        unlock_at=unlock_at,
        passcode_hash=hash_passcode(passcode),
    )

    logger.info(
        "Gift created",
        gift_id=gift.gift_id,
        sender_id=sender.user_id,
        recipient_hash=recipient_hash(recipient_email),
        unlock_at=gift.unlock_at.isoformat(),
    )

    await audit_logger.record(
        gift.gift_id,
        GiftEvent.CREATED,
        sender_id=gift.sender_id,
        recipient_email=gift.recipient_email,
        actor_user_id=sender.user_id,
        actor_email=sender.email,
        snapshot=gift.content.model_dump(),
    )

    return GiftHandle(
        gift_id=gift.gift_id,
        share_url=settings.share_url(gift.gift_id),
        unlock_at=gift.unlock_at,
    )


def _already_opened(gift: Gift, user: User | None) -> OpenedGift:
    if settings.REOPEN_POLICY == "error":
        raise AlreadyOpenedError("Gift has already been opened")

    # Once bound, only the user who opened it may see it again
    if gift.recipient_user_id and user and user.user_id != gift.recipient_user_id:
        raise ForbiddenError("You are not the intended recipient")

    return OpenedGift(
        gift_id=gift.gift_id,
        content=gift.content,
        unlock_at=to_utc(gift.unlock_at),
        opened_at=gift.opened_at,
        first_open=False,
    )


@translate_db_errors
async def open_gift(
    gift_id: str,
    passcode: str | None,
    *,
    user: User | None = None,
    email: str | None = None,
) -> OpenedGift:
    """
    Open a gift for its recipient.

    The caller is either a resolved user or, in email-only mode, a bare email.
    Re-opening an opened gift returns the content again (first_open=False)
    unless REOPEN_POLICY is "error".

    Raises:
        InvalidCredentialError: no caller identity
        NotFoundError, ForbiddenError, NotYetUnlockedError, InvalidPasscodeError,
        AlreadyOpenedError: see module docstring for order
        UnavailableError: storage unavailable
    """
    caller_email = recipient_key(user.email if user else email)
    if not caller_email:
        raise InvalidCredentialError("Sign in to open this gift")

    handle = parse_handle(gift_id)
    gift = await GiftRepository.get(handle) if handle else None
    if gift is None:
        raise NotFoundError("Gift not found")

    if recipient_key(gift.recipient_email) != caller_email:
        logger.warning(
            "Gift open attempted by non-recipient",
            gift_id=gift.gift_id,
            caller_id=user.user_id if user else None,
        )
        raise ForbiddenError("You are not the intended recipient")

    if gift.opened:
        return _already_opened(gift, user)

    now = utc_now()
    unlock_at = to_utc(gift.unlock_at)
    if now < unlock_at:
        raise NotYetUnlockedError(unlock_at)

    if not verify_passcode(passcode or "", gift.passcode_hash):
        logger.info("Incorrect passcode for gift", gift_id=gift.gift_id)
        raise InvalidPasscodeError("Incorrect passcode")

    opened = await GiftRepository.mark_opened(
        gift.gift_id,
        recipient_user_id=user.user_id if user else None,
        opened_at=now,
    )

    if opened is None:
        # A concurrent request flipped the flag between our read and update
        logger.info("Gift open lost race, returning opened state", gift_id=gift.gift_id)
        current = await GiftRepository.get(gift.gift_id)
        return _already_opened(current, user)

    logger.info(
        "Gift opened",
        gift_id=opened.gift_id,
        recipient_user_id=opened.recipient_user_id,
        sender_id=opened.sender_id,
    )

    await audit_logger.record(
        opened.gift_id,
        GiftEvent.OPENED,
        sender_id=opened.sender_id,
        recipient_email=opened.recipient_email,
        actor_user_id=user.user_id if user else None,
        actor_email=caller_email,
        snapshot=opened.content.model_dump(),
    )

    return OpenedGift(
        gift_id=opened.gift_id,
        content=opened.content,
        unlock_at=to_utc(opened.unlock_at),
        opened_at=opened.opened_at,
        first_open=True,
    )


@translate_db_errors
async def get_gift_metadata(gift_id: str) -> GiftMetadata:
    """Public view of a gift: no passcode, no recipient, no content."""
    handle = parse_handle(gift_id)
    gift = await GiftRepository.get(handle) if handle else None
    if gift is None:
        raise NotFoundError("Gift not found")

    sender = await UserRepository.get_by_id(gift.sender_id)
    unlock_at = to_utc(gift.unlock_at)

    return GiftMetadata(
        gift_id=gift.gift_id,
        sender_name=sender.display_name if sender else None,
        unlock_at=unlock_at,
        unlock_at_display=format_for_display(unlock_at, settings.DISPLAY_TIMEZONE),
        display_timezone=settings.DISPLAY_TIMEZONE,
        is_unlocked=utc_now() >= unlock_at,
        opened=gift.opened,
        created_at=gift.created_at,
    )


@translate_db_errors
async def list_sent_gifts(requester: User, sender_id: str | None = None) -> list[SentGift]:
    """Gifts the requester sent, newest first."""
    if sender_id and sender_id != requester.user_id:
        raise ForbiddenError("You can only view gifts you sent")

    gifts = await GiftRepository.list_by_sender(requester.user_id)
    return [
        SentGift(
            gift_id=gift.gift_id,
            recipient_email=gift.recipient_email,
            content=gift.content,
            unlock_at=to_utc(gift.unlock_at),
            opened=gift.opened,
            opened_at=gift.opened_at,
            created_at=gift.created_at,
        )
        for gift in gifts
    ]
