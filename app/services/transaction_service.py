"""
Read side of the audit trail for history views.
"""

from app.db.helpers import translate_db_errors
from app.errors import ForbiddenError, NotFoundError
from app.infrastructure.audit import audit_logger
from app.models.domain.gift_domain import TransactionRecord
from app.models.domain.user_domain import User
from app.repositories.gift_repository import GiftRepository
from app.services.gift_service import parse_handle


@translate_db_errors
async def list_transactions(
    requester: User,
    *,
    gift_id: str | None = None,
    sender_id: str | None = None,
) -> list[TransactionRecord]:
    """
    Transactions for one gift, or for everything a sender sent.

    A gift's trail is visible to its sender and to the user it was opened by.
    A sender's trail is visible only to that sender. With no filter the
    requester's own sent-gift trail is returned.
    """
    if gift_id:
        handle = parse_handle(gift_id)
        gift = await GiftRepository.get(handle) if handle else None
        if gift is None:
            raise NotFoundError("Gift not found")
        if requester.user_id not in (gift.sender_id, gift.recipient_user_id):
            raise ForbiddenError("You can only view transactions for your own gifts")
        return await audit_logger.list_for_gift(gift.gift_id)

    if sender_id and sender_id != requester.user_id:
        raise ForbiddenError("You can only view your own transactions")

    return await audit_logger.list_for_sender(requester.user_id)
