"""
Persistence for gifts.

The only mutation after insert is mark_opened, a compare-and-set on the
opened flag; see that method.
"""

from datetime import datetime
from typing import Any

from app.db.helpers import fetch_all, fetch_one
from app.infrastructure.observability.logging import get_logger
from app.models.domain.gift_domain import Gift, GiftContent

logger = get_logger(__name__)

_GIFT_COLUMNS = """
    id, sender_id, recipient_email, recipient_user_id,
    text_message, image_url, video_url,
    unlock_at, passcode_hash, opened, opened_at, created_at
"""


def _row_to_gift(row: dict[str, Any]) -> Gift:
    recipient_user_id = row.get("recipient_user_id")
    return Gift(
        gift_id=str(row["id"]),
        sender_id=str(row["sender_id"]),
        recipient_email=row["recipient_email"],
        recipient_user_id=str(recipient_user_id) if recipient_user_id else None,
        content=GiftContent(
            text_message=row.get("text_message"),
            image_url=row.get("image_url"),
            video_url=row.get("video_url"),
        ),
        unlock_at=row["unlock_at"],
        passcode_hash=row["passcode_hash"],
        opened=row["opened"],
        opened_at=row.get("opened_at"),
        created_at=row["created_at"],
    )


class GiftRepository:
    """Persistence helpers for gifts."""

    @classmethod
    async def insert(
        cls,
        *,
        gift_id: str,
        sender_id: str,
        recipient_email: str,
        content: GiftContent,
        unlock_at: datetime,
        passcode_hash: str,
    ) -> Gift:
        query = f"""
            INSERT INTO gifts (
                id, sender_id, recipient_email,
                text_message, image_url, video_url,
                unlock_at, passcode_hash
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_GIFT_COLUMNS}
        """
        row = await fetch_one(
            query,
            (
                gift_id,
                sender_id,
                recipient_email,
                content.text_message,
                content.image_url,
                content.video_url,
                unlock_at,
                passcode_hash,
            ),
        )
        return _row_to_gift(row)

    @classmethod
    async def get(cls, gift_id: str) -> Gift | None:
        query = f"SELECT {_GIFT_COLUMNS} FROM gifts WHERE id = %s"
        row = await fetch_one(query, (gift_id,))
        return _row_to_gift(row) if row else None

    @classmethod
    async def mark_opened(
        cls, gift_id: str, *, recipient_user_id: str | None, opened_at: datetime
    ) -> Gift | None:
        """
        Flip opened false -> true and bind the recipient, atomically.

        Returns the updated gift, or None when the gift was already open
        (another request won the race).
        """
        query = f"""
            UPDATE gifts
            SET opened = TRUE,
                opened_at = %s,
                recipient_user_id = COALESCE(recipient_user_id, %s)
            WHERE id = %s AND opened = FALSE
            RETURNING {_GIFT_COLUMNS}
        """
        row = await fetch_one(query, (opened_at, recipient_user_id, gift_id))
        return _row_to_gift(row) if row else None

    @classmethod
    async def list_by_sender(cls, sender_id: str) -> list[Gift]:
        query = f"""
            SELECT {_GIFT_COLUMNS}
            FROM gifts
            WHERE sender_id = %s
            ORDER BY created_at DESC
        """
        rows = await fetch_all(query, (sender_id,))
        return [_row_to_gift(row) for row in rows]
