"""
Append-only storage for gift transactions (the audit trail).

No update or delete here; a trigger on the table rejects both.
"""

from typing import Any

from psycopg.types.json import Jsonb

from app.db.helpers import execute_query, fetch_all
from app.models.domain.gift_domain import GiftEvent, TransactionRecord

_TRANSACTION_COLUMNS = """
    id, gift_id, event, sender_id, recipient_email,
    actor_user_id, actor_email, content, created_at
"""


def _row_to_record(row: dict[str, Any]) -> TransactionRecord:
    actor_user_id = row.get("actor_user_id")
    return TransactionRecord(
        transaction_id=str(row["id"]),
        gift_id=str(row["gift_id"]),
        event=GiftEvent(row["event"]),
        sender_id=str(row["sender_id"]),
        recipient_email=row["recipient_email"],
        actor_user_id=str(actor_user_id) if actor_user_id else None,
        actor_email=row.get("actor_email"),
        content=row.get("content"),
        created_at=row["created_at"],
    )


class TransactionRepository:
    """Persistence helpers for gift transactions."""

    @classmethod
    async def append(
        cls,
        *,
        gift_id: str,
        event: GiftEvent,
        sender_id: str,
        recipient_email: str,
        actor_user_id: str | None,
        actor_email: str | None,
        content: dict[str, Any] | None,
    ) -> None:
        query = """
            INSERT INTO gift_transactions (
                gift_id, event, sender_id, recipient_email,
                actor_user_id, actor_email, content
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s)
        """
        await execute_query(
            query,
            (
                gift_id,
                event.value,
                sender_id,
                recipient_email,
                actor_user_id,
                actor_email,
                Jsonb(content) if content is not None else None,
            ),
        )

    @classmethod
    async def list_for_gift(cls, gift_id: str) -> list[TransactionRecord]:
        query = f"""
            SELECT {_TRANSACTION_COLUMNS}
            FROM gift_transactions
            WHERE gift_id = %s
            ORDER BY created_at ASC
        """
        rows = await fetch_all(query, (gift_id,))
        return [_row_to_record(row) for row in rows]

    @classmethod
    async def list_for_sender(cls, sender_id: str) -> list[TransactionRecord]:
        query = f"""
            SELECT {_TRANSACTION_COLUMNS}
            FROM gift_transactions
            WHERE sender_id = %s
            ORDER BY created_at ASC
        """
        rows = await fetch_all(query, (sender_id,))
        return [_row_to_record(row) for row in rows]
