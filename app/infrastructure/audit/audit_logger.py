"""
AuditLogger - append-only record of gift lifecycle events.

Every CREATED and OPENED transition produces one gift_transactions row plus
a structured log line. The row is what the history views read.

Usage:
    from app.infrastructure.audit import audit_logger

    await audit_logger.record(
        gift_id=gift.gift_id,
        event=GiftEvent.OPENED,
        sender_id=gift.sender_id,
        recipient_email=gift.recipient_email,
        actor_user_id=user.user_id,
        actor_email=user.email,
        snapshot=gift.content.model_dump(),
    )

Design Principles:
- Write to both database (immutable) and structured logs (searchable)
- Never fail the request if audit logging fails: the gift state change has
  already been committed and must stand on its own
"""

from datetime import UTC, datetime
from typing import Any

from app.infrastructure.observability.logging import get_logger
from app.models.domain.gift_domain import GiftEvent, TransactionRecord
from app.repositories.transaction_repository import TransactionRepository
from app.security.pseudonym import recipient_hash

logger = get_logger(__name__)


class AuditLogger:
    """
    Append-only audit sink for gift events.

    Writes go to:
    1. Structured logs (stdout) - always, first
    2. gift_transactions table - best effort
    """

    @staticmethod
    async def record(
        gift_id: str,
        event: GiftEvent,
        *,
        sender_id: str,
        recipient_email: str,
        actor_user_id: str | None = None,
        actor_email: str | None = None,
        snapshot: dict[str, Any] | None = None,
    ) -> bool:
        """
        Record a gift lifecycle event.

        Args:
            gift_id: Gift the event belongs to
            event: CREATED or OPENED
            sender_id: Owning user of the gift
            recipient_email: Intended recipient
            actor_user_id: User who caused the event (sender on CREATED, opener on OPENED)
            actor_email: Email of the actor
            snapshot: Denormalized copy of the gift content at the time of the event

        Returns:
            True if stored, False if the database write failed (never raises)
        """
        try:
            logger.info(
                "Audit event",
                audit_event=event.value,
                gift_id=gift_id,
                sender_id=sender_id,
                actor_user_id=actor_user_id,
                recipient_hash=recipient_hash(recipient_email),
            )

            await TransactionRepository.append(
                gift_id=gift_id,
                event=event,
                sender_id=sender_id,
                recipient_email=recipient_email,
                actor_user_id=actor_user_id,
                actor_email=actor_email,
                content=snapshot,
            )
            return True

        except Exception as e:
            # The gift transition is already committed; report and move on
            logger.error(
                "CRITICAL: Failed to write gift transaction",
                error=str(e),
                error_type=type(e).__name__,
                audit_event=event.value,
                gift_id=gift_id,
                fallback_data={
                    "gift_id": gift_id,
                    "event": event.value,
                    "sender_id": sender_id,
                    "actor_user_id": actor_user_id,
                    "timestamp": datetime.now(UTC).isoformat(),
                },
            )
            return False

    @staticmethod
    async def list_for_gift(gift_id: str) -> list[TransactionRecord]:
        return await TransactionRepository.list_for_gift(gift_id)

    @staticmethod
    async def list_for_sender(sender_id: str) -> list[TransactionRecord]:
        return await TransactionRepository.list_for_sender(sender_id)


# Global singleton instance
audit_logger = AuditLogger()
