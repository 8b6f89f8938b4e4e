# app/routes/transactions.py
from fastapi import APIRouter, Depends, Query

from app.auth.verify import auth_dependency
from app.models.domain.gift_domain import TransactionRecord
from app.models.domain.user_domain import User
from app.services.transaction_service import list_transactions

router = APIRouter(tags=["transactions"])


@router.get("/transactions", response_model=list[TransactionRecord])
async def transactions(
    gift_id: str | None = Query(default=None),
    sender_id: str | None = Query(default=None),
    user: User = Depends(auth_dependency),
):
    """Audit trail for one gift, or for everything the caller sent (oldest first)."""
    return await list_transactions(user, gift_id=gift_id, sender_id=sender_id)
