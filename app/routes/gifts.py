"""
gifts.py
--------
Purpose:
    Gift endpoints: create a time-locked gift, open it, look it up publicly,
    and list what the caller has sent.

Architecture:
    - API layer: parses bodies, resolves the caller, maps to the service
    - Service layer: enforces the lifecycle and returns domain models
    - Errors raised below are rendered by the handlers in app.main

Usage:
    1. POST /gift            - create (sender signed in)
    2. POST /gift/open       - open (recipient signed in, rate limited)
    3. GET  /gift/{gift_id}  - public metadata for the share page
    4. GET  /gifts           - caller's sent gifts, newest first
"""

from fastapi import APIRouter, Depends, Query, status

from app.auth.verify import auth_dependency, optional_auth_dependency
from app.config import settings
from app.errors import ForbiddenError
from app.infrastructure.observability.logging import get_logger
from app.middleware.rate_limit_dependencies import rate_limit_gift_open
from app.models.api.gift_request import CreateGiftRequest, OpenGiftRequest
from app.models.api.gift_response import CreateGiftResponse, OpenGiftResponse
from app.models.domain.gift_domain import GiftMetadata, SentGift
from app.models.domain.user_domain import User
from app.services.gift_service import (
    create_gift,
    get_gift_metadata,
    list_sent_gifts,
    open_gift,
)

router = APIRouter(tags=["gifts"])
logger = get_logger(__name__)


@router.post("/gift", response_model=CreateGiftResponse, status_code=status.HTTP_201_CREATED)
async def create(body: CreateGiftRequest, user: User = Depends(auth_dependency)):
    """
    Create a gift from the signed-in sender.

    A sender_id in the body, if present, must be the caller.

    Raises:
        401: not signed in
        403: sender_id names someone else
        422: invalid recipient, empty content, unlock time not in the future, no passcode
    """
    if body.sender_id and body.sender_id != user.user_id:
        logger.warning("Gift create with mismatched sender", caller_id=user.user_id)
        raise ForbiddenError("Gifts can only be sent as yourself")

    handle = await create_gift(
        user,
        recipient_email=body.recipient_email,
        content=body.content(),
        unlock_at=body.unlock_at,
        passcode=body.passcode,
    )
    return CreateGiftResponse.from_domain(handle)


@router.post(
    "/gift/open",
    response_model=OpenGiftResponse,
    dependencies=[Depends(rate_limit_gift_open)],
)
async def open_(body: OpenGiftRequest, user: User | None = Depends(optional_auth_dependency)):
    """
    Open a gift as its recipient.

    Raises:
        401: not signed in, or wrong passcode
        403: not the recipient, or not yet unlocked
        404: unknown gift
        409: already opened (only with REOPEN_POLICY=error)
        429: too many attempts
    """
    email = None
    if user is None and settings.ALLOW_EMAIL_ONLY_OPEN:
        email = body.recipient_email

    opened = await open_gift(body.gift_id, body.passcode, user=user, email=email)
    return OpenGiftResponse.from_domain(opened)


@router.get("/gift/{gift_id}", response_model=GiftMetadata)
async def metadata(gift_id: str):
    return await get_gift_metadata(gift_id)


@router.get("/gifts", response_model=list[SentGift])
async def sent_gifts(
    sender: str | None = Query(default=None, description="Must be the caller's own id"),
    user: User = Depends(auth_dependency),
):
    return await list_sent_gifts(user, sender_id=sender)
