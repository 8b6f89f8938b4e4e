"""
Repository SQL against a real Postgres.

Skipped unless CHRONOGIFT_TEST_DATABASE_URL points at a disposable database;
the schema is applied to it. Run with: pytest -m postgres
"""

import asyncio
import os
import uuid
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from app.db import pool as pool_module
from app.db.helpers import DatabaseError, execute_query
from app.db.pool import DatabasePoolManager
from app.db.schema import apply_schema
from app.errors import EmailInUseError
from app.models.domain.gift_domain import GiftContent, GiftEvent
from app.models.domain.user_domain import GoogleProfile
from app.repositories.gift_repository import GiftRepository
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository

TEST_DATABASE_URL = os.environ.get("CHRONOGIFT_TEST_DATABASE_URL")

pytestmark = [
    pytest.mark.postgres,
    pytest.mark.skipif(not TEST_DATABASE_URL, reason="CHRONOGIFT_TEST_DATABASE_URL not set"),
]

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def pg_pool(monkeypatch):
    monkeypatch.setattr("app.db.pool.settings.DATABASE_URL", TEST_DATABASE_URL)
    pool = DatabasePoolManager()
    monkeypatch.setattr(pool_module, "db_pool", pool)
    monkeypatch.setattr("app.db.schema.db_pool", pool)

    await pool.initialize()
    await apply_schema()
    yield pool
    await pool.close()


async def _user(name: str):
    tag = uuid.uuid4().hex[:12]
    user, _ = await UserRepository.upsert_from_profile(
        GoogleProfile(sub=f"sub-{tag}", email=f"{name}-{tag}@example.com", name=name)
    )
    return user


async def _gift(sender, recipient):
    return await GiftRepository.insert(
        gift_id=str(uuid.uuid4()),
        sender_id=sender.user_id,
        recipient_email=recipient.email,
        content=GiftContent(text_message="hello"),
        unlock_at=NOW - timedelta(hours=1),
        passcode_hash="pbkdf2_sha256$1000$00$00",
    )


@pytest.mark.asyncio
async def test_concurrent_mark_opened_has_one_winner(pg_pool):
    sender, recipient = await _user("alice"), await _user("bob")
    gift = await _gift(sender, recipient)

    results = await asyncio.gather(
        *(
            GiftRepository.mark_opened(
                gift.gift_id,
                recipient_user_id=recipient.user_id,
                opened_at=NOW + timedelta(seconds=i),
            )
            for i in range(5)
        )
    )

    winners = [r for r in results if r is not None]
    assert len(winners) == 1
    stored = await GiftRepository.get(gift.gift_id)
    assert stored.opened is True
    assert stored.opened_at == winners[0].opened_at
    assert stored.recipient_user_id == recipient.user_id


@pytest.mark.asyncio
async def test_mark_opened_on_open_gift_changes_nothing(pg_pool):
    sender, recipient = await _user("alice"), await _user("bob")
    gift = await _gift(sender, recipient)
    first = await GiftRepository.mark_opened(
        gift.gift_id, recipient_user_id=recipient.user_id, opened_at=NOW
    )

    again = await GiftRepository.mark_opened(
        gift.gift_id, recipient_user_id=sender.user_id, opened_at=NOW + timedelta(days=1)
    )

    assert again is None
    stored = await GiftRepository.get(gift.gift_id)
    assert stored.opened_at == first.opened_at
    assert stored.recipient_user_id == recipient.user_id


@pytest.mark.asyncio
async def test_email_unique_ignoring_case(pg_pool):
    existing = await _user("carol")

    with pytest.raises(EmailInUseError):
        await UserRepository.upsert_from_profile(
            GoogleProfile(sub=f"sub-{uuid.uuid4().hex}", email=existing.email.upper())
        )


@pytest.mark.asyncio
async def test_transactions_reject_update(pg_pool):
    sender, recipient = await _user("alice"), await _user("bob")
    gift = await _gift(sender, recipient)
    await TransactionRepository.append(
        gift_id=gift.gift_id,
        event=GiftEvent.CREATED,
        sender_id=sender.user_id,
        recipient_email=recipient.email,
        actor_user_id=sender.user_id,
        actor_email=sender.email,
        content={"text_message": "hello"},
    )

    with pytest.raises(DatabaseError):
        await execute_query(
            "UPDATE gift_transactions SET actor_email = %s WHERE gift_id = %s",
            ("mallory@example.com", gift.gift_id),
        )

    records = await TransactionRepository.list_for_gift(gift.gift_id)
    assert [r.actor_email for r in records] == [sender.email]
