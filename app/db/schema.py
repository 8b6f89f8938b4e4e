"""
DDL for the three record sets: users, gifts and gift_transactions.

Applied on startup when DB_AUTO_CREATE_SCHEMA is set. Every statement is
idempotent so repeated startups are harmless.
"""

from app.db.pool import db_pool
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS: list[str] = [
    "CREATE EXTENSION IF NOT EXISTS pgcrypto",
    """
    CREATE TABLE IF NOT EXISTS users (
        id            UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        google_sub    TEXT NOT NULL UNIQUE,
        email         TEXT NOT NULL,
        display_name  TEXT,
        avatar_url    TEXT,
        created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS gifts (
        id                 UUID PRIMARY KEY,
        sender_id          UUID NOT NULL REFERENCES users(id),
        recipient_email    TEXT NOT NULL,
        recipient_user_id  UUID REFERENCES users(id),
        text_message       TEXT,
        image_url          TEXT,
        video_url          TEXT,
        unlock_at          TIMESTAMPTZ NOT NULL,
        passcode_hash      TEXT NOT NULL,
        opened             BOOLEAN NOT NULL DEFAULT FALSE,
        opened_at          TIMESTAMPTZ,
        created_at         TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS users_email_key ON users (lower(email))",
    "CREATE INDEX IF NOT EXISTS gifts_sender_created_idx ON gifts (sender_id, created_at DESC)",
    "CREATE INDEX IF NOT EXISTS gifts_recipient_email_idx ON gifts (lower(recipient_email))",
    """
    CREATE TABLE IF NOT EXISTS gift_transactions (
        id               UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        gift_id          UUID NOT NULL,
        event            TEXT NOT NULL CHECK (event IN ('CREATED', 'OPENED')),
        sender_id        UUID NOT NULL,
        recipient_email  TEXT NOT NULL,
        actor_user_id    UUID,
        actor_email      TEXT,
        content          JSONB,
        created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS gift_transactions_gift_idx ON gift_transactions (gift_id, created_at)",
    "CREATE INDEX IF NOT EXISTS gift_transactions_sender_idx ON gift_transactions (sender_id, created_at)",
    """
    CREATE OR REPLACE FUNCTION gift_transactions_append_only() RETURNS trigger AS $$
    BEGIN
        RAISE EXCEPTION 'gift_transactions is append-only';
    END;
    $$ LANGUAGE plpgsql
    """,
    "DROP TRIGGER IF EXISTS gift_transactions_no_mutation ON gift_transactions",
    """
    CREATE TRIGGER gift_transactions_no_mutation
        BEFORE UPDATE OR DELETE ON gift_transactions
        FOR EACH ROW EXECUTE FUNCTION gift_transactions_append_only()
    """,
]


async def apply_schema() -> None:
    """Create tables, indexes and the append-only trigger."""
    async with db_pool.transaction() as conn:
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)

    logger.info("Database schema applied", statement_count=len(SCHEMA_STATEMENTS))
