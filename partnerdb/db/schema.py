"""
Database schema.
Creates every table the stores use. Safe to run repeatedly (IF NOT EXISTS everywhere).
"""

import logging

from partnerdb.db.connection import get_db_cursor

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    # Contacts: staff are embedded as a JSONB array, deleted with their contact
    """
    CREATE TABLE IF NOT EXISTS contacts (
        id            TEXT PRIMARY KEY,
        category      TEXT NOT NULL,
        brand_name    TEXT,
        industry      TEXT,
        sub_category  TEXT,
        address       TEXT,
        phone         TEXT,
        phone2        TEXT,
        email         TEXT,
        homepage      TEXT,
        bank_account  TEXT,
        license_file  JSONB,
        attachments   JSONB NOT NULL DEFAULT '[]'::jsonb,
        staff_list    JSONB NOT NULL DEFAULT '[]'::jsonb,
        memo          TEXT,
        created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_contacts_category ON contacts (category, created_at DESC)",
    "CREATE INDEX IF NOT EXISTS idx_contacts_brand_name ON contacts (brand_name)",
    "CREATE INDEX IF NOT EXISTS idx_contacts_industry ON contacts (industry)",
    "CREATE INDEX IF NOT EXISTS idx_contacts_staff_list ON contacts USING GIN (staff_list jsonb_path_ops)",

    # Controlled vocabularies: position keeps insertion order across renames
    """
    CREATE TABLE IF NOT EXISTS vocabulary_entries (
        position    BIGSERIAL PRIMARY KEY,
        vocabulary  TEXT NOT NULL,
        value       TEXT NOT NULL,
        created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        UNIQUE (vocabulary, value)
    )
    """,

    """
    CREATE TABLE IF NOT EXISTS authorized_users (
        id             TEXT PRIMARY KEY,
        name           TEXT NOT NULL,
        username       TEXT UNIQUE NOT NULL,
        password_hash  TEXT NOT NULL,
        created_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at     TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,

    """
    CREATE TABLE IF NOT EXISTS labor_claims (
        id            TEXT PRIMARY KEY,
        worker_id     TEXT,
        worker_name   TEXT,
        worker_phone  TEXT,
        work_date     TEXT,
        sites         JSONB NOT NULL DEFAULT '[]'::jsonb,
        breakdown     JSONB NOT NULL DEFAULT '{}'::jsonb,
        total_amount  NUMERIC NOT NULL DEFAULT 0,
        status        TEXT NOT NULL DEFAULT 'pending',
        approved_by   TEXT,
        approved_at   TEXT,
        paid_at       TEXT,
        memo          TEXT,
        raw_text      TEXT,
        claimed_at    TEXT,
        created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_labor_claims_worker ON labor_claims (worker_id)",
]


def init_schema() -> int:
    """Create all tables and indexes. Returns the number of statements executed."""
    with get_db_cursor() as cur:
        for statement in SCHEMA_STATEMENTS:
            cur.execute(statement)
    logger.info(f"Schema ensured ({len(SCHEMA_STATEMENTS)} statements)")
    return len(SCHEMA_STATEMENTS)
