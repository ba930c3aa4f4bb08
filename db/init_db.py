"""
db/init_db.py
-------------
Creates the database schema (types, tables, indexes) if it does not exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE EXTENSION IF NOT EXISTS pgcrypto;

-- Enum types (CREATE TYPE has no IF NOT EXISTS)
DO $$ BEGIN
    CREATE TYPE billing_cycle AS ENUM ('monthly', 'yearly', 'one-time', 'trial');
EXCEPTION WHEN duplicate_object THEN NULL; END $$;

DO $$ BEGIN
    CREATE TYPE subscription_status AS ENUM ('active', 'cancelled', 'expired');
EXCEPTION WHEN duplicate_object THEN NULL; END $$;

DO $$ BEGIN
    CREATE TYPE subscription_type AS ENUM ('trial', 'voucher', 'subscription');
EXCEPTION WHEN duplicate_object THEN NULL; END $$;

-- Users table: owner ids (Telegram user id as text) and display settings
CREATE TABLE IF NOT EXISTS users (
    user_id         TEXT PRIMARY KEY,
    first_name      VARCHAR(100),
    theme           VARCHAR(10) NOT NULL DEFAULT 'dark' CHECK (theme IN ('light', 'dark')),
    currency        VARCHAR(5) NOT NULL DEFAULT 'IDR',
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Subscriptions table: one row per tracked subscription
CREATE TABLE IF NOT EXISTS subscriptions (
    id                          UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id                     TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
    name                        VARCHAR(100) NOT NULL,
    price                       NUMERIC(10,2) NOT NULL CHECK (price >= 0),
    currency                    VARCHAR(5) NOT NULL DEFAULT 'IDR',
    billing_cycle               billing_cycle NOT NULL,
    subscription_type           subscription_type,
    start_date                  DATE NOT NULL,
    next_payment_date           DATE NOT NULL,
    reminder_days               INT NOT NULL DEFAULT 3 CHECK (reminder_days BETWEEN 0 AND 30),
    payment_method_provider     TEXT,
    payment_method_number       TEXT,
    account_email               TEXT,
    account_login_method        TEXT,
    account_password_encrypted  TEXT,
    notes                       TEXT,
    category                    TEXT,
    url                         TEXT,
    status                      subscription_status NOT NULL DEFAULT 'active',
    created_at                  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at                  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Master data: saved payment methods, logins and categories
CREATE TABLE IF NOT EXISTS payment_methods (
    id                  UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id             TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
    name                TEXT NOT NULL,
    provider            TEXT NOT NULL,
    last_four_digits    TEXT,
    is_default          BOOLEAN NOT NULL DEFAULT FALSE,
    created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS account_credentials (
    id                  UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id             TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
    name                TEXT NOT NULL,
    email               TEXT NOT NULL,
    password_encrypted  TEXT,
    login_method        TEXT NOT NULL DEFAULT 'email',
    is_default          BOOLEAN NOT NULL DEFAULT FALSE,
    created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS custom_categories (
    id                  UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id             TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
    name                TEXT NOT NULL,
    color               VARCHAR(9) NOT NULL DEFAULT '#6366f1',
    created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (user_id, name)
);

-- Indexes for owner-scoped reads and the daily reminder scan
CREATE INDEX IF NOT EXISTS idx_subscriptions_user_next ON subscriptions(user_id, next_payment_date);
CREATE INDEX IF NOT EXISTS idx_subscriptions_active_next ON subscriptions(next_payment_date) WHERE status = 'active';
CREATE INDEX IF NOT EXISTS idx_payment_methods_user ON payment_methods(user_id);
CREATE INDEX IF NOT EXISTS idx_account_credentials_user ON account_credentials(user_id);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all types, tables and indexes.
    Safe to call multiple times.
    """
    try:
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        logger.error(f"Failed to initialize schema: {e}")
        raise


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("✅ Database schema created successfully.")
