"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "subtrack")
DB_USER: str = os.getenv("DB_USER", "subtrack_user")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# ── Encryption ────────────────────────────────────────────
# Used for stored account passwords. 32 bytes for AES-256; shorter keys are padded.
ENCRYPTION_KEY: str = os.getenv("ENCRYPTION_KEY", "")

# ── Security ──────────────────────────────────────────────
_raw_ids = os.getenv("ALLOWED_USER_IDS", "")
ALLOWED_USER_IDS: list[int] = (
    [int(uid.strip()) for uid in _raw_ids.split(",") if uid.strip()]
    if _raw_ids
    else []
)

# ── Rate Limiting ─────────────────────────────────────────
RATE_LIMIT_MESSAGES: int = int(os.getenv("RATE_LIMIT_MESSAGES", "30"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

# ── Subscriptions ─────────────────────────────────────────
DEFAULT_CURRENCY: str = "IDR"
SUPPORTED_CURRENCIES: tuple[str, ...] = ("IDR", "USD")
DEFAULT_REMINDER_DAYS: int = 3
TRIAL_WINDOW_DAYS: int = int(os.getenv("TRIAL_WINDOW_DAYS", "7"))
DEFAULT_CATEGORY_COLOR: str = "#6366f1"

# ── Scheduler ─────────────────────────────────────────────
REMINDER_HOUR: int = int(os.getenv("REMINDER_HOUR", "9"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
