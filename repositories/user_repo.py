"""
repositories/user_repo.py
--------------------------
Data access layer for owners and their display settings.
"""

from typing import Optional

from db.connection import get_connection, release_connection, transaction
from models.settings import UserSettings
from utils.logger import get_logger

logger = get_logger(__name__)


class UserRepository:
    """Repository for the users table."""

    def ensure_user(self, user_id: str, first_name: Optional[str] = None) -> UserSettings:
        """
        Insert a user if they don't exist, refreshing the first name otherwise.
        Uses PostgreSQL's ON CONFLICT (upsert) for atomicity.

        Returns:
            The user's current settings.
        """
        query = """
            INSERT INTO users (user_id, first_name)
            VALUES (%s, %s)
            ON CONFLICT (user_id) DO UPDATE SET first_name = EXCLUDED.first_name
            RETURNING user_id, theme, currency;
        """
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (user_id, first_name))
                    row = cur.fetchone()
            return UserSettings(user_id=row[0], theme=row[1], currency=row[2])
        except Exception as e:
            logger.error(f"Failed to ensure user {user_id}: {e}")
            raise

    def load_settings(self, user_id: str) -> Optional[UserSettings]:
        query = "SELECT user_id, theme, currency FROM users WHERE user_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(query, (user_id,))
                row = cur.fetchone()
                if row:
                    return UserSettings(user_id=row[0], theme=row[1], currency=row[2])
                return None
        finally:
            release_connection(conn)

    def save_settings(self, settings: UserSettings) -> None:
        query = "UPDATE users SET theme = %s, currency = %s WHERE user_id = %s;"
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (settings.theme, settings.currency, settings.user_id))
            logger.info(f"Saved settings for user {settings.user_id}: theme={settings.theme}")
        except Exception as e:
            logger.error(f"Failed to save settings for {settings.user_id}: {e}")
            raise
