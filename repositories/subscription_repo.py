"""
repositories/subscription_repo.py
---------------------------------
Data access layer for subscriptions.
All SQL touching the `subscriptions` table lives here, and every
per-user statement filters on user_id.
"""

from datetime import date
from enum import Enum
from typing import Optional

from psycopg2 import sql

from db.connection import get_connection, release_connection, transaction
from models.subscription import (
    UPDATABLE_FIELDS,
    BillingCycle,
    Status,
    Subscription,
    SubscriptionType,
)
from utils.logger import get_logger

logger = get_logger(__name__)

COLUMNS: tuple[str, ...] = (
    "id", "user_id", "name", "price", "currency", "billing_cycle",
    "subscription_type", "start_date", "next_payment_date", "reminder_days",
    "status", "category", "payment_method_provider", "payment_method_number",
    "account_email", "account_login_method", "account_password_encrypted",
    "notes", "url", "created_at", "updated_at",
)
_SELECT = sql.SQL(", ").join(sql.Identifier(c) for c in COLUMNS)
_INSERT_COLUMNS = tuple(c for c in COLUMNS if c not in ("id", "created_at", "updated_at"))


def _to_db(value):
    """Enums go to the database as their string value."""
    return value.value if isinstance(value, Enum) else value


class SubscriptionRepository:
    """Repository for CRUD operations on the subscriptions table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, sub: Subscription) -> Subscription:
        """
        Insert a new subscription.

        Returns:
            The same object with `id`, `created_at` and `updated_at` populated.
        """
        query = sql.SQL(
            "INSERT INTO subscriptions ({cols}) VALUES ({vals}) "
            "RETURNING id, created_at, updated_at;"
        ).format(
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in _INSERT_COLUMNS),
            vals=sql.SQL(", ").join(sql.Placeholder() * len(_INSERT_COLUMNS)),
        )
        params = [_to_db(getattr(sub, c)) for c in _INSERT_COLUMNS]
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
            sub.id = str(row[0])
            sub.created_at, sub.updated_at = row[1], row[2]
            logger.info(f"Added subscription '{sub.name}' {sub.id} for user {sub.user_id}")
            return sub
        except Exception as e:
            logger.error(f"Failed to add subscription: {e}")
            raise

    # ── READ ──────────────────────────────────────────────

    def get_all(self, user_id: str) -> list[Subscription]:
        """All subscriptions of a user, soonest payment first."""
        query = sql.SQL(
            "SELECT {cols} FROM subscriptions WHERE user_id = %s "
            "ORDER BY next_payment_date ASC;"
        ).format(cols=_SELECT)
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(query, (user_id,))
                return [self._row_to_subscription(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_by_id(self, user_id: str, subscription_id: str) -> Optional[Subscription]:
        """Fetch a single subscription, or None if it is missing or not owned."""
        query = sql.SQL(
            "SELECT {cols} FROM subscriptions WHERE id = %s AND user_id = %s LIMIT 1;"
        ).format(cols=_SELECT)
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(query, (subscription_id, user_id))
                row = cur.fetchone()
                return self._row_to_subscription(row) if row else None
        finally:
            release_connection(conn)

    def get_all_active(self) -> list[Subscription]:
        """
        Every active subscription across all users.
        Only the scheduler calls this; results are grouped per owner by the caller.
        """
        query = sql.SQL(
            "SELECT {cols} FROM subscriptions WHERE status = 'active' "
            "ORDER BY user_id, next_payment_date ASC;"
        ).format(cols=_SELECT)
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(query)
                return [self._row_to_subscription(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    # ── UPDATE ────────────────────────────────────────────

    def update(self, user_id: str, subscription_id: str, fields: dict) -> Optional[Subscription]:
        """
        Replace the given columns and bump updated_at.

        Args:
            fields: Column -> value; keys must be in UPDATABLE_FIELDS.

        Returns:
            The updated subscription, or None if it is missing or not owned.
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update column(s): {', '.join(sorted(unknown))}")

        assignments = [
            sql.SQL("{} = %s").format(sql.Identifier(name)) for name in fields
        ]
        assignments.append(sql.SQL("updated_at = NOW()"))
        query = sql.SQL(
            "UPDATE subscriptions SET {sets} WHERE id = %s AND user_id = %s "
            "RETURNING {cols};"
        ).format(sets=sql.SQL(", ").join(assignments), cols=_SELECT)
        params = [_to_db(v) for v in fields.values()] + [subscription_id, user_id]
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
            if row is None:
                return None
            logger.info(f"Updated subscription {subscription_id}: {', '.join(fields)}")
            return self._row_to_subscription(row)
        except Exception as e:
            logger.error(f"Failed to update subscription {subscription_id}: {e}")
            raise

    def set_next_payment_date(self, user_id: str, subscription_id: str, new_date: date) -> bool:
        """Persist a rolled-forward payment date."""
        query = (
            "UPDATE subscriptions SET next_payment_date = %s, updated_at = NOW() "
            "WHERE id = %s AND user_id = %s;"
        )
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (new_date, subscription_id, user_id))
                    updated = cur.rowcount > 0
            if updated:
                logger.info(f"Advanced subscription {subscription_id} to {new_date}")
            return updated
        except Exception as e:
            logger.error(f"Failed to advance subscription {subscription_id}: {e}")
            raise

    # ── DELETE ────────────────────────────────────────────

    def delete(self, user_id: str, subscription_id: str) -> bool:
        """Delete a subscription, scoped to its owner."""
        query = "DELETE FROM subscriptions WHERE id = %s AND user_id = %s RETURNING id;"
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (subscription_id, user_id))
                    deleted = cur.fetchone() is not None
            if deleted:
                logger.info(f"Deleted subscription {subscription_id}")
            return deleted
        except Exception as e:
            logger.error(f"Failed to delete subscription {subscription_id}: {e}")
            raise

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_subscription(row: tuple) -> Subscription:
        """Convert a row (in COLUMNS order) to a Subscription."""
        data = dict(zip(COLUMNS, row))
        data["id"] = str(data["id"])
        # NUMERIC arrives as Decimal; keep the exact text
        data["price"] = str(data["price"])
        data["billing_cycle"] = BillingCycle(data["billing_cycle"])
        data["status"] = Status(data["status"])
        if data["subscription_type"] is not None:
            data["subscription_type"] = SubscriptionType(data["subscription_type"])
        return Subscription(**data)
