"""
repositories/master_data_repo.py
--------------------------------
Data access for per-user master data: payment methods, account
credentials and custom categories. Every statement is owner-scoped.
"""

from typing import Optional

from db.connection import get_connection, release_connection, transaction
from models.master_data import AccountCredential, CustomCategory, PaymentMethod
from utils.logger import get_logger

logger = get_logger(__name__)


class _OwnedTable:
    """Shared list/delete plumbing for the owner-scoped master tables."""

    table: str = ""
    columns: tuple[str, ...] = ()

    def _fetch_all(self, user_id: str) -> list[tuple]:
        query = (
            f"SELECT {', '.join(self.columns)} FROM {self.table} "
            f"WHERE user_id = %s ORDER BY created_at ASC;"
        )
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(query, (user_id,))
                return cur.fetchall()
        finally:
            release_connection(conn)

    def _insert(self, values: dict) -> tuple:
        cols = list(values)
        query = (
            f"INSERT INTO {self.table} ({', '.join(cols)}) "
            f"VALUES ({', '.join(['%s'] * len(cols))}) "
            f"RETURNING {', '.join(self.columns)};"
        )
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, list(values.values()))
                    return cur.fetchone()
        except Exception as e:
            logger.error(f"Failed to insert into {self.table}: {e}")
            raise

    def _update(self, user_id: str, row_id: str, values: dict) -> Optional[tuple]:
        sets = ", ".join(f"{col} = %s" for col in values)
        query = (
            f"UPDATE {self.table} SET {sets}, updated_at = NOW() "
            f"WHERE id = %s AND user_id = %s RETURNING {', '.join(self.columns)};"
        )
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, list(values.values()) + [row_id, user_id])
                    return cur.fetchone()
        except Exception as e:
            logger.error(f"Failed to update {self.table} {row_id}: {e}")
            raise

    def delete(self, user_id: str, row_id: str) -> bool:
        query = f"DELETE FROM {self.table} WHERE id = %s AND user_id = %s;"
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (row_id, user_id))
                    deleted = cur.rowcount > 0
            if deleted:
                logger.info(f"Deleted {self.table} row {row_id}")
            return deleted
        except Exception as e:
            logger.error(f"Failed to delete {self.table} {row_id}: {e}")
            raise

    def _row(self, row: tuple) -> dict:
        data = dict(zip(self.columns, row))
        data["id"] = str(data["id"])
        return data


class PaymentMethodRepository(_OwnedTable):
    table = "payment_methods"
    columns = (
        "id", "user_id", "name", "provider", "last_four_digits",
        "is_default", "created_at", "updated_at",
    )

    def get_all(self, user_id: str) -> list[PaymentMethod]:
        return [PaymentMethod(**self._row(r)) for r in self._fetch_all(user_id)]

    def add(self, method: PaymentMethod) -> PaymentMethod:
        row = self._insert({
            "user_id": method.user_id,
            "name": method.name,
            "provider": method.provider,
            "last_four_digits": method.last_four_digits,
            "is_default": method.is_default,
        })
        return PaymentMethod(**self._row(row))

    def update(self, user_id: str, method_id: str, values: dict) -> Optional[PaymentMethod]:
        row = self._update(user_id, method_id, values)
        return PaymentMethod(**self._row(row)) if row else None


class AccountCredentialRepository(_OwnedTable):
    table = "account_credentials"
    columns = (
        "id", "user_id", "name", "email", "password_encrypted",
        "login_method", "is_default", "created_at", "updated_at",
    )

    def get_all(self, user_id: str) -> list[AccountCredential]:
        return [AccountCredential(**self._row(r)) for r in self._fetch_all(user_id)]

    def get_by_id(self, user_id: str, credential_id: str) -> Optional[AccountCredential]:
        query = (
            f"SELECT {', '.join(self.columns)} FROM {self.table} "
            f"WHERE id = %s AND user_id = %s;"
        )
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(query, (credential_id, user_id))
                row = cur.fetchone()
                return AccountCredential(**self._row(row)) if row else None
        finally:
            release_connection(conn)

    def add(self, credential: AccountCredential) -> AccountCredential:
        row = self._insert({
            "user_id": credential.user_id,
            "name": credential.name,
            "email": credential.email,
            "password_encrypted": credential.password_encrypted,
            "login_method": credential.login_method,
            "is_default": credential.is_default,
        })
        return AccountCredential(**self._row(row))

    def update(self, user_id: str, credential_id: str,
               values: dict) -> Optional[AccountCredential]:
        row = self._update(user_id, credential_id, values)
        return AccountCredential(**self._row(row)) if row else None


class CategoryRepository(_OwnedTable):
    table = "custom_categories"
    columns = ("id", "user_id", "name", "color", "created_at", "updated_at")

    def get_all(self, user_id: str) -> list[CustomCategory]:
        return [CustomCategory(**self._row(r)) for r in self._fetch_all(user_id)]

    def add(self, category: CustomCategory) -> CustomCategory:
        row = self._insert({
            "user_id": category.user_id,
            "name": category.name,
            "color": category.color,
        })
        return CustomCategory(**self._row(row))

    def update(self, user_id: str, category_id: str, values: dict) -> Optional[CustomCategory]:
        row = self._update(user_id, category_id, values)
        return CustomCategory(**self._row(row)) if row else None
