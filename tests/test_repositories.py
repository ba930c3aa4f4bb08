"""Tests for repositories against a mocked psycopg2 connection."""

import uuid
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import psycopg2
import pytest

import repositories.master_data_repo as master_data_repo
import repositories.subscription_repo as subscription_repo
from conftest import OWNER, make_subscription
from models.master_data import CustomCategory
from models.subscription import BillingCycle, Status, SubscriptionType
from repositories.master_data_repo import CategoryRepository
from repositories.subscription_repo import COLUMNS, SubscriptionRepository

ROW_ID = uuid.UUID("7f1c7a3e-2f0a-4d4f-9a55-0f4a1c2b3d4e")
CREATED = datetime(2024, 5, 20, 8, 30)


def _row(**overrides) -> tuple:
    values = {
        "id": ROW_ID,
        "user_id": OWNER,
        "name": "Netflix",
        "price": Decimal("54000.00"),
        "currency": "IDR",
        "billing_cycle": "monthly",
        "subscription_type": None,
        "start_date": date(2024, 5, 20),
        "next_payment_date": date(2024, 6, 20),
        "reminder_days": 3,
        "status": "active",
        "category": None,
        "payment_method_provider": None,
        "payment_method_number": None,
        "account_email": None,
        "account_login_method": None,
        "account_password_encrypted": None,
        "notes": None,
        "url": None,
        "created_at": CREATED,
        "updated_at": CREATED,
    }
    values.update(overrides)
    return tuple(values[c] for c in COLUMNS)


@pytest.fixture
def db(monkeypatch):
    """Patch both repository modules onto one mocked connection/cursor pair."""
    conn = MagicMock()
    cursor = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor

    @contextmanager
    def fake_transaction():
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    for module in (subscription_repo, master_data_repo):
        monkeypatch.setattr(module, "get_connection", lambda: conn)
        monkeypatch.setattr(module, "release_connection", lambda c: None)
        monkeypatch.setattr(module, "transaction", fake_transaction)
    return conn, cursor


class TestSubscriptionRepository:
    """Test SQL plumbing of SubscriptionRepository."""

    def test_add_populates_id(self, db):
        """Test RETURNING values land on the object and enums go in as text."""
        conn, cursor = db
        cursor.fetchone.return_value = (ROW_ID, CREATED, CREATED)
        sub = make_subscription(subscription_type=SubscriptionType.SUBSCRIPTION)

        saved = SubscriptionRepository().add(sub)

        assert saved.id == str(ROW_ID)
        assert saved.created_at == CREATED
        params = cursor.execute.call_args.args[1]
        assert "monthly" in params
        assert "subscription" in params
        assert "active" in params
        conn.commit.assert_called_once()

    def test_add_failure_rolls_back(self, db):
        """Test database errors propagate after rollback."""
        conn, cursor = db
        cursor.execute.side_effect = psycopg2.OperationalError("gone")
        with pytest.raises(psycopg2.OperationalError):
            SubscriptionRepository().add(make_subscription())
        conn.rollback.assert_called_once()

    def test_get_all_maps_rows(self, db):
        """Test rows become Subscription objects with enums and text prices."""
        _, cursor = db
        cursor.fetchall.return_value = [
            _row(),
            _row(billing_cycle="yearly", subscription_type="voucher", status="cancelled"),
        ]
        subs = SubscriptionRepository().get_all(OWNER)
        assert subs[0].id == str(ROW_ID)
        assert subs[0].price == "54000.00"
        assert subs[0].billing_cycle == BillingCycle.MONTHLY
        assert subs[1].subscription_type == SubscriptionType.VOUCHER
        assert subs[1].status == Status.CANCELLED
        assert cursor.execute.call_args.args[1] == (OWNER,)

    def test_get_by_id_scoped_to_owner(self, db):
        """Test both id and owner are bound."""
        _, cursor = db
        cursor.fetchone.return_value = None
        assert SubscriptionRepository().get_by_id(OWNER, str(ROW_ID)) is None
        assert cursor.execute.call_args.args[1] == (str(ROW_ID), OWNER)

    def test_update_rejects_unknown_columns(self, db):
        """Test only whitelisted columns can be written."""
        with pytest.raises(ValueError):
            SubscriptionRepository().update(OWNER, str(ROW_ID), {"user_id": "evil"})

    def test_update_returns_row(self, db):
        """Test the updated row comes back, params end with id and owner."""
        _, cursor = db
        cursor.fetchone.return_value = _row(status="cancelled")
        updated = SubscriptionRepository().update(
            OWNER, str(ROW_ID), {"status": Status.CANCELLED}
        )
        assert updated.status == Status.CANCELLED
        assert cursor.execute.call_args.args[1] == ["cancelled", str(ROW_ID), OWNER]

    def test_update_missing(self, db):
        """Test a row that is missing or not owned."""
        _, cursor = db
        cursor.fetchone.return_value = None
        assert SubscriptionRepository().update(OWNER, str(ROW_ID), {"name": "X"}) is None

    def test_set_next_payment_date(self, db):
        """Test rowcount drives the result."""
        _, cursor = db
        cursor.rowcount = 1
        assert SubscriptionRepository().set_next_payment_date(OWNER, str(ROW_ID), date(2024, 7, 20))

    def test_delete(self, db):
        """Test delete reports whether a row was removed."""
        _, cursor = db
        cursor.fetchone.return_value = (ROW_ID,)
        assert SubscriptionRepository().delete(OWNER, str(ROW_ID))
        cursor.fetchone.return_value = None
        assert not SubscriptionRepository().delete(OWNER, str(ROW_ID))


class TestCategoryRepository:
    """Test the owner-scoped master data plumbing."""

    def test_add(self, db):
        """Test insert returns a model with a text id."""
        _, cursor = db
        cursor.fetchone.return_value = (ROW_ID, OWNER, "Tools", "#6366f1", CREATED, CREATED)
        category = CategoryRepository().add(CustomCategory(user_id=OWNER, name="Tools"))
        assert category.id == str(ROW_ID)
        assert category.color == "#6366f1"

    def test_delete_scoped(self, db):
        """Test delete binds id and owner."""
        _, cursor = db
        cursor.rowcount = 0
        assert not CategoryRepository().delete(OWNER, str(ROW_ID))
        assert cursor.execute.call_args.args[1] == (str(ROW_ID), OWNER)
