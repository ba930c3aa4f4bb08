"""Tests for SubscriptionService against the in-memory repository."""

from datetime import date

import psycopg2
import pytest

from conftest import OTHER_OWNER, OWNER, FakeSubscriptionRepository
from models.schemas import NEXT_BEFORE_START
from models.subscription import BillingCycle, Status
from security.encryption import decrypt_password
from services.subscription_service import SubscriptionService


@pytest.fixture
def service(encryption_key) -> SubscriptionService:
    return SubscriptionService(repo=FakeSubscriptionRepository())


def _payload(**overrides) -> dict:
    payload = {
        "name": "Netflix",
        "price": "54000",
        "billing_cycle": "monthly",
        "start_date": "2024-01-31",
    }
    payload.update(overrides)
    return payload


class TestCreate:
    """Test subscription creation."""

    def test_computes_next_payment_date(self, service):
        """Test Jan 31 monthly starts billing on Feb 29 (leap year)."""
        result = service.create(OWNER, _payload())
        assert result.success
        sub = result.data
        assert sub.id
        assert sub.next_payment_date == date(2024, 2, 29)
        assert sub.status == Status.ACTIVE
        assert sub.price == "54000.00"

    def test_explicit_next_date_wins(self, service):
        """Test a supplied next_payment_date overrides the computed one."""
        result = service.create(OWNER, _payload(next_payment_date="2024-02-10"))
        assert result.data.next_payment_date == date(2024, 2, 10)

    def test_next_date_before_start_rejected(self, service):
        """Test an explicit next payment date earlier than the start date."""
        payload = _payload(start_date="2024-05-01", next_payment_date="2024-01-01")
        result = service.create(OWNER, payload)
        assert not result.success
        assert result.validation_errors == {"next_payment_date": [NEXT_BEFORE_START]}

    def test_masks_payment_number(self, service):
        """Test the full number never reaches the repository."""
        result = service.create(OWNER, _payload(payment_method_number="4111 1111 1111 1234"))
        assert result.data.payment_method_number == "**** 1234"

    def test_encrypts_password(self, service):
        """Test the password is stored encrypted and decrypts back."""
        result = service.create(OWNER, _payload(account_password="hunter2"))
        stored = result.data.account_password_encrypted
        assert stored != "hunter2"
        assert decrypt_password(stored) == "hunter2"

    def test_validation_failure(self, service):
        """Test field errors are returned, nothing is stored."""
        result = service.create(OWNER, _payload(price="0", currency="EUR"))
        assert not result.success
        assert result.error == "Validation failed"
        assert set(result.validation_errors) == {"price", "currency"}
        assert service.repo.rows == {}

    def test_database_error_is_reported(self, service, monkeypatch):
        """Test a failing insert becomes a failed result."""
        def boom(sub):
            raise psycopg2.OperationalError("connection lost")

        monkeypatch.setattr(service.repo, "add", boom)
        result = service.create(OWNER, _payload())
        assert not result.success
        assert result.error == "Failed to create subscription"


class TestUpdate:
    """Test partial updates."""

    def test_cycle_change_recomputes_next_date(self, service):
        """Test switching to yearly recomputes from the start date."""
        sub = service.create(OWNER, _payload()).data
        result = service.update(OWNER, sub.id, {"billing_cycle": "yearly"})
        assert result.success
        assert result.data.billing_cycle == BillingCycle.YEARLY
        assert result.data.next_payment_date == date(2025, 1, 31)

    def test_price_change_keeps_next_date(self, service):
        """Test unrelated edits leave the payment date alone."""
        sub = service.create(OWNER, _payload()).data
        result = service.update(OWNER, sub.id, {"price": "59000"})
        assert result.data.price == "59000.00"
        assert result.data.next_payment_date == date(2024, 2, 29)

    def test_unchanged_start_keeps_next_date(self, service):
        """Test resending the same start date does not reset a moved payment date."""
        sub = service.create(OWNER, _payload()).data
        service.update(OWNER, sub.id, {"next_payment_date": "2024-06-30"})
        result = service.update(OWNER, sub.id, {"start_date": "2024-01-31", "price": "60000"})
        assert result.success
        assert result.data.next_payment_date == date(2024, 6, 30)

    def test_unchanged_cycle_keeps_next_date(self, service):
        """Test resending the current cycle is not a cycle change."""
        sub = service.create(OWNER, _payload()).data
        service.update(OWNER, sub.id, {"next_payment_date": "2024-06-30"})
        result = service.update(OWNER, sub.id, {"billing_cycle": "monthly"})
        assert result.data.next_payment_date == date(2024, 6, 30)

    def test_next_date_before_start_rejected(self, service):
        """Test an update cannot move the payment date before the start date."""
        sub = service.create(OWNER, _payload(start_date="2024-05-01")).data
        result = service.update(OWNER, sub.id, {"next_payment_date": "2023-01-01"})
        assert not result.success
        assert result.validation_errors == {"next_payment_date": [NEXT_BEFORE_START]}
        assert service.get(OWNER, sub.id).next_payment_date == date(2024, 6, 1)

    def test_start_moved_past_explicit_next_rejected(self, service):
        """Test the combined start and next dates are checked together."""
        sub = service.create(OWNER, _payload()).data
        result = service.update(
            OWNER, sub.id, {"start_date": "2024-08-01", "next_payment_date": "2024-07-01"}
        )
        assert not result.success
        assert "next_payment_date" in result.validation_errors

    def test_clear_optional_field(self, service):
        """Test an empty string clears an optional field."""
        sub = service.create(OWNER, _payload(category="Entertainment")).data
        result = service.update(OWNER, sub.id, {"category": ""})
        assert result.data.category is None

    def test_status_change(self, service):
        """Test cancelling a subscription."""
        sub = service.create(OWNER, _payload()).data
        result = service.update(OWNER, sub.id, {"status": "cancelled"})
        assert result.data.status == Status.CANCELLED

    def test_other_owner_cannot_update(self, service):
        """Test updates are scoped to the owner."""
        sub = service.create(OWNER, _payload()).data
        result = service.update(OTHER_OWNER, sub.id, {"price": "1"})
        assert not result.success
        assert result.error == "Subscription not found"

    def test_invalid_update(self, service):
        """Test validation errors on update."""
        sub = service.create(OWNER, _payload()).data
        result = service.update(OWNER, sub.id, {"reminder_days": "45"})
        assert not result.success
        assert "reminder_days" in result.validation_errors


class TestReadAndDelete:
    """Test get, list, delete and password reveal."""

    def test_owner_isolation(self, service):
        """Test listing and lookup only see the owner's rows."""
        mine = service.create(OWNER, _payload()).data
        service.create(OTHER_OWNER, _payload(name="Spotify"))
        assert [s.name for s in service.list_subscriptions(OWNER)] == ["Netflix"]
        assert service.get(OTHER_OWNER, mine.id) is None

    def test_non_uuid_id_is_not_found(self, service):
        """Test ids typed in chat that are not UUIDs match nothing."""
        assert service.get(OWNER, "42") is None
        assert not service.delete(OWNER, "42").success

    def test_list_filters(self, service):
        """Test category and status filters."""
        service.create(OWNER, _payload(category="Tools"))
        service.create(OWNER, _payload(name="Disney+", category="Entertainment"))
        assert [s.name for s in service.list_subscriptions(OWNER, category="Tools")] == ["Netflix"]
        assert len(service.list_subscriptions(OWNER, status="active")) == 2
        assert service.list_subscriptions(OWNER, status=Status.EXPIRED) == []

    def test_delete(self, service):
        """Test delete removes the row once."""
        sub = service.create(OWNER, _payload()).data
        assert service.delete(OWNER, sub.id).success
        assert not service.delete(OWNER, sub.id).success

    def test_reveal_password(self, service):
        """Test revealing a stored password."""
        sub = service.create(OWNER, _payload(account_password="hunter2")).data
        assert service.reveal_password(OWNER, sub.id).data == "hunter2"

    def test_reveal_without_password(self, service):
        """Test a record without a password."""
        sub = service.create(OWNER, _payload()).data
        result = service.reveal_password(OWNER, sub.id)
        assert result.error == "No password stored for this subscription"

    def test_reveal_with_corrupt_ciphertext(self, service):
        """Test a broken token is reported, not raised."""
        sub = service.create(OWNER, _payload(account_password="hunter2")).data
        sub.account_password_encrypted = "AAAA"
        result = service.reveal_password(OWNER, sub.id)
        assert result.error == "Failed to decrypt password"
