"""Test fixtures for SubTrack tests."""

import uuid
from dataclasses import replace
from datetime import date
from typing import Optional

import pytest

import config
from models.subscription import (
    UPDATABLE_FIELDS,
    BillingCycle,
    Status,
    Subscription,
    SubscriptionType,
)

TODAY = date(2024, 6, 10)
OWNER = "1001"
OTHER_OWNER = "2002"


class FakeSubscriptionRepository:
    """In-memory stand-in for SubscriptionRepository with the same owner scoping."""

    def __init__(self, subscriptions: Optional[list[Subscription]] = None):
        self.rows: dict[str, Subscription] = {}
        self.date_updates: list[tuple[str, str, date]] = []
        for sub in subscriptions or []:
            self.add(sub)

    def add(self, sub: Subscription) -> Subscription:
        sub.id = sub.id or str(uuid.uuid4())
        self.rows[sub.id] = sub
        return sub

    def get_all(self, user_id: str) -> list[Subscription]:
        owned = [s for s in self.rows.values() if s.user_id == user_id]
        return sorted(owned, key=lambda s: s.next_payment_date)

    def get_by_id(self, user_id: str, subscription_id: str) -> Optional[Subscription]:
        sub = self.rows.get(subscription_id)
        return sub if sub is not None and sub.user_id == user_id else None

    def get_all_active(self) -> list[Subscription]:
        return [s for s in self.rows.values() if s.status == Status.ACTIVE]

    def update(self, user_id: str, subscription_id: str, fields: dict) -> Optional[Subscription]:
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update column(s): {', '.join(sorted(unknown))}")
        sub = self.get_by_id(user_id, subscription_id)
        if sub is None:
            return None
        updated = replace(sub, **fields)
        self.rows[subscription_id] = updated
        return updated

    def set_next_payment_date(self, user_id: str, subscription_id: str, new_date: date) -> bool:
        sub = self.get_by_id(user_id, subscription_id)
        if sub is None:
            return False
        sub.next_payment_date = new_date
        self.date_updates.append((user_id, subscription_id, new_date))
        return True

    def delete(self, user_id: str, subscription_id: str) -> bool:
        if self.get_by_id(user_id, subscription_id) is None:
            return False
        del self.rows[subscription_id]
        return True


def make_subscription(**overrides) -> Subscription:
    """Build a Subscription with sensible defaults."""
    values = dict(
        user_id=OWNER,
        name="Netflix",
        price="54000",
        billing_cycle=BillingCycle.MONTHLY,
        start_date=date(2024, 5, 20),
        next_payment_date=date(2024, 6, 20),
        currency="IDR",
    )
    values.update(overrides)
    return Subscription(**values)


@pytest.fixture
def encryption_key(monkeypatch) -> str:
    """Configure a 32-byte ENCRYPTION_KEY for the duration of a test."""
    key = "k" * 32
    monkeypatch.setattr(config, "ENCRYPTION_KEY", key)
    return key


@pytest.fixture
def sample_subscriptions() -> list[Subscription]:
    """A mixed set of subscriptions relative to TODAY (2024-06-10)."""
    return [
        make_subscription(
            name="Netflix", price="54000", category="Entertainment",
            next_payment_date=date(2024, 6, 12),
        ),
        make_subscription(
            name="GitHub", price="120", billing_cycle=BillingCycle.YEARLY,
            category="Tools", start_date=date(2024, 3, 1),
            next_payment_date=date(2025, 3, 1),
        ),
        make_subscription(
            name="Canva Trial", price="99000", billing_cycle=BillingCycle.TRIAL,
            subscription_type=SubscriptionType.TRIAL, category="Tools",
            start_date=date(2024, 6, 5), next_payment_date=date(2024, 6, 15),
        ),
        make_subscription(
            name="Spotify", price="55000", status=Status.CANCELLED,
            category="Entertainment", next_payment_date=date(2024, 6, 11),
        ),
        make_subscription(
            name="Game Voucher", price="150000", billing_cycle=BillingCycle.ONE_TIME,
            subscription_type=SubscriptionType.VOUCHER,
            start_date=date(2024, 6, 1), next_payment_date=date(2024, 6, 1),
        ),
    ]


@pytest.fixture
def fake_repo(sample_subscriptions) -> FakeSubscriptionRepository:
    """Fake repository preloaded with the sample subscriptions."""
    return FakeSubscriptionRepository(sample_subscriptions)
