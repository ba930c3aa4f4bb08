"""
models/subscription.py
----------------------
Domain model for tracked subscriptions (recurring payments, trials, vouchers).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class BillingCycle(str, Enum):
    """Recurrence policy of a subscription."""
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ONE_TIME = "one-time"
    TRIAL = "trial"


class Status(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class SubscriptionType(str, Enum):
    """
    Spend-inclusion classification added after billing cycles.
    Records created before it existed carry ``None``.
    """
    TRIAL = "trial"
    VOUCHER = "voucher"
    SUBSCRIPTION = "subscription"


@dataclass
class Subscription:
    """
    Represents a single tracked subscription.

    Attributes:
        user_id: Owner identifier; every query is scoped by it.
        name: Display name (e.g., 'Netflix').
        price: Exact decimal text, e.g. "9.99".
        billing_cycle: One of BillingCycle.
        start_date: Anchor date for cycle computation.
        next_payment_date: Derived next billing date.
        currency: Currency tag (IDR or USD).
        subscription_type: Optional SubscriptionType; when set it takes
            precedence over billing_cycle for spend calculation.
        reminder_days: Days before next_payment_date to start reminding (0-30).
        status: One of Status. Only active records count toward spend.
        category: Free-form tag used for filtering.
        payment_method_number: Masked number ("**** 1234"), never the full one.
        account_password_encrypted: Ciphertext from security.encryption.
        id: UUID string (None for unsaved records).
    """
    user_id: str
    name: str
    price: str
    billing_cycle: BillingCycle
    start_date: date
    next_payment_date: date
    currency: str = "IDR"
    subscription_type: Optional[SubscriptionType] = None
    reminder_days: int = 3
    status: Status = Status.ACTIVE
    category: Optional[str] = None
    payment_method_provider: Optional[str] = None
    payment_method_number: Optional[str] = None
    account_email: Optional[str] = None
    account_login_method: Optional[str] = None
    account_password_encrypted: Optional[str] = None
    notes: Optional[str] = None
    url: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_active(self) -> bool:
        return self.status == Status.ACTIVE

    def is_trial(self) -> bool:
        """True for trials under either the legacy cycle tag or the newer type tag."""
        return (
            self.subscription_type == SubscriptionType.TRIAL
            or self.billing_cycle == BillingCycle.TRIAL
        )

    def is_recurring(self) -> bool:
        return self.billing_cycle in (BillingCycle.MONTHLY, BillingCycle.YEARLY)

    def has_password(self) -> bool:
        return bool(self.account_password_encrypted)

    def __str__(self) -> str:
        icon = {"active": "✅", "cancelled": "❌", "expired": "⌛"}.get(self.status.value, "•")
        return (
            f"{icon} {self.name}: {self.price} {self.currency} "
            f"({self.billing_cycle.value}) - Next: {self.next_payment_date}"
        )


# Columns that may be written through SubscriptionRepository.update()
UPDATABLE_FIELDS: tuple[str, ...] = (
    "name", "price", "currency", "billing_cycle", "subscription_type",
    "start_date", "next_payment_date", "reminder_days", "status", "category",
    "payment_method_provider", "payment_method_number", "account_email",
    "account_login_method", "account_password_encrypted", "notes", "url",
)
