"""
models/schemas.py
-----------------
Input validation for subscription create/update requests.
Handlers build these from user text; services only ever see validated data.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from config import SUPPORTED_CURRENCIES
from models.subscription import BillingCycle, Status, SubscriptionType

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)

NEXT_BEFORE_START = "Next payment date cannot be before the start date"


class _SubscriptionRules(BaseModel):
    """Field rules shared by create and update payloads."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    @field_validator("currency", check_fields=False)
    @classmethod
    def _known_currency(cls, v):
        if v is not None and v not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Currency must be {' or '.join(SUPPORTED_CURRENCIES)}")
        return v

    @field_validator("subscription_type", mode="before", check_fields=False)
    @classmethod
    def _blank_type(cls, v):
        return v or None

    @field_validator("account_email", check_fields=False)
    @classmethod
    def _valid_email(cls, v):
        if not v:
            return None
        if not _EMAIL_RE.match(v):
            raise ValueError("Invalid email format")
        return v

    @field_validator("url", check_fields=False)
    @classmethod
    def _valid_url(cls, v):
        if not v:
            return None
        if not _URL_RE.match(v):
            raise ValueError("Invalid URL format")
        return v


class SubscriptionCreate(_SubscriptionRules):
    name: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    currency: str = "IDR"
    billing_cycle: BillingCycle
    start_date: date
    subscription_type: Optional[SubscriptionType] = None
    # Overrides the computed date when supplied
    next_payment_date: Optional[date] = None
    reminder_days: int = Field(default=3, ge=0, le=30)
    payment_method_provider: Optional[str] = None
    payment_method_number: Optional[str] = None
    account_email: Optional[str] = None
    account_login_method: Optional[str] = None
    account_password: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = None
    url: Optional[str] = None

    @field_validator("next_payment_date")
    @classmethod
    def _not_before_start(cls, v, info: ValidationInfo):
        # start_date is declared first, so it is already in info.data when valid
        start = info.data.get("start_date")
        if v is not None and start is not None and v < start:
            raise ValueError(NEXT_BEFORE_START)
        return v


class SubscriptionUpdate(_SubscriptionRules):
    """
    Partial update. Only fields that were explicitly set are applied
    (use ``model_dump(exclude_unset=True)``); an empty string clears an
    optional field.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    currency: Optional[str] = None
    billing_cycle: Optional[BillingCycle] = None
    start_date: Optional[date] = None
    subscription_type: Optional[SubscriptionType] = None
    next_payment_date: Optional[date] = None
    reminder_days: Optional[int] = Field(default=None, ge=0, le=30)
    payment_method_provider: Optional[str] = None
    payment_method_number: Optional[str] = None
    account_email: Optional[str] = None
    account_login_method: Optional[str] = None
    account_password: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = None
    url: Optional[str] = None
    status: Optional[Status] = None


def flatten_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Group pydantic error messages by dotted field path."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        path = ".".join(str(p) for p in err["loc"]) or "root"
        message = err["msg"].removeprefix("Value error, ")
        errors.setdefault(path, []).append(message)
    return errors
