"""
services/subscription_service.py
--------------------------------
Business logic for creating, editing, deleting and reading subscriptions.
Masking, encryption and next-payment-date derivation all happen here,
before anything reaches the repository.
"""

import uuid
from decimal import Decimal
from typing import Optional, Union

import psycopg2
from pydantic import ValidationError

from models.result import ActionResult
from models.schemas import (
    NEXT_BEFORE_START,
    SubscriptionCreate,
    SubscriptionUpdate,
    flatten_errors,
)
from models.subscription import Status, Subscription, SubscriptionType
from repositories.subscription_repo import SubscriptionRepository
from security.encryption import decrypt_password, encrypt_password
from security.masking import mask_payment_method
from utils.dates import next_payment_date
from utils.errors import SubTrackError
from utils.filtering import filter_by_category, filter_by_status, filter_by_type
from utils.logger import get_logger

logger = get_logger(__name__)

_CENTS = Decimal("0.01")

# Columns that can never be cleared once set
_REQUIRED = (
    "name", "price", "currency", "billing_cycle", "start_date",
    "reminder_days", "status",
)
_CLEARABLE = (
    "subscription_type", "payment_method_provider", "account_email",
    "account_login_method", "notes", "category", "url",
)


def _price_text(price: Decimal) -> str:
    return str(price.quantize(_CENTS))


def is_uuid(value: str) -> bool:
    """Ids come from chat text; anything that is not a UUID cannot match a row."""
    try:
        uuid.UUID(str(value))
        return True
    except ValueError:
        return False


class SubscriptionService:
    """
    Handles all business logic for a user's subscriptions.

    Workflow:
        1. Validate the raw input against the pydantic schemas.
        2. Mask the payment number and encrypt the password.
        3. Derive next_payment_date unless the caller supplied one.
        4. Persist via the repository, always scoped by user_id.
    """

    def __init__(self, repo: Optional[SubscriptionRepository] = None):
        self.repo = repo or SubscriptionRepository()

    def create(self, user_id: str,
               payload: Union[dict, SubscriptionCreate]) -> ActionResult[Subscription]:
        try:
            data = (
                payload if isinstance(payload, SubscriptionCreate)
                else SubscriptionCreate.model_validate(payload)
            )
        except ValidationError as e:
            errors = flatten_errors(e)
            logger.info(f"Rejected new subscription for {user_id}: {errors}")
            return ActionResult.fail("Validation failed", errors)

        try:
            sub = Subscription(
                user_id=user_id,
                name=data.name,
                price=_price_text(data.price),
                currency=data.currency,
                billing_cycle=data.billing_cycle,
                subscription_type=data.subscription_type,
                start_date=data.start_date,
                next_payment_date=(
                    data.next_payment_date
                    or next_payment_date(data.start_date, data.billing_cycle)
                ),
                reminder_days=data.reminder_days,
                status=Status.ACTIVE,
                category=data.category or None,
                payment_method_provider=data.payment_method_provider or None,
                payment_method_number=(
                    mask_payment_method(data.payment_method_number)
                    if data.payment_method_number else None
                ),
                account_email=data.account_email,
                account_login_method=data.account_login_method or None,
                account_password_encrypted=(
                    encrypt_password(data.account_password)
                    if data.account_password else None
                ),
                notes=data.notes or None,
                url=data.url,
            )
            return ActionResult.ok(self.repo.add(sub))
        except (SubTrackError, psycopg2.Error) as e:
            logger.error(f"Failed to create subscription for {user_id}: {e}")
            return ActionResult.fail("Failed to create subscription")

    def update(self, user_id: str, subscription_id: str,
               payload: Union[dict, SubscriptionUpdate]) -> ActionResult[Subscription]:
        """
        Apply a partial update. When start_date or billing_cycle actually changes and
        no explicit next_payment_date is given, the next date is recomputed.
        """
        try:
            data = (
                payload if isinstance(payload, SubscriptionUpdate)
                else SubscriptionUpdate.model_validate(payload)
            ).model_dump(exclude_unset=True)
        except ValidationError as e:
            return ActionResult.fail("Validation failed", flatten_errors(e))

        try:
            existing = self.get(user_id, subscription_id)
            if existing is None:
                return ActionResult.fail("Subscription not found")

            fields: dict = {}
            for name in _REQUIRED:
                if data.get(name) is not None:
                    fields[name] = data[name]
            for name in _CLEARABLE:
                if name in data:
                    fields[name] = data[name] or None
            if "price" in fields:
                fields["price"] = _price_text(fields["price"])

            start = fields.get("start_date", existing.start_date)
            cycle = fields.get("billing_cycle", existing.billing_cycle)
            if data.get("next_payment_date") is not None:
                fields["next_payment_date"] = data["next_payment_date"]
            elif start != existing.start_date or cycle != existing.billing_cycle:
                fields["next_payment_date"] = next_payment_date(start, cycle)

            next_date = fields.get("next_payment_date", existing.next_payment_date)
            dates_touched = "start_date" in fields or "next_payment_date" in fields
            if dates_touched and next_date is not None and next_date < start:
                return ActionResult.fail(
                    "Validation failed", {"next_payment_date": [NEXT_BEFORE_START]}
                )

            if "payment_method_number" in data:
                number = data["payment_method_number"]
                fields["payment_method_number"] = mask_payment_method(number) if number else None

            if "account_password" in data:
                password = data["account_password"]
                fields["account_password_encrypted"] = (
                    encrypt_password(password) if password else None
                )

            if not fields:
                return ActionResult.ok(existing)

            updated = self.repo.update(user_id, subscription_id, fields)
            if updated is None:
                return ActionResult.fail("Subscription not found")
            return ActionResult.ok(updated)
        except (SubTrackError, psycopg2.Error) as e:
            logger.error(f"Failed to update subscription {subscription_id}: {e}")
            return ActionResult.fail("Failed to update subscription")

    def delete(self, user_id: str, subscription_id: str) -> ActionResult[None]:
        if not is_uuid(subscription_id):
            return ActionResult.fail("Subscription not found")
        try:
            if not self.repo.delete(user_id, subscription_id):
                return ActionResult.fail("Subscription not found")
            return ActionResult.ok()
        except psycopg2.Error as e:
            logger.error(f"Failed to delete subscription {subscription_id}: {e}")
            return ActionResult.fail("Failed to delete subscription")

    def get(self, user_id: str, subscription_id: str) -> Optional[Subscription]:
        if not is_uuid(subscription_id):
            return None
        return self.repo.get_by_id(user_id, subscription_id)

    def list_subscriptions(self, user_id: str, category: Optional[str] = None,
                           status: Optional[Union[str, Status]] = None,
                           subscription_type: Optional[Union[str, SubscriptionType]] = None,
                           ) -> list[Subscription]:
        """A user's subscriptions, optionally narrowed by category, status and type."""
        subs = self.repo.get_all(user_id)
        if category is not None:
            subs = filter_by_category(subs, category)
        if status is not None:
            subs = filter_by_status(subs, Status(status))
        if subscription_type is not None:
            subs = filter_by_type(subs, SubscriptionType(subscription_type))
        return subs

    def reveal_password(self, user_id: str, subscription_id: str) -> ActionResult[str]:
        """Decrypt the stored account password of an owned subscription."""
        sub = self.get(user_id, subscription_id)
        if sub is None:
            return ActionResult.fail("Subscription not found")
        if not sub.has_password():
            return ActionResult.fail("No password stored for this subscription")
        try:
            return ActionResult.ok(decrypt_password(sub.account_password_encrypted))
        except SubTrackError as e:
            logger.error(f"Failed to decrypt password for {subscription_id}: {e}")
            return ActionResult.fail("Failed to decrypt password")
