"""
utils/serialization.py
----------------------
JSON (de)serialization for Subscription objects with ISO-8601 dates.
"""

import json
from dataclasses import asdict
from datetime import date, datetime
from enum import Enum

from models.subscription import BillingCycle, Status, Subscription, SubscriptionType

_DATE_FIELDS = ("start_date", "next_payment_date")
_DATETIME_FIELDS = ("created_at", "updated_at")


def _encode(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def subscription_to_dict(sub: Subscription) -> dict:
    """Plain JSON-safe dict: enums as their values, dates as ISO strings."""
    return {k: _encode(v) for k, v in asdict(sub).items()}


def subscription_from_dict(data: dict) -> Subscription:
    payload = dict(data)
    for key in _DATE_FIELDS:
        payload[key] = date.fromisoformat(payload[key])
    for key in _DATETIME_FIELDS:
        if payload.get(key):
            payload[key] = datetime.fromisoformat(payload[key])
    payload["billing_cycle"] = BillingCycle(payload["billing_cycle"])
    payload["status"] = Status(payload.get("status", Status.ACTIVE.value))
    if payload.get("subscription_type"):
        payload["subscription_type"] = SubscriptionType(payload["subscription_type"])
    return Subscription(**payload)


def serialize_subscription(sub: Subscription) -> str:
    return json.dumps(subscription_to_dict(sub), ensure_ascii=False)


def deserialize_subscription(raw: str) -> Subscription:
    """Rebuild a Subscription from serialize_subscription output."""
    return subscription_from_dict(json.loads(raw))
