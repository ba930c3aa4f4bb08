"""
utils/calculations.py
---------------------
Dashboard aggregation over a user's subscriptions.

Monthly normalization (active records only):
    subscription_type == trial    -> 0 (free)
    subscription_type == voucher  -> full price (one-off value)
    otherwise, by billing_cycle:
        monthly  -> price
        yearly   -> price / 12
        one-time -> price
        trial    -> price

Amounts in different currencies are summed as raw numbers.
"""

import math
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from models.subscription import BillingCycle, Subscription, SubscriptionType
from utils.dates import is_within_window, to_billing_cycle
from utils.errors import InvalidBillingCycle, MalformedPrice
from utils.logger import get_logger

logger = get_logger(__name__)

UNCATEGORIZED = "Uncategorized"


def parse_price(raw) -> float:
    """
    Parse a stored price into a float.

    Raises:
        MalformedPrice: if the value is not a finite, non-negative number.
    """
    if isinstance(raw, bool):
        raise MalformedPrice(raw)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise MalformedPrice(raw) from None
    if not math.isfinite(value) or value < 0:
        raise MalformedPrice(raw)
    return value


def monthly_contribution(sub: Subscription) -> float:
    """
    Normalized monthly amount for one subscription, ignoring its status.

    Raises:
        MalformedPrice: if the price cannot be parsed.
        InvalidBillingCycle: if the cycle tag is unknown.
    """
    price = parse_price(sub.price)

    if sub.subscription_type == SubscriptionType.TRIAL:
        return 0.0
    if sub.subscription_type == SubscriptionType.VOUCHER:
        return price

    if to_billing_cycle(sub.billing_cycle) == BillingCycle.YEARLY:
        return price / 12
    return price


def _safe_contribution(sub: Subscription) -> float:
    try:
        return monthly_contribution(sub)
    except (MalformedPrice, InvalidBillingCycle) as e:
        logger.warning(f"Skipping subscription {sub.id or sub.name!r} in totals: {e}")
        return 0.0


def total_monthly_spend(subscriptions: Iterable[Subscription]) -> float:
    """
    Sum the normalized monthly amount of all active subscriptions.
    A record with a malformed price or an unknown cycle counts as zero;
    the rest still add up.
    """
    return sum(
        (_safe_contribution(s) for s in subscriptions if s.is_active()),
        0.0,
    )


def count_active(subscriptions: Iterable[Subscription]) -> int:
    return sum(1 for s in subscriptions if s.is_active())


def trials_ending_soon(subscriptions: Iterable[Subscription], window_days: int,
                       today: Optional[date] = None) -> list[Subscription]:
    """
    Trials (by type or by legacy cycle tag) whose next payment date falls
    within ``window_days`` of today, in input order.
    """
    return [
        s for s in subscriptions
        if s.is_trial() and is_within_window(s.next_payment_date, window_days, today)
    ]


def due_soon(subscriptions: Iterable[Subscription],
             today: Optional[date] = None) -> list[Subscription]:
    """Active subscriptions inside their own ``reminder_days`` window."""
    return [
        s for s in subscriptions
        if s.is_active() and is_within_window(s.next_payment_date, s.reminder_days, today)
    ]


def spend_by_category(subscriptions: Iterable[Subscription]) -> dict[str, float]:
    """Normalized monthly spend of active subscriptions grouped by category."""
    totals: dict[str, float] = defaultdict(float)
    for s in subscriptions:
        if not s.is_active():
            continue
        totals[s.category or UNCATEGORIZED] += _safe_contribution(s)
    return dict(totals)
