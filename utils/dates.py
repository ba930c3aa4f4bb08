"""
utils/dates.py
--------------
Billing-cycle date arithmetic and the shared "coming due" window check.
Every function is pure; callers that care about "today" may pass it in.
"""

from datetime import date, datetime
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from models.subscription import BillingCycle
from utils.errors import InvalidBillingCycle

DateLike = Union[date, datetime]

# relativedelta clamps to the last day of the month (Jan 31 + 1 month -> Feb 28/29)
_CYCLE_DELTAS = {
    BillingCycle.MONTHLY: relativedelta(months=1),
    BillingCycle.YEARLY: relativedelta(years=1),
}


def to_billing_cycle(value) -> BillingCycle:
    """Coerce a tag into a BillingCycle, raising InvalidBillingCycle if unknown."""
    if isinstance(value, BillingCycle):
        return value
    try:
        return BillingCycle(value)
    except ValueError:
        raise InvalidBillingCycle(value) from None


def _as_date(value: DateLike) -> date:
    """Strip the time of day, if any."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _shift(anchor: DateLike, billing_cycle, cycles: int = 1) -> date:
    cycle = to_billing_cycle(billing_cycle)
    anchor = _as_date(anchor)
    delta = _CYCLE_DELTAS.get(cycle)
    if delta is None:
        # one-time and trial never move
        return anchor
    return anchor + delta * cycles


def next_payment_date(start_date: DateLike, billing_cycle) -> date:
    """
    Compute the first payment date after ``start_date``.

    - monthly: one calendar month later (end-of-month clamped)
    - yearly: one calendar year later (Feb 29 -> Feb 28)
    - one-time / trial: ``start_date`` itself

    Raises:
        InvalidBillingCycle: for any tag outside BillingCycle.
    """
    return _shift(start_date, billing_cycle)


def advance_payment_date(current_next_date: DateLike, billing_cycle, cycles: int = 1) -> date:
    """
    Move a next-payment date forward by ``cycles`` whole cycles (default one).
    One-time and trial stay put.

    Multi-cycle jumps are measured from the same anchor, so Jan 31 + 2 months
    is Mar 31 rather than the clamped Feb 29 + 1 month.
    """
    return _shift(current_next_date, billing_cycle, cycles)


def days_until(target: DateLike, today: Optional[date] = None) -> int:
    """Whole calendar days from ``today`` to ``target``; negative when past."""
    today = _as_date(today) if today is not None else date.today()
    return (_as_date(target) - today).days


def is_within_window(next_date: DateLike, window_days: int,
                     today: Optional[date] = None) -> bool:
    """
    True when ``next_date`` is between today and today + ``window_days``.

    Both ends are inclusive; anything already past is outside the window.
    """
    remaining = days_until(next_date, today)
    return 0 <= remaining <= window_days
