"""
services/reminder_service.py
----------------------------
Daily maintenance for the scheduler: roll past-due recurring payment
dates forward and pick out subscriptions that need a reminder.
"""

from datetime import date
from typing import Optional

from telegram.helpers import escape_markdown

from models.subscription import Subscription
from repositories.subscription_repo import SubscriptionRepository
from utils.calculations import due_soon
from utils.calendar_link import format_price
from utils.dates import advance_payment_date, days_until
from utils.logger import get_logger

logger = get_logger(__name__)


def roll_forward_date(sub: Subscription, today: date) -> date:
    """
    Advance a recurring subscription's next payment date cycle by cycle
    until it is today or later. One-time and trial dates never move.
    """
    anchor = next_date = sub.next_payment_date
    if not sub.is_recurring():
        return next_date
    cycles = 0
    while next_date < today:
        cycles += 1
        next_date = advance_payment_date(anchor, sub.billing_cycle, cycles)
    return next_date


class ReminderService:
    """
    Scheduler-facing operations over all owners' active subscriptions.

    Responsibilities:
        - Keep next_payment_date current once a billing day has passed.
        - Find subscriptions inside their reminder window.
        - Format the reminder message.
    """

    def __init__(self, repo: Optional[SubscriptionRepository] = None):
        self.repo = repo or SubscriptionRepository()

    def roll_forward(self, today: Optional[date] = None) -> list[Subscription]:
        """
        Persist advanced dates for every active recurring subscription whose
        payment date has passed.

        Returns:
            The subscriptions that moved, with their new dates.
        """
        today = today or date.today()
        moved = []
        for sub in self.repo.get_all_active():
            new_date = roll_forward_date(sub, today)
            if new_date == sub.next_payment_date:
                continue
            self.repo.set_next_payment_date(sub.user_id, sub.id, new_date)
            sub.next_payment_date = new_date
            moved.append(sub)
        if moved:
            logger.info(f"Rolled forward {len(moved)} subscription date(s)")
        return moved

    def due_reminders(self, today: Optional[date] = None) -> list[Subscription]:
        """Active subscriptions due within their own reminder_days."""
        return due_soon(self.repo.get_all_active(), today)

    @staticmethod
    def format_reminder(sub: Subscription, today: Optional[date] = None) -> str:
        remaining = days_until(sub.next_payment_date, today)
        when = "today" if remaining == 0 else f"in {remaining} day(s)"
        label = "Trial ends" if sub.is_trial() else "Payment due"
        return (
            f"⏰ *{label} {when}!*\n\n"
            f"📌 {escape_markdown(sub.name)}\n"
            f"💶 {format_price(sub.price, sub.currency)}\n"
            f"📅 {sub.next_payment_date}"
        )
