"""
services/dashboard_service.py
-----------------------------
Builds the dashboard summary: normalized monthly spend, active count,
trials about to end and payments coming due.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from telegram.helpers import escape_markdown

from config import DEFAULT_CURRENCY, TRIAL_WINDOW_DAYS
from models.subscription import Subscription
from repositories.subscription_repo import SubscriptionRepository
from utils.calculations import count_active, due_soon, total_monthly_spend, trials_ending_soon
from utils.calendar_link import format_price
from utils.dates import days_until
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class DashboardSummary:
    total_monthly: float
    active_count: int
    total_count: int
    trials_ending: list[Subscription] = field(default_factory=list)
    due_soon: list[Subscription] = field(default_factory=list)
    currencies: set[str] = field(default_factory=set)

    @property
    def mixed_currencies(self) -> bool:
        """True when the total adds amounts of more than one currency."""
        return len(self.currencies) > 1


class DashboardService:
    """Computes and renders per-user dashboard figures."""

    def __init__(self, repo: Optional[SubscriptionRepository] = None,
                 trial_window_days: int = TRIAL_WINDOW_DAYS):
        self.repo = repo or SubscriptionRepository()
        self.trial_window_days = trial_window_days

    def summarize(self, subscriptions: list[Subscription],
                  today: Optional[date] = None) -> DashboardSummary:
        """Aggregate an already-fetched list (pure, no I/O)."""
        return DashboardSummary(
            total_monthly=total_monthly_spend(subscriptions),
            active_count=count_active(subscriptions),
            total_count=len(subscriptions),
            trials_ending=trials_ending_soon(subscriptions, self.trial_window_days, today),
            due_soon=due_soon(subscriptions, today),
            currencies={s.currency for s in subscriptions if s.is_active()},
        )

    def get_summary(self, user_id: str, today: Optional[date] = None) -> DashboardSummary:
        return self.summarize(self.repo.get_all(user_id), today)

    def render(self, user_id: str, today: Optional[date] = None) -> str:
        """Dashboard as bot-ready text."""
        subs = self.repo.get_all(user_id)
        if not subs:
            return "📭 No subscriptions yet. Use /add to track one."

        summary = self.summarize(subs, today)
        # Mixed totals are labelled with the first code alphabetically
        currency = min(summary.currencies) if summary.currencies else DEFAULT_CURRENCY
        lines = [
            "📊 *Dashboard*\n",
            f"💰 Monthly spend: {format_price(str(summary.total_monthly), currency)}",
            f"✅ Active: {summary.active_count} / {summary.total_count}",
        ]
        if summary.mixed_currencies:
            lines.append(
                f"⚠️ Total mixes {', '.join(sorted(summary.currencies))} without conversion."
            )

        if summary.trials_ending:
            lines.append(f"\n⏳ *Trials ending within {self.trial_window_days} days:*")
            lines.extend(self._due_line(s, today) for s in summary.trials_ending)

        if summary.due_soon:
            lines.append("\n🔔 *Coming due:*")
            lines.extend(self._due_line(s, today) for s in summary.due_soon)

        return "\n".join(lines)

    @staticmethod
    def _due_line(sub: Subscription, today: Optional[date]) -> str:
        remaining = days_until(sub.next_payment_date, today)
        when = "today" if remaining == 0 else f"in {remaining}d"
        name = escape_markdown(sub.name)
        return f"  • {name}: {format_price(sub.price, sub.currency)} {when} ({sub.next_payment_date})"
