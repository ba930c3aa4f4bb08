"""
handlers/dashboard_handler.py
-----------------------------
Summary views: /dashboard, /trials, /chart and the /theme setting.
"""

from telegram import Update
from telegram.ext import ContextTypes
from telegram.helpers import escape_markdown

from config import TRIAL_WINDOW_DAYS
from handlers.common import ensure_owner, first_arg
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.chart_service import ChartService
from services.dashboard_service import DashboardService
from services.settings_service import SettingsService
from services.subscription_service import SubscriptionService
from utils.calculations import trials_ending_soon
from utils.calendar_link import format_price
from utils.logger import get_logger

logger = get_logger(__name__)
dashboard_service = DashboardService()
subscription_service = SubscriptionService()
chart_service = ChartService()
settings_service = SettingsService()


@authorized_only
@rate_limited
async def dashboard_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /dashboard - monthly spend, active count, trials and due payments."""
    owner = ensure_owner(update)
    await update.message.reply_text(dashboard_service.render(owner), parse_mode="Markdown")


@authorized_only
@rate_limited
async def trials_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /trials [days] - trials ending within the window.
    Default window: TRIAL_WINDOW_DAYS.
    """
    owner = ensure_owner(update)
    days = TRIAL_WINDOW_DAYS
    arg = first_arg(context.args)
    if arg:
        try:
            days = int(arg)
            if days < 0:
                raise ValueError
        except ValueError:
            await update.message.reply_text("⚠️ Usage: /trials [days]\nExample: /trials 14")
            return

    trials = trials_ending_soon(subscription_service.list_subscriptions(owner), days)
    if not trials:
        await update.message.reply_text(f"🎉 No trials ending in the next {days} day(s).")
        return

    lines = [f"⏳ *Trials ending within {days} day(s):*\n"]
    lines.extend(
        f"• {escape_markdown(t.name)} ({format_price(t.price, t.currency)}) - {t.next_payment_date}"
        for t in trials
    )
    await update.message.reply_text("\n".join(lines), parse_mode="Markdown")


@authorized_only
@rate_limited
async def chart_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /chart - pie chart of monthly spend per category."""
    owner = ensure_owner(update)
    theme = settings_service.load(owner).theme

    buf = chart_service.category_pie(owner, theme=theme)
    if buf:
        await update.message.reply_photo(photo=buf, caption="📊 Monthly spend by category")
    else:
        await update.message.reply_text("📭 No active spending to chart yet.")


@authorized_only
@rate_limited
async def theme_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /theme [light|dark] - set or toggle the chart theme."""
    owner = ensure_owner(update)
    arg = first_arg(context.args)
    try:
        settings = (
            settings_service.set_theme(owner, arg.lower()) if arg
            else settings_service.toggle_theme(owner)
        )
    except ValueError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return
    icon = "🌙" if settings.theme == "dark" else "☀️"
    await update.message.reply_text(f"{icon} Theme set to {settings.theme}.")
