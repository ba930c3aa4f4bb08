"""
handlers/subscription_handler.py
--------------------------------
Subscription commands: /subs, /filter, /sub, /add, /edit, /delete, /password.
Delegates to SubscriptionService.
"""

import html

from telegram import Update
from telegram.ext import ContextTypes
from telegram.helpers import escape_markdown

from handlers.common import (
    describe_failure,
    ensure_owner,
    first_arg,
    parse_add_args,
    parse_edit_args,
    parse_key_values,
)
from models.subscription import Status, Subscription, SubscriptionType
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.subscription_service import SubscriptionService
from utils.calendar_link import format_price, google_calendar_url
from utils.logger import get_logger

logger = get_logger(__name__)
subscription_service = SubscriptionService()

ADD_USAGE = (
    "📝 *Add a subscription*\n\n"
    "`/add name | price | cycle | start date`\n"
    "Optional extras, each as `| key=value`:\n"
    "currency, type, remind, category, provider, card, email, login, password, notes, url, next\n\n"
    "*Examples:*\n"
    "• `/add Netflix | 54000 | monthly | 2024-01-31`\n"
    "• `/add GitHub | 48 | yearly | 2024-03-01 | currency=USD | category=Tools`\n"
    "• `/add Canva Pro | 120000 | trial | 2024-05-01 | type=trial`\n\n"
    "*Cycles:* monthly, yearly, one-time, trial"
)


def _detail(sub: Subscription) -> str:
    lines = [
        f"📌 *{escape_markdown(sub.name)}*",
        f"🔖 `{sub.id}`",
        f"💰 {format_price(sub.price, sub.currency)} ({sub.billing_cycle.value})",
        f"📅 Started {sub.start_date} · next {sub.next_payment_date}",
        f"🔔 Reminder {sub.reminder_days} day(s) before",
        f"📍 Status: {sub.status.value}",
    ]
    if sub.subscription_type:
        lines.append(f"🏷️ Type: {sub.subscription_type.value}")
    if sub.category:
        lines.append(f"🗂️ Category: {escape_markdown(sub.category)}")
    if sub.payment_method_provider or sub.payment_method_number:
        # The masked number itself starts with asterisks
        payment = f"{sub.payment_method_provider or ''} {sub.payment_method_number or ''}".strip()
        lines.append(f"💳 {escape_markdown(payment)}")
    if sub.account_email:
        lock = " 🔒" if sub.has_password() else ""
        lines.append(f"📧 {escape_markdown(sub.account_email)}{lock}")
    if sub.url:
        lines.append(f"🔗 {escape_markdown(sub.url)}")
    if sub.notes:
        lines.append(f"📝 {escape_markdown(sub.notes)}")
    return "\n".join(lines)


async def _reply_listing(update: Update, args: list[str]) -> None:
    owner = ensure_owner(update)
    try:
        filters = parse_key_values([p.strip() for p in " ".join(args).split("|")])
        status = filters.get("status")
        if status is not None:
            Status(status)
        sub_type = filters.get("subscription_type")
        if sub_type is not None:
            SubscriptionType(sub_type)
    except ValueError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return

    subs = subscription_service.list_subscriptions(
        owner, category=filters.get("category"), status=status, subscription_type=sub_type
    )
    if not subs:
        await update.message.reply_text("📭 No matching subscriptions.")
        return

    lines = ["📋 *Your subscriptions:*\n"]
    lines.extend(f"{escape_markdown(str(s))}\n   `{s.id}`" for s in subs)
    await update.message.reply_text("\n".join(lines), parse_mode="Markdown")


@authorized_only
@rate_limited
async def subs_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /subs - list subscriptions.
    Optional filters: /subs category=Tools | status=active
    """
    await _reply_listing(update, context.args or [])


@authorized_only
@rate_limited
async def filter_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /filter category=... | status=... | type=... - same listing, filters required."""
    if not context.args:
        await update.message.reply_text(
            "⚠️ Usage: /filter category=Tools | status=active | type=trial\n"
            "Statuses: active, cancelled, expired\n"
            "Types: trial, voucher, subscription"
        )
        return
    await _reply_listing(update, context.args)


@authorized_only
@rate_limited
async def sub_detail_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /sub <id> - show details and a calendar reminder link."""
    owner = ensure_owner(update)
    sub_id = first_arg(context.args)
    if not sub_id:
        await update.message.reply_text("⚠️ Usage: /sub <id>")
        return

    sub = subscription_service.get(owner, sub_id)
    if sub is None:
        await update.message.reply_text("⚠️ Subscription not found.")
        return

    text = f"{_detail(sub)}\n\n[📆 Add renewal to Google Calendar]({google_calendar_url(sub)})"
    await update.message.reply_text(text, parse_mode="Markdown", disable_web_page_preview=True)


@authorized_only
@rate_limited
async def add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add - create a subscription from the pipe-separated format."""
    owner = ensure_owner(update)
    if not context.args:
        await update.message.reply_text(ADD_USAGE, parse_mode="Markdown")
        return

    try:
        payload = parse_add_args(" ".join(context.args))
    except ValueError as e:
        await update.message.reply_text(f"⚠️ {e}\n\nSend /add for the format.")
        return

    result = subscription_service.create(owner, payload)
    if not result.success:
        await update.message.reply_text(describe_failure(result))
        return

    await update.message.reply_text(
        f"✅ Added:\n\n{_detail(result.data)}", parse_mode="Markdown"
    )


@authorized_only
@rate_limited
async def edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /edit <id> key=value | key=value ...
    Example: /edit 3f2a... price=59000 | cycle=yearly
    """
    owner = ensure_owner(update)
    if not context.args:
        await update.message.reply_text(
            "⚠️ Usage: /edit <id> key=value | key=value\n"
            "Example: /edit <id> price=59000 | status=cancelled"
        )
        return

    try:
        sub_id, payload = parse_edit_args(" ".join(context.args))
    except ValueError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return

    result = subscription_service.update(owner, sub_id, payload)
    if not result.success:
        await update.message.reply_text(describe_failure(result))
        return

    await update.message.reply_text(
        f"✏️ Updated:\n\n{_detail(result.data)}", parse_mode="Markdown"
    )


@authorized_only
@rate_limited
async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /delete <id>."""
    owner = ensure_owner(update)
    sub_id = first_arg(context.args)
    if not sub_id:
        await update.message.reply_text("⚠️ Usage: /delete <id>")
        return

    result = subscription_service.delete(owner, sub_id)
    if result.success:
        await update.message.reply_text("🗑️ Subscription deleted.")
    else:
        await update.message.reply_text(describe_failure(result))


@authorized_only
@rate_limited
async def password_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /password <id> - reveal the stored account password."""
    owner = ensure_owner(update)
    sub_id = first_arg(context.args)
    if not sub_id:
        await update.message.reply_text("⚠️ Usage: /password <id>")
        return

    result = subscription_service.reveal_password(owner, sub_id)
    if not result.success:
        await update.message.reply_text(describe_failure(result))
        return

    logger.info(f"User {owner} revealed password of subscription {sub_id}")
    # Spoiler formatting keeps it hidden until tapped
    await update.message.reply_text(
        f"🔑 <tg-spoiler>{html.escape(result.data)}</tg-spoiler>", parse_mode="HTML"
    )
