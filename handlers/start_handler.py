"""
handlers/start_handler.py
--------------------------
Handles /start, /help and /myid.
Registers the user and shows available commands.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import ensure_owner
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.logger import get_logger

logger = get_logger(__name__)

HELP_TEXT = """
🤖 *SubTrack* - your subscription tracker

*📋 Subscriptions:*
/subs - list (filters: `category=Tools | status=active`)
/filter category=... | status=... | type=... - filtered list
/sub <id> - details + Google Calendar link
/add - add a subscription (send alone for the format)
/edit <id> key=value | ... - change fields
/delete <id> - remove a subscription
/password <id> - reveal the stored account password

*📊 Overview:*
/dashboard - monthly spend, trials, coming due
/trials [days] - trials ending soon
/chart - spend by category
/export\\_csv - export as CSV
/export\\_excel - export as Excel

*🗂️ Saved data:*
/methods - payment methods (add, edit, delete)
/accounts - account logins (add, edit, reveal, delete)
/categories - custom categories (add, edit, delete)

*⚙️ Settings:*
/theme [light|dark] - chart theme
/myid - your Telegram ID
"""


@authorized_only
@rate_limited
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start - register the user and show a welcome message."""
    user = update.effective_user
    ensure_owner(update)
    logger.info(f"User {user.id} ({user.first_name}) started the bot.")

    await update.message.reply_text(
        f"Hi {user.first_name}! 👋\n"
        f"I keep track of your subscriptions, trials and renewal dates.\n\n"
        f"Send /help to see every command.",
    )


@authorized_only
@rate_limited
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help - show all available commands."""
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")


@authorized_only
async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myid - show the user's Telegram ID for whitelisting."""
    user = update.effective_user
    await update.message.reply_text(
        f"🆔 Your ID: `{user.id}`\n"
        f"Add it to `ALLOWED_USER_IDS` in `.env` to lock the bot down.",
        parse_mode="Markdown",
    )
