"""
security/auth.py
-----------------
Identity for the bot: the owner identifier of every record is the
Telegram user id (as text). Handlers are gated on a whitelist.
"""

from functools import wraps
from typing import Callable, Optional

from telegram import Update
from telegram.ext import ContextTypes

import config
from utils.errors import Unauthenticated
from utils.logger import get_logger

logger = get_logger(__name__)


def owner_id_of(update: Update) -> Optional[str]:
    """Owner identifier for the update's sender, or None if there is no sender."""
    user = update.effective_user
    return str(user.id) if user else None


def require_owner_id(update: Update) -> str:
    """
    Owner identifier for the update's sender.

    Raises:
        Unauthenticated: if the update carries no user.
    """
    owner = owner_id_of(update)
    if owner is None:
        raise Unauthenticated("Update has no effective user")
    return owner


def is_allowed(telegram_id: int) -> bool:
    """An empty whitelist allows everyone (dev mode)."""
    return not config.ALLOWED_USER_IDS or telegram_id in config.ALLOWED_USER_IDS


def authorized_only(func: Callable):
    """
    Decorator that restricts a handler to whitelisted users only.

    Usage:
        @authorized_only
        async def my_handler(update, context):
            ...

    Updates without a user are dropped; unauthorized attempts are logged.
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not is_allowed(user.id):
            logger.warning(
                f"🚫 Unauthorized access attempt: user_id={user.id}, username={user.username}"
            )
            await update.message.reply_text("⛔ Sorry, this bot is private.")
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
