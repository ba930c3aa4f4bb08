"""
main.py
-------
Entry point for the SubTrack Telegram bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Configure and start the Telegram bot with all handlers.
    - Schedule the daily roll-forward + payment reminder job.
"""

from datetime import date, time as dt_time

import psycopg2
from telegram import BotCommand
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes

from config import REMINDER_HOUR, TELEGRAM_BOT_TOKEN
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from handlers.dashboard_handler import (
    chart_command,
    dashboard_command,
    theme_command,
    trials_command,
)
from handlers.export_handler import export_csv_command, export_excel_command
from handlers.master_data_handler import (
    accounts_command,
    categories_command,
    methods_command,
)
from handlers.start_handler import help_command, myid_command, start_command
from handlers.subscription_handler import (
    add_command,
    delete_command,
    edit_command,
    filter_command,
    password_command,
    sub_detail_command,
    subs_command,
)
from services.reminder_service import ReminderService
from utils.logger import get_logger

logger = get_logger(__name__)

COMMANDS = (
    ("start", start_command, "🚀 Start the bot"),
    ("help", help_command, "📖 Show help"),
    ("subs", subs_command, "📋 List subscriptions"),
    ("filter", filter_command, "🔍 Filter by category/status"),
    ("sub", sub_detail_command, "🔎 Subscription details"),
    ("add", add_command, "➕ Add a subscription"),
    ("edit", edit_command, "✏️ Edit a subscription"),
    ("delete", delete_command, "🗑️ Delete a subscription"),
    ("password", password_command, "🔑 Reveal account password"),
    ("dashboard", dashboard_command, "📊 Spending overview"),
    ("trials", trials_command, "⏳ Trials ending soon"),
    ("chart", chart_command, "🥧 Spend by category"),
    ("theme", theme_command, "🎨 Chart theme"),
    ("export_csv", export_csv_command, "📄 Export CSV"),
    ("export_excel", export_excel_command, "📊 Export Excel"),
    ("methods", methods_command, "💳 Payment methods"),
    ("accounts", accounts_command, "📧 Saved accounts"),
    ("categories", categories_command, "🏷️ Categories"),
    ("myid", myid_command, "🆔 Your Telegram ID"),
)


async def send_reminders(context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Scheduled job: roll past-due payment dates forward, then remind owners
    of payments inside their reminder window.
    Runs daily at REMINDER_HOUR.
    """
    reminder_service = ReminderService()
    today = date.today()

    try:
        reminder_service.roll_forward(today)
        due = reminder_service.due_reminders(today)
    except psycopg2.Error as e:
        logger.error(f"Reminder job could not read subscriptions: {e}")
        return

    for sub in due:
        try:
            await context.bot.send_message(
                chat_id=int(sub.user_id),
                text=ReminderService.format_reminder(sub, today),
                parse_mode="Markdown",
            )
            logger.info(f"Sent reminder for '{sub.name}' to user {sub.user_id}")
        except (TelegramError, ValueError) as e:
            logger.error(f"Failed to send reminder for '{sub.name}': {e}")


async def set_bot_commands(application: Application) -> None:
    """Register bot commands menu in Telegram on startup."""
    await application.bot.set_my_commands(
        [BotCommand(name, description) for name, _, description in COMMANDS]
    )
    logger.info("Bot commands menu registered successfully.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = Application.builder().token(TELEGRAM_BOT_TOKEN).post_init(set_bot_commands).build()

    # ── 3. Register command handlers ──────────────────────
    for name, callback, _ in COMMANDS:
        app.add_handler(CommandHandler(name, callback))

    # ── 4. Schedule jobs ──────────────────────────────────
    job_queue = app.job_queue
    if job_queue:
        job_queue.run_daily(
            send_reminders,
            time=dt_time(hour=REMINDER_HOUR, minute=0),
            name="daily_reminders",
        )
        logger.info(f"Scheduled daily reminders ({REMINDER_HOUR:02d}:00)")
    else:
        logger.warning("Job queue unavailable; install python-telegram-bot[job-queue] for reminders.")

    # ── 5. Start polling ──────────────────────────────────
    logger.info("🚀 SubTrack is running! Press Ctrl+C to stop.")
    app.run_polling(drop_pending_updates=True, allowed_updates=["message"])

    # ── 6. Cleanup on shutdown ────────────────────────────
    close_pool()
    logger.info("SubTrack stopped.")


if __name__ == "__main__":
    main()
