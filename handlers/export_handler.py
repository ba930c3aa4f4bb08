"""
handlers/export_handler.py
---------------------------
Handles data export commands (CSV, Excel).
Delegates to ExportService.
"""

from datetime import date

import psycopg2
from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import ensure_owner
from services.export_service import ExportService
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.logger import get_logger

logger = get_logger(__name__)
export_service = ExportService()


@authorized_only
@rate_limited
async def export_csv_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_csv - send all subscriptions as CSV."""
    owner = ensure_owner(update)
    await update.message.reply_text("📄 Preparing CSV...")

    try:
        buffer = export_service.export_csv(owner)
    except psycopg2.Error as e:
        logger.error(f"CSV export failed for {owner}: {e}")
        await update.message.reply_text("❌ Export failed. Please try again.")
        return

    await update.message.reply_document(
        document=buffer,
        filename=f"subscriptions_{date.today():%Y%m%d}.csv",
        caption="📊 Subscriptions - CSV",
    )


@authorized_only
@rate_limited
async def export_excel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_excel - send all subscriptions plus a spend summary as .xlsx."""
    owner = ensure_owner(update)
    await update.message.reply_text("📊 Preparing Excel...")

    try:
        buffer = export_service.export_excel(owner)
    except psycopg2.Error as e:
        logger.error(f"Excel export failed for {owner}: {e}")
        await update.message.reply_text("❌ Export failed. Please try again.")
        return

    await update.message.reply_document(
        document=buffer,
        filename=f"subscriptions_{date.today():%Y%m%d}.xlsx",
        caption="📊 Subscriptions - Excel",
    )
