"""
handlers/master_data_handler.py
-------------------------------
Saved payment methods, account logins and custom categories:
/methods, /accounts, /categories. Each takes a sub-command:

    /methods                                  list
    /methods add name | provider [| number]   add (number is masked)
    /methods edit <id> | name | provider | number    (blank parts are kept)
    /methods delete <id>

    /accounts                                 list
    /accounts add name | email [| password [| login method]]
    /accounts edit <id> | name | email | password | login method
    /accounts reveal <id>
    /accounts delete <id>

    /categories                               list
    /categories add name [| #color]
    /categories edit <id> | name | #color
    /categories delete <id>
"""

import html

from telegram import Update
from telegram.ext import ContextTypes
from telegram.helpers import escape_markdown

from handlers.common import describe_failure, ensure_owner
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.master_data_service import MasterDataService
from services.subscription_service import is_uuid
from utils.logger import get_logger

logger = get_logger(__name__)
master_data_service = MasterDataService()


def _split(args: list[str]) -> tuple[str, list[str]]:
    """Sub-command and its pipe-separated parts."""
    if not args:
        return "list", []
    action = args[0].lower()
    rest = " ".join(args[1:])
    return action, [p.strip() for p in rest.split("|")] if rest else []


def _listing(title: str, items: list, empty: str) -> str:
    if not items:
        return empty
    lines = [f"{escape_markdown(str(item))}\n   `{item.id}`" for item in items]
    return "\n".join([title] + lines)


async def _edit(update: Update, parts: list[str], updater) -> None:
    """Run updater(id, values); a blank value leaves that field unchanged."""
    row_id = parts[0] if parts else ""
    if not is_uuid(row_id):
        await update.message.reply_text("⚠️ Please give a valid id.")
        return
    result = updater(row_id, [p or None for p in parts[1:]])
    reply = f"✏️ Updated {result.data}" if result.success else describe_failure(result)
    await update.message.reply_text(reply)


async def _delete(update: Update, parts: list[str], deleter) -> None:
    row_id = parts[0] if parts else ""
    if not is_uuid(row_id):
        await update.message.reply_text("⚠️ Please give a valid id.")
        return
    if deleter(row_id):
        await update.message.reply_text("🗑️ Deleted.")
    else:
        await update.message.reply_text("⚠️ Not found.")


@authorized_only
@rate_limited
async def methods_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    owner = ensure_owner(update)
    action, parts = _split(context.args or [])

    if action == "list":
        await update.message.reply_text(_listing(
            "💳 *Payment methods:*",
            master_data_service.list_payment_methods(owner),
            "📭 No saved payment methods.",
        ), parse_mode="Markdown")
    elif action == "add" and len(parts) >= 2:
        result = master_data_service.add_payment_method(
            owner, parts[0], parts[1], parts[2] if len(parts) > 2 else None
        )
        reply = f"✅ Saved {result.data}" if result.success else describe_failure(result)
        await update.message.reply_text(reply)
    elif action == "edit":
        await _edit(update, parts, lambda i, v: master_data_service.update_payment_method(owner, i, *v[:3]))
    elif action == "delete":
        await _delete(update, parts, lambda i: master_data_service.delete_payment_method(owner, i))
    else:
        await update.message.reply_text(
            "⚠️ Usage: /methods [add name | provider | number] "
            "[edit <id> | name | provider | number] [delete <id>]"
        )


@authorized_only
@rate_limited
async def accounts_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    owner = ensure_owner(update)
    action, parts = _split(context.args or [])

    if action == "list":
        await update.message.reply_text(_listing(
            "📧 *Saved accounts:*",
            master_data_service.list_credentials(owner),
            "📭 No saved accounts.",
        ), parse_mode="Markdown")
    elif action == "add" and len(parts) >= 2:
        result = master_data_service.add_credential(
            owner,
            name=parts[0],
            email=parts[1],
            password=parts[2] if len(parts) > 2 else None,
            login_method=parts[3] if len(parts) > 3 else "email",
        )
        reply = f"✅ Saved {result.data}" if result.success else describe_failure(result)
        await update.message.reply_text(reply)
    elif action == "reveal":
        if not parts or not is_uuid(parts[0]):
            await update.message.reply_text("⚠️ Please give a valid id.")
            return
        result = master_data_service.reveal_credential_password(owner, parts[0])
        if not result.success:
            await update.message.reply_text(describe_failure(result))
            return
        logger.info(f"User {owner} revealed credential {parts[0]}")
        await update.message.reply_text(
            f"🔑 <tg-spoiler>{html.escape(result.data)}</tg-spoiler>", parse_mode="HTML"
        )
    elif action == "edit":
        await _edit(update, parts, lambda i, v: master_data_service.update_credential(owner, i, *v[:4]))
    elif action == "delete":
        await _delete(update, parts, lambda i: master_data_service.delete_credential(owner, i))
    else:
        await update.message.reply_text(
            "⚠️ Usage: /accounts [add name | email | password | login] "
            "[edit <id> | name | email | password | login] [reveal <id>] [delete <id>]"
        )


@authorized_only
@rate_limited
async def categories_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    owner = ensure_owner(update)
    action, parts = _split(context.args or [])

    if action == "list":
        await update.message.reply_text(_listing(
            "🏷️ *Categories:*",
            master_data_service.list_categories(owner),
            "📭 No custom categories.",
        ), parse_mode="Markdown")
    elif action == "add" and parts and parts[0]:
        result = master_data_service.add_category(
            owner, parts[0], parts[1] if len(parts) > 1 else None
        )
        reply = f"✅ Saved {result.data}" if result.success else describe_failure(result)
        await update.message.reply_text(reply)
    elif action == "edit":
        await _edit(update, parts, lambda i, v: master_data_service.update_category(owner, i, *v[:2]))
    elif action == "delete":
        await _delete(update, parts, lambda i: master_data_service.delete_category(owner, i))
    else:
        await update.message.reply_text(
            "⚠️ Usage: /categories [add name | #color] [edit <id> | name | #color] [delete <id>]"
        )
