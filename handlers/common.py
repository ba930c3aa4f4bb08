"""
handlers/common.py
------------------
Helpers shared by the command handlers: resolving the owner id and
turning pipe-separated command text into service payloads.
"""

from typing import Optional

from telegram import Update

from models.result import ActionResult
from repositories.user_repo import UserRepository
from security.auth import require_owner_id

user_repo = UserRepository()
_registered: set[str] = set()

# Short user-facing keys -> payload field names
FIELD_ALIASES = {
    "name": "name",
    "price": "price",
    "currency": "currency",
    "cycle": "billing_cycle",
    "start": "start_date",
    "next": "next_payment_date",
    "type": "subscription_type",
    "remind": "reminder_days",
    "status": "status",
    "category": "category",
    "provider": "payment_method_provider",
    "card": "payment_method_number",
    "email": "account_email",
    "login": "account_login_method",
    "password": "account_password",
    "notes": "notes",
    "url": "url",
}

CYCLE_ALIASES = {
    "monthly": "monthly", "month": "monthly",
    "yearly": "yearly", "year": "yearly", "annual": "yearly",
    "one-time": "one-time", "onetime": "one-time", "once": "one-time",
    "trial": "trial",
}


def ensure_owner(update: Update) -> str:
    """Owner id of the sender, registering the users row on first sight."""
    owner = require_owner_id(update)
    if owner not in _registered:
        user_repo.ensure_user(owner, update.effective_user.first_name)
        _registered.add(owner)
    return owner


def parse_key_values(parts: list[str]) -> dict:
    """
    Parse ``key=value`` segments into payload fields.

    Raises:
        ValueError: on a segment without '=' or an unknown key.
    """
    payload = {}
    for part in parts:
        if not part:
            continue
        key, sep, value = part.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got '{part}'")
        field = FIELD_ALIASES.get(key.strip().lower())
        if field is None:
            raise ValueError(f"Unknown field '{key.strip()}'")
        value = value.strip()
        if field == "billing_cycle":
            value = CYCLE_ALIASES.get(value.lower(), value)
        payload[field] = value
    return payload


def parse_add_args(text: str) -> dict:
    """
    Parse the /add format:
        name | price | cycle | start date [| key=value ...]
    Example:
        Netflix | 54000 | monthly | 2024-01-31 | category=Entertainment

    Raises:
        ValueError: if the four positional parts are missing.
    """
    parts = [p.strip() for p in text.split("|")]
    if len(parts) < 4:
        raise ValueError("Expected: name | price | cycle | start date")
    name, price, cycle, start = parts[:4]
    payload = {
        "name": name,
        "price": price,
        "billing_cycle": CYCLE_ALIASES.get(cycle.lower(), cycle),
        "start_date": start,
    }
    payload.update(parse_key_values(parts[4:]))
    return payload


def parse_edit_args(text: str) -> tuple[str, dict]:
    """
    Parse the /edit format:
        <id> key=value | key=value ...
    """
    head, _, rest = text.strip().partition(" ")
    if not head:
        raise ValueError("Missing subscription id")
    parts = [p.strip() for p in rest.split("|")]
    return head, parse_key_values(parts)


def describe_failure(result: ActionResult) -> str:
    """Render a failed ActionResult for a chat reply."""
    lines = [f"⚠️ {result.error or 'Something went wrong'}"]
    for field, messages in result.validation_errors.items():
        lines.append(f"  • {field}: {'; '.join(messages)}")
    return "\n".join(lines)


def first_arg(args: Optional[list[str]]) -> Optional[str]:
    return args[0] if args else None

