"""
utils/calendar_link.py
----------------------
Builds a Google Calendar "add event" URL reminding the user about a
renewal the day before it is charged (09:00-12:00).
"""

from datetime import date, timedelta
from urllib.parse import urlencode

from models.subscription import Subscription

CALENDAR_BASE_URL = "https://calendar.google.com/calendar/render"


def _format_calendar_datetime(day: date, hour: int = 9, minute: int = 0) -> str:
    """YYYYMMDDTHHmmss, floating local time."""
    return f"{day:%Y%m%d}T{hour:02d}{minute:02d}00"


def format_price(amount: str, currency: str) -> str:
    """Display a price: ``Rp 150.000`` for IDR, ``$9.99`` otherwise."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return f"{amount} {currency}"
    if currency == "IDR":
        # id-ID grouping uses dots as thousands separators
        return "Rp " + f"{value:,.0f}".replace(",", ".")
    return f"${value:.2f}"


def build_event_description(sub: Subscription) -> str:
    parts = [
        f"📌 Subscription: {sub.name}",
        f"💰 Price: {format_price(sub.price, sub.currency)}",
    ]
    if sub.category:
        parts.append(f"🏷️ Category: {sub.category}")
    if sub.account_email:
        parts.append(f"📧 Account: {sub.account_email}")
    if sub.payment_method_provider:
        payment = f"💳 Payment: {sub.payment_method_provider}"
        if sub.payment_method_number:
            payment += f" ({sub.payment_method_number})"
        parts.append(payment)
    if sub.url:
        parts.append(f"🔗 URL: {sub.url}")
    if sub.notes:
        parts.append(f"📝 Notes: {sub.notes}")
    return "\n".join(parts)


def google_calendar_url(sub: Subscription) -> str:
    """Return a prefilled Google Calendar event URL for the next renewal."""
    event_day = sub.next_payment_date - timedelta(days=1)
    dates = (
        f"{_format_calendar_datetime(event_day, 9)}/"
        f"{_format_calendar_datetime(event_day, 12)}"
    )
    params = {
        "action": "TEMPLATE",
        "text": f"🔔 {sub.name}",
        "dates": dates,
        "details": build_event_description(sub),
    }
    return f"{CALENDAR_BASE_URL}?{urlencode(params)}"
