"""
services/export_service.py
---------------------------
Generates CSV and Excel exports of a user's subscriptions.
Passwords never leave the database; only the masked payment number is exported.
"""

import io
from typing import Optional

import pandas as pd

from models.subscription import Subscription
from repositories.subscription_repo import SubscriptionRepository
from utils.calculations import spend_by_category, total_monthly_spend
from utils.logger import get_logger

logger = get_logger(__name__)


def subscriptions_frame(subs: list[Subscription]) -> pd.DataFrame:
    """One row per subscription with display-friendly columns."""
    rows = [
        {
            "Name": s.name,
            "Price": s.price,
            "Currency": s.currency,
            "Billing Cycle": s.billing_cycle.value,
            "Type": s.subscription_type.value if s.subscription_type else "",
            "Start Date": s.start_date.isoformat(),
            "Next Payment": s.next_payment_date.isoformat(),
            "Status": s.status.value,
            "Category": s.category or "",
            "Payment Method": " ".join(
                p for p in (s.payment_method_provider, s.payment_method_number) if p
            ),
            "Account": s.account_email or "",
            "URL": s.url or "",
            "Notes": s.notes or "",
        }
        for s in subs
    ]
    return pd.DataFrame(rows)


class ExportService:
    """Generates downloadable subscription reports in CSV and Excel formats."""

    def __init__(self, repo: Optional[SubscriptionRepository] = None):
        self.repo = repo or SubscriptionRepository()

    def export_csv(self, user_id: str) -> io.BytesIO:
        """
        Export all of a user's subscriptions as CSV.

        Returns:
            A BytesIO buffer containing UTF-8 (BOM) CSV data.
        """
        subs = self.repo.get_all(user_id)
        df = subscriptions_frame(subs)
        buffer = io.BytesIO()
        df.to_csv(buffer, index=False, encoding="utf-8-sig")
        buffer.seek(0)
        logger.info(f"Exported {len(subs)} subscriptions as CSV for user {user_id}")
        return buffer

    def export_excel(self, user_id: str) -> io.BytesIO:
        """
        Export all of a user's subscriptions as an Excel (.xlsx) workbook,
        with a second sheet of normalized monthly spend per category.
        """
        subs = self.repo.get_all(user_id)
        df = subscriptions_frame(subs)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Subscriptions", index=False)

            if subs:
                by_category = spend_by_category(subs)
                summary = pd.DataFrame(
                    sorted(by_category.items(), key=lambda kv: kv[1], reverse=True),
                    columns=["Category", "Monthly Spend"],
                )
                total = pd.DataFrame(
                    [{"Category": "Total", "Monthly Spend": total_monthly_spend(subs)}]
                )
                pd.concat([summary, total], ignore_index=True).round(2).to_excel(
                    writer, sheet_name="Summary", index=False
                )

        buffer.seek(0)
        logger.info(f"Exported {len(subs)} subscriptions as Excel for user {user_id}")
        return buffer
