"""
services/chart_service.py
--------------------------
Renders the monthly spend breakdown as a pie chart.
Uses matplotlib and returns PNG images in BytesIO buffers.
"""

import io
from typing import Optional

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for server use
import matplotlib.pyplot as plt

from repositories.subscription_repo import SubscriptionRepository
from utils.calculations import spend_by_category
from utils.logger import get_logger

logger = get_logger(__name__)

_DARK = {"face": "#1a1a2e", "text": "#e0e0e0"}
_LIGHT = {"face": "#ffffff", "text": "#1a1a2e"}


class ChartService:
    """Generates visual charts for subscription spend."""

    def __init__(self, repo: Optional[SubscriptionRepository] = None):
        self.repo = repo or SubscriptionRepository()

    def category_pie(self, user_id: str, theme: str = "dark") -> io.BytesIO | None:
        """
        Pie chart of normalized monthly spend per category (active only).

        Returns:
            BytesIO buffer with a PNG image, or None if nothing is spent.
        """
        totals = {k: v for k, v in spend_by_category(self.repo.get_all(user_id)).items() if v > 0}
        if not totals:
            return None

        palette = _DARK if theme == "dark" else _LIGHT
        labels = list(totals)
        values = [totals[k] for k in labels]

        fig, ax = plt.subplots(figsize=(8, 6), facecolor=palette["face"])
        ax.set_facecolor(palette["face"])
        wedges, texts, autotexts = ax.pie(
            values,
            labels=labels,
            autopct="%1.1f%%",
            startangle=90,
            pctdistance=0.8,
            wedgeprops={"linewidth": 1.5, "edgecolor": palette["face"]},
        )
        for t in texts + autotexts:
            t.set_color(palette["text"])
        ax.set_title("Monthly spend by category", color=palette["text"], fontsize=14)
        ax.axis("equal")

        buffer = io.BytesIO()
        fig.savefig(buffer, format="png", bbox_inches="tight", dpi=120)
        plt.close(fig)
        buffer.seek(0)
        logger.info(f"Generated category chart for user {user_id} ({len(labels)} slices)")
        return buffer
