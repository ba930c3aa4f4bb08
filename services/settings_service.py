"""
services/settings_service.py
----------------------------
Load, change and save per-user display settings (theme, currency).
Settings are passed around explicitly; nothing is cached between calls.
"""

from typing import Optional

from config import DEFAULT_CURRENCY, SUPPORTED_CURRENCIES
from models.settings import UserSettings
from repositories.user_repo import UserRepository


class SettingsService:
    def __init__(self, repo: Optional[UserRepository] = None):
        self.repo = repo or UserRepository()

    def load(self, user_id: str) -> UserSettings:
        """Stored settings, or defaults when the user has none yet."""
        return self.repo.load_settings(user_id) or UserSettings(
            user_id=user_id, currency=DEFAULT_CURRENCY
        )

    def toggle_theme(self, user_id: str) -> UserSettings:
        settings = self.load(user_id)
        settings.toggle_theme()
        self.repo.save_settings(settings)
        return settings

    def set_theme(self, user_id: str, theme: str) -> UserSettings:
        settings = self.load(user_id)
        settings.set_theme(theme)
        self.repo.save_settings(settings)
        return settings

    def set_currency(self, user_id: str, currency: str) -> UserSettings:
        currency = currency.upper()
        if currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Currency must be one of {', '.join(SUPPORTED_CURRENCIES)}")
        settings = self.load(user_id)
        settings.currency = currency
        self.repo.save_settings(settings)
        return settings
