"""
models/settings.py
------------------
Per-user display settings. Loaded and saved explicitly through
UserRepository; nothing here is module-level state.
"""

from dataclasses import dataclass

THEMES: tuple[str, ...] = ("light", "dark")


@dataclass
class UserSettings:
    user_id: str
    theme: str = "dark"
    currency: str = "IDR"

    def toggle_theme(self) -> str:
        """Flip between light and dark and return the new theme."""
        self.theme = "light" if self.theme == "dark" else "dark"
        return self.theme

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Theme must be one of {', '.join(THEMES)}")
        self.theme = theme
