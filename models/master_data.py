"""
models/master_data.py
---------------------
Reusable per-user master data: payment methods, account credentials
and custom categories that subscriptions can reference.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class PaymentMethod:
    """A saved card or wallet. Only the masked number is ever stored."""
    user_id: str
    name: str
    provider: str
    last_four_digits: Optional[str] = None  # "**** 1234"
    is_default: bool = False
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __str__(self) -> str:
        number = f" ({self.last_four_digits})" if self.last_four_digits else ""
        star = " ⭐" if self.is_default else ""
        return f"💳 {self.name} - {self.provider}{number}{star}"


@dataclass
class AccountCredential:
    """A login reused across subscriptions; the password is ciphertext."""
    user_id: str
    name: str
    email: str
    password_encrypted: Optional[str] = None
    login_method: str = "email"
    is_default: bool = False
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __str__(self) -> str:
        lock = " 🔒" if self.password_encrypted else ""
        return f"📧 {self.name}: {self.email} [{self.login_method}]{lock}"


@dataclass
class CustomCategory:
    user_id: str
    name: str
    color: str = "#6366f1"
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __str__(self) -> str:
        return f"🏷️ {self.name} ({self.color})"
