"""
services/master_data_service.py
-------------------------------
Business logic for reusable payment methods, account logins and
custom categories. Numbers are masked and passwords encrypted here.
"""

from typing import Optional

import psycopg2

from config import DEFAULT_CATEGORY_COLOR
from models.master_data import AccountCredential, CustomCategory, PaymentMethod
from models.result import ActionResult
from repositories.master_data_repo import (
    AccountCredentialRepository,
    CategoryRepository,
    PaymentMethodRepository,
)
from security.encryption import decrypt_password, encrypt_password
from security.masking import mask_payment_method
from utils.errors import SubTrackError
from utils.logger import get_logger

logger = get_logger(__name__)


class MasterDataService:
    """Manages a user's saved payment methods, credentials and categories."""

    def __init__(self, methods: Optional[PaymentMethodRepository] = None,
                 credentials: Optional[AccountCredentialRepository] = None,
                 categories: Optional[CategoryRepository] = None):
        self.methods = methods or PaymentMethodRepository()
        self.credentials = credentials or AccountCredentialRepository()
        self.categories = categories or CategoryRepository()

    # ── PAYMENT METHODS ───────────────────────────────────

    def list_payment_methods(self, user_id: str) -> list[PaymentMethod]:
        return self.methods.get_all(user_id)

    def add_payment_method(self, user_id: str, name: str, provider: str,
                           account_number: Optional[str] = None,
                           is_default: bool = False) -> ActionResult[PaymentMethod]:
        if not name or not provider:
            return ActionResult.fail("Name and provider are required")
        method = PaymentMethod(
            user_id=user_id,
            name=name,
            provider=provider,
            last_four_digits=mask_payment_method(account_number) if account_number else None,
            is_default=is_default,
        )
        try:
            return ActionResult.ok(self.methods.add(method))
        except psycopg2.Error as e:
            logger.error(f"Failed to create payment method for {user_id}: {e}")
            return ActionResult.fail("Failed to create payment method")

    def update_payment_method(self, user_id: str, method_id: str, name: Optional[str] = None,
                              provider: Optional[str] = None,
                              account_number: Optional[str] = None) -> ActionResult[PaymentMethod]:
        values = {}
        if name:
            values["name"] = name
        if provider:
            values["provider"] = provider
        if account_number:
            values["last_four_digits"] = mask_payment_method(account_number)
        if not values:
            return ActionResult.fail("Nothing to update")
        try:
            updated = self.methods.update(user_id, method_id, values)
        except psycopg2.Error as e:
            logger.error(f"Failed to update payment method {method_id}: {e}")
            return ActionResult.fail("Failed to update payment method")
        if updated is None:
            return ActionResult.fail("Payment method not found")
        return ActionResult.ok(updated)

    def delete_payment_method(self, user_id: str, method_id: str) -> bool:
        return self.methods.delete(user_id, method_id)

    # ── ACCOUNT CREDENTIALS ───────────────────────────────

    def list_credentials(self, user_id: str) -> list[AccountCredential]:
        return self.credentials.get_all(user_id)

    def add_credential(self, user_id: str, name: str, email: str,
                       password: Optional[str] = None, login_method: str = "email",
                       is_default: bool = False) -> ActionResult[AccountCredential]:
        if not name or not email:
            return ActionResult.fail("Name and email are required")
        try:
            credential = AccountCredential(
                user_id=user_id,
                name=name,
                email=email,
                password_encrypted=encrypt_password(password) if password else None,
                login_method=login_method or "email",
                is_default=is_default,
            )
            return ActionResult.ok(self.credentials.add(credential))
        except (SubTrackError, psycopg2.Error) as e:
            logger.error(f"Failed to create account credential for {user_id}: {e}")
            return ActionResult.fail("Failed to create account credential")

    def update_credential(self, user_id: str, credential_id: str, name: Optional[str] = None,
                          email: Optional[str] = None, password: Optional[str] = None,
                          login_method: Optional[str] = None) -> ActionResult[AccountCredential]:
        values = {}
        if name:
            values["name"] = name
        if email:
            values["email"] = email
        if login_method:
            values["login_method"] = login_method
        try:
            if password:
                values["password_encrypted"] = encrypt_password(password)
        except SubTrackError as e:
            logger.error(f"Failed to encrypt credential password: {e}")
            return ActionResult.fail("Failed to update account credential")
        if not values:
            return ActionResult.fail("Nothing to update")
        try:
            updated = self.credentials.update(user_id, credential_id, values)
        except psycopg2.Error as e:
            logger.error(f"Failed to update account credential {credential_id}: {e}")
            return ActionResult.fail("Failed to update account credential")
        if updated is None:
            return ActionResult.fail("Credential not found")
        return ActionResult.ok(updated)

    def delete_credential(self, user_id: str, credential_id: str) -> bool:
        return self.credentials.delete(user_id, credential_id)

    def reveal_credential_password(self, user_id: str, credential_id: str) -> ActionResult[str]:
        credential = self.credentials.get_by_id(user_id, credential_id)
        if credential is None or not credential.password_encrypted:
            return ActionResult.fail("Credential not found or no password stored")
        try:
            return ActionResult.ok(decrypt_password(credential.password_encrypted))
        except SubTrackError as e:
            logger.error(f"Failed to decrypt credential {credential_id}: {e}")
            return ActionResult.fail("Failed to decrypt password")

    # ── CATEGORIES ────────────────────────────────────────

    def list_categories(self, user_id: str) -> list[CustomCategory]:
        return self.categories.get_all(user_id)

    def add_category(self, user_id: str, name: str,
                     color: Optional[str] = None) -> ActionResult[CustomCategory]:
        if not name:
            return ActionResult.fail("Category name is required")
        try:
            category = CustomCategory(
                user_id=user_id, name=name, color=color or DEFAULT_CATEGORY_COLOR
            )
            return ActionResult.ok(self.categories.add(category))
        except psycopg2.IntegrityError:
            return ActionResult.fail(f"Category '{name}' already exists")
        except psycopg2.Error as e:
            logger.error(f"Failed to create category for {user_id}: {e}")
            return ActionResult.fail("Failed to create category")

    def update_category(self, user_id: str, category_id: str, name: Optional[str] = None,
                        color: Optional[str] = None) -> ActionResult[CustomCategory]:
        values = {k: v for k, v in (("name", name), ("color", color)) if v}
        if not values:
            return ActionResult.fail("Nothing to update")
        try:
            updated = self.categories.update(user_id, category_id, values)
        except psycopg2.IntegrityError:
            return ActionResult.fail(f"Category '{name}' already exists")
        except psycopg2.Error as e:
            logger.error(f"Failed to update category {category_id}: {e}")
            return ActionResult.fail("Failed to update category")
        if updated is None:
            return ActionResult.fail("Category not found")
        return ActionResult.ok(updated)

    def delete_category(self, user_id: str, category_id: str) -> bool:
        return self.categories.delete(user_id, category_id)
