"""Tests for payment masking, password encryption, auth and rate limiting."""

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

import config
from security.auth import authorized_only, is_allowed, require_owner_id
from security.encryption import decrypt_password, encrypt_password
from security.masking import extract_last_four_digits, mask_payment_method
from security.rate_limiter import SlidingWindowLimiter
from utils.errors import DecryptionFailure, EncryptionKeyMissing, Unauthenticated


class TestMasking:
    """Test payment number masking."""

    def test_card_with_spaces(self):
        """Test separators are ignored."""
        assert mask_payment_method("4111 1111 1111 1234") == "**** 1234"

    def test_dashes_and_text(self):
        """Test non-digit characters are dropped before taking the tail."""
        assert mask_payment_method("BCA-0812-3456-7890") == "**** 7890"

    def test_exactly_four_digits(self):
        """Test a bare four-digit value is masked."""
        assert mask_payment_method("5678") == "**** 5678"

    def test_too_few_digits_unchanged(self):
        """Test fewer than four digits returns the input as-is."""
        assert mask_payment_method("GoPay 12") == "GoPay 12"

    def test_extract_last_four(self):
        """Test extraction with fewer digits returns what is there."""
        assert extract_last_four_digits("12-345-678") == "5678"
        assert extract_last_four_digits("x9") == "9"


class TestEncryption:
    """Test AES-GCM password encryption."""

    @pytest.mark.parametrize("plain", ["hunter2", "", "пароль 🔐 密码"])
    def test_round_trip(self, encryption_key, plain):
        """Test decrypt(encrypt(p)) == p, including empty and unicode."""
        assert decrypt_password(encrypt_password(plain)) == plain

    def test_fresh_iv_every_call(self, encryption_key):
        """Test the same plaintext yields different tokens."""
        assert encrypt_password("same") != encrypt_password("same")

    def test_token_layout(self, encryption_key):
        """Test token = iv(16) | tag(16) | ciphertext."""
        raw = base64.b64decode(encrypt_password("abc"))
        assert len(raw) == 16 + 16 + 3

    def test_tampered_ciphertext(self, encryption_key):
        """Test flipping a ciphertext byte fails authentication."""
        raw = bytearray(base64.b64decode(encrypt_password("secret")))
        raw[-1] ^= 0x01
        with pytest.raises(DecryptionFailure):
            decrypt_password(base64.b64encode(bytes(raw)).decode())

    def test_wrong_key(self, encryption_key):
        """Test a token from another key fails."""
        token = encrypt_password("secret", key="another-key")
        with pytest.raises(DecryptionFailure):
            decrypt_password(token)

    @pytest.mark.parametrize("token", ["not base64!!", base64.b64encode(b"short").decode()])
    def test_malformed_tokens(self, encryption_key, token):
        """Test non-base64 and truncated tokens."""
        with pytest.raises(DecryptionFailure):
            decrypt_password(token)

    def test_missing_key(self, monkeypatch):
        """Test an unset ENCRYPTION_KEY is reported."""
        monkeypatch.setattr(config, "ENCRYPTION_KEY", "")
        with pytest.raises(EncryptionKeyMissing):
            encrypt_password("secret")

    def test_short_key_is_padded(self):
        """Test keys shorter than 32 bytes still work."""
        token = encrypt_password("secret", key="short")
        assert decrypt_password(token, key="short") == "secret"


class TestAuth:
    """Test owner resolution and whitelist gating."""

    def test_require_owner_id(self):
        """Test the owner id is the Telegram id as text."""
        update = SimpleNamespace(effective_user=SimpleNamespace(id=42))
        assert require_owner_id(update) == "42"

    def test_require_owner_id_without_user(self):
        """Test a missing user raises Unauthenticated."""
        with pytest.raises(Unauthenticated):
            require_owner_id(SimpleNamespace(effective_user=None))

    def test_empty_whitelist_allows_everyone(self, monkeypatch):
        """Test dev mode."""
        monkeypatch.setattr(config, "ALLOWED_USER_IDS", [])
        assert is_allowed(7)

    def test_whitelist(self, monkeypatch):
        """Test only listed ids pass."""
        monkeypatch.setattr(config, "ALLOWED_USER_IDS", [1, 2])
        assert is_allowed(1)
        assert not is_allowed(3)

    async def test_authorized_only_blocks(self, monkeypatch):
        """Test the decorator replies and skips the handler for strangers."""
        monkeypatch.setattr(config, "ALLOWED_USER_IDS", [1])
        handler = AsyncMock()
        update = SimpleNamespace(
            effective_user=SimpleNamespace(id=9, username="stranger"),
            message=SimpleNamespace(reply_text=AsyncMock()),
        )
        await authorized_only(handler)(update, None)
        handler.assert_not_called()
        update.message.reply_text.assert_awaited_once()


class TestRateLimiter:
    """Test the sliding window limiter."""

    def test_limit_within_window(self):
        """Test the hit after the limit is refused."""
        limiter = SlidingWindowLimiter(2, 60, clock=lambda: 0.0)
        assert limiter.allow(1)
        assert limiter.allow(1)
        assert not limiter.allow(1)

    def test_window_slides(self):
        """Test old hits expire."""
        now = [0.0]
        limiter = SlidingWindowLimiter(1, 10, clock=lambda: now[0])
        assert limiter.allow(1)
        now[0] = 10.0
        assert limiter.allow(1)

    def test_keys_are_independent(self):
        """Test one user's hits do not limit another."""
        limiter = SlidingWindowLimiter(1, 60, clock=lambda: 0.0)
        assert limiter.allow(1)
        assert limiter.allow(2)
