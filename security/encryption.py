"""
security/encryption.py
----------------------
AES-256-GCM encryption for stored account passwords.

Token layout (base64): IV (16 bytes) | auth tag (16 bytes) | ciphertext.
A fresh IV is drawn for every call, so the same password never produces
the same token twice.
"""

import base64
import binascii
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

import config
from utils.errors import DecryptionFailure, EncryptionKeyMissing

IV_LENGTH = 16
AUTH_TAG_LENGTH = 16
KEY_LENGTH = 32


def _get_key(key: Optional[str] = None) -> bytes:
    """
    Resolve the AES key, defaulting to ENCRYPTION_KEY.
    Short keys are zero-padded and long keys truncated to 32 bytes.
    """
    raw = key if key is not None else config.ENCRYPTION_KEY
    if not raw:
        raise EncryptionKeyMissing("ENCRYPTION_KEY environment variable is not set")
    key_bytes = raw.encode("utf-8")
    return key_bytes[:KEY_LENGTH].ljust(KEY_LENGTH, b"\0")


def encrypt_password(plain_text: str, key: Optional[str] = None) -> str:
    """Encrypt a password and return a base64 token."""
    aes = AESGCM(_get_key(key))
    iv = os.urandom(IV_LENGTH)
    # AESGCM appends the tag to the ciphertext; store it up front instead
    sealed = aes.encrypt(iv, plain_text.encode("utf-8"), None)
    ciphertext, tag = sealed[:-AUTH_TAG_LENGTH], sealed[-AUTH_TAG_LENGTH:]
    return base64.b64encode(iv + tag + ciphertext).decode("ascii")


def decrypt_password(token: str, key: Optional[str] = None) -> str:
    """
    Decrypt a token produced by encrypt_password.

    Raises:
        DecryptionFailure: if the token is malformed, truncated, tampered
            with, or was encrypted under a different key.
    """
    aes = AESGCM(_get_key(key))
    try:
        combined = base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecryptionFailure("Token is not valid base64") from e

    if len(combined) < IV_LENGTH + AUTH_TAG_LENGTH:
        raise DecryptionFailure("Token is too short")

    iv = combined[:IV_LENGTH]
    tag = combined[IV_LENGTH:IV_LENGTH + AUTH_TAG_LENGTH]
    ciphertext = combined[IV_LENGTH + AUTH_TAG_LENGTH:]

    try:
        plain = aes.decrypt(iv, ciphertext + tag, None)
        return plain.decode("utf-8")
    except (InvalidTag, UnicodeDecodeError) as e:
        raise DecryptionFailure("Token failed authentication") from e
