"""
security/masking.py
-------------------
Payment-number masking. Full card/account numbers are masked before
they reach a repository and are never stored.
"""

import re

_NON_DIGITS = re.compile(r"\D")


def extract_last_four_digits(full_number: str) -> str:
    """
    Return the last four digits of a number, ignoring spaces, dashes, etc.
    Fewer than four digits present -> all of them.
    """
    digits = _NON_DIGITS.sub("", full_number)
    return digits[-4:]


def mask_payment_method(full_number: str) -> str:
    """
    Mask a payment number as ``"**** 1234"``.

    Inputs with fewer than four digits are returned unchanged.
    """
    last_four = extract_last_four_digits(full_number)
    if len(last_four) < 4:
        return full_number
    return f"**** {last_four}"
