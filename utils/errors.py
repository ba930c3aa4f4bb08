"""
utils/errors.py
---------------
Domain exceptions shared across layers.
Pure helpers raise these; services translate them into user-facing messages.
"""


class SubTrackError(Exception):
    """Base class for all SubTrack domain errors."""


class InvalidBillingCycle(SubTrackError, ValueError):
    """An unrecognized billing-cycle tag reached the date calculator."""

    def __init__(self, cycle):
        self.cycle = cycle
        super().__init__(f"Unknown billing cycle: {cycle!r}")


class MalformedPrice(SubTrackError, ValueError):
    """A stored price is not a finite, non-negative number."""

    def __init__(self, raw):
        self.raw = raw
        super().__init__(f"Malformed price: {raw!r}")


class DecryptionFailure(SubTrackError):
    """Ciphertext is malformed, tampered with, or encrypted under another key."""


class EncryptionKeyMissing(SubTrackError):
    """ENCRYPTION_KEY is not configured."""


class Unauthenticated(SubTrackError):
    """No owner identifier could be resolved for the caller."""
