"""
security/rate_limiter.py
-------------------------
Per-user sliding-window rate limiting for bot handlers.
"""

import time
from collections import defaultdict, deque
from functools import wraps
from typing import Callable

from telegram import Update
from telegram.ext import ContextTypes

from config import RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)


class SlidingWindowLimiter:
    """
    Allows at most ``limit`` hits per key within ``window`` seconds.
    The clock is injectable for tests.
    """

    def __init__(self, limit: int, window: float, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window = window
        self.clock = clock
        self._hits: dict[int, deque] = defaultdict(deque)

    def allow(self, key: int) -> bool:
        """Record a hit for ``key`` and report whether it is within the limit."""
        now = self.clock()
        hits = self._hits[key]
        while hits and hits[0] <= now - self.window:
            hits.popleft()
        if len(hits) >= self.limit:
            return False
        hits.append(now)
        return True


limiter = SlidingWindowLimiter(RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS)


def rate_limited(func: Callable):
    """
    Decorator that enforces the per-user rate limit.

    Configuration (via .env):
        RATE_LIMIT_MESSAGES: Max messages per window (default: 30).
        RATE_LIMIT_WINDOW_SECONDS: Window duration in seconds (default: 60).
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not limiter.allow(user.id):
            logger.warning(f"⚠️ Rate limit hit for user {user.id}")
            await update.message.reply_text("⚠️ Too many messages. Please wait a moment.")
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
