"""
Rate Limiter - sliding-window cap on model requests per browser session.
"""

from datetime import datetime, timedelta
from typing import Optional


class RateLimiter:
    """Allows at most max_requests within any window_seconds span."""

    def __init__(self, max_requests: int = 30, window_seconds: float = 60):
        self.max_requests = max_requests
        self.window = timedelta(seconds=window_seconds)
        self.timestamps: list[datetime] = []

    def allow(self, now: Optional[datetime] = None) -> bool:
        """Record a request if it fits in the window. Returns True if allowed."""
        now = now or datetime.now()
        window_start = now - self.window
        self.timestamps = [ts for ts in self.timestamps if ts > window_start]

        if len(self.timestamps) >= self.max_requests:
            return False

        self.timestamps.append(now)
        return True
