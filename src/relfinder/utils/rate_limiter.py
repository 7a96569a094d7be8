"""
Rate limit bookkeeping for the GitHub API.

GitHub reports the window of the resource a request was charged to in the
``X-RateLimit-*`` headers of every response. Search requests have their own
30-per-minute window; listing releases is charged to the 5,000-per-hour
``core`` window.

Modified: 2026-10-19
"""

from datetime import datetime
from typing import Mapping, Optional


class RateLimiter:
    """Remaining quota of the window the last response was charged to."""

    def __init__(self, buffer: int = 100):
        """
        Args:
            buffer: Remaining count under which the quota counts as low
        """
        self.buffer = buffer
        self.resource = "core"
        self.hourly_quota = 5000
        self.quota_used = 0
        self.reset_time: Optional[datetime] = None
        self.last_check: Optional[datetime] = None

    def track_request(self) -> None:
        """Count one request; headers from its response then correct the tally."""
        self.quota_used += 1

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        """Replace the local count with what GitHub reported."""
        self.resource = headers.get("X-RateLimit-Resource", self.resource)

        limit = headers.get("X-RateLimit-Limit")
        if limit is not None:
            self.hourly_quota = int(limit)

        remaining = headers.get("X-RateLimit-Remaining")
        if remaining is not None:
            self.quota_used = self.hourly_quota - int(remaining)

        reset = headers.get("X-RateLimit-Reset")
        if reset is not None:
            self.reset_time = datetime.fromtimestamp(int(reset))

        self.last_check = datetime.now()

    def get_remaining(self) -> int:
        return max(0, self.hourly_quota - self.quota_used)

    def should_warn(self) -> bool:
        """True once fewer than ``buffer`` requests are left."""
        return self.get_remaining() < self.buffer

    def should_wait(self) -> bool:
        """True while the window is used up and has not reset yet."""
        return self.get_remaining() == 0 and self.get_wait_time() > 0

    def get_wait_time(self) -> int:
        """Whole seconds until the window resets, 0 when unknown or past."""
        if self.reset_time is None:
            return 0
        return max(0, int((self.reset_time - datetime.now()).total_seconds()))

    def format_remaining(self) -> str:
        """``resource remaining/limit``, as shown in the status bar."""
        return f"{self.resource} {self.get_remaining()}/{self.hourly_quota}"
