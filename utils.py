#!/usr/bin/env python3
"""Utility classes for gogs-mirror."""

import threading
import time
from typing import List

from logging_utils import Logger


class RateLimiter:
    """Sliding one-minute window limiter shared by concurrent API callers.

    Every dispatcher worker thread calls into the same instance of its API
    client, so the clock is read and the window updated under one lock.
    """

    def __init__(self, max_requests_per_minute: int = 60):
        self.max_requests = max_requests_per_minute
        self.requests: List[float] = []
        self.lock = threading.Lock()

    def wait_if_needed(self, operation_type: str = "API") -> None:
        """Block until another request fits into the current window."""
        with self.lock:
            current_time = time.time()
            self._clean_old_requests(current_time)
            if len(self.requests) >= self.max_requests:
                wait_time = 60 - (current_time - self.requests[0])
                if wait_time > 0:
                    Logger.security_event(
                        "RATE_LIMIT_HIT",
                        f"rate limit reached for {operation_type}, "
                        f"waiting {wait_time:.2f}s",
                    )
                    time.sleep(wait_time)
                current_time = time.time()
                self._clean_old_requests(current_time)
            self.requests.append(current_time)

    def _clean_old_requests(self, current_time: float) -> None:
        """Remove requests older than 1 minute."""
        cutoff_time = current_time - 60
        self.requests = [
            req_time for req_time in self.requests if req_time > cutoff_time
        ]
