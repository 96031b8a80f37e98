"""
Advisory auth rate limiter

Client-local attempt counters per auth form. Five failures lock the form for
five minutes; the record is dropped once the lockout has passed. Trivially
bypassable: the authoritative limit, if any, lives at the identity provider.
"""

import logging
import math
import time
from typing import Callable, Optional

from core.local_state import LocalStateStore

from .models import AuthForm
from .protocols import RateLimitedError

logger = logging.getLogger(__name__)

RATE_LIMIT_KEY = "auth-rate-limit"


def rate_limit_key(form: AuthForm) -> str:
    return f"{RATE_LIMIT_KEY}_{AuthForm(form).value}"


class AuthRateLimiter:
    """Per-form failed-attempt counter with timed lockout"""

    def __init__(
        self,
        state: LocalStateStore,
        max_attempts: int = 5,
        lockout_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        self.state = state
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self._clock = clock

    def _record(self, form: AuthForm) -> dict:
        record = self.state.get(rate_limit_key(form))
        if not isinstance(record, dict):
            return {"attempts": 0, "lock_until": 0}
        return {
            "attempts": int(record.get("attempts", 0) or 0),
            "lock_until": float(record.get("lock_until", 0) or 0),
        }

    def remaining_lockout(self, form: AuthForm) -> int:
        """Seconds left on the lockout (rounded up), 0 when the form is open"""
        record = self._record(form)
        lock_until = record["lock_until"]
        if not lock_until:
            return 0
        remaining = lock_until - self._clock()
        if remaining <= 0:
            # lockout over: start counting from scratch
            self.state.remove(rate_limit_key(form))
            return 0
        return math.ceil(remaining)

    def is_locked(self, form: AuthForm) -> bool:
        return self.remaining_lockout(form) > 0

    def check(self, form: AuthForm) -> None:
        """Raise RateLimitedError while the form is locked"""
        remaining = self.remaining_lockout(form)
        if remaining:
            raise RateLimitedError(remaining)

    def record_failure(self, form: AuthForm) -> int:
        """Count a failed attempt; returns the attempt count"""
        record = self._record(form)
        record["attempts"] += 1
        if record["attempts"] >= self.max_attempts:
            record["lock_until"] = self._clock() + self.lockout_seconds
            logger.warning(f"Auth form '{AuthForm(form).value}' locked for {self.lockout_seconds}s")
        self.state.set(rate_limit_key(form), record)
        return record["attempts"]

    def attempts(self, form: AuthForm) -> int:
        return self._record(form)["attempts"]


__all__ = ["AuthRateLimiter", "RATE_LIMIT_KEY", "rate_limit_key"]
