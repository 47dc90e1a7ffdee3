"""
Lockout policy - Brute-force protection for login.

Login-security state machine per account:

    ACTIVE --(max_attempts consecutive failures)--> LOCKED
    LOCKED --(lock_duration elapses, observed on next login)--> ACTIVE

A success while ACTIVE keeps the counter at 0. A success while LOCKED is
impossible: the password is never checked while the lock holds.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class LockoutVerdict(Enum):
    """Outcome of evaluating an account's lock state."""

    ALLOW = "allow"
    DENY = "deny"
    ALLOW_AND_RESET = "allow_and_reset"


@dataclass(frozen=True)
class LockoutDecision:
    verdict: LockoutVerdict
    remaining: timedelta | None = None

    @property
    def allowed(self) -> bool:
        return self.verdict is not LockoutVerdict.DENY

    @property
    def remaining_minutes(self) -> int:
        """Remaining lock time in whole minutes, rounded up."""
        if self.remaining is None:
            return 0
        return max(1, math.ceil(self.remaining.total_seconds() / 60))


@dataclass(frozen=True)
class FailureOutcome:
    failed_login_attempts: int
    locked_until: datetime | None

    @property
    def locked(self) -> bool:
        return self.locked_until is not None


@dataclass(frozen=True)
class LockoutPolicy:
    """Pure decision logic over (failed attempts, locked until, now)."""

    max_attempts: int = 5
    lock_duration: timedelta = timedelta(minutes=30)

    def evaluate(
        self, failed_attempts: int, locked_until: datetime | None, now: datetime
    ) -> LockoutDecision:
        if locked_until is None:
            return LockoutDecision(LockoutVerdict.ALLOW)
        if locked_until > now:
            return LockoutDecision(LockoutVerdict.DENY, remaining=locked_until - now)
        return LockoutDecision(LockoutVerdict.ALLOW_AND_RESET)

    def register_failure(self, failed_attempts: int, now: datetime) -> FailureOutcome:
        """Counter transition after a wrong password."""
        attempts = failed_attempts + 1
        if attempts >= self.max_attempts:
            return FailureOutcome(attempts, now + self.lock_duration)
        return FailureOutcome(attempts, None)
