"""In-memory login throttle keyed by client identifier (usually the source IP).

Process-local and best-effort: state lives for the process lifetime and is
never persisted. A single lock guards the whole mapping so concurrent
requests handled on the worker thread pool never lose an update.
"""
import logging
import math
import os
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("registrar.auth")

# Configurable limits
MAX_ATTEMPTS = int(os.environ.get("LOGIN_MAX_ATTEMPTS", "3"))
LOCKOUT_SECONDS = float(os.environ.get("LOGIN_LOCKOUT_SECONDS", "900"))  # 15 minutes
SWEEP_INTERVAL_SECONDS = float(os.environ.get("LOGIN_SWEEP_INTERVAL_SECONDS", "300"))
SWEEP_AFTER_WINDOWS = int(os.environ.get("LOGIN_SWEEP_AFTER_WINDOWS", "4"))


class Decision(str, Enum):
    ALLOWED = "allowed"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class GuardDecision:
    decision: Decision
    retry_after: int = 0

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.ALLOWED


@dataclass
class AttemptRecord:
    identifier: str
    failure_count: int = 0
    last_attempt_time: float = 0.0


class LoginAttemptGuard:
    """Counts consecutive failed logins per identifier and blocks past a threshold."""

    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        lockout_seconds: float = LOCKOUT_SECONDS,
        sweep_interval_seconds: float = SWEEP_INTERVAL_SECONDS,
        sweep_after_windows: int = SWEEP_AFTER_WINDOWS,
        clock=time.monotonic,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self.sweep_after_windows = sweep_after_windows
        self._clock = clock
        self._records: dict[str, AttemptRecord] = {}
        self._lock = threading.Lock()
        self._attempt_locks: dict[str, list] = {}
        self._last_sweep = clock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @contextmanager
    def attempt(self, identifier: str):
        """Serialize whole login attempts for one identifier.

        Held from the check to the recorded outcome so concurrent requests
        from the same client cannot all pass the check before any failure
        is counted. Other identifiers are not blocked.
        """
        _require(identifier)
        with self._lock:
            entry = self._attempt_locks.get(identifier)
            if entry is None:
                entry = self._attempt_locks[identifier] = [threading.Lock(), 0]
            entry[1] += 1
        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._attempt_locks[identifier]

    def check_and_consume(self, identifier: str) -> GuardDecision:
        """Decide whether a login attempt for ``identifier`` may proceed.

        An expired window resets the counter before the decision is made.
        """
        _require(identifier)
        with self._lock:
            now = self._clock()
            rec = self._current(identifier, now)
            if rec is not None and rec.failure_count >= self.max_attempts:
                remaining = self.lockout_seconds - (now - rec.last_attempt_time)
                return GuardDecision(Decision.BLOCKED, retry_after=max(1, math.ceil(remaining)))
            return GuardDecision(Decision.ALLOWED)

    def record_failure(self, identifier: str) -> int:
        """Count one failed attempt and return the updated failure count."""
        _require(identifier)
        with self._lock:
            now = self._clock()
            rec = self._current(identifier, now)
            if rec is None:
                rec = AttemptRecord(identifier)
                self._records[identifier] = rec
            rec.failure_count += 1
            rec.last_attempt_time = now
            count = rec.failure_count
            if now - self._last_sweep >= self.sweep_interval_seconds:
                self._sweep_locked(now)
        if count == self.max_attempts:
            logger.warning(
                "Login locked for %s after %d failed attempts (%ds window)",
                identifier, count, int(self.lockout_seconds),
            )
        return count

    def record_success(self, identifier: str) -> None:
        """Forget every failure recorded for ``identifier``."""
        _require(identifier)
        with self._lock:
            self._records.pop(identifier, None)

    def failure_count(self, identifier: str) -> int:
        """Current count with the window applied; never mutates state."""
        with self._lock:
            rec = self._records.get(identifier)
            if rec is None or self._expired(rec, self._clock()):
                return 0
            return rec.failure_count

    def sweep(self) -> int:
        """Drop idle records; returns how many were removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def reset(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _expired(self, rec: AttemptRecord, now: float) -> bool:
        return now - rec.last_attempt_time > self.lockout_seconds

    def _current(self, identifier: str, now: float) -> AttemptRecord | None:
        rec = self._records.get(identifier)
        if rec is not None and self._expired(rec, now):
            del self._records[identifier]
            return None
        return rec

    def _sweep_locked(self, now: float) -> int:
        self._last_sweep = now
        horizon = self.lockout_seconds * self.sweep_after_windows
        stale = [
            key for key, rec in self._records.items()
            if rec.failure_count == 0 or now - rec.last_attempt_time > horizon
        ]
        for key in stale:
            del self._records[key]
        if stale:
            logger.debug("Swept %d idle login attempt records", len(stale))
        return len(stale)


def _require(identifier: str) -> None:
    if not identifier:
        raise ValueError("identifier must be a non-empty string")


# Process-wide instance, created at import and shared by every login request.
login_guard = LoginAttemptGuard()
