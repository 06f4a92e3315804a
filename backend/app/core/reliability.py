"""
Reliability Utilities.

Includes the Circuit Breaker used around the notification hook and the
bounded retry used around ledger transactions.
"""

import time
import asyncio
import logging
from functools import wraps
from typing import Callable, Any

from backend.app.core.config import settings
from backend.app.core.exceptions import ConflictError

logger = logging.getLogger("ledger.reliability")


class CircuitOpenError(Exception):
    pass


class CircuitBreaker:
    """
    Simple Circuit Breaker implementation.
    If 'failure_threshold' failures occur within 'reset_timeout',
    the circuit opens and rejects calls for 'reset_timeout' seconds.
    """
    def __init__(self, failure_threshold: int = 5, reset_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.failures = 0
        self.last_failure_time = 0
        self.state = "CLOSED"  # CLOSED, OPEN, HALF_OPEN

    async def call(self, func: Callable, *args, **kwargs) -> Any:
        if self.state == "OPEN":
            if time.time() - self.last_failure_time > self.reset_timeout:
                self.state = "HALF_OPEN"
            else:
                raise CircuitOpenError("Circuit is OPEN")

        try:
            result = await func(*args, **kwargs)
            if self.state == "HALF_OPEN":
                self.reset_state()
            return result
        except Exception:
            self.record_failure()
            raise

    def record_failure(self):
        self.failures += 1
        self.last_failure_time = time.time()
        if self.failures >= self.failure_threshold:
            self.state = "OPEN"

    def reset_state(self):
        self.failures = 0
        self.state = "CLOSED"


def retry_on_conflict(func: Callable) -> Callable:
    """
    Retry an async ledger operation when it fails with ConflictError.

    The wrapped operation must open its own transaction (atomic) so that a
    failed attempt is fully rolled back before the next one starts. Gives
    up after `conflict_max_retries` retries and re-raises the conflict.
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        attempt = 0
        while True:
            try:
                return await func(*args, **kwargs)
            except ConflictError:
                attempt += 1
                if attempt > settings.conflict_max_retries:
                    logger.warning("%s: giving up after %d conflicts", func.__qualname__, attempt)
                    raise
                logger.warning("%s: conflict, retry %d/%d", func.__qualname__, attempt, settings.conflict_max_retries)
                await asyncio.sleep(settings.conflict_retry_backoff_ms * attempt / 1000)
    return wrapper


# Global instance for the post-commit notification hook
notification_circuit_breaker = CircuitBreaker(
    failure_threshold=settings.notification_failure_threshold,
    reset_timeout=settings.notification_reset_timeout,
)
