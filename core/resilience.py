"""
Resilience Patterns

Retry and circuit breaking around roster fetches. Roster sources signal
transient trouble by raising a RetryableError subclass; anything else is
treated as permanent and surfaces on the first attempt.
"""

from typing import Any, Callable, Optional, TypeVar

from circuitbreaker import CircuitBreakerError, CircuitBreakerMonitor, circuit
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from core.logging import get_logger


T = TypeVar("T")

log = get_logger("resilience")


class RetryableError(Exception):
    """Base class for errors that should trigger retries."""

    pass


class RateLimitError(RetryableError):
    """The roster provider throttled the request."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class NetworkError(RetryableError):
    """Connection reset, timeout or a provider-side 5xx."""

    pass


class wait_retry_after(wait_base):
    """
    Honor a RateLimitError's retry_after, capped at max_delay; otherwise
    fall back to exponential backoff.
    """

    def __init__(self, base_delay: float, max_delay: float):
        self.max_delay = max_delay
        self.fallback = wait_exponential(multiplier=base_delay, max=max_delay)

    def __call__(self, retry_state: RetryCallState) -> float:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return max(0.0, min(float(error.retry_after), self.max_delay))
        return self.fallback(retry_state)


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    log.warning(
        "retry_attempt",
        function=getattr(retry_state.fn, "__name__", repr(retry_state.fn)),
        attempt=retry_state.attempt_number,
        wait_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(error),
        error_type=type(error).__name__,
    )


def with_retry(
    max_attempts: int = 3,
    base_delay: float = 2.0,
    max_delay: float = 30.0,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator factory retrying on RetryableError.

    The last error is re-raised once attempts run out.

    Example:
        @with_retry(max_attempts=3)
        def fetch_roster(team, target_date, season_id):
            ...
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_retry_after(base_delay, max_delay),
        retry=retry_if_exception_type(RetryableError),
        before_sleep=_log_retry,
        reraise=True,
    )


def create_circuit_breaker(
    name: str,
    failure_threshold: int = 5,
    recovery_timeout: int = 60,
) -> Callable:
    """
    Circuit breaker counting only RetryableError failures.

    Once open, calls fail fast with CircuitBreakerError until
    recovery_timeout seconds have passed.
    """
    return circuit(
        failure_threshold=failure_threshold,
        recovery_timeout=recovery_timeout,
        expected_exception=RetryableError,
        name=name,
    )


def is_circuit_open(name: str) -> bool:
    """Whether the named breaker is currently rejecting calls."""
    breaker: Any = CircuitBreakerMonitor.get(name)
    return bool(breaker is not None and breaker.opened)


__all__ = [
    "RetryableError",
    "RateLimitError",
    "NetworkError",
    "CircuitBreakerError",
    "with_retry",
    "create_circuit_breaker",
    "is_circuit_open",
]
