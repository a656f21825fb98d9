"""
External Collaborators

Interfaces for the opaque functions the pipelines consume: the roster
source, the performance rater and the lineup optimizer. Implementations
are injected into pipeline constructors, or loaded from import strings in
settings (ROSTER_SOURCE, RATER, LINEUP_OPTIMIZER).
"""

import inspect
from datetime import date
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from circuitbreaker import CircuitBreakerMonitor

from core.exceptions import ConfigurationError
from core.logging import get_logger
from core.resilience import create_circuit_breaker, is_circuit_open, with_retry
from core.settings import settings


log = get_logger("collaborators")


@runtime_checkable
class Rater(Protocol):
    """Pure, deterministic performance rating: rate(record) -> {"score": float}."""

    def rate(self, record: dict) -> Any: ...


@runtime_checkable
class LineupOptimizer(Protocol):
    """Assigns best_pos, full_pos and gs to each roster entry for one team-day."""

    def optimize(self, entries: list[dict]) -> list[dict]: ...


@runtime_checkable
class RosterSource(Protocol):
    """
    Raw roster rows for one team and date.

    Rows are dicts keyed by the league's category codes (G, A, GP, GS,
    IRplus, ...) plus yahooId, playerName, nhlPos and nhlTeam. Fields may be
    missing or blank.
    """

    def fetch_roster(self, team: Any, target_date: date, season_id: int) -> list[dict]: ...


class FunctionRater:
    """Adapts a plain rate(record) function to the Rater interface."""

    def __init__(self, func: Callable[[dict], Any]):
        self.func = func

    def rate(self, record: dict) -> Any:
        return self.func(record)


class FunctionLineupOptimizer:
    """Adapts a plain optimize(entries) function to the LineupOptimizer interface."""

    def __init__(self, func: Callable[[list[dict]], list[dict]]):
        self.func = func

    def optimize(self, entries: list[dict]) -> list[dict]:
        return self.func(entries)


ROSTER_SOURCE_BREAKER = "roster_source"

# One breaker per name for the life of the process, so open state and
# failure counts carry across pipeline runs.
_breakers: dict[str, Callable] = {}


def _shared_breaker(name: str, failure_threshold: int, recovery_timeout: int) -> Callable:
    breaker = _breakers.get(name)
    if breaker is None:
        breaker = create_circuit_breaker(
            name=name,
            failure_threshold=failure_threshold,
            recovery_timeout=recovery_timeout,
        )
        _breakers[name] = breaker
    return breaker


def reset_breakers() -> None:
    """Forget every shared breaker; the next wrapper starts closed."""
    for name in _breakers:
        CircuitBreakerMonitor.circuit_breakers.pop(name, None)
    _breakers.clear()


class ResilientRosterSource:
    """
    Wraps a RosterSource with retry and a circuit breaker.

    Retries only on RetryableError raised by the wrapped source; after
    repeated failures the circuit opens and calls fail fast with
    CircuitBreakerError until the recovery timeout passes. Wrappers with
    the same breaker name share one breaker, whose threshold and timeout
    are fixed by the first wrapper created. Unset arguments fall back to
    the current settings.
    """

    def __init__(
        self,
        source: RosterSource,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
        failure_threshold: Optional[int] = None,
        recovery_timeout: Optional[int] = None,
        breaker_name: str = ROSTER_SOURCE_BREAKER,
    ):
        self.source = source
        self.breaker_name = breaker_name
        breaker = _shared_breaker(
            breaker_name,
            failure_threshold=(
                failure_threshold if failure_threshold is not None
                else settings.circuit_breaker_threshold
            ),
            recovery_timeout=(
                recovery_timeout if recovery_timeout is not None
                else settings.circuit_breaker_timeout
            ),
        )
        retrying = with_retry(
            max_attempts=max_attempts if max_attempts is not None else settings.retry_max_attempts,
            base_delay=base_delay if base_delay is not None else settings.retry_base_delay,
            max_delay=max_delay if max_delay is not None else settings.retry_max_delay,
        )
        self._fetch = retrying(breaker(source.fetch_roster))

    @property
    def is_open(self) -> bool:
        return is_circuit_open(self.breaker_name)

    def fetch_roster(self, team: Any, target_date: date, season_id: int) -> list[dict]:
        return self._fetch(team, target_date, season_id) or []


def _instantiate(obj: Any) -> Any:
    return obj() if inspect.isclass(obj) else obj


def load_rater(obj: Any = None) -> Optional[Rater]:
    """Resolve the configured rater, or None when rating is not configured."""
    obj = _instantiate(obj if obj is not None else settings.rater)
    if obj is None:
        log.warning("rater_not_configured")
        return None
    if isinstance(obj, Rater):
        return obj
    if callable(obj):
        return FunctionRater(obj)
    raise ConfigurationError(f"RATER must provide rate(record), got {obj!r}")


def load_lineup_optimizer(obj: Any = None) -> LineupOptimizer:
    """Resolve the configured lineup optimizer."""
    obj = _instantiate(obj if obj is not None else settings.lineup_optimizer)
    if obj is None:
        raise ConfigurationError("LINEUP_OPTIMIZER is not configured")
    if isinstance(obj, LineupOptimizer):
        return obj
    if callable(obj):
        return FunctionLineupOptimizer(obj)
    raise ConfigurationError(f"LINEUP_OPTIMIZER must provide optimize(entries), got {obj!r}")


def load_roster_source(obj: Any = None) -> RosterSource:
    """Resolve the configured roster source, wrapped with retry/circuit breaker."""
    obj = _instantiate(obj if obj is not None else settings.roster_source)
    if obj is None:
        raise ConfigurationError("ROSTER_SOURCE is not configured")
    if not isinstance(obj, RosterSource):
        raise ConfigurationError(f"ROSTER_SOURCE must provide fetch_roster(), got {obj!r}")
    return ResilientRosterSource(obj)
