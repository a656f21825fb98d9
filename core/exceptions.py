"""
Pipeline Error Taxonomy

Each class maps to one handling policy:

- ConfigurationError: the run cannot start (no season/week for the date,
  missing collaborator). Fatal, aborts the run.
- PartialDataWarning: one unit (a matchup, a roster row) lacks inputs.
  Logged and skipped; the run continues.
- ExternalFunctionFailure: the rater, lineup optimizer or roster source
  raised. Caught per unit, a blank value is substituted.
- PersistenceError: one or more upserts reported errors. Raised after the
  whole batch has been written.
"""

from typing import Any, Optional


class PipelineError(Exception):
    """Base class for all GSHL pipeline errors."""

    pass


class ConfigurationError(PipelineError):
    """Raised when season, week or collaborator configuration is missing."""

    pass


class PartialDataWarning(PipelineError):
    """Raised for a unit of work that cannot be computed from its inputs."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class ExternalFunctionFailure(PipelineError):
    """Raised when an injected collaborator call fails."""

    def __init__(self, collaborator: str, message: str, **context: Any):
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator
        self.context = context


class PersistenceError(PipelineError):
    """Raised when a batch upsert reported row-level failures."""

    def __init__(self, table: str, errors: list[str], message: Optional[str] = None):
        super().__init__(
            message or f"{len(errors)} write error(s) on {table}: {errors[:3]}"
        )
        self.table = table
        self.errors = errors
