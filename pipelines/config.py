"""
Pipeline Configuration

Static metadata each pipeline class declares: identity, the tables it
writes and the pipelines whose output it reads.
"""

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class PipelineConfig:
    """
    Immutable metadata for a pipeline.

    Attributes:
        name: Registry and audit name (e.g., "player_days")
        display_name: Human-readable name (e.g., "Player Days")
        description: What this pipeline does
        writes: Tables the pipeline upserts into, primary table first
        season_scoped: Runs over a whole season instead of one date
        depends_on: Pipelines whose output this one reads
    """

    name: str
    display_name: str
    description: str
    writes: tuple[str, ...]
    season_scoped: bool = False
    depends_on: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Pipeline name is required")
        if not self.writes:
            raise ValueError(f"Pipeline {self.name} must write at least one table")
        if self.name in self.depends_on:
            raise ValueError(f"Pipeline {self.name} cannot depend on itself")

    @property
    def target_table(self) -> str:
        return self.writes[0]


def dependency_order(configs: Iterable[PipelineConfig]) -> list[str]:
    """
    Order pipeline names so each comes after everything it depends on.

    Dependencies outside ``configs`` are assumed satisfied. Ties keep the
    input order.
    """
    pending = {config.name: config for config in configs}
    ordered: list[str] = []
    while pending:
        ready = [
            name
            for name, config in pending.items()
            if not any(dep in pending for dep in config.depends_on)
        ]
        if not ready:
            raise ValueError(f"Dependency cycle among: {', '.join(pending)}")
        for name in ready:
            ordered.append(name)
            del pending[name]
    return ordered
