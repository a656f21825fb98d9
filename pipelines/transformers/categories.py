"""
Category Rules

The league's stat fields and the versioned rule table deciding which
categories exist in which season. Adding a rule era means adding or
editing a row here; call sites only ask `is_stat_enabled` or
`matchup_categories`.
"""

from dataclasses import dataclass
from typing import Optional

# Roster counters, summed over the full roster and never start-gated
COUNTER_FIELDS: tuple[str, ...] = ("gp", "mg", "ir", "ir_plus", "gs")
ROSTER_MOVE_FIELDS: tuple[str, ...] = ("add", "ms", "bs")

SKATER_FIELDS: tuple[str, ...] = ("g", "a", "p", "pm", "pim", "ppp", "sog", "hit", "blk")
GOALIE_FIELDS: tuple[str, ...] = ("w", "ga", "sv", "sa", "so", "toi")
RATIO_FIELDS: tuple[str, ...] = ("gaa", "svp")

# Every summable stat column on a stat line
SUMMED_FIELDS: tuple[str, ...] = COUNTER_FIELDS + SKATER_FIELDS + GOALIE_FIELDS + ROSTER_MOVE_FIELDS
STAT_FIELDS: tuple[str, ...] = SUMMED_FIELDS + RATIO_FIELDS + ("rating",)

GOALIE_POS_GROUP = "G"
BENCH_SLOT = "BN"


@dataclass(frozen=True)
class SeasonRange:
    """Inclusive season-id range; None means unbounded on that side."""

    first: Optional[int] = None
    last: Optional[int] = None

    def contains(self, season_id: int) -> bool:
        if self.first is not None and season_id < self.first:
            return False
        if self.last is not None and season_id > self.last:
            return False
        return True


ALL_SEASONS = SeasonRange()


@dataclass(frozen=True)
class CategoryRule:
    """
    A head-to-head scoring category.

    Attributes:
        field: Stat line field compared between the two teams
        higher_better: False for categories where the lower value wins (GAA)
        goalie_only: Subject to the goalie-start minimum
        seasons: Seasons in which the category is scored
    """

    field: str
    higher_better: bool = True
    goalie_only: bool = False
    seasons: SeasonRange = ALL_SEASONS


# Stats only recorded for part of the league's history. A stat missing here
# is recorded in every season.
STAT_ERA_RULES: dict[str, SeasonRange] = {
    "pm": SeasonRange(last=6),
    "pim": SeasonRange(last=4),
    "so": SeasonRange(last=4),
}

# Matchup categories in scoring order
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule("g"),
    CategoryRule("a"),
    CategoryRule("p"),
    CategoryRule("pm", seasons=STAT_ERA_RULES["pm"]),
    CategoryRule("pim", seasons=STAT_ERA_RULES["pim"]),
    CategoryRule("ppp"),
    CategoryRule("sog"),
    CategoryRule("hit"),
    CategoryRule("blk"),
    CategoryRule("w", goalie_only=True),
    CategoryRule("gaa", higher_better=False, goalie_only=True),
    CategoryRule("svp", goalie_only=True),
    CategoryRule("so", goalie_only=True, seasons=STAT_ERA_RULES["so"]),
)


def is_stat_enabled(field: str, season_id: int) -> bool:
    """Whether a stat is recorded in the given season."""
    era = STAT_ERA_RULES.get(field)
    return era is None or era.contains(int(season_id))


def matchup_categories(season_id: int) -> list[CategoryRule]:
    """Active category rules for a season, in stable scoring order."""
    return [rule for rule in CATEGORY_RULES if rule.seasons.contains(int(season_id))]
